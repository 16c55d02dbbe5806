"""The injected prompt-submission capability"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from chronicler.errors import PromptSubmissionError
from .provider import LLMProvider, LLMMessage
from .json_repair import parse_json_response

logger = logging.getLogger(__name__)

JSON_INSTRUCTION = (
    "\n\nIMPORTANT: Respond with valid JSON only. Do not include any text before or after "
    "the JSON. Do not include any markdown formatting or code blocks. Return pure JSON."
)

STRICT_JSON_INSTRUCTION = (
    "\n\nCRITICAL: You MUST respond with ONLY valid JSON. No explanations, no markdown, "
    "no truncation. Complete the entire JSON structure."
)


class PromptSubmitter(ABC):
    """Turns a prompt into a JSON-ish value.

    Production code wraps a model provider; tests hand in canned payloads.
    Transport failures raise PromptSubmissionError. Unparseable output is
    not an error: implementations return an empty dict instead.
    """

    @abstractmethod
    async def submit_prompt(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None
    ) -> Any:
        """Submit a prompt and return the parsed response"""
        pass

    async def close(self):
        """Release underlying resources"""
        pass


class StructuredPromptSubmitter(PromptSubmitter):
    """Submitter backed by an LLMProvider that extracts and repairs JSON"""

    def __init__(
        self,
        llm_provider: LLMProvider,
        temperature: float = 0.7,
        default_max_tokens: Optional[int] = None
    ):
        self.llm_provider = llm_provider
        self.temperature = temperature
        self.default_max_tokens = default_max_tokens

    async def _generate(
        self,
        prompt: str,
        system_prompt: Optional[str],
        max_tokens: Optional[int]
    ) -> str:
        messages = []
        if system_prompt:
            messages.append(LLMMessage(role="system", content=system_prompt))
        messages.append(LLMMessage(role="user", content=prompt))

        try:
            response = await self.llm_provider.generate(
                messages=messages,
                temperature=self.temperature,
                max_tokens=max_tokens or self.default_max_tokens
            )
        except PromptSubmissionError:
            raise
        except Exception as e:
            raise PromptSubmissionError(f"Prompt submission failed: {str(e)}") from e

        logger.debug(f"{self.llm_provider.get_model_name()} responded with {len(response.content)} characters, {response.total_tokens} tokens")

        if response.truncated:
            logger.warning("Model output was truncated; attempting JSON repair")

        return response.content

    async def submit_prompt(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None
    ) -> Any:
        """
        Submit a prompt and parse the JSON response

        Tries twice, the second time with a stricter instruction. When both
        attempts fail to parse, returns an empty dict so the normalizer can
        fall back to defaults.
        """
        full_prompt = prompt + JSON_INSTRUCTION

        for attempt in range(2):
            text = await self._generate(full_prompt, system_prompt, max_tokens)

            try:
                return parse_json_response(text)
            except json.JSONDecodeError as e:
                if attempt == 0:
                    logger.warning(f"Failed to parse JSON response, retrying: {e}")
                    full_prompt = prompt + STRICT_JSON_INSTRUCTION
                    continue
                logger.error(f"Failed to parse JSON response: {e}\nResponse: {text[:500]}...")

        return {}

    async def close(self):
        await self.llm_provider.close()
