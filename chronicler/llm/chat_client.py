"""Client for OpenAI-compatible chat completions endpoints"""

import logging
import aiohttp
from typing import List, Optional, Dict, Any

from chronicler.errors import PromptSubmissionError
from .provider import LLMProvider, LLMMessage, LLMResponse

logger = logging.getLogger(__name__)


class ChatCompletionsClient(LLMProvider):
    """Chat completions client implementation"""

    def __init__(
        self,
        model: str = "gpt-4o",
        base_url: str = "https://api.openai.com/v1",
        api_key: Optional[str] = None,
        timeout: int = 300,
        json_mode: bool = False
    ):
        """
        Initialize chat completions client

        Args:
            model: Model name (e.g., "gpt-4o")
            base_url: API base URL, without the /chat/completions suffix
            api_key: Bearer token; omitted for local servers that need none
            timeout: Request timeout in seconds
            json_mode: Ask the server for a JSON object response by default
        """
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.json_mode = json_mode
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session"""
        if self._session is None or self._session.closed:
            headers = {"Content-Type": "application/json"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._session = aiohttp.ClientSession(
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def close(self):
        """Close the session"""
        if self._session and not self._session.closed:
            await self._session.close()

    def _build_payload(
        self,
        messages: List[LLMMessage],
        temperature: float,
        max_tokens: Optional[int],
        **kwargs
    ) -> Dict[str, Any]:
        payload = {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
        }

        if max_tokens:
            payload["max_tokens"] = max_tokens

        if kwargs.get("json_mode", self.json_mode):
            payload["response_format"] = {"type": "json_object"}

        return payload

    async def generate(
        self,
        messages: List[LLMMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate a response from the chat completions endpoint"""
        session = await self._get_session()
        payload = self._build_payload(messages, temperature, max_tokens, **kwargs)

        try:
            async with session.post(
                f"{self.base_url}/chat/completions",
                json=payload
            ) as response:
                response.raise_for_status()
                data = await response.json()
        except Exception as e:
            raise PromptSubmissionError(f"Chat completions API error: {str(e)}") from e

        choices = data.get("choices") or [{}]
        choice = choices[0]
        finish_reason = choice.get("finish_reason")

        if finish_reason == "length":
            logger.warning(
                f"Response from {self.model} hit the token limit; content may be incomplete"
            )

        return LLMResponse(
            content=(choice.get("message") or {}).get("content") or "",
            model=data.get("model", self.model),
            usage=data.get("usage"),
            metadata={"finish_reason": finish_reason}
        )

    def get_model_name(self) -> str:
        """Get the model name being used"""
        return self.model
