"""Chat-style model provider interface behind the prompt submitter"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel


class LLMMessage(BaseModel):
    """Single chat message"""
    role: Literal["system", "user", "assistant"]
    content: str


class LLMResponse(BaseModel):
    """Completion returned by a provider"""
    content: str
    model: str
    usage: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None

    @property
    def finish_reason(self) -> Optional[str]:
        return (self.metadata or {}).get("finish_reason")

    @property
    def truncated(self) -> bool:
        """Whether the provider stopped because it ran out of tokens"""
        return self.finish_reason == "length"

    @property
    def total_tokens(self) -> Optional[int]:
        return (self.usage or {}).get("total_tokens")


class LLMProvider(ABC):
    """A model endpoint that completes a list of chat messages"""

    @abstractmethod
    async def generate(
        self,
        messages: List[LLMMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """
        Complete the conversation

        Raises:
            PromptSubmissionError: The endpoint could not be reached or refused the request
        """
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        pass

    async def close(self):
        """Release any held connections"""
        pass
