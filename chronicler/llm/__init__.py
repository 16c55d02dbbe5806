"""LLM provider interfaces and the prompt submission capability"""

from .provider import LLMProvider, LLMMessage, LLMResponse
from .chat_client import ChatCompletionsClient
from .json_repair import extract_json, fix_json, parse_json_response
from .submitter import PromptSubmitter, StructuredPromptSubmitter

__all__ = [
    "LLMProvider",
    "LLMMessage",
    "LLMResponse",
    "ChatCompletionsClient",
    "extract_json",
    "fix_json",
    "parse_json_response",
    "PromptSubmitter",
    "StructuredPromptSubmitter",
]
