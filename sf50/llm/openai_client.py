"""
OpenAI chat-completions model client.
"""
from typing import Optional

from openai import OpenAI, OpenAIError

from sf50.core.errors import ModelInvocationError
from sf50.llm.base import describe_provider_error
from sf50.utils.logger import get_logger

logger = get_logger("llm.openai_client")


class OpenAIModelClient:
    """Sends the prompt as a single user message and returns the reply text."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        temperature: float = 0,
        max_tokens: int = 1000,
        timeout: float = 30.0,
        client: Optional[OpenAI] = None,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        # No retries: a failed turn is reported to the caller, who decides whether to resubmit.
        self.client = client or OpenAI(timeout=timeout, max_retries=0)

    def complete(self, prompt: str) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI call failed: {e}")
            raise ModelInvocationError(describe_provider_error(e), detail=str(e)) from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
