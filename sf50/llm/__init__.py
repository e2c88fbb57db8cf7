"""
Model clients for the SF-50 assistant.
"""
from typing import Optional

from sf50.core.config import SF50Config, get_config
from sf50.llm.base import ModelClient, describe_provider_error
from sf50.llm.bedrock_client import BedrockModelClient, get_inference_profile_id
from sf50.llm.openai_client import OpenAIModelClient


def create_model_client(config: Optional[SF50Config] = None) -> ModelClient:
    """Build the model client for the configured provider."""
    config = config or get_config()
    if config.provider == "bedrock":
        return BedrockModelClient(
            model_id=config.bedrock_model_id,
            region=config.aws_region,
            max_tokens=config.max_tokens,
        )
    return OpenAIModelClient(
        model=config.openai_model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.request_timeout,
    )


__all__ = [
    "ModelClient",
    "OpenAIModelClient",
    "BedrockModelClient",
    "create_model_client",
    "describe_provider_error",
    "get_inference_profile_id",
]
