"""
AWS Bedrock model client for Anthropic models.

Claude 3.7 Sonnet and newer models can only be invoked through an inference
profile, so bare model IDs are converted to the regional profile ID.
"""
import json
import re
from typing import Any, Dict, Optional

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from sf50.core.errors import ModelInvocationError
from sf50.llm.base import describe_provider_error
from sf50.utils.logger import get_logger

logger = get_logger("llm.bedrock_client")

ANTHROPIC_VERSION = "bedrock-2023-05-31"

_PROFILE_PREFIX = re.compile(r"^(us|global|eu|ap)\.")


def get_inference_profile_id(model_id: str, region: str = "us-east-1") -> str:
    """
    Convert a model ID to an inference profile ID if needed.

    Examples:
        anthropic.claude-3-7-sonnet-20250219-v1:0, us-east-1
            -> us.anthropic.claude-3-7-sonnet-20250219-v1:0
        eu.anthropic.claude-3-7-sonnet-20250219-v1:0 -> unchanged
    """
    if _PROFILE_PREFIX.match(model_id):
        return model_id

    region_prefix = "us"
    if region.startswith("eu-"):
        region_prefix = "eu"
    elif region.startswith("ap-"):
        region_prefix = "ap"

    model_part = re.sub(r"^anthropic\.", "", model_id)
    return f"{region_prefix}.anthropic.{model_part}"


def build_request_body(prompt: str, max_tokens: int) -> Dict[str, Any]:
    """Anthropic messages body for invoke_model."""
    return {
        "anthropic_version": ANTHROPIC_VERSION,
        "max_tokens": max_tokens,
        "messages": [
            {
                "role": "user",
                "content": [{"type": "text", "text": prompt}],
            }
        ],
    }


class BedrockModelClient:
    """Invokes an Anthropic model through the bedrock-runtime API."""

    def __init__(
        self,
        model_id: str = "anthropic.claude-3-7-sonnet-20250219-v1:0",
        region: str = "us-east-1",
        max_tokens: int = 1000,
        client: Optional[BaseClient] = None,
    ):
        self.region = region
        self.model_id = get_inference_profile_id(model_id, region)
        self.max_tokens = max_tokens
        self.client = client or boto3.client("bedrock-runtime", region_name=region)

    def complete(self, prompt: str) -> str:
        try:
            response = self.client.invoke_model(
                modelId=self.model_id,
                contentType="application/json",
                accept="application/json",
                body=json.dumps(build_request_body(prompt, self.max_tokens)),
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Bedrock call failed for {self.model_id}: {e}")
            raise ModelInvocationError(describe_provider_error(e), detail=str(e)) from e

        payload = json.loads(response["body"].read())
        content = payload.get("content") or []
        if not content:
            return ""
        return content[0].get("text") or ""
