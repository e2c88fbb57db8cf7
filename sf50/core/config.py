"""
Configuration management for the SF-50 assistant.

Loads settings from a YAML config file, lets environment variables override
them, and provides typed access.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()


def _project_root() -> Path:
    """Return project root (parent of sf50 package)."""
    return Path(__file__).resolve().parent.parent.parent


DEFAULT_CONFIG_PATH = _project_root() / "config" / "default.yaml"

PROVIDERS = ("openai", "bedrock")


@dataclass
class SF50Config:
    """Configuration for the SF-50 assistant."""

    # Model provider: "openai" or "bedrock"
    provider: str = "openai"
    openai_model: str = "gpt-4o-mini"
    bedrock_model_id: str = "anthropic.claude-3-7-sonnet-20250219-v1:0"
    aws_region: str = "us-east-1"
    max_tokens: int = 1000
    temperature: float = 0
    request_timeout: float = 30.0

    # Input limits enforced by the API layer
    max_scenario_length: int = 5000
    max_chat_message_length: int = 2000
    max_conversation_history: int = 50

    @property
    def model(self) -> str:
        """Model identifier for the configured provider."""
        if self.provider == "bedrock":
            return self.bedrock_model_id
        return self.openai_model

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "SF50Config":
        """Load configuration from YAML file, then apply environment overrides."""
        path = config_path or DEFAULT_CONFIG_PATH
        data: Dict[str, Any] = {}
        if path.exists():
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}

        model_config = data.get('model', {})
        openai_config = model_config.get('openai', {})
        bedrock_config = model_config.get('bedrock', {})
        limits_config = data.get('limits', {})

        config = cls(
            provider=model_config.get('provider', 'openai'),
            openai_model=openai_config.get('model', 'gpt-4o-mini'),
            bedrock_model_id=bedrock_config.get('model_id', 'anthropic.claude-3-7-sonnet-20250219-v1:0'),
            aws_region=bedrock_config.get('region', 'us-east-1'),
            max_tokens=model_config.get('max_tokens', 1000),
            temperature=model_config.get('temperature', 0),
            request_timeout=model_config.get('request_timeout', 30.0),
            max_scenario_length=limits_config.get('max_scenario_length', 5000),
            max_chat_message_length=limits_config.get('max_chat_message_length', 2000),
            max_conversation_history=limits_config.get('max_conversation_history', 50),
        )
        config.apply_env_overrides(os.environ)
        return config

    def apply_env_overrides(self, env) -> None:
        """Override settings from environment variables when they are set."""
        if env.get("SF50_PROVIDER"):
            self.provider = env["SF50_PROVIDER"].strip().lower()
        if env.get("SF50_MODEL"):
            self.openai_model = env["SF50_MODEL"]
        if env.get("BEDROCK_MODEL_ID"):
            self.bedrock_model_id = env["BEDROCK_MODEL_ID"]
        if env.get("AWS_REGION"):
            self.aws_region = env["AWS_REGION"]
        if env.get("SF50_MAX_TOKENS"):
            self.max_tokens = int(env["SF50_MAX_TOKENS"])
        if env.get("SF50_TEMPERATURE"):
            self.temperature = float(env["SF50_TEMPERATURE"])

        if self.provider not in PROVIDERS:
            raise ValueError(f"Unknown model provider '{self.provider}', expected one of {PROVIDERS}")


# Global config instance
_config: Optional[SF50Config] = None


def get_config() -> SF50Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = SF50Config.from_yaml()
    return _config


def set_config(config: SF50Config) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
