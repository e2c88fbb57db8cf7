"""
Shared conversation types.
"""
from typing import Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class ConversationTurn(BaseModel):
    """One message in the clarification dialogue."""
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"] = Field(description="Who sent the message")
    content: str = Field(description="Message text")

    @classmethod
    def coerce(cls, turn: Union["ConversationTurn", Dict[str, Any]]) -> "ConversationTurn":
        """Accept either a ConversationTurn or a plain {"role", "content"} dict."""
        if isinstance(turn, cls):
            return turn
        return cls.model_validate(turn)
