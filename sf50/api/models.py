"""
Pydantic models for SF-50 assistant API requests and responses.

Request models enforce the input limits from the configuration so the
core never sees empty or oversized text.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Dict, Any, List, Literal

from sf50.core.config import get_config
from sf50.core.models import ConversationTurn
from sf50.parsing.recommendation_parser import Recommendation


def _bounded_text(value: str, name: str, max_length: int) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{name} is required")
    if len(value) > max_length:
        raise ValueError(f"{name} cannot exceed {max_length} characters")
    return value


class ChatMessage(BaseModel):
    """One message of conversation history sent by the client."""
    role: Literal["user", "assistant"]
    content: str

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        return _bounded_text(v, "Content", get_config().max_chat_message_length)

    def to_turn(self) -> ConversationTurn:
        return ConversationTurn(role=self.role, content=self.content)


class RecommendNOARequest(BaseModel):
    """Request model for a first-pass recommendation."""
    scenario: str = Field(description="Employee scenario to classify")

    @field_validator("scenario")
    @classmethod
    def check_scenario(cls, v: str) -> str:
        return _bounded_text(v, "Scenario", get_config().max_scenario_length)


class ChatNOARequest(BaseModel):
    """Request model for a stateless follow-up recommendation."""
    model_config = ConfigDict(populate_by_name=True)

    original_scenario: str = Field(alias="originalScenario", description="Scenario from the first request")
    conversation_history: List[ChatMessage] = Field(
        alias="conversationHistory",
        description="Ordered dialogue turns"
    )

    @field_validator("original_scenario")
    @classmethod
    def check_scenario(cls, v: str) -> str:
        return _bounded_text(v, "Original scenario", get_config().max_scenario_length)

    @field_validator("conversation_history")
    @classmethod
    def check_history(cls, v: List[ChatMessage]) -> List[ChatMessage]:
        limit = get_config().max_conversation_history
        if not v:
            raise ValueError("Conversation history must contain at least one message")
        if len(v) > limit:
            raise ValueError(f"Conversation history cannot exceed {limit} messages")
        return v


class RecommendationResponse(BaseModel):
    """Response model for the stateless recommendation endpoints."""
    model_config = ConfigDict(populate_by_name=True)

    recommendation: Recommendation
    raw_response: str = Field(alias="rawResponse", description="Unparsed model reply")


class StartSessionRequest(BaseModel):
    """Request model for submitting a scenario to a dialogue session."""
    scenario: str = Field(description="Employee scenario to classify")
    session_id: Optional[str] = Field(default=None, description="Session ID (auto-generated if not provided)")

    @field_validator("scenario")
    @classmethod
    def check_scenario(cls, v: str) -> str:
        return _bounded_text(v, "Scenario", get_config().max_scenario_length)


class AnswerRequest(BaseModel):
    """Request model for answering the current clarification question."""
    message: str = Field(description="User's answer")

    @field_validator("message")
    @classmethod
    def check_message(cls, v: str) -> str:
        return _bounded_text(v, "Message", get_config().max_chat_message_length)


class TurnResponse(BaseModel):
    """Response model for a dialogue turn."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(description="Session ID")
    recommendation: Recommendation
    next_question: Optional[str] = Field(default=None, alias="nextQuestion", description="Question to show next, if any")
    state: str = Field(description="Dialogue state after this turn")
    raw_response: str = Field(alias="rawResponse", description="Unparsed model reply")


class SessionResponse(BaseModel):
    """Response model for session state endpoint. History text is not returned."""
    session_id: str
    state: str
    question_index: int
    questions_remaining: int
    original_questions: List[str]
    history_length: int
    recommendation: Optional[Recommendation] = None


class ResetRequest(BaseModel):
    """Request model for session reset."""
    session_id: Optional[str] = None


class ResetResponse(BaseModel):
    """Response model for session reset."""
    session_id: str
    status: str


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str
    service: str
    version: str
    config: Dict[str, Any]
