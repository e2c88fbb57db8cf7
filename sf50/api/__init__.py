"""
API module for the SF-50 assistant.

Provides REST API endpoints for the web UI.
"""
from sf50.api.models import (
    AnswerRequest,
    ChatMessage,
    ChatNOARequest,
    RecommendationResponse,
    RecommendNOARequest,
    ResetRequest,
    ResetResponse,
    SessionResponse,
    StartSessionRequest,
    TurnResponse,
)

__all__ = [
    "AnswerRequest",
    "ChatMessage",
    "ChatNOARequest",
    "RecommendationResponse",
    "RecommendNOARequest",
    "ResetRequest",
    "ResetResponse",
    "SessionResponse",
    "StartSessionRequest",
    "TurnResponse",
]
