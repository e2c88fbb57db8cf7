"""
Dialogue controller for NOA recommendations.

Orchestrates the scenario -> prompt -> model -> parse pipeline and sequences
clarification questions across turns.

Questions are asked in the order the first parse produced them. Once that
list is used up, the first clarification of the latest parse (if any) is
shown instead. State lives in an immutable DialogueCursor that is passed in
and returned from every call, so a failed model call leaves the caller's
cursor exactly as it was.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from sf50.core.config import SF50Config, get_config
from sf50.core.errors import DialogueStateError, EmptyModelOutputError
from sf50.core.models import ConversationTurn
from sf50.llm.base import ModelClient
from sf50.parsing.recommendation_parser import Recommendation, parse_noa_response
from sf50.prompting.composer import build_conversational_prompt, build_noa_prompt
from sf50.utils.logger import get_logger

logger = get_logger("core.controller")


class DialogueState(str, Enum):
    """Where a conversation is in the clarification dialogue."""
    NO_SESSION = "no_session"
    AWAITING_FIRST_QUESTION = "awaiting_first_question"
    ASKING = "asking"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class DialogueCursor:
    """Per-session dialogue state."""
    state: DialogueState = DialogueState.NO_SESSION
    scenario: str = ""
    original_questions: Tuple[str, ...] = ()
    index: int = 0  # Position in original_questions of the last question asked
    history: Tuple[ConversationTurn, ...] = ()
    recommendation: Optional[Recommendation] = None

    @property
    def is_active(self) -> bool:
        return self.state in (DialogueState.ASKING, DialogueState.EXHAUSTED)

    @property
    def questions_remaining(self) -> int:
        if self.state != DialogueState.ASKING:
            return 0
        return len(self.original_questions) - self.index - 1

    def with_turn(self, role: str, content: str) -> "DialogueCursor":
        return replace(self, history=self.history + (ConversationTurn(role=role, content=content),))


@dataclass(frozen=True)
class TurnResult:
    """Outcome of one turn: the new cursor and what to show the user."""
    cursor: DialogueCursor
    recommendation: Recommendation
    next_question: Optional[str] = None
    raw_response: str = ""


class DialogueController:
    """
    Runs NOA recommendation turns against an explicitly supplied model client.

    The controller itself holds no session state; each call takes a cursor
    and returns a new one.
    """

    def __init__(self, client: ModelClient, config: Optional[SF50Config] = None):
        """
        Initialize the controller.

        Args:
            client: Model client used for every turn
            config: Configuration object. Uses default config if not provided.
        """
        self.client = client
        self.config = config or get_config()

    # ------------------------------------------------------------------
    # Stateless pipeline
    # ------------------------------------------------------------------

    def recommend(self, scenario: str) -> Tuple[Recommendation, str]:
        """First-pass recommendation for a scenario. Returns (recommendation, raw reply)."""
        logger.info(f"First-pass recommendation: scenario_chars={len(scenario)}")
        return self._invoke(build_noa_prompt(scenario))

    def refine(
        self,
        scenario: str,
        history: Iterable[Union[ConversationTurn, Dict[str, Any]]],
    ) -> Tuple[Recommendation, str]:
        """Updated recommendation given the dialogue so far. Returns (recommendation, raw reply)."""
        history = [ConversationTurn.coerce(turn) for turn in history]
        logger.info(f"Follow-up recommendation: turns={len(history)}")
        return self._invoke(build_conversational_prompt(scenario, history))

    def _invoke(self, prompt: str) -> Tuple[Recommendation, str]:
        raw = self.client.complete(prompt)
        if not raw or not raw.strip():
            logger.error("Model returned empty output")
            raise EmptyModelOutputError()
        return parse_noa_response(raw), raw

    # ------------------------------------------------------------------
    # Dialogue state machine
    # ------------------------------------------------------------------

    def start(self, scenario: str) -> TurnResult:
        """
        Submit a new scenario, discarding any previous dialogue.

        Returns:
            TurnResult whose next_question is the first clarification, if any
        """
        cursor = DialogueCursor(state=DialogueState.AWAITING_FIRST_QUESTION, scenario=scenario)
        recommendation, raw = self.recommend(scenario)

        questions = tuple(recommendation.clarifications)
        cursor = replace(cursor, original_questions=questions, recommendation=recommendation)

        if questions:
            next_question = questions[0]
            cursor = replace(cursor, state=DialogueState.ASKING, index=0)
            cursor = cursor.with_turn("assistant", next_question)
        else:
            next_question = None
            cursor = replace(cursor, state=DialogueState.EXHAUSTED)

        logger.info(f"Dialogue started: noa={recommendation.noa_code or '-'}, questions={len(questions)}")
        return TurnResult(cursor, recommendation, next_question, raw)

    def answer(self, cursor: DialogueCursor, message: str) -> TurnResult:
        """
        Submit the user's answer and get an updated recommendation.

        The new recommendation replaces the previous one in full.

        Raises:
            DialogueStateError: if no scenario has been submitted yet
        """
        if not cursor.is_active:
            raise DialogueStateError(f"Cannot answer in state '{cursor.state.value}'; submit a scenario first")

        cursor = cursor.with_turn("user", message)
        recommendation, raw = self.refine(cursor.scenario, cursor.history)
        cursor = replace(cursor, recommendation=recommendation)

        next_index = cursor.index + 1
        next_question = None
        if cursor.state == DialogueState.ASKING and next_index < len(cursor.original_questions):
            next_question = cursor.original_questions[next_index]
            cursor = replace(cursor, index=next_index)
        else:
            cursor = replace(cursor, state=DialogueState.EXHAUSTED)
            # Follow-up prompts do not ask for clarifications, so this is usually empty.
            if recommendation.clarifications:
                next_question = recommendation.clarifications[0]

        if next_question:
            cursor = cursor.with_turn("assistant", next_question)

        logger.info(
            f"Answer processed: noa={recommendation.noa_code or '-'}, "
            f"state={cursor.state.value}, asked_next={next_question is not None}"
        )
        return TurnResult(cursor, recommendation, next_question, raw)

    def reset(self) -> DialogueCursor:
        """Discard all dialogue state."""
        logger.info("Dialogue reset")
        return DialogueCursor()
