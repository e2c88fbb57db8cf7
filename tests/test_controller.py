"""
Unit tests for DialogueController (sf50/core/controller.py).

Uses a scripted model client so tests run without an API key.
Covers: first turn, question ordering, exhaustion, reset, empty output, failed calls.
"""
import pytest
from unittest.mock import MagicMock

from sf50.core.controller import DialogueController, DialogueCursor, DialogueState
from sf50.core.errors import DialogueStateError, EmptyModelOutputError, ModelInvocationError

from tests.fakes import FOLLOW_UP_REPLY, PROMOTION_REPLY, WIGI_REPLY


SCENARIO = "Employee is being permanently promoted from GS-12 step 5 to GS-13 step 1."

FOLLOW_UP_WITH_QUESTION = FOLLOW_UP_REPLY.replace(
    "Required SF-50", "Clarifications: Was a waiver approved? Required SF-50"
)


# ---------------------------------------------------------------------------
# First turn
# ---------------------------------------------------------------------------

def test_start_surfaces_first_question(scripted_client):
    client = scripted_client(PROMOTION_REPLY)
    result = DialogueController(client).start(SCENARIO)

    assert result.next_question == "Effective date?"
    assert result.recommendation.noa_code == "702"
    assert result.raw_response == PROMOTION_REPLY

    cursor = result.cursor
    assert cursor.state == DialogueState.ASKING
    assert cursor.index == 0
    assert cursor.scenario == SCENARIO
    assert cursor.questions_remaining == 1
    assert cursor.original_questions == ("Effective date?", "Competitive certificate number?")
    assert [(t.role, t.content) for t in cursor.history] == [("assistant", "Effective date?")]
    assert SCENARIO in client.prompts[0]
    assert "Example 1:" in client.prompts[0]


def test_start_without_clarifications_is_exhausted(scripted_client):
    result = DialogueController(scripted_client(FOLLOW_UP_REPLY)).start(SCENARIO)
    assert result.next_question is None
    assert result.cursor.state == DialogueState.EXHAUSTED
    assert result.cursor.history == ()


def test_end_to_end_wigi(scripted_client):
    scenario = "Employee is receiving a within-grade increase (WIGI) from step 2 to step 3."
    result = DialogueController(scripted_client(WIGI_REPLY)).start(scenario)
    rec = result.recommendation
    assert rec.noa_code == "891"
    assert rec.label == "Within-Grade Increase"
    assert rec.legal_authority_code == "5 USC 5335"
    assert "Step 2 to Step 3" in rec.remarks_text


# ---------------------------------------------------------------------------
# Follow-up turns
# ---------------------------------------------------------------------------

def test_questions_asked_in_original_order(scripted_client):
    client = scripted_client(PROMOTION_REPLY, FOLLOW_UP_REPLY, FOLLOW_UP_WITH_QUESTION)
    controller = DialogueController(client)

    first = controller.start(SCENARIO)
    second = controller.answer(first.cursor, "January 12, 2025.")
    third = controller.answer(second.cursor, "Certificate 24-113.")

    assert [first.next_question, second.next_question, third.next_question] == [
        "Effective date?",
        "Competitive certificate number?",
        "Was a waiver approved?",
    ]
    assert second.cursor.state == DialogueState.ASKING
    assert second.cursor.index == 1
    assert third.cursor.state == DialogueState.EXHAUSTED


def test_no_question_when_exhausted_and_follow_up_has_none(scripted_client):
    client = scripted_client(PROMOTION_REPLY, FOLLOW_UP_REPLY, FOLLOW_UP_REPLY)
    controller = DialogueController(client)

    cursor = controller.start(SCENARIO).cursor
    cursor = controller.answer(cursor, "January 12.").cursor
    result = controller.answer(cursor, "Certificate 24-113.")

    assert result.next_question is None
    assert result.cursor.state == DialogueState.EXHAUSTED


def test_answer_replaces_recommendation(scripted_client):
    client = scripted_client(PROMOTION_REPLY, FOLLOW_UP_REPLY)
    controller = DialogueController(client)

    first = controller.start(SCENARIO)
    second = controller.answer(first.cursor, "January 12.")

    assert second.recommendation.remarks_text == "Permanent promotion effective 01/12/2025."
    assert second.recommendation.clarifications == []
    assert second.recommendation.required_fields == ["Position title", "grade", "step"]
    assert second.cursor.recommendation is second.recommendation
    # The earlier cursor is untouched.
    assert first.cursor.recommendation is first.recommendation
    assert len(first.cursor.history) == 1


def test_follow_up_prompt_carries_full_history(scripted_client):
    client = scripted_client(PROMOTION_REPLY, FOLLOW_UP_REPLY)
    controller = DialogueController(client)

    cursor = controller.start(SCENARIO).cursor
    result = controller.answer(cursor, "January 12.")

    follow_up_prompt = client.prompts[1]
    assert f"Original Scenario: {SCENARIO}" in follow_up_prompt
    assert "Assistant: Effective date?\nUser: January 12." in follow_up_prompt
    assert [(t.role, t.content) for t in result.cursor.history] == [
        ("assistant", "Effective date?"),
        ("user", "January 12."),
        ("assistant", "Competitive certificate number?"),
    ]


def test_answer_before_start_is_rejected(scripted_client):
    controller = DialogueController(scripted_client())
    with pytest.raises(DialogueStateError):
        controller.answer(DialogueCursor(), "hello")


# ---------------------------------------------------------------------------
# Reset
# ---------------------------------------------------------------------------

def test_reset_then_new_scenario_never_reuses_old_questions(scripted_client):
    new_reply = (
        "Recommendation: NOA 792 – Change in Duty Station. "
        "Clarifications: Telework status? Required SF-50: New duty station code. "
        "OPM NOA Remarks: Change in duty station."
    )
    client = scripted_client(PROMOTION_REPLY, new_reply, FOLLOW_UP_REPLY)
    controller = DialogueController(client)

    old = controller.start(SCENARIO)
    cursor = controller.reset()
    assert cursor == DialogueCursor()
    assert cursor.state == DialogueState.NO_SESSION

    new = controller.start("Employee's duty station is changing from DC to Baltimore.")
    after = controller.answer(new.cursor, "Full-time telework.")

    old_questions = set(old.cursor.original_questions)
    assert new.next_question not in old_questions
    assert after.next_question is None
    assert new.cursor.original_questions == ("Telework status?",)


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("reply", ["", "   \n"])
def test_empty_model_output_is_fatal(scripted_client, reply):
    controller = DialogueController(scripted_client(reply))
    with pytest.raises(EmptyModelOutputError):
        controller.start(SCENARIO)


def test_empty_follow_up_leaves_cursor_unchanged(scripted_client):
    controller = DialogueController(scripted_client(PROMOTION_REPLY, ""))
    cursor = controller.start(SCENARIO).cursor

    with pytest.raises(EmptyModelOutputError):
        controller.answer(cursor, "January 12.")

    assert cursor.index == 0
    assert len(cursor.history) == 1


def test_provider_failure_propagates():
    client = MagicMock()
    client.complete.side_effect = ModelInvocationError("Access denied.", detail="AccessDeniedException")
    with pytest.raises(ModelInvocationError):
        DialogueController(client).recommend(SCENARIO)


def test_refine_accepts_plain_dict_history(scripted_client):
    client = scripted_client(FOLLOW_UP_REPLY)
    recommendation, raw = DialogueController(client).refine(
        SCENARIO, [{"role": "user", "content": "It is permanent."}]
    )
    assert recommendation.noa_code == "702"
    assert raw == FOLLOW_UP_REPLY
    assert "User: It is permanent." in client.prompts[0]

