"""
Prompt composer for NOA recommendations.

Builds the single instruction string sent to the model, either for the
first pass over a scenario or for a follow-up turn that carries the
clarification dialogue so far.
"""
from typing import Any, Dict, Iterable, Sequence, Union

from sf50.core.models import ConversationTurn
from sf50.prompting.templates import (
    EXAMPLE_TEMPLATE,
    FEW_SHOT_EXAMPLES,
    FIRST_PASS_FORMAT,
    FIRST_PASS_PROMPT,
    FOLLOW_UP_FORMAT,
    FOLLOW_UP_PROMPT,
    ROLE_PREAMBLE,
    FewShotExample,
)

TurnLike = Union[ConversationTurn, Dict[str, Any]]

_SPEAKER_LABELS = {"user": "User", "assistant": "Assistant"}


def format_examples(examples: Sequence[FewShotExample] = FEW_SHOT_EXAMPLES) -> str:
    """Render worked examples as numbered Instruction/Output blocks."""
    return "\n\n".join(
        EXAMPLE_TEMPLATE.format(number=i + 1, instruction=ex.instruction, output=ex.output)
        for i, ex in enumerate(examples)
    )


def render_history(history: Iterable[TurnLike]) -> str:
    """Render turns as alternating 'User:' / 'Assistant:' lines."""
    lines = []
    for turn in history:
        turn = ConversationTurn.coerce(turn)
        lines.append(f"{_SPEAKER_LABELS[turn.role]}: {turn.content}")
    return "\n".join(lines)


def build_noa_prompt(scenario: str) -> str:
    """
    Build the first-pass prompt for a scenario.

    Args:
        scenario: Free-text description of the personnel action

    Returns:
        Prompt with the task description, output format, worked examples
        and the caller's scenario
    """
    return FIRST_PASS_PROMPT.format(
        preamble=ROLE_PREAMBLE,
        format=FIRST_PASS_FORMAT,
        examples=format_examples(),
        scenario=scenario,
    )


def build_conversational_prompt(scenario: str, history: Iterable[TurnLike]) -> str:
    """
    Build the follow-up prompt asking for an updated recommendation.

    Args:
        scenario: The original scenario, included verbatim
        history: Ordered dialogue turns; may be empty

    Returns:
        Prompt requesting the same format without a clarifications section
    """
    return FOLLOW_UP_PROMPT.format(
        preamble=ROLE_PREAMBLE,
        scenario=scenario,
        history=render_history(history),
        format=FOLLOW_UP_FORMAT,
    )
