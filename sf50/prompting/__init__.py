"""
Prompt construction for NOA recommendations.
"""
from sf50.prompting.composer import (
    build_conversational_prompt,
    build_noa_prompt,
    format_examples,
    render_history,
)
from sf50.prompting.templates import FEW_SHOT_EXAMPLES, FewShotExample

__all__ = [
    "build_noa_prompt",
    "build_conversational_prompt",
    "format_examples",
    "render_history",
    "FEW_SHOT_EXAMPLES",
    "FewShotExample",
]
