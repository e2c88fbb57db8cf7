"""
Model client contract and shared helpers.

A model client turns one prompt into the model's plain-text answer. Clients
are constructed explicitly by the caller and passed to the dialogue
controller; nothing here keeps process-wide client state.
"""
from typing import Protocol, runtime_checkable


@runtime_checkable
class ModelClient(Protocol):
    """Anything that can complete a prompt."""

    def complete(self, prompt: str) -> str:
        """Return the model's text answer, or an empty string if it gave none."""
        ...


# Provider error text -> message safe to show to the user.
_FRIENDLY_ERRORS = (
    (("not authorized", "ViewSubscriptions"),
     "Model access denied. Please ensure: 1) Model access is granted in the provider console, "
     "2) the credentials have permission to invoke the model, 3) wait 15 minutes after granting access."),
    (("on-demand throughput isn't supported", "inference profile"),
     "This model requires an inference profile. Check that the configured model ID is correct."),
    (("AccessDeniedException",),
     "Access denied. Check credentials and model access with the provider."),
    (("ValidationException",),
     "Invalid request format. Please check the model ID and request structure."),
)

DEFAULT_ERROR_MESSAGE = "Failed to get recommendation"


def describe_provider_error(exc: BaseException, default: str = DEFAULT_ERROR_MESSAGE) -> str:
    """Map a provider exception to a user-facing message."""
    text = f"{type(exc).__name__}: {exc}"
    for needles, message in _FRIENDLY_ERRORS:
        if any(needle in text for needle in needles):
            return message
    return default
