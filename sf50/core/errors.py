"""
Exceptions raised by the SF-50 assistant core.

Extraction problems never raise; a reply that does not follow the template
simply yields a partial Recommendation. These errors cover the cases the
caller has to handle.
"""


class SF50Error(Exception):
    """Base class for assistant errors."""


class EmptyModelOutputError(SF50Error):
    """The model returned no text, so nothing can be extracted."""

    def __init__(self, message: str = "No response from model"):
        super().__init__(message)


class ModelInvocationError(SF50Error):
    """The model provider call failed.

    ``user_message`` is safe to show to an end user; the provider's own
    error text is kept on ``detail``.
    """

    def __init__(self, user_message: str, detail: str = ""):
        super().__init__(user_message)
        self.user_message = user_message
        self.detail = detail


class DialogueStateError(SF50Error):
    """A turn was submitted that the dialogue cannot accept in its current state."""


class SessionBusyError(SF50Error):
    """A turn is already in flight for this session."""
