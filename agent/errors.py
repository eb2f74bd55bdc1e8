"""Error types raised by the chat relay.

Each error carries the HTTP status the API answers with and the message shown
to the caller. None of them is fatal: the relay keeps serving, with whatever
the transcript holds at that point.
"""

from __future__ import annotations

from typing import Optional


class RelayError(Exception):
    """Base exception for the chat relay."""

    status_code: int = 500
    default_message: str = "Failed to get response from Gemini"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(RelayError):
    """Raised when the inbound message is missing or empty."""

    status_code = 400
    default_message = "Message is required"


class EmptyReplyError(RelayError):
    """Raised when Gemini answers without any usable text."""

    status_code = 500
    default_message = "No reply generated from Gemini."


class UpstreamOverloadError(RelayError):
    """Raised when Gemini reports it is overloaded. Callers may retry later."""

    status_code = 503
    default_message = "Gemini API is currently overloaded. Please try again in a few moments."


class GenerationError(RelayError):
    """Raised for any other failure while generating a reply."""

    status_code = 500
    default_message = "Failed to get response from Gemini"
