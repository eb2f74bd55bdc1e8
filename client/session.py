"""Client-side chat state.

The message list kept here is a local copy of what the user has seen. It is
never reconciled with the relay's transcript: a failed send keeps the user's
message on screen even though the relay may hold a different history, and
several clients talking to one relay all share the relay's single
conversation.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Literal, Optional

import httpx

from client.transport import RelayClient


logger = logging.getLogger(__name__)

SEND_FAILED_MESSAGE = "⚠️ Something went wrong. Please try again."
RESET_FAILED_MESSAGE = "Server reset failed. Please try again."
NO_REPLY_FALLBACK = "Sorry, I couldn't get a response."

Author = Literal["user", "bot"]


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Message:
    id: int
    type: Author
    text: str
    full_text: str

    @property
    def revealed(self) -> bool:
        return self.text == self.full_text


class ChatSession:
    def __init__(
        self,
        client: RelayClient,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._client = client
        self._clock = clock
        self.messages: List[Message] = []
        self.error: str = ""
        self.loading: bool = False
        self.typing_id: Optional[int] = None
        self._last_id = 0

    def _next_id(self) -> int:
        # Clock-derived, but strictly increasing even within one millisecond.
        self._last_id = max(self._clock(), self._last_id + 1)
        return self._last_id

    def send(self, text: str) -> Optional[Message]:
        """Send ``text`` to the relay; returns the bot message on success.

        Blank input is ignored. The user message is shown before the request
        goes out and stays even when the request fails.
        """
        if not text.strip():
            return None

        self.messages.append(Message(id=self._next_id(), type="user", text=text, full_text=text))
        self.loading = True
        self.error = ""
        try:
            reply = self._client.send_message(text)
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Send failed: %s", exc)
            self.error = SEND_FAILED_MESSAGE
            return None
        finally:
            self.loading = False

        bot_id = self._next_id()
        bot = Message(id=bot_id, type="bot", text="", full_text=reply or NO_REPLY_FALLBACK)
        self.messages.append(bot)
        self.typing_id = bot_id
        return bot

    def reset(self) -> bool:
        self.loading = True
        self.error = ""
        try:
            self._client.reset()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Reset failed: %s", exc)
            self.error = RESET_FAILED_MESSAGE
            return False
        finally:
            self.loading = False

        self.messages = []
        self.typing_id = None
        return True

    def advance_reveal(self) -> bool:
        """Show one more character of the message being revealed.

        Returns True while there is more to reveal.
        """
        if self.typing_id is None:
            return False
        msg = next((m for m in self.messages if m.id == self.typing_id), None)
        if msg is None or msg.revealed:
            self.typing_id = None
            return False
        msg.text = msg.full_text[: len(msg.text) + 1]
        if msg.revealed:
            self.typing_id = None
            return False
        return True
