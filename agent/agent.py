from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from agent.core.memory import Transcript, Turn
from agent.core.prompt import SYSTEM_PROMPT
from agent.errors import EmptyReplyError, GenerationError, UpstreamOverloadError, ValidationError
from config.settings import get_settings


logger = logging.getLogger(__name__)

OVERLOADED_STATUS = 503


def build_llm() -> ChatGoogleGenerativeAI:
    settings = get_settings()
    if not settings.google_api_key:
        raise RuntimeError(
            "GOOGLE_API_KEY not set. Please configure it in environment or .env"
        )

    # max_retries=0: a failed call is reported to the caller, never retried here.
    return ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        google_api_key=settings.google_api_key,
        temperature=settings.temperature,
        top_p=settings.top_p,
        max_retries=0,
        timeout=settings.request_timeout,
    )


def to_lc_messages(turns: Iterable[Turn]) -> List[BaseMessage]:
    messages: List[BaseMessage] = [SystemMessage(content=SYSTEM_PROMPT)]
    for turn in turns:
        if turn.role == "user":
            messages.append(HumanMessage(content=turn.text))
        else:
            messages.append(AIMessage(content=turn.text))
    return messages


def extract_reply(result: Any) -> Optional[str]:
    """Return the reply text of a model result, if any.

    A string ``content`` is what the chat model made by joining the text parts
    of the first candidate, so it is returned whole. A list ``content`` keeps
    the parts, and only the first one is read.
    """
    content = getattr(result, "content", None)
    if isinstance(content, str):
        return content or None
    if not isinstance(content, list) or not content:
        return None
    first = content[0]
    if isinstance(first, str):
        return first or None
    if isinstance(first, dict):
        text = first.get("text")
        if isinstance(text, str) and text:
            return text
    return None


def _status_of(exc: BaseException) -> Optional[int]:
    for attr in ("status_code", "code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return int(value)
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int):
        return value
    return None


def is_overloaded(exc: BaseException) -> bool:
    """True when any exception in the chain carries a 503 status."""
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if _status_of(current) == OVERLOADED_STATUS:
            return True
        if getattr(current, "status", None) == "UNAVAILABLE":
            return True
        current = current.__cause__ or current.__context__
    return False


class ChatRelay:
    """Relays user messages to Gemini with the whole conversation as context.

    A single instance serves the whole process. Its transcript is shared by
    every caller and nothing guards it against concurrent requests: two
    in-flight messages may interleave their turns, and a reset during a call
    leaves only that call's late turns behind.
    """

    def __init__(
        self,
        llm: Optional[Any] = None,
        transcript: Optional[Transcript] = None,
    ) -> None:
        self._llm = llm
        self.transcript = transcript if transcript is not None else Transcript()

    def _get_llm(self) -> Any:
        if self._llm is None:
            try:
                self._llm = build_llm()
            except Exception as exc:
                logger.error("Could not build Gemini client: %s", exc)
                raise GenerationError() from exc
        return self._llm

    async def handle_message(self, text: Optional[str]) -> str:
        if not isinstance(text, str) or not text:
            raise ValidationError()

        self.transcript.append_user(text)
        llm = self._get_llm()
        messages = to_lc_messages(self.transcript.snapshot())
        logger.info(
            "Calling Gemini: message_len=%s context_turns=%s",
            len(text),
            len(messages) - 1,
        )

        try:
            result = await llm.ainvoke(messages)
        except Exception as exc:
            if is_overloaded(exc):
                logger.warning("Gemini overloaded: %s", exc)
                raise UpstreamOverloadError() from exc
            logger.exception("Gemini error: %s", exc)
            raise GenerationError() from exc

        reply = extract_reply(result)
        if not reply:
            logger.warning(
                "Gemini returned no text; transcript left with %s turns",
                len(self.transcript),
            )
            raise EmptyReplyError()

        self.transcript.append_assistant(reply)
        logger.info(
            "Gemini replied: %s chars, transcript now %s turns",
            len(reply),
            len(self.transcript),
        )
        return reply

    def reset(self) -> dict:
        dropped = len(self.transcript)
        self.transcript.clear()
        logger.info("Transcript reset: dropped %s turns", dropped)
        return {"ok": True}

    def history(self):
        return self.transcript.snapshot()
