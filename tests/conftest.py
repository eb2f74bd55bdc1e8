from __future__ import annotations

import asyncio
from typing import Any, List, Optional

import pytest
from langchain_core.messages import AIMessage, BaseMessage

from agent.agent import ChatRelay
from config.settings import get_settings


class FakeLLM:
    """Stands in for ChatGoogleGenerativeAI; replies are consumed in order."""

    def __init__(self, replies: Optional[List[Any]] = None, gate: Optional[asyncio.Event] = None) -> None:
        self.replies = list(replies or [])
        self.calls: List[List[BaseMessage]] = []
        self.gate = gate

    async def ainvoke(self, messages: List[BaseMessage]) -> Any:
        self.calls.append(list(messages))
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        reply = self.replies.pop(0) if self.replies else "ok"
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, (str, list)):
            return AIMessage(content=reply)
        return reply


class FakeAPIError(Exception):
    def __init__(self, message: str, code: Optional[int] = None, status: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code
        self.status = status


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("GEMINI_TIMEOUT", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def relay(fake_llm: FakeLLM) -> ChatRelay:
    return ChatRelay(llm=fake_llm)
