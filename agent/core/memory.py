"""Server-side conversation memory.

One ``Transcript`` holds the whole conversation for the running process.
There is no per-user or per-session partitioning and nothing is persisted:
restarting the server starts a fresh conversation. Growth is unbounded; no
turn is ever evicted except by ``clear``.
"""

from __future__ import annotations

from typing import List, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field


Role = Literal["user", "assistant"]


class Turn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role = Field(..., description="'user' or 'assistant'")
    text: str


class Transcript:
    """Ordered, append-only log of turns, cleared only on reset.

    Alternation between user and assistant turns is not enforced: a failed
    generation leaves a user turn without an answer.
    """

    def __init__(self) -> None:
        self._turns: List[Turn] = []

    def append_user(self, text: str) -> Turn:
        return self._append(Turn(role="user", text=text))

    def append_assistant(self, text: str) -> Turn:
        return self._append(Turn(role="assistant", text=text))

    def _append(self, turn: Turn) -> Turn:
        self._turns.append(turn)
        return turn

    def clear(self) -> None:
        # In place, so a snapshot taken before the clear is unaffected.
        del self._turns[:]

    def snapshot(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self):
        return iter(self.snapshot())
