"""Score snapshots captured from metric rules, one per course member."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from asgn.domain.rules import MetricValue

STAT_BLOCK_KEY = "stat_block"


@dataclass(frozen=True, slots=True)
class StatBlock:
    """Metrics harvested from one member's submission at ``time`` (its turn-in time)."""

    username: str
    time: datetime
    scores: dict[str, MetricValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.username, str) or not self.username:
            raise ValueError("StatBlock.username must be a non-empty string")
        if not isinstance(self.time, datetime):
            raise ValueError("StatBlock.time must be a datetime")
        if self.time.tzinfo is None:
            object.__setattr__(self, "time", self.time.astimezone())
        scores = dict(self.scores)
        for key, value in scores.items():
            if not isinstance(value, (bool, int, float)):
                raise ValueError(f"StatBlock score {key!r} must be a bool, int or float")
        object.__setattr__(self, "scores", scores)

    def get(self, target: str) -> MetricValue | None:
        return self.scores.get(target)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> StatBlock:
        missing = {"username", "time"} - set(payload)
        if missing:
            raise ValueError(f"stat block is missing field(s): {', '.join(sorted(missing))}")
        scores = payload.get("scores", {})
        if not isinstance(scores, Mapping):
            raise ValueError("stat block 'scores' must be a table")
        return cls(username=payload["username"], time=payload["time"], scores=dict(scores))

    def to_dict(self) -> dict[str, Any]:
        return {"username": self.username, "time": self.time, "scores": dict(self.scores)}


@dataclass(slots=True)
class StatBlockSet:
    """Ordered stat blocks for an assignment; rewritten wholesale on every refresh."""

    blocks: list[StatBlock] = field(default_factory=list)

    def __iter__(self) -> Iterator[StatBlock]:
        return iter(self.blocks)

    def __len__(self) -> int:
        return len(self.blocks)

    def get_block(self, username: str) -> StatBlock | None:
        """First block for ``username``, or ``None``."""

        for block in self.blocks:
            if block.username == username:
                return block
        return None

    def append(self, block: StatBlock) -> None:
        self.blocks.append(block)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> StatBlockSet:
        raw = payload.get(STAT_BLOCK_KEY, [])
        if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
            raise ValueError(f"'{STAT_BLOCK_KEY}' must be an array of tables")
        blocks: list[StatBlock] = []
        for index, item in enumerate(raw):
            if not isinstance(item, Mapping):
                raise ValueError(f"{STAT_BLOCK_KEY} #{index} must be a table")
            blocks.append(StatBlock.from_dict(item))
        return cls(blocks=blocks)

    def to_dict(self) -> dict[str, Any]:
        return {STAT_BLOCK_KEY: [block.to_dict() for block in self.blocks]}


__all__ = ["STAT_BLOCK_KEY", "StatBlock", "StatBlockSet"]
