"""
Pydantic schemas for the Rapport relationship-inference system.

All value objects that flow between the reader, the world model and the
surrounding loaders are defined here.

Design Philosophy:
- Events, scenarios and tasks are immutable (frozen models) so a scenario can
  be read any number of times without drifting
- Participants are plain string identifiers; a missing participant is None
- AgentPair is a canonical (min, max) key so both orderings of a pair land on
  the same belief
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Relationship categories
# ============================================================================


class RelationshipCategory(str, Enum):
    """The three kinds of relationship a pair of agents can have.

    Declaration order (FRIEND, NEUTRAL, ENEMY) is the display order used by
    every concise distribution string.
    """

    FRIEND = "FRIEND"
    # A neutral relationship is not the same as an unobserved one: an observer
    # may bet that the next action in a neutral relationship is itself neutral,
    # while having no such expectation for a pair it knows nothing about.
    NEUTRAL = "NEUTRAL"
    ENEMY = "ENEMY"


# ============================================================================
# Agent pairs
# ============================================================================


@dataclass(frozen=True, order=True)
class AgentPair:
    """Unordered pair of agent identifiers stored in canonical order.

    ``AgentPair("bob", "alice")`` and ``AgentPair("alice", "bob")`` are equal
    and hash identically because both store ``("alice", "bob")``.
    """

    first: str
    second: str

    def __post_init__(self) -> None:
        if self.second < self.first:
            low, high = self.second, self.first
            object.__setattr__(self, "first", low)
            object.__setattr__(self, "second", high)

    @property
    def members(self) -> Tuple[str, str]:
        return (self.first, self.second)

    def contains(self, agent_id: Optional[str]) -> bool:
        """Return ``True`` if ``agent_id`` is one of the pair's members."""
        return agent_id is not None and agent_id in self.members

    def __str__(self) -> str:
        return f"{self.first}&{self.second}"


# ============================================================================
# Events, scenarios, tasks
# ============================================================================


class ActionEvent(BaseModel):
    """An actor performing an action, optionally upon another participant.

    Either participant may be None when the narration leaves it implicit,
    or may name a non-agent (an object or place). Resolution of such slots is
    the job of ``rapport.memory.CoreferenceResolver``.
    """

    model_config = ConfigDict(frozen=True)

    actor: Optional[str] = Field(None, description="Identifier of the acting participant")
    action: str = Field(..., min_length=1, description="Action verb, third person singular")
    acted_upon: Optional[str] = Field(None, description="Identifier of the acted-upon participant")

    @classmethod
    def of(cls, actor: Optional[str], action: str, acted_upon: Optional[str] = None) -> "ActionEvent":
        """Positional shorthand: ``ActionEvent.of("alice", "greets", "bob")``."""
        return cls(actor=actor, action=action, acted_upon=acted_upon)

    def involves(self, pair: AgentPair) -> bool:
        """Return ``True`` if either participant belongs to ``pair``."""
        return pair.contains(self.actor) or pair.contains(self.acted_upon)

    def __str__(self) -> str:
        actor = self.actor if self.actor is not None else "_"
        acted_upon = self.acted_upon if self.acted_upon is not None else "_"
        return f"{actor} {self.action} {acted_upon}"


EventLike = Union[ActionEvent, Sequence[Optional[str]]]


def _coerce_event(value: EventLike) -> ActionEvent:
    if isinstance(value, ActionEvent):
        return value
    if isinstance(value, dict):
        return ActionEvent(**value)
    items = list(value)
    if len(items) == 2:
        items.append(None)
    if len(items) != 3:
        raise ValueError(f"Event triples need 2 or 3 items, got {len(items)}: {items!r}")
    return ActionEvent.of(*items)


class Scenario(BaseModel):
    """Ordered, finite sequence of action events."""

    model_config = ConfigDict(frozen=True)

    events: Tuple[ActionEvent, ...] = Field(default_factory=tuple)

    @field_validator("events", mode="before")
    @classmethod
    def _coerce_events(cls, value):
        return tuple(_coerce_event(item) for item in value)

    @classmethod
    def of(cls, events: Iterable[EventLike]) -> "Scenario":
        """Build a scenario from events or ``(actor, action, acted_upon)`` triples."""
        return cls(events=tuple(events))

    @property
    def length(self) -> int:
        return len(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def __str__(self) -> str:
        return "[" + ", ".join(str(event) for event in self.events) + "]"


class Task(BaseModel):
    """Forced-choice task: a premise and exactly two candidate continuations.

    ``answer`` is the 0-based index of the correct continuation when known.
    """

    model_config = ConfigDict(frozen=True)

    premise: Scenario
    choices: Tuple[Scenario, ...]
    task_id: Optional[str] = Field(None, description="Identifier within its task set")
    answer: Optional[int] = Field(None, ge=0, le=1, description="Index of the correct choice")

    @field_validator("choices")
    @classmethod
    def _exactly_two(cls, value: Tuple[Scenario, ...]) -> Tuple[Scenario, ...]:
        if len(value) != 2:
            raise ValueError(f"A task needs exactly 2 choices, got {len(value)}")
        return value

    @property
    def longest_choice_length(self) -> int:
        return max(choice.length for choice in self.choices)

    def __str__(self) -> str:
        return f"{self.premise} -> {' | '.join(str(choice) for choice in self.choices)}"
