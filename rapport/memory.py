"""
Recency memory and co-reference resolution.

Narrations often leave a participant implicit ("then cries") or name an
object as an emotional stand-in for a person ("hits the door"). The reader
assumes such slots refer to whichever agent was most recently salient: an
implicit response. ``RecencyMemory`` holds the two most recently mentioned
agents and ``CoreferenceResolver`` uses it to fill those slots.

Resolution never raises. It returns ``Resolved`` or ``Unresolved`` so the
reader can skip an event without any exception handling.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import FrozenSet, Iterable, Optional, Union

from .schemas import ActionEvent


NULL_AGENT = "_"


@dataclass
class RecencyMemory:
    """The two most recently mentioned agents, newest in ``last``."""

    last: Optional[str] = None
    second_to_last: Optional[str] = None

    def observe(self, agent_id: str) -> None:
        """Record a mention. Repeating the newest agent does not shift the slots."""
        if agent_id != self.last:
            self.second_to_last = self.last
            self.last = agent_id

    def reset(self) -> None:
        self.last = None
        self.second_to_last = None

    def snapshot(self) -> "RecencyMemory":
        """Independent copy; mutating it never touches this memory."""
        return replace(self)

    def __str__(self) -> str:
        second = self.second_to_last if self.second_to_last is not None else NULL_AGENT
        last = self.last if self.last is not None else NULL_AGENT
        return f"Memory: {second} {last}"


@dataclass(frozen=True)
class Resolved:
    """Event whose participants are both concrete agents."""

    event: ActionEvent


@dataclass(frozen=True)
class Unresolved:
    """Event with a participant slot that recency memory could not fill."""

    event: ActionEvent
    reason: str


Resolution = Union[Resolved, Unresolved]


class CoreferenceResolver:
    """Fills non-agent participant slots from recency memory.

    A token counts as an agent when it is not None, is not a known non-agent,
    and (if an explicit roster was given) appears in ``agents``.
    """

    def __init__(self, non_agents: Iterable[str] = (), agents: Optional[Iterable[str]] = None):
        self.non_agents: FrozenSet[str] = frozenset(non_agents)
        self.agents: Optional[FrozenSet[str]] = frozenset(agents) if agents is not None else None

    def is_agent(self, token: Optional[str]) -> bool:
        if token is None or token in self.non_agents:
            return False
        return self.agents is None or token in self.agents

    def resolve(self, event: ActionEvent, memory: RecencyMemory) -> Resolution:
        """Fill missing or non-agent participants of ``event``.

        The acted-upon slot is filled first (distinct from the event's actor),
        then the actor (distinct from the possibly filled acted-upon). Each slot
        tries ``memory.last`` and falls back to ``memory.second_to_last``.
        """
        actor = event.actor
        acted_upon = event.acted_upon

        if not self.is_agent(acted_upon):
            acted_upon = self._recall(memory, exclude=actor)
            if acted_upon is None:
                return Unresolved(event, "no recent agent distinct from the actor")

        if not self.is_agent(actor):
            actor = self._recall(memory, exclude=acted_upon)
            if actor is None:
                return Unresolved(event, "no recent agent distinct from the acted-upon")

        if actor == event.actor and acted_upon == event.acted_upon:
            return Resolved(event)
        return Resolved(event.model_copy(update={"actor": actor, "acted_upon": acted_upon}))

    def remember(self, event: ActionEvent, memory: RecencyMemory) -> None:
        """Update ``memory`` from the agents named in ``event``.

        The acted-upon agent is observed before the actor so the actor ends up
        the most salient.
        """
        if self.is_agent(event.acted_upon):
            memory.observe(event.acted_upon)
        if self.is_agent(event.actor):
            memory.observe(event.actor)

    def _recall(self, memory: RecencyMemory, exclude: Optional[str]) -> Optional[str]:
        for candidate in (memory.last, memory.second_to_last):
            if self.is_agent(candidate) and candidate != exclude:
                return candidate
        return None
