"""
World model: beliefs about every relationship among the agents seen so far.

The world model owns one ``RelationshipBelief`` per unordered pair of known
agents. Beliefs are created uninformed the moment both members of a pair are
known, sharpened by resolved events, and (after a scenario has been read)
regularized by reflection.

Key behaviors:
- Recency weighting: the n-th update (1-based) counts as n unit updates, so
  later evidence outweighs earlier evidence
- Reflection: beliefs still indistinguishable from uniform are replaced by a
  default ordering (NEUTRAL > FRIEND > ENEMY by default)
- History: every update and reflection rewrite snapshots the affected belief,
  keyed by the world-model age at which it happened
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from .beliefs import ActionObservationModel, RelationshipBelief
from .config import ReasoningConfig
from .schemas import ActionEvent, AgentPair, RelationshipCategory

BeliefSnapshot = Dict[RelationshipCategory, float]


class WorldModel:
    """Tracks relationship beliefs among agents over one reading."""

    MAX_ENTRIES_PER_LINE = 5

    def __init__(self, config: Optional[ReasoningConfig] = None):
        self.config = config or ReasoningConfig.from_env()
        self._agents: List[str] = []
        self._beliefs: Dict[AgentPair, RelationshipBelief] = {}
        self._history: Dict[AgentPair, Dict[int, BeliefSnapshot]] = {}
        self.age = 0

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def agents(self) -> Tuple[str, ...]:
        """Known agents in the order they were first seen."""
        return tuple(self._agents)

    @property
    def pairs(self) -> Tuple[AgentPair, ...]:
        return tuple(self._beliefs)

    def belief(self, pair: AgentPair) -> Optional[RelationshipBelief]:
        return self._beliefs.get(pair)

    def beliefs_for(self, pair: AgentPair) -> BeliefSnapshot:
        """Current distribution for ``pair``, or the uniform prior if unknown."""
        belief = self._beliefs.get(pair)
        if belief is None:
            return RelationshipBelief.uniform().probabilities
        return belief.probabilities

    def history_for(self, pair: AgentPair) -> Dict[int, BeliefSnapshot]:
        """Snapshots of ``pair``'s belief keyed by the age at which they were taken."""
        return {age: dict(snapshot) for age, snapshot in self._history.get(pair, {}).items()}

    @property
    def history(self) -> Dict[AgentPair, Dict[int, BeliefSnapshot]]:
        return {pair: self.history_for(pair) for pair in self._history}

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def update(self, event: ActionEvent, observation: ActionObservationModel) -> None:
        """Fold one resolved event into the beliefs about its participants.

        Both participants must be concrete; resolution happens upstream.

        Raises:
            ValueError: If the actor or the acted-upon participant is missing
        """
        if event.actor is None or event.acted_upon is None:
            raise ValueError(f"World model updates need both participants, got '{event}'")

        self._introduce(event.actor)
        self._introduce(event.acted_upon)

        pair = AgentPair(event.actor, event.acted_upon)
        belief = self._beliefs.get(pair)
        if belief is None:
            # Only reachable for an agent acting upon itself.
            belief = RelationshipBelief()
            self._beliefs[pair] = belief

        belief.update(observation, weight=self.age + 1)
        self._record(pair, belief)
        self.age += 1

    def reflect_and_refine(self) -> List[AgentPair]:
        """Replace every uninformative belief with the default bias ordering.

        Returns:
            The pairs whose beliefs were rewritten, in tracking order
        """
        rewritten: List[AgentPair] = []
        for pair, belief in list(self._beliefs.items()):
            if belief.is_informative(self.config.informative_tolerance):
                continue
            default = RelationshipBelief.from_ranking(self.config.default_bias_order)
            self._beliefs[pair] = default
            self._record(pair, default)
            self.age += 1
            rewritten.append(pair)
        return rewritten

    def _introduce(self, agent_id: str) -> None:
        if agent_id in self._agents:
            return
        # Pair the newcomer with everyone already known before adding it, so
        # every pair of known agents always has a belief.
        for known in self._agents:
            self._beliefs[AgentPair(known, agent_id)] = RelationshipBelief()
        self._agents.append(agent_id)

    def _record(self, pair: AgentPair, belief: RelationshipBelief) -> None:
        self._history.setdefault(pair, {})[self.age] = belief.probabilities

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def probability_of(self, event: ActionEvent, observation: ActionObservationModel) -> float:
        """Predictive probability of ``event``; unknown pairs impose no penalty."""
        if event.actor is None or event.acted_upon is None:
            return self.config.unknown_pair_probability
        belief = self._beliefs.get(AgentPair(event.actor, event.acted_upon))
        if belief is None:
            return self.config.unknown_pair_probability
        return belief.probability_of_observation(observation)

    def divergence_from(self, other: "WorldModel") -> float:
        """Sum of belief distances over shared pairs, rewarding each shared pair."""
        distance = 0.0
        for pair, belief in self._beliefs.items():
            other_belief = other._beliefs.get(pair)
            if other_belief is None:
                continue
            distance += belief.divergence_from(other_belief)
            distance -= self.config.shared_pair_reward
        return distance

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def concise_string_for(self, pair: AgentPair) -> str:
        belief = self._beliefs.get(pair) or RelationshipBelief()
        return f"{pair}:{belief.to_concise_string()}"

    def to_concise_string(self, pairs: Optional[Iterable[AgentPair]] = None) -> str:
        """All (or the given) beliefs, a handful of entries per line."""
        selected = list(self._beliefs) if pairs is None else list(pairs)
        entries = [self.concise_string_for(pair) for pair in selected]
        lines = [
            ", ".join(entries[start:start + self.MAX_ENTRIES_PER_LINE])
            for start in range(0, len(entries), self.MAX_ENTRIES_PER_LINE)
        ]
        return ",\n".join(lines)

    def __repr__(self) -> str:
        return f"WorldModel(age={self.age}, agents={self._agents!r}, pairs={len(self._beliefs)})"
