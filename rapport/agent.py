"""
Interpreting agent: reads scenarios into world models and ranks continuations.

The agent reads a scenario event by event:

    START -> (RESOLVE -> UPDATE_OR_SKIP)* -> REFLECT -> DONE

Each event's implicit participants are resolved from recency memory; resolved
events update the world model, unresolved ones are skipped but still refresh
memory. After the last event the world model reflects on its beliefs.

To rank candidate continuations, the agent reads the premise once and then
scores each candidate by the predictive probability of its events under the
premise's world model. Candidates never update beliefs, and each one starts
from an identical copy of the memory the premise left behind.

Usage:
    agent = InterpretingAgent(knowledge, non_agents={"door", "house"})
    outcome = agent.rank_choices(task.premise, task.choices)
    if isinstance(outcome, Ranked):
        print("choice", outcome.index + 1)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .beliefs import ActionObservationModel, RelationshipBelief
from .config import Config, ReasoningConfig
from .logging_utils import (
    LOG_TAG_ERROR,
    LOG_TAG_SUCCESS,
    TRACE_RULE,
    format_columns,
    indent_continuation,
    log_deterministic,
    log_error,
    log_info,
    log_skipped,
    log_success,
)
from .memory import CoreferenceResolver, RecencyMemory, Resolved
from .schemas import AgentPair, RelationshipCategory, Scenario, Task
from .world_model import BeliefSnapshot, WorldModel


class InsufficientKnowledgeError(KeyError):
    """An action was read for which no observation model is known."""

    def __init__(self, action: str):
        super().__init__(action)
        self.action = action

    def __str__(self) -> str:
        return f'Insufficient knowledge about "{self.action}" to continue.'


@dataclass(frozen=True)
class Ranked:
    """Ranking verdict: ``index`` (0-based) is the most probable choice."""

    index: int
    probabilities: Tuple[float, ...]


@dataclass(frozen=True)
class Undecided:
    """Ranking ended in an exact tie between ``tied`` choice indices."""

    tied: Tuple[int, int]
    probabilities: Tuple[float, ...]


RankingOutcome = Union[Ranked, Undecided]


def _percent(value: float) -> str:
    return f"{round(value * 100):02d}%"


class InterpretingAgent:
    """Infers relationships from scenarios and judges continuations.

    Args:
        knowledge: Observation model per action verb
        non_agents: Identifiers known to denote objects or places
        agents: Optional explicit roster; when given, only these count as agents
        config: Numeric knobs shared with the world models this agent builds
            (defaults to ``ReasoningConfig.from_env()``)
        verbose: Print a reading trace (defaults to ``Config.VERBOSE``)
    """

    def __init__(
        self,
        knowledge: Mapping[str, ActionObservationModel],
        non_agents: Iterable[str] = (),
        agents: Optional[Iterable[str]] = None,
        *,
        config: Optional[ReasoningConfig] = None,
        verbose: Optional[bool] = None,
    ):
        self.knowledge: Dict[str, ActionObservationModel] = dict(knowledge)
        self.resolver = CoreferenceResolver(non_agents, agents)
        self.config = config or ReasoningConfig.from_env()
        self.verbose = Config.VERBOSE if verbose is None else verbose
        self.memory = RecencyMemory()
        self.world_model: Optional[WorldModel] = None

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read(
        self,
        scenario: Scenario,
        continue_memory: bool = False,
        focus: Optional[AgentPair] = None,
    ) -> WorldModel:
        """Build a world model of ``scenario`` and remember it for queries.

        Args:
            scenario: Events to read, in order
            continue_memory: Keep recency memory from the previous read (a
                follow-up scenario). The world model always starts fresh.
            focus: When verbose, only trace events and beliefs touching this pair

        Raises:
            InsufficientKnowledgeError: An event's action has no observation model
        """
        if self.verbose:
            log_info(format_columns("", "(Friend|Neutral|Enemy)", "(Friend|Neutral|Enemy)"))
            log_info(format_columns("Event", "Action distribution", "Beliefs about relationships"))
            log_info(TRACE_RULE)

        world_model = WorldModel(self.config)
        if not continue_memory:
            self.memory.reset()
        self.world_model = world_model

        for event in scenario.events:
            observation = self._observation_for(event.action)
            resolution = self.resolver.resolve(event, self.memory)

            if isinstance(resolution, Resolved):
                world_model.update(resolution.event, observation)
                self.resolver.remember(resolution.event, self.memory)
                if self.verbose and (focus is None or resolution.event.involves(focus)):
                    log_deterministic(self._belief_line(str(event), observation, world_model, focus))
            else:
                self.resolver.remember(event, self.memory)
                if self.verbose and focus is None:
                    log_skipped(self._belief_line(str(event), observation, world_model, focus))

        world_model.reflect_and_refine()

        if self.verbose:
            log_deterministic(self._belief_line("Reflecting", None, world_model, focus))
            print()

        return world_model

    # ------------------------------------------------------------------
    # Ranking
    # ------------------------------------------------------------------

    def rank_choices(self, premise: Scenario, choices: Sequence[Scenario]) -> RankingOutcome:
        """Pick the continuation most probable under the premise's world model.

        Returns:
            ``Ranked`` with the winning index, or ``Undecided`` on an exact tie

        Raises:
            InsufficientKnowledgeError: A premise or choice action has no observation model
            ValueError: If fewer than two choices are given
        """
        if len(choices) < 2:
            raise ValueError(f"rank_choices needs at least two choices, got {len(choices)}")

        world_model = self.read(premise, continue_memory=False)
        premise_memory = self.memory.snapshot()
        longest = max(choice.length for choice in choices)

        probabilities: List[float] = []
        best_index = -1
        best_probability = 0.0
        for index, choice in enumerate(choices):
            self.memory = premise_memory.snapshot()
            probability = self._score_choice(choice, world_model, longest)
            probabilities.append(probability)

            if index > 0 and probability == best_probability:
                if self.verbose:
                    log_error(f"{LOG_TAG_ERROR} I am undecided.")
                return Undecided(
                    tied=(best_index if best_index >= 0 else 0, index),
                    probabilities=tuple(probabilities),
                )
            if probability > best_probability:
                best_probability = probability
                best_index = index

        if self.verbose:
            log_success(f"{LOG_TAG_SUCCESS} I choose interpretation {best_index + 1}.")
        return Ranked(index=best_index, probabilities=tuple(probabilities))

    def perform(self, task: Task) -> RankingOutcome:
        """Rank the choices of a forced-choice task."""
        return self.rank_choices(task.premise, task.choices)

    def _score_choice(self, choice: Scenario, world_model: WorldModel, longest: int) -> float:
        if self.verbose:
            log_info(format_columns("Possible event", "Action distribution", "p"))
            log_info(TRACE_RULE)

        probability = 1.0
        total = 0.0
        resolved = 0
        for event in choice.events:
            observation = self._observation_for(event.action)
            resolution = self.resolver.resolve(event, self.memory)

            if isinstance(resolution, Resolved):
                event_probability = world_model.probability_of(resolution.event, observation)
                total += event_probability
                probability *= event_probability
                resolved += 1
                self.resolver.remember(resolution.event, self.memory)
                if self.verbose:
                    log_deterministic(
                        format_columns(str(event), observation.to_concise_string(), _percent(event_probability))
                    )
            else:
                self.resolver.remember(event, self.memory)
                if self.verbose:
                    log_skipped(format_columns(str(event), observation.to_concise_string(), "N/A"))

        if resolved == 0:
            # A choice with nothing to score can never win.
            probability = 0.0
        else:
            mean = total / resolved
            for _ in range(resolved, longest):
                if self.verbose:
                    log_deterministic(format_columns("Normalizing", "", _percent(mean)))
                probability *= mean

        if self.verbose:
            log_info(format_columns("", "", f"P={_percent(probability)}"))
            print()
        return probability

    # ------------------------------------------------------------------
    # Queries about the most recent reading
    # ------------------------------------------------------------------

    def beliefs_for(self, a: str, b: str) -> BeliefSnapshot:
        """Distribution over categories for the pair, from the last reading."""
        return self._require_world_model().beliefs_for(AgentPair(a, b))

    def history_for(self, a: str, b: str) -> Dict[int, BeliefSnapshot]:
        """Belief snapshots for the pair over the last reading, keyed by age."""
        return self._require_world_model().history_for(AgentPair(a, b))

    def state_belief(self, a: str, b: str) -> str:
        """Sentence naming the most believed category and its confidence."""
        pair = AgentPair(a, b)
        belief = RelationshipBelief(self._require_world_model().beliefs_for(pair))
        leaders, confidence = belief.most_believed()
        kinds = " or ".join(category.value.lower() for category in leaders)
        return (
            f"I believe that the relationship between {pair} is a {kinds} "
            f"relationship with {_percent(confidence)} confidence."
        )

    def most_believed(self, a: str, b: str) -> Tuple[List[RelationshipCategory], float]:
        belief = RelationshipBelief(self.beliefs_for(a, b))
        return belief.most_believed()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _observation_for(self, action: str) -> ActionObservationModel:
        observation = self.knowledge.get(action)
        if observation is None:
            raise InsufficientKnowledgeError(action)
        return observation

    def _require_world_model(self) -> WorldModel:
        if self.world_model is None:
            raise RuntimeError("No scenario has been read yet")
        return self.world_model

    def _belief_line(
        self,
        label: str,
        observation: Optional[ActionObservationModel],
        world_model: WorldModel,
        focus: Optional[AgentPair],
    ) -> str:
        if focus is None:
            beliefs = indent_continuation(world_model.to_concise_string())
        else:
            beliefs = world_model.concise_string_for(focus)
        distribution = observation.to_concise_string() if observation is not None else ""
        return format_columns(label, distribution, beliefs)
