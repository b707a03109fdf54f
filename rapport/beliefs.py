"""
Observation models and relationship beliefs.

An ``ActionObservationModel`` says how likely one action is to be observed
under each relationship category. A ``RelationshipBelief`` is the current
distribution over categories for one pair of agents; it is sharpened by
observations (Bayesian update) and queried for the predictive probability of
the next observation.

Both are discrete distributions over ``RelationshipCategory`` that always sum
to 1. Every constructor normalizes, so callers may pass relative weights.
"""

from __future__ import annotations

import math
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .schemas import RelationshipCategory


CATEGORIES: Tuple[RelationshipCategory, ...] = tuple(RelationshipCategory)
"""All categories in declaration order (FRIEND, NEUTRAL, ENEMY)."""

DEFAULT_INFORMATIVE_TOLERANCE = 0.001

_FLAG_CATEGORIES = {
    "F": RelationshipCategory.FRIEND,
    "N": RelationshipCategory.NEUTRAL,
    "E": RelationshipCategory.ENEMY,
}


def normalize(weights: Mapping[RelationshipCategory, float]) -> Dict[RelationshipCategory, float]:
    """Scale non-negative weights so they sum to 1.

    Categories missing from ``weights`` get probability 0.

    Raises:
        KeyError: If a category is not a ``RelationshipCategory``
        ValueError: If a weight is negative or all weights are zero
    """
    unknown = set(weights) - set(CATEGORIES)
    if unknown:
        raise KeyError(f"Unknown relationship categories: {sorted(unknown)}")

    for category, weight in weights.items():
        if weight < 0 or math.isnan(weight):
            raise ValueError(f"Weight for {category.value} must be non-negative, got {weight}")

    total = sum(weights.values())
    if total <= 0:
        raise ValueError("Cannot normalize a distribution whose weights sum to zero")

    return {category: weights.get(category, 0.0) / total for category in CATEGORIES}


def preference_weights(
    preferences: Mapping[RelationshipCategory, bool], ratio: float
) -> Dict[RelationshipCategory, float]:
    """Turn "is this category typical?" flags into relative weights.

    Typical categories weigh ``ratio``, the rest weigh 1. Categories absent
    from ``preferences`` count as atypical.
    """
    if ratio < 1:
        raise ValueError(f"Preference ratio must be >= 1, got {ratio}")
    return {
        category: (ratio if preferences.get(category, False) else 1.0)
        for category in CATEGORIES
    }


def format_distribution(distribution: Mapping[RelationshipCategory, float]) -> str:
    """Concise ``FRIEND|NEUTRAL|ENEMY`` percentage string, e.g. ``67%|17%|17%``."""
    return "|".join(f"{round(distribution[category] * 100):02d}%" for category in CATEGORIES)


class ActionObservationModel:
    """Distribution of one action's observation likelihood over categories.

    Immutable once built. Use ``from_preferences`` / ``from_flags`` for the
    common "typical under X" knowledge notation.
    """

    __slots__ = ("_probabilities",)

    def __init__(self, probabilities: Mapping[RelationshipCategory, float]):
        self._probabilities = normalize(probabilities)

    @classmethod
    def from_preferences(
        cls, preferences: Mapping[RelationshipCategory, bool], ratio: float
    ) -> "ActionObservationModel":
        """Build from typical/atypical flags and a big:small odds ratio.

        With ``ratio=3`` and only FRIEND typical the result is
        ``{FRIEND: 0.6, NEUTRAL: 0.2, ENEMY: 0.2}``.
        """
        return cls(preference_weights(preferences, ratio))

    @classmethod
    def from_flags(cls, flags: str, ratio: float) -> "ActionObservationModel":
        """Build from a letter string such as ``"F"``, ``"FE"`` or ``""``.

        Each of F, N, E marks the matching category as typical. Case is
        ignored; an empty string yields the uniform distribution.
        """
        preferences: Dict[RelationshipCategory, bool] = {}
        for letter in flags.upper():
            if letter not in _FLAG_CATEGORIES:
                raise ValueError(f"Unknown relationship flag {letter!r} in {flags!r}")
            preferences[_FLAG_CATEGORIES[letter]] = True
        return cls.from_preferences(preferences, ratio)

    @property
    def probabilities(self) -> Dict[RelationshipCategory, float]:
        return dict(self._probabilities)

    def probability_given(self, category: RelationshipCategory) -> float:
        """Probability of observing this action under ``category``."""
        try:
            return self._probabilities[category]
        except KeyError:
            raise KeyError(f"Unknown relationship category: {category!r}") from None

    def to_concise_string(self) -> str:
        return format_distribution(self._probabilities)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActionObservationModel):
            return NotImplemented
        return self._probabilities == other._probabilities

    def __hash__(self) -> int:
        return hash(tuple(self._probabilities[category] for category in CATEGORIES))

    def __repr__(self) -> str:
        return f"ActionObservationModel({self.to_concise_string()})"


class RelationshipBelief:
    """Belief about which relationship one pair of agents has.

    Starts uniform unless built with ``biased_toward`` or ``from_ranking``.
    Mutated in place by ``update``.
    """

    def __init__(self, probabilities: Optional[Mapping[RelationshipCategory, float]] = None):
        if probabilities is None:
            probabilities = {category: 1.0 for category in CATEGORIES}
        self._probabilities = normalize(probabilities)

    # Constructors -------------------------------------------------------------

    @classmethod
    def uniform(cls) -> "RelationshipBelief":
        return cls()

    @classmethod
    def biased_toward(cls, category: RelationshipCategory, ratio: float) -> "RelationshipBelief":
        """Belief in which ``category`` is ``ratio`` times as likely as each other one."""
        return cls(preference_weights({category: True}, ratio))

    @classmethod
    def from_ranking(cls, ordering: Sequence[RelationshipCategory]) -> "RelationshipBelief":
        """Belief from categories listed in increasing order of likelihood.

        The i-th category (1-based) gets weight i before normalization, so
        ``[ENEMY, FRIEND, NEUTRAL]`` yields ``{ENEMY: 1/6, FRIEND: 2/6, NEUTRAL: 3/6}``.
        """
        if len(ordering) != len(CATEGORIES) or set(ordering) != set(CATEGORIES):
            raise ValueError("A ranking must list every relationship category exactly once")
        return cls({category: float(rank) for rank, category in enumerate(ordering, start=1)})

    # Queries ------------------------------------------------------------------

    @property
    def probabilities(self) -> Dict[RelationshipCategory, float]:
        return dict(self._probabilities)

    def probability_of(self, category: RelationshipCategory) -> float:
        return self._probabilities[category]

    def probability_of_observation(self, observation: ActionObservationModel) -> float:
        """Predictive probability of seeing ``observation`` under this belief.

        Sum over categories of ``belief(c) * P(observation | c)``.
        """
        return sum(
            self._probabilities[category] * observation.probability_given(category)
            for category in CATEGORIES
        )

    def divergence_from(self, other: "RelationshipBelief") -> float:
        """L1 distance between the two distributions."""
        return sum(
            abs(self._probabilities[category] - other._probabilities[category])
            for category in CATEGORIES
        )

    def is_informative(self, tolerance: float = DEFAULT_INFORMATIVE_TOLERANCE) -> bool:
        """``True`` if any category deviates from uniform by more than ``tolerance``."""
        uniform = 1.0 / len(CATEGORIES)
        return any(abs(value - uniform) > tolerance for value in self._probabilities.values())

    def most_believed(self) -> Tuple[List[RelationshipCategory], float]:
        """Return the top categories (ties included, declaration order) and their probability."""
        highest = max(self._probabilities.values())
        leaders = [
            category
            for category in CATEGORIES
            if math.isclose(self._probabilities[category], highest, rel_tol=0.0, abs_tol=1e-12)
        ]
        return leaders, highest

    # Mutation -----------------------------------------------------------------

    def update(self, observation: ActionObservationModel, weight: float = 1.0) -> None:
        """Bayesian update with the evidence counted ``weight`` times.

        Each category is multiplied by ``P(observation | c) ** weight`` and the
        result renormalized, so an integer weight ``w`` is the same as ``w``
        unit-weight updates. The product is taken in log space and shifted by
        its maximum, so large weights never underflow the whole posterior.

        Raises:
            ValueError: If ``weight`` is negative, or the observation has zero
                probability under every category this belief supports
        """
        if weight < 0:
            raise ValueError(f"Update weight must be non-negative, got {weight}")

        log_posterior: Dict[RelationshipCategory, float] = {}
        for category in CATEGORIES:
            prior = self._probabilities[category]
            likelihood = observation.probability_given(category)
            if prior <= 0:
                continue
            if weight == 0:
                log_posterior[category] = math.log(prior)
            elif likelihood > 0:
                log_posterior[category] = math.log(prior) + weight * math.log(likelihood)

        if not log_posterior:
            raise ValueError(
                f"Observation {observation!r} is impossible under belief {self!r}"
            )
        peak = max(log_posterior.values())
        self._probabilities = normalize(
            {category: math.exp(value - peak) for category, value in log_posterior.items()}
        )

    # Misc ---------------------------------------------------------------------

    def copy(self) -> "RelationshipBelief":
        return RelationshipBelief(self._probabilities)

    def to_concise_string(self) -> str:
        return format_distribution(self._probabilities)

    def __repr__(self) -> str:
        return f"RelationshipBelief({self.to_concise_string()})"
