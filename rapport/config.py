"""
Rapport Configuration

Loads configuration from environment variables with sensible defaults.

Two layers:
- ``Config`` mirrors the process environment (and an optional .env file).
- ``ReasoningConfig`` is the explicit, immutable bundle of numeric knobs that
  belief and world-model objects receive through their constructors. Build
  one from the environment with ``ReasoningConfig.from_env()``.
"""

import os
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .schemas import RelationshipCategory

# Load .env file if it exists
load_dotenv()


def _env_flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Config:
    """Application configuration loaded from environment variables."""

    # Knowledge interpretation
    # Ratio between a "typical" and an "atypical" category in one action's
    # observation distribution.
    OBSERVATION_RATIO: float = float(os.getenv("RAPPORT_OBSERVATION_RATIO", "2.0"))

    # Belief bookkeeping
    INFORMATIVE_TOLERANCE: float = float(os.getenv("RAPPORT_INFORMATIVE_TOLERANCE", "0.001"))
    SHARED_PAIR_REWARD: float = float(os.getenv("RAPPORT_SHARED_PAIR_REWARD", "0.01"))
    UNKNOWN_PAIR_PROBABILITY: float = float(os.getenv("RAPPORT_UNKNOWN_PAIR_PROBABILITY", "1.0"))

    # Logging
    VERBOSE: bool = _env_flag("RAPPORT_VERBOSE")

    # Project Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    TASKS_DIR: Path = PROJECT_ROOT / "examples" / "tasks"

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors if values are out of range."""
        if cls.OBSERVATION_RATIO < 1:
            raise ValueError(
                "RAPPORT_OBSERVATION_RATIO must be >= 1 "
                f"(got {cls.OBSERVATION_RATIO})"
            )

        if cls.INFORMATIVE_TOLERANCE <= 0:
            raise ValueError("RAPPORT_INFORMATIVE_TOLERANCE must be positive")

        if not 0 <= cls.UNKNOWN_PAIR_PROBABILITY <= 1:
            raise ValueError("RAPPORT_UNKNOWN_PAIR_PROBABILITY must lie in [0, 1]")

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Rapport Configuration:",
            f"  Observation Ratio: {cls.OBSERVATION_RATIO}",
            f"  Informative Tolerance: {cls.INFORMATIVE_TOLERANCE}",
            f"  Shared Pair Reward: {cls.SHARED_PAIR_REWARD}",
            f"  Unknown Pair Probability: {cls.UNKNOWN_PAIR_PROBABILITY}",
            f"  Verbose: {cls.VERBOSE}",
            f"  Tasks Dir: {cls.TASKS_DIR}",
        ]
        return "\n".join(lines)


DEFAULT_BIAS_ORDER: Tuple[RelationshipCategory, ...] = (
    RelationshipCategory.ENEMY,
    RelationshipCategory.FRIEND,
    RelationshipCategory.NEUTRAL,
)
"""Increasing-likelihood order imposed on uninformative beliefs at reflection."""


class ReasoningConfig(BaseModel):
    """Numeric knobs shared by beliefs, world models and agents.

    Instances are frozen so one config can be handed to many world models
    without any of them drifting.
    """

    model_config = ConfigDict(frozen=True)

    observation_ratio: float = Field(
        2.0, ge=1.0, description="Weight of a typical category relative to an atypical one"
    )
    informative_tolerance: float = Field(
        0.001, gt=0.0, description="Deviation from uniform that makes a belief informative"
    )
    shared_pair_reward: float = Field(
        0.01, ge=0.0, description="Subtracted from world-model divergence per shared pair"
    )
    unknown_pair_probability: float = Field(
        1.0, ge=0.0, le=1.0, description="Probability reported for pairs with no belief"
    )
    default_bias_order: Tuple[RelationshipCategory, ...] = Field(
        DEFAULT_BIAS_ORDER,
        description="Categories in increasing order of assumed likelihood",
    )

    @field_validator("default_bias_order")
    @classmethod
    def _check_bias_order(
        cls, value: Tuple[RelationshipCategory, ...]
    ) -> Tuple[RelationshipCategory, ...]:
        if set(value) != set(RelationshipCategory) or len(value) != len(RelationshipCategory):
            raise ValueError("default_bias_order must list every relationship category exactly once")
        return value

    @classmethod
    def from_env(cls) -> "ReasoningConfig":
        """Build a config from the current ``Config`` values."""
        return cls(
            observation_ratio=Config.OBSERVATION_RATIO,
            informative_tolerance=Config.INFORMATIVE_TOLERANCE,
            shared_pair_reward=Config.SHARED_PAIR_REWARD,
            unknown_pair_probability=Config.UNKNOWN_PAIR_PROBABILITY,
        )
