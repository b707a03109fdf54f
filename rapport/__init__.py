"""
Rapport - relationship inference from narrated actions.

Reads short stories told as sequences of actions, infers whether each pair
of characters are friends, neutral or enemies, and uses those beliefs to
judge which of two continuations is more plausible.

Reading and ranking do no file I/O: knowledge bases and non-agent
vocabularies are injected by the caller. ``TaskLoader`` reads them from JSON.
"""

__version__ = "0.1.0"

# Main reader
from .agent import (
    InterpretingAgent,
    InsufficientKnowledgeError,
    Ranked,
    Undecided,
    RankingOutcome,
)

# Probability core
from .beliefs import (
    ActionObservationModel,
    RelationshipBelief,
    CATEGORIES,
    format_distribution,
)
from .world_model import WorldModel
from .memory import (
    RecencyMemory,
    CoreferenceResolver,
    Resolved,
    Unresolved,
    Resolution,
)

# Configuration
from .config import Config, ReasoningConfig, DEFAULT_BIAS_ORDER

# Core schemas
from .schemas import (
    RelationshipCategory,
    AgentPair,
    ActionEvent,
    Scenario,
    Task,
)

# Evaluation and loading helpers
from .evaluation import (
    TaskPerformance,
    PerformanceReport,
    administer_tasks,
    split_by_performance,
)
from .scenario import TaskLoader, TaskSet, load_task_set, load_knowledge

__all__ = [
    # Main class
    "InterpretingAgent",
    "InsufficientKnowledgeError",
    "Ranked",
    "Undecided",
    "RankingOutcome",
    # Probability core
    "ActionObservationModel",
    "RelationshipBelief",
    "CATEGORIES",
    "format_distribution",
    "WorldModel",
    "RecencyMemory",
    "CoreferenceResolver",
    "Resolved",
    "Unresolved",
    "Resolution",
    # Configuration
    "Config",
    "ReasoningConfig",
    "DEFAULT_BIAS_ORDER",
    # Schemas
    "RelationshipCategory",
    "AgentPair",
    "ActionEvent",
    "Scenario",
    "Task",
    # Evaluation and loading
    "TaskPerformance",
    "PerformanceReport",
    "administer_tasks",
    "split_by_performance",
    "TaskLoader",
    "TaskSet",
    "load_task_set",
    "load_knowledge",
]
