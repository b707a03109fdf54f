"""
Task and knowledge loading from JSON files.

This module provides TaskLoader for converting JSON files into the value
objects the interpreting agent consumes:
- Knowledge files: which relationship categories each action is typical of
- Task files: forced-choice tasks (premise + two continuations), plus the
  identifiers known to denote non-agents

Design philosophy:
- Tasks and knowledge are data (JSON), not code - corpora can grow without
  code changes
- Validation ensures required fields are present (early failure beats a
  cryptic error halfway through a batch)
- Events accept both a verbose object form and a compact triple form

Knowledge file structure:
```json
{
  "ratio": 2,
  "actions": {
    "greets": "F",
    "hits": "E",
    "argues": "FE",
    "walks": "",
    "hugs": {"FRIEND": 0.7, "NEUTRAL": 0.2, "ENEMY": 0.1}
  }
}
```

Task file structure:
```json
{
  "name": "Playground",
  "description": "...",
  "non_agents": ["door", "house"],
  "tasks": [
    {
      "task_id": "1",
      "premise": [["bigtriangle", "hits", "circle"], {"actor": null, "action": "cries"}],
      "choices": [[["circle", "fears", "bigtriangle"]], [["circle", "hugs", "bigtriangle"]]],
      "answer": "a"
    }
  ]
}
```

Usage:
    loader = TaskLoader(Path("examples/tasks"))
    knowledge = loader.load_knowledge("knowledge")
    task_set = loader.load_tasks("playground")
    agent = InterpretingAgent(knowledge, non_agents=task_set.non_agents)
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from .beliefs import ActionObservationModel
from .config import Config, ReasoningConfig
from .schemas import RelationshipCategory, Scenario, Task


class TaskSet(BaseModel):
    """A named collection of tasks sharing one set of non-agent identifiers."""

    name: str
    description: str = ""
    non_agents: Tuple[str, ...] = Field(default_factory=tuple)
    agents: Optional[Tuple[str, ...]] = Field(
        None, description="Explicit agent roster; None means any non-object token is an agent"
    )
    tasks: List[Task] = Field(default_factory=list)

    def answers(self) -> Dict[str, int]:
        """Task id → 0-based correct index, for tasks that carry an answer."""
        return {
            task.task_id: task.answer
            for task in self.tasks
            if task.task_id is not None and task.answer is not None
        }


class TaskLoader:
    """Load and validate knowledge and task files from a directory.

    Directory structure:
    - Default: {PROJECT_ROOT}/examples/tasks/
    - Override via constructor: TaskLoader(Path("/custom/tasks"))
    - Files: {name}.json

    Validation:
    - Task files need: name, tasks
    - Each task needs premise and exactly two choices
    - Knowledge files need: actions
    - Raises ValueError if validation fails
    """

    def __init__(self, tasks_dir: Optional[Path] = None, ratio: Optional[float] = None):
        """Initialize loader.

        Args:
            tasks_dir: Directory containing JSON files. Defaults to Config.TASKS_DIR
            ratio: Typical:atypical ratio for flag-style knowledge entries when a
                knowledge file does not set its own. Defaults to the
                ``observation_ratio`` of ``ReasoningConfig.from_env()``
        """
        self.tasks_dir = tasks_dir or Config.TASKS_DIR
        self.ratio = ratio if ratio is not None else ReasoningConfig.from_env().observation_ratio

    # ------------------------------------------------------------------
    # Knowledge
    # ------------------------------------------------------------------

    def load_knowledge(self, name: str) -> Dict[str, ActionObservationModel]:
        """Load an action knowledge base by name.

        Returns:
            Action verb → observation model

        Raises:
            FileNotFoundError: If the file doesn't exist in tasks_dir
            ValueError: If the file is missing ``actions`` or an entry is malformed
        """
        data = self._read(name)
        if "actions" not in data or not isinstance(data["actions"], dict):
            raise ValueError(f"Knowledge file '{name}' must contain an 'actions' object")

        ratio = float(data.get("ratio", self.ratio))
        knowledge: Dict[str, ActionObservationModel] = {}
        for action, entry in data["actions"].items():
            knowledge[action] = self._parse_observation(action, entry, ratio)
        return knowledge

    def _parse_observation(self, action: str, entry: Any, ratio: float) -> ActionObservationModel:
        # Flag string ("FE") or explicit probability map ({"FRIEND": 0.7, ...}).
        if isinstance(entry, str):
            return ActionObservationModel.from_flags(entry, ratio)
        if isinstance(entry, dict):
            try:
                probabilities = {
                    RelationshipCategory(key.upper()): float(value) for key, value in entry.items()
                }
            except ValueError as exc:
                raise ValueError(f"Malformed knowledge entry for '{action}': {entry!r}") from exc
            return ActionObservationModel(probabilities)
        raise ValueError(f"Knowledge entry for '{action}' must be a string or object, got {entry!r}")

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def load_tasks(self, name: str) -> TaskSet:
        """Load a task set by name.

        Raises:
            FileNotFoundError: If the file doesn't exist in tasks_dir
            ValueError: If required fields are missing or malformed
        """
        data = self._read(name)
        self._validate_task_file(data)

        tasks = [
            self._parse_task(entry, fallback_id=str(number))
            for number, entry in enumerate(data["tasks"], start=1)
        ]
        agents = data.get("agents")
        return TaskSet(
            name=data["name"],
            description=data.get("description", ""),
            non_agents=tuple(data.get("non_agents", [])),
            agents=tuple(agents) if agents is not None else None,
            tasks=tasks,
        )

    def _validate_task_file(self, data: Dict) -> None:
        required = ["name", "tasks"]
        missing = [field for field in required if field not in data]
        if missing:
            raise ValueError(f"Task file missing required fields: {missing}")

        for entry in data["tasks"]:
            if "premise" not in entry or "choices" not in entry:
                raise ValueError("Each task entry must include 'premise' and 'choices'")
            if len(entry["choices"]) != 2:
                raise ValueError(
                    f"Each task needs exactly 2 choices, got {len(entry['choices'])}"
                )

    def _parse_task(self, data: Dict[str, Any], fallback_id: str) -> Task:
        return Task(
            task_id=str(data.get("task_id", fallback_id)),
            premise=Scenario.of(data["premise"]),
            choices=tuple(Scenario.of(choice) for choice in data["choices"]),
            answer=self._parse_answer(data.get("answer")),
        )

    @staticmethod
    def _parse_answer(raw: Any) -> Optional[int]:
        # Letters follow the corpus convention (a = first choice); integers are 1-based.
        if raw is None:
            return None
        if isinstance(raw, str):
            letter = raw.strip().lower()
            if letter not in ("a", "b"):
                raise ValueError(f"Answer letters must be 'a' or 'b', got {raw!r}")
            return ord(letter) - ord("a")
        if isinstance(raw, int) and raw in (1, 2):
            return raw - 1
        raise ValueError(f"Unrecognised answer {raw!r}")

    # ------------------------------------------------------------------
    # Directory helpers
    # ------------------------------------------------------------------

    def _read(self, name: str) -> Dict[str, Any]:
        path = self.tasks_dir / f"{name}.json"
        if not path.exists():
            raise FileNotFoundError(f"'{name}' not found at {path}")
        return json.loads(path.read_text())

    def list_files(self) -> List[str]:
        """List available JSON files (without extension), skipping ``_``-prefixed ones."""
        if not self.tasks_dir.exists():
            return []
        return sorted(
            f.stem for f in self.tasks_dir.glob("*.json")
            if not f.name.startswith("_")
        )

    def get_task_set_info(self, name: str) -> Dict[str, Any]:
        """Get task-set metadata without building the tasks."""
        data = self._read(name)
        return {
            "name": data.get("name", name),
            "description": data.get("description", "No description"),
            "num_tasks": len(data.get("tasks", [])),
        }


def load_task_set(name: str) -> TaskSet:
    """Convenience function to load a task set from the default directory."""
    return TaskLoader().load_tasks(name)


def load_knowledge(name: str) -> Dict[str, ActionObservationModel]:
    """Convenience function to load a knowledge base from the default directory."""
    return TaskLoader().load_knowledge(name)
