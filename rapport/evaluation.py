"""
Administer forced-choice tasks to an agent and summarize its performance.

An undecided verdict is recorded as INCOMPLETE, never as a guess, so the
accuracy on answered tasks is not inflated by ties. Missing action knowledge
aborts the whole batch: the error propagates to the caller.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, Field

from .agent import InterpretingAgent, Ranked
from .logging_utils import (
    LOG_TAG_ERROR,
    LOG_TAG_INFO,
    LOG_TAG_SUCCESS,
    log_error,
    log_info,
    log_success,
)
from .schemas import Task


class TaskPerformance(str, Enum):
    """Outcome of one administered task."""

    CORRECT = "CORRECT"
    INCORRECT = "INCORRECT"
    # The agent was undecided, so the task was left unanswered.
    INCOMPLETE = "INCOMPLETE"


_TABLE_SYMBOLS = {
    TaskPerformance.CORRECT: "1",
    TaskPerformance.INCORRECT: "-1",
    TaskPerformance.INCOMPLETE: "0",
}


class PerformanceReport(BaseModel):
    """Per-task performance plus derived counts."""

    performances: Dict[str, TaskPerformance] = Field(
        default_factory=dict, description="Task id → performance, in administration order"
    )

    @property
    def total(self) -> int:
        return len(self.performances)

    @property
    def correct(self) -> int:
        return sum(1 for p in self.performances.values() if p is TaskPerformance.CORRECT)

    @property
    def answered(self) -> int:
        return sum(1 for p in self.performances.values() if p is not TaskPerformance.INCOMPLETE)

    @property
    def answered_ratio(self) -> float:
        return self.answered / self.total if self.total else 0.0

    @property
    def accuracy(self) -> float:
        """Fraction correct among answered tasks (0 when nothing was answered)."""
        return self.correct / self.answered if self.answered else 0.0

    def score_statement(self) -> str:
        """Two-line summary of coverage and accuracy."""
        return (
            f"On the {self.total} tasks, the agent answered "
            f"{self.answered}/{self.total}={self.answered_ratio:.0%}\n"
            f"On the {self.answered} tasks answered, the agent correctly answered "
            f"{self.correct}/{self.answered}={self.accuracy:.0%}"
        )

    def table(self, task_ids: Optional[Iterable[str]] = None) -> str:
        """Tab-separated row of ``1``/``-1``/``0`` per task, ``X`` if not administered.

        Handy for pasting into a spreadsheet heatmap.
        """
        ids = list(task_ids) if task_ids is not None else list(self.performances)
        cells = [
            _TABLE_SYMBOLS[self.performances[task_id]] if task_id in self.performances else "X"
            for task_id in ids
        ]
        return "\t".join(cells)


def administer_tasks(
    agent: InterpretingAgent,
    tasks: Iterable[Task],
    answers: Optional[Mapping[str, int]] = None,
    *,
    verbose: bool = False,
) -> PerformanceReport:
    """Run every task through ``agent`` and grade it.

    Args:
        agent: The agent to evaluate
        tasks: Tasks to administer; tasks without ``task_id`` are numbered from 1
        answers: Optional task id → correct 0-based index; falls back to ``task.answer``
        verbose: Print a verdict line per task

    Raises:
        ValueError: If a task has no known answer
        InsufficientKnowledgeError: Propagated from the agent
    """
    report = PerformanceReport()
    for number, task in enumerate(tasks, start=1):
        task_id = task.task_id or str(number)
        answer = answers.get(task_id, task.answer) if answers is not None else task.answer
        if answer is None:
            raise ValueError(f"Task {task_id} has no known answer")

        if verbose:
            log_info(f"{LOG_TAG_INFO} TASK {task_id}")

        outcome = agent.perform(task)
        if isinstance(outcome, Ranked):
            performance = (
                TaskPerformance.CORRECT if outcome.index == answer else TaskPerformance.INCORRECT
            )
        else:
            performance = TaskPerformance.INCOMPLETE
        report.performances[task_id] = performance

        if verbose:
            if performance is TaskPerformance.CORRECT:
                log_success(f"{LOG_TAG_SUCCESS} CORRECT")
            elif performance is TaskPerformance.INCORRECT:
                log_error(f"{LOG_TAG_ERROR} INCORRECT")
            else:
                log_error(f"{LOG_TAG_ERROR} INCOMPLETE (the correct answer was {answer + 1})")

    return report


def split_by_performance(report: PerformanceReport) -> Dict[TaskPerformance, List[str]]:
    """Group task ids by outcome."""
    groups: Dict[TaskPerformance, List[str]] = {performance: [] for performance in TaskPerformance}
    for task_id, performance in report.performances.items():
        groups[performance].append(task_id)
    return groups

