"""Tests for administering task sets and reporting performance."""

import pytest

from rapport.agent import InsufficientKnowledgeError, InterpretingAgent
from rapport.config import Config
from rapport.evaluation import (
    PerformanceReport,
    TaskPerformance,
    administer_tasks,
    split_by_performance,
)
from rapport.schemas import Scenario, Task
from rapport.scenario import TaskLoader


@pytest.fixture
def playground():
    loader = TaskLoader(Config.TASKS_DIR)
    return loader.load_knowledge("knowledge"), loader.load_tasks("playground")


def test_playground_performance(playground):
    knowledge, task_set = playground
    agent = InterpretingAgent(knowledge, non_agents=task_set.non_agents, verbose=False)

    report = administer_tasks(agent, task_set.tasks)

    assert report.performances == {
        "1": TaskPerformance.CORRECT,
        "2": TaskPerformance.CORRECT,
        "3": TaskPerformance.INCOMPLETE,
    }
    assert (report.total, report.answered, report.correct) == (3, 2, 2)
    assert report.accuracy == 1.0
    assert report.table() == "1\t1\t0"
    assert report.table(["3", "4", "1"]) == "0\tX\t1"


def test_answers_map_overrides_task_answers(playground):
    knowledge, task_set = playground
    agent = InterpretingAgent(knowledge, non_agents=task_set.non_agents, verbose=False)

    report = administer_tasks(agent, task_set.tasks, answers={"1": 1})

    assert report.performances["1"] is TaskPerformance.INCORRECT
    assert report.performances["2"] is TaskPerformance.CORRECT


def test_score_statement():
    report = PerformanceReport(performances={
        "1": TaskPerformance.CORRECT,
        "2": TaskPerformance.INCORRECT,
        "3": TaskPerformance.INCOMPLETE,
        "4": TaskPerformance.CORRECT,
    })

    assert report.score_statement() == (
        "On the 4 tasks, the agent answered 3/4=75%\n"
        "On the 3 tasks answered, the agent correctly answered 2/3=67%"
    )


def test_empty_report_has_zero_ratios():
    report = PerformanceReport()

    assert report.answered_ratio == 0.0
    assert report.accuracy == 0.0
    assert report.table() == ""


def test_split_by_performance():
    report = PerformanceReport(performances={
        "a": TaskPerformance.INCOMPLETE,
        "b": TaskPerformance.CORRECT,
        "c": TaskPerformance.INCOMPLETE,
    })

    groups = split_by_performance(report)

    assert groups[TaskPerformance.CORRECT] == ["b"]
    assert groups[TaskPerformance.INCORRECT] == []
    assert groups[TaskPerformance.INCOMPLETE] == ["a", "c"]


def test_task_without_answer_is_rejected(playground):
    knowledge, _ = playground
    agent = InterpretingAgent(knowledge, verbose=False)
    task = Task(premise=Scenario(), choices=[Scenario(), Scenario()])

    with pytest.raises(ValueError):
        administer_tasks(agent, [task])


def test_missing_knowledge_aborts_the_batch(playground):
    knowledge, _ = playground
    agent = InterpretingAgent(knowledge, verbose=False)
    task = Task(
        premise=Scenario.of([("a", "waves", "b")]),
        choices=[Scenario(), Scenario()],
        answer=0,
    )

    with pytest.raises(InsufficientKnowledgeError):
        administer_tasks(agent, [task])


def test_verbose_administration_prints_verdicts(playground, capsys, monkeypatch):
    monkeypatch.setenv("RAPPORT_NO_COLOR", "1")
    knowledge, task_set = playground
    agent = InterpretingAgent(knowledge, non_agents=task_set.non_agents, verbose=False)

    administer_tasks(agent, task_set.tasks, verbose=True)
    out = capsys.readouterr().out

    assert "TASK 1" in out
    assert "CORRECT" in out
    assert "INCOMPLETE (the correct answer was 1)" in out
