"""Unit tests for the core schema building blocks."""

import pytest
from pydantic import ValidationError

from rapport.schemas import (
    ActionEvent,
    AgentPair,
    RelationshipCategory,
    Scenario,
    Task,
)


def test_agent_pair_is_unordered():
    forward = AgentPair("alice", "bob")
    backward = AgentPair("bob", "alice")

    assert forward == backward
    assert hash(forward) == hash(backward)
    assert forward.members == ("alice", "bob")
    assert {forward: 1}[backward] == 1


def test_agent_pair_contains_and_str():
    pair = AgentPair("circle", "bigtriangle")

    assert pair.contains("circle")
    assert not pair.contains("littletriangle")
    assert not pair.contains(None)
    assert str(pair) == "bigtriangle&circle"


def test_action_event_is_frozen_value():
    event = ActionEvent.of("alice", "greets", "bob")

    assert event == ActionEvent(actor="alice", action="greets", acted_upon="bob")
    assert str(event) == "alice greets bob"
    with pytest.raises(ValidationError):
        event.actor = "carol"


def test_action_event_missing_participants_render_as_placeholder():
    event = ActionEvent.of(None, "cries")

    assert event.acted_upon is None
    assert str(event) == "_ cries _"
    assert event.involves(AgentPair("a", "b")) is False


def test_scenario_accepts_triples_and_objects():
    scenario = Scenario.of([
        ("alice", "greets", "bob"),
        ["bob", "cries"],
        {"actor": None, "action": "leaves", "acted_upon": "house"},
        ActionEvent.of("alice", "hugs", "bob"),
    ])

    assert scenario.length == 4
    assert len(scenario) == 4
    assert scenario.events[1] == ActionEvent.of("bob", "cries", None)
    assert scenario.events[2].acted_upon == "house"


def test_empty_scenario():
    scenario = Scenario()

    assert scenario.length == 0
    assert str(scenario) == "[]"


def test_task_requires_exactly_two_choices():
    premise = Scenario.of([("a", "greets", "b")])
    choice = Scenario.of([("b", "hugs", "a")])

    task = Task(premise=premise, choices=[choice, Scenario()], task_id="7", answer=0)
    assert task.longest_choice_length == 1
    assert isinstance(task.choices, tuple)

    with pytest.raises(ValidationError):
        Task(premise=premise, choices=[choice])
    with pytest.raises(ValidationError):
        Task(premise=premise, choices=[choice, choice, choice])


def test_relationship_category_order():
    assert list(RelationshipCategory) == [
        RelationshipCategory.FRIEND,
        RelationshipCategory.NEUTRAL,
        RelationshipCategory.ENEMY,
    ]
