"""Tests for environment configuration and the reasoning knobs."""

import pytest
from pydantic import ValidationError

from rapport.agent import InterpretingAgent
from rapport.beliefs import ActionObservationModel
from rapport.config import DEFAULT_BIAS_ORDER, Config, ReasoningConfig
from rapport.scenario import TaskLoader
from rapport.schemas import ActionEvent, RelationshipCategory, Scenario
from rapport.world_model import WorldModel


def test_reasoning_defaults():
    config = ReasoningConfig()

    assert config.observation_ratio == 2.0
    assert config.informative_tolerance == 0.001
    assert config.shared_pair_reward == 0.01
    assert config.unknown_pair_probability == 1.0
    assert config.default_bias_order == DEFAULT_BIAS_ORDER


def test_reasoning_config_validation():
    with pytest.raises(ValidationError):
        ReasoningConfig(observation_ratio=0.5)
    with pytest.raises(ValidationError):
        ReasoningConfig(unknown_pair_probability=1.5)
    with pytest.raises(ValidationError):
        ReasoningConfig(default_bias_order=(RelationshipCategory.FRIEND, RelationshipCategory.ENEMY))
    with pytest.raises(ValidationError):
        ReasoningConfig(default_bias_order=(
            RelationshipCategory.FRIEND,
            RelationshipCategory.FRIEND,
            RelationshipCategory.ENEMY,
        ))


def test_reasoning_config_is_frozen():
    config = ReasoningConfig()
    with pytest.raises(ValidationError):
        config.observation_ratio = 3.0


def test_from_env_reads_config(monkeypatch):
    monkeypatch.setattr(Config, "OBSERVATION_RATIO", 4.0)
    monkeypatch.setattr(Config, "UNKNOWN_PAIR_PROBABILITY", 0.5)

    config = ReasoningConfig.from_env()

    assert config.observation_ratio == 4.0
    assert config.unknown_pair_probability == 0.5


def test_validate_rejects_bad_values(monkeypatch):
    Config.validate()

    monkeypatch.setattr(Config, "OBSERVATION_RATIO", 0.5)
    with pytest.raises(ValueError):
        Config.validate()


def test_display_lists_settings():
    text = Config.display()

    assert text.startswith("Rapport Configuration:")
    assert "Observation Ratio" in text
    assert str(Config.TASKS_DIR) in text


def test_engine_defaults_follow_environment_config(monkeypatch):
    monkeypatch.setattr(Config, "UNKNOWN_PAIR_PROBABILITY", 0.5)
    monkeypatch.setattr(Config, "SHARED_PAIR_REWARD", 0.2)
    monkeypatch.setattr(Config, "INFORMATIVE_TOLERANCE", 0.05)
    agent = InterpretingAgent({"walks": ActionObservationModel.from_flags("", ratio=2)}, verbose=False)

    assert agent.config.unknown_pair_probability == 0.5
    assert agent.config.shared_pair_reward == 0.2
    assert agent.config.informative_tolerance == 0.05
    assert WorldModel().config.unknown_pair_probability == 0.5

    world_model = agent.read(Scenario.of([("a", "walks", "b")]))
    assert world_model.config is agent.config
    assert world_model.probability_of(ActionEvent.of("a", "walks", "z"), agent.knowledge["walks"]) == 0.5
    assert world_model.divergence_from(world_model) == pytest.approx(-0.2)


def test_task_loader_ratio_follows_environment_config(monkeypatch, tmp_path):
    monkeypatch.setattr(Config, "OBSERVATION_RATIO", 3.0)
    (tmp_path / "kb.json").write_text('{"actions": {"greets": "F"}}')

    loader = TaskLoader(tmp_path)
    knowledge = loader.load_knowledge("kb")

    assert loader.ratio == 3.0
    assert knowledge["greets"].probability_given(RelationshipCategory.FRIEND) == pytest.approx(0.6)
