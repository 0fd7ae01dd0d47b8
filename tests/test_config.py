"""
Unit tests for environment-driven configuration.
"""

import logging

import pytest
from neuralnet.config import ENV_PREFIX, TrainingConfig, configure_logging
from neuralnet.math.functions import HYPERBOLIC_TANGENT, SIGMOID

NAMES = ("LEARNING_RATE", "MOMENT", "EPOCHS", "SEED", "WEIGHT_LOW", "WEIGHT_HIGH",
         "ACTIVATION", "LOG_LEVEL")


@pytest.fixture
def clean_env(monkeypatch):
    """Remove NEURALNET_* variables, restoring the environment afterwards."""
    for name in NAMES:
        # setenv first so variables added by load_dotenv are removed on undo
        monkeypatch.setenv(ENV_PREFIX + name, "")
        monkeypatch.delenv(ENV_PREFIX + name)
    return monkeypatch


class TestTrainingConfig:
    """Test TrainingConfig defaults and validation."""

    def test_defaults(self):
        config = TrainingConfig()

        assert config.learning_rate == 0.1
        assert config.moment == 0.8
        assert config.epochs == 1000
        assert config.seed is None
        assert config.activation_function is HYPERBOLIC_TANGENT

    @pytest.mark.parametrize("kwargs", [
        {"learning_rate": 0.0},
        {"moment": 1.0},
        {"moment": -0.5},
        {"epochs": -1},
        {"weight_low": 1.0, "weight_high": -1.0},
        {"activation": "softmax"},
        {"log_level": "LOUD"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            TrainingConfig(**kwargs)


class TestFromEnv:
    """Test loading from environment variables and .env files."""

    def test_defaults_without_variables(self, clean_env):
        assert TrainingConfig.from_env() == TrainingConfig()

    def test_reads_variables(self, clean_env):
        clean_env.setenv("NEURALNET_LEARNING_RATE", "0.05")
        clean_env.setenv("NEURALNET_MOMENT", "0.5")
        clean_env.setenv("NEURALNET_EPOCHS", "20")
        clean_env.setenv("NEURALNET_SEED", "42")
        clean_env.setenv("NEURALNET_ACTIVATION", "sigmoid")
        clean_env.setenv("NEURALNET_LOG_LEVEL", "debug")

        config = TrainingConfig.from_env()

        assert config.learning_rate == 0.05
        assert config.moment == 0.5
        assert config.epochs == 20
        assert config.seed == 42
        assert config.activation_function is SIGMOID
        assert config.log_level == "DEBUG"

    def test_dotenv_file(self, clean_env, tmp_path):
        """Test values from a .env file, with the environment taking precedence."""
        env_file = tmp_path / ".env"
        env_file.write_text("NEURALNET_EPOCHS=7\nNEURALNET_WEIGHT_LOW=-0.5\n"
                            "NEURALNET_LEARNING_RATE=0.3\n")
        clean_env.setenv("NEURALNET_LEARNING_RATE", "0.2")

        config = TrainingConfig.from_env(env_file)

        assert config.epochs == 7
        assert config.weight_low == -0.5
        assert config.learning_rate == 0.2

    def test_unparsable_value(self, clean_env):
        clean_env.setenv("NEURALNET_EPOCHS", "many")

        with pytest.raises(ValueError, match="NEURALNET_EPOCHS"):
            TrainingConfig.from_env()

    def test_empty_seed_means_random(self, clean_env):
        clean_env.setenv("NEURALNET_SEED", "  ")

        assert TrainingConfig.from_env().seed is None


def test_configure_logging(monkeypatch):
    """Test basicConfig receives the requested level."""
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

    configure_logging("warning")

    assert calls["level"] == logging.WARNING
    assert "%(name)s" in calls["format"]
