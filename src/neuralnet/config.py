"""
Configuration for training runs.

Values come from NEURALNET_* environment variables, optionally loaded from a
.env file with python-dotenv:

    NEURALNET_LEARNING_RATE   step size η                 (default 0.1)
    NEURALNET_MOMENT          momentum EMA coefficient    (default 0.8)
    NEURALNET_EPOCHS          passes over the samples     (default 1000)
    NEURALNET_SEED            weight seed, empty = random (default empty)
    NEURALNET_WEIGHT_LOW      lower weight bound          (default -1.0)
    NEURALNET_WEIGHT_HIGH     upper weight bound          (default 1.0)
    NEURALNET_ACTIVATION      activation name             (default hyperbolic_tangent)
    NEURALNET_LOG_LEVEL       logging level name          (default INFO)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from neuralnet.math.functions import Activation, get_activation

ENV_PREFIX = "NEURALNET_"


def _env(name: str, default: str) -> str:
    return os.getenv(ENV_PREFIX + name, default).strip()


def _parse(name: str, default: str, cast):
    raw = _env(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {ENV_PREFIX}{name}: {raw!r}") from None


@dataclass
class TrainingConfig:
    """
    Hyperparameters of a training run.

    Attributes:
        learning_rate: Step size η (> 0)
        moment: Momentum EMA coefficient in [0, 1)
        epochs: Passes over the samples (>= 0)
        seed: Seed for weight randomization, None for fresh entropy
        weight_low: Lower bound of initial weights
        weight_high: Upper bound of initial weights
        activation: Activation name understood by get_activation()
        log_level: Logging level name
    """
    learning_rate: float = 0.1
    moment: float = 0.8
    epochs: int = 1000
    seed: Optional[int] = None
    weight_low: float = -1.0
    weight_high: float = 1.0
    activation: str = "hyperbolic_tangent"
    log_level: str = "INFO"

    def __post_init__(self):
        if self.learning_rate <= 0:
            raise ValueError(f"Learning rate must be positive, got {self.learning_rate}")
        if not 0.0 <= self.moment < 1.0:
            raise ValueError(f"Moment must be in [0, 1), got {self.moment}")
        if self.epochs < 0:
            raise ValueError(f"Epochs must be non-negative, got {self.epochs}")
        if self.weight_low > self.weight_high:
            raise ValueError(
                f"Weight bounds inverted: low={self.weight_low}, high={self.weight_high}")
        # Fails early on unknown names
        get_activation(self.activation)
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level {self.log_level!r}")

    @property
    def activation_function(self) -> Activation:
        return get_activation(self.activation)

    @classmethod
    def from_env(cls, dotenv_path: Optional[Union[str, Path]] = None) -> "TrainingConfig":
        """
        Build a config from the environment.

        Args:
            dotenv_path: Optional .env file loaded first; variables already set
                in the environment take precedence

        Returns:
            TrainingConfig: Validated configuration

        Raises:
            ValueError: If a variable cannot be parsed or is out of range
        """
        if dotenv_path is not None:
            load_dotenv(dotenv_path)

        return cls(
            learning_rate=_parse("LEARNING_RATE", "0.1", float),
            moment=_parse("MOMENT", "0.8", float),
            epochs=_parse("EPOCHS", "1000", int),
            seed=_parse("SEED", "", int) if _env("SEED", "") else None,
            weight_low=_parse("WEIGHT_LOW", "-1.0", float),
            weight_high=_parse("WEIGHT_HIGH", "1.0", float),
            activation=_env("ACTIVATION", "hyperbolic_tangent"),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: Optional[str] = None):
    """
    Set up root logging for applications using the package.

    Args:
        level: Level name; defaults to NEURALNET_LOG_LEVEL or INFO
    """
    level_name = (level or _env("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
