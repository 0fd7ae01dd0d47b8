"""Training cache, update dynamics and training loop helpers."""

from neuralnet.training.cache import TrainCache
from neuralnet.training.updates import apply_update, blend_momentum, validate_moment

__all__ = [
    "TrainCache",
    "apply_update",
    "blend_momentum",
    "validate_moment",
]
