"""
Error taxonomy for the neural network engine.

All errors are caller-contract violations detected synchronously:
- DimensionMismatchError: incompatible matrix shapes, or a destination
  matrix not pre-sized to the result of a fused product
- InvalidTopologyError: a perceptron topology that cannot be built
- CacheNotInitializedError: a training operation invoked without a cache
"""


class NeuralNetError(Exception):
    """Base class for every error raised by neuralnet."""


class DimensionMismatchError(NeuralNetError, ValueError):
    """Raised when matrix shapes are incompatible for an operation."""

    def __init__(self, message: str, expected=None, actual=None):
        if expected is not None or actual is not None:
            message = f"{message} (expected {expected}, got {actual})"
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class InvalidTopologyError(NeuralNetError, ValueError):
    """Raised when a layer layout cannot form a perceptron."""


class CacheNotInitializedError(NeuralNetError, RuntimeError):
    """Raised when training is attempted before init_train_cache()."""

    def __init__(self, message: str = "Cache is not initialized. Use init_train_cache() method."):
        super().__init__(message)
