"""Dense matrix engine and activation functions."""

from neuralnet.math.functions import (
    ACTIVATIONS,
    BINARY_STEP,
    HYPERBOLIC_TANGENT,
    LINEAR,
    RELU,
    SIGMOID,
    Activation,
    binary_step,
    binary_step_derivative,
    get_activation,
    hyperbolic_tangent,
    hyperbolic_tangent_derivative,
    hyperbolic_tangent_derivative_optimized,
    leaky_relu,
    linear,
    linear_derivative,
    relu,
    relu_derivative,
    sigmoid,
    sigmoid_derivative,
    sigmoid_derivative_optimized,
)
from neuralnet.math.matrix import Matrix

__all__ = [
    "Matrix",
    "Activation",
    "ACTIVATIONS",
    "LINEAR",
    "BINARY_STEP",
    "SIGMOID",
    "HYPERBOLIC_TANGENT",
    "RELU",
    "leaky_relu",
    "get_activation",
    "linear",
    "linear_derivative",
    "binary_step",
    "binary_step_derivative",
    "sigmoid",
    "sigmoid_derivative",
    "sigmoid_derivative_optimized",
    "hyperbolic_tangent",
    "hyperbolic_tangent_derivative",
    "hyperbolic_tangent_derivative_optimized",
    "relu",
    "relu_derivative",
]
