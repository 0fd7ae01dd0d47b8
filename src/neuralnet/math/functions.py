"""
Activation functions and their derivatives.

Each function accepts a scalar or an ndarray and is applied elementwise;
a scalar argument gives a scalar result. Derivatives come in two forms:

- derivative(x): evaluated on the pre-activation input x
- derivative_optimized(y): evaluated on the already computed output y = f(x),
  available for sigmoid (y(1 - y)) and tanh (1 - y²), avoiding a second exp()

The Activation variants bundle a function with its derivatives so that the
derivative matching a caching convention can be picked automatically.
"""

from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, Optional

import numpy as np


def linear(x):
    return x


def linear_derivative(x):
    return np.ones_like(x, dtype=float)[()]


def binary_step(x):
    """0 for x < 0, else 1."""
    return np.where(np.asarray(x) < 0, 0.0, 1.0)[()]


def binary_step_derivative(x):
    return np.zeros_like(x, dtype=float)[()]


def sigmoid(x):
    """Logistic function 1 / (1 + e^-x)."""
    return 1.0 / (1.0 + np.exp(-x))


def sigmoid_derivative(x):
    y = sigmoid(x)
    return y * (1.0 - y)


def sigmoid_derivative_optimized(y):
    """Sigmoid derivative from the sigmoid output y."""
    return y * (1.0 - y)


def hyperbolic_tangent(x):
    return np.tanh(x)


def hyperbolic_tangent_derivative(x):
    y = np.tanh(x)
    return 1.0 - y * y


def hyperbolic_tangent_derivative_optimized(y):
    """tanh derivative from the tanh output y."""
    return 1.0 - y * y


def relu(x, alpha: float = 0.0):
    """
    Leaky ReLU: x for x >= 0, alpha * x otherwise.

    Args:
        x: Input value(s)
        alpha: Leak coefficient (0 gives the standard ReLU)
    """
    x = np.asarray(x)
    return np.where(x < 0, alpha * x, x)[()]


def relu_derivative(x, alpha: float = 0.0):
    return np.where(np.asarray(x) < 0, alpha, 1.0)[()]


@dataclass(frozen=True)
class Activation:
    """
    Activation function paired with its derivatives.

    Attributes:
        name: Registry name
        function: f(x)
        input_derivative: f'(x) evaluated on the pre-activation input
        output_derivative: f'(x) evaluated on the output y = f(x), if cheaper
            form exists
    """
    name: str
    function: Callable
    input_derivative: Callable
    output_derivative: Optional[Callable] = None

    def __call__(self, x):
        return self.function(x)

    def apply(self, x):
        return self.function(x)

    def derivative(self, x):
        return self.input_derivative(x)

    @property
    def supports_output_derivative(self) -> bool:
        return self.output_derivative is not None

    def derivative_from_output(self, y):
        if self.output_derivative is None:
            raise ValueError(f"Activation '{self.name}' has no output-based derivative")
        return self.output_derivative(y)

    def derivative_for(self, cache_after_activation: bool) -> Callable:
        """
        Derivative matching a forward-pass caching convention.

        Args:
            cache_after_activation: True when the derivative is evaluated on
                the layer output, False when on the pre-activation sum

        Returns:
            Callable: Elementwise derivative function

        Raises:
            ValueError: If the output-based form is requested but unavailable
        """
        if not cache_after_activation:
            return self.input_derivative
        if self.output_derivative is None:
            raise ValueError(f"Activation '{self.name}' has no output-based derivative")
        return self.output_derivative

    def __repr__(self):
        return f"Activation({self.name!r})"


LINEAR = Activation("linear", linear, linear_derivative)
BINARY_STEP = Activation("binary_step", binary_step, binary_step_derivative)
SIGMOID = Activation("sigmoid", sigmoid, sigmoid_derivative, sigmoid_derivative_optimized)
HYPERBOLIC_TANGENT = Activation("hyperbolic_tangent", hyperbolic_tangent,
                                hyperbolic_tangent_derivative,
                                hyperbolic_tangent_derivative_optimized)
RELU = Activation("relu", relu, relu_derivative)


def leaky_relu(alpha: float) -> Activation:
    """Leaky ReLU variant with the given leak coefficient."""
    if alpha == 0.0:
        return RELU
    return Activation(f"leaky_relu({alpha:g})", partial(relu, alpha=alpha),
                      partial(relu_derivative, alpha=alpha))


ACTIVATIONS: Dict[str, Activation] = {
    "linear": LINEAR,
    "binary_step": BINARY_STEP,
    "sigmoid": SIGMOID,
    "hyperbolic_tangent": HYPERBOLIC_TANGENT,
    "tanh": HYPERBOLIC_TANGENT,
    "relu": RELU,
}


def get_activation(name: str, alpha: float = 0.0) -> Activation:
    """
    Look up an activation by name.

    Args:
        name: One of ACTIVATIONS, or "leaky_relu"
        alpha: Leak coefficient, used only for "leaky_relu"

    Raises:
        ValueError: If the name is unknown
    """
    key = name.strip().lower()
    if key == "leaky_relu":
        return leaky_relu(alpha)
    try:
        return ACTIVATIONS[key]
    except KeyError:
        known = ", ".join(sorted(list(ACTIVATIONS) + ["leaky_relu"]))
        raise ValueError(f"Unknown activation '{name}'. Known: {known}") from None
