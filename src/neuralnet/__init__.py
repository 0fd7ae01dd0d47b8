"""
neuralnet: A dense-matrix engine and a feed-forward multilayer perceptron.

The package is organised in three layers:
- math.Matrix: Dense row-major matrices with shape-checked arithmetic,
  fused transpose products and a plain text format
- math.functions: Activation functions with pre- and post-activation
  derivatives
- Perceptron: Layers, weights and bias with forward propagation,
  cached forward propagation and momentum backpropagation

Training is stochastic (one example per step) with an exponential moving
average of gradients as momentum.
"""

import logging

__version__ = "0.1.0"

from neuralnet.errors import (
    CacheNotInitializedError,
    DimensionMismatchError,
    InvalidTopologyError,
    NeuralNetError,
)
from neuralnet.math import Activation, Matrix
from neuralnet.perceptron import Perceptron

__all__ = [
    "Matrix",
    "Activation",
    "Perceptron",
    "NeuralNetError",
    "DimensionMismatchError",
    "InvalidTopologyError",
    "CacheNotInitializedError",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
