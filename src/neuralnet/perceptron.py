"""
Perceptron: Feed-forward multilayer network built on the Matrix engine.

Layers are column vectors; transition i maps layer i to layer i+1 with a
weight matrix W_i (n_{i+1} x n_i) and a bias vector b_i (n_{i+1} x 1):

    a_{i+1} = f(W_i · a_i + b_i)

Training follows the sequence

    init_train_cache()
    repeat: set_input_values(x); forward_propagation_with_cache(...);
            backward_propagation(target, ...)
    clear_train_cache()

after which forward_propagation() serves inference without a cache.
"""

import io
import logging
import numbers
from typing import Callable, List, Optional, Sequence, TextIO, Tuple, Union

import numpy as np

from neuralnet.errors import CacheNotInitializedError, DimensionMismatchError, InvalidTopologyError
from neuralnet.math.functions import Activation
from neuralnet.math.matrix import DEFAULT_DTYPE, Matrix
from neuralnet.training.cache import TrainCache
from neuralnet.training.updates import apply_update, blend_momentum, validate_moment

logger = logging.getLogger(__name__)

MIN_LAYERS = 2


def _elementwise(function: Union[Activation, Callable]) -> Tuple[Callable, bool]:
    """Split an activation into (callable, accepts_whole_arrays)."""
    if isinstance(function, Activation):
        return function.function, True
    return function, isinstance(function, np.ufunc)


class Perceptron:
    """
    Multilayer perceptron with an optional training cache.

    Attributes:
        layer_sizes: Neurons per layer, input layer first
        dtype: numpy floating type of every buffer
    """

    def __init__(self, layer_sizes: Sequence[int], dtype=DEFAULT_DTYPE):
        """
        Build the topology with zeroed layers, weights and bias.

        Args:
            layer_sizes: Neurons per layer; at least an input and an output layer
            dtype: numpy floating type of every buffer

        Raises:
            InvalidTopologyError: On fewer than two layers or a non-positive size
        """
        sizes = list(layer_sizes)
        if len(sizes) < MIN_LAYERS:
            raise InvalidTopologyError(
                f"Neuron layers count must be at least {MIN_LAYERS}, got {len(sizes)}")
        for index, size in enumerate(sizes):
            if isinstance(size, bool) or not isinstance(size, numbers.Integral) or size < 1:
                raise InvalidTopologyError(
                    f"Layer {index} must have a positive integer neuron count, got {size!r}")

        self._layer_sizes: Tuple[int, ...] = tuple(int(size) for size in sizes)
        self.dtype = np.dtype(dtype)

        self._layers: List[Matrix] = [Matrix(size, 1, dtype=dtype) for size in self._layer_sizes]
        self._weights: List[Matrix] = []
        self._bias: List[Matrix] = []
        for current, following in zip(self._layer_sizes[:-1], self._layer_sizes[1:]):
            self._weights.append(Matrix(following, current, dtype=dtype))
            self._bias.append(Matrix(following, 1, dtype=dtype))

        self._cache: Optional[TrainCache] = None

        logger.debug("Created perceptron with topology %s", self._layer_sizes)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def layer_sizes(self) -> Tuple[int, ...]:
        return self._layer_sizes

    @property
    def transitions_count(self) -> int:
        return len(self._weights)

    @property
    def layers(self) -> List[Matrix]:
        return list(self._layers)

    @property
    def weights(self) -> List[Matrix]:
        return list(self._weights)

    @property
    def bias(self) -> List[Matrix]:
        return list(self._bias)

    @property
    def output(self) -> Matrix:
        return self._layers[-1]

    @property
    def train_cache(self) -> Optional[TrainCache]:
        return self._cache

    @property
    def cache_is_initialized(self) -> bool:
        return self._cache is not None

    # ------------------------------------------------------------------
    # Forward propagation
    # ------------------------------------------------------------------

    def set_input_values(self, input_values: Matrix):
        """
        Copy input values into the input layer.

        Args:
            input_values: Column vector of shape (layer_sizes[0], 1)

        Raises:
            DimensionMismatchError: If the shape does not match the input layer
        """
        expected = self._layers[0].shape
        if input_values.shape != expected:
            raise DimensionMismatchError("Input values do not match the input layer",
                                         expected=expected, actual=input_values.shape)
        self._layers[0].assign(input_values)

    def forward_propagation(self, activation: Union[Activation, Callable]) -> Matrix:
        """
        Compute every layer from the input layer, without touching the cache.

        Args:
            activation: Activation variant or elementwise function

        Returns:
            Matrix: The output layer (owned by the perceptron, overwritten by
                the next forward pass)
        """
        function, vectorized = _elementwise(activation)
        for i, (weights, bias) in enumerate(zip(self._weights, self._bias)):
            (self._layers[i + 1]
                .mult_and_store_this(weights, self._layers[i])
                .add_col(bias, 0)
                .apply_function(function, vectorized=vectorized))
        return self._layers[-1]

    def forward_propagation_with_cache(self, activation: Union[Activation, Callable],
                                       derivative: Optional[Callable] = None,
                                       cache_after_activation: bool = False) -> Matrix:
        """
        Forward pass that also stores each layer's activation derivative.

        Args:
            activation: Activation variant or elementwise function
            derivative: Elementwise derivative; taken from the Activation when
                omitted
            cache_after_activation: If False the derivative is evaluated on the
                pre-activation sum; if True on the layer output, which requires
                an output-based derivative (y(1-y) for sigmoid, 1-y² for tanh)

        Returns:
            Matrix: The output layer

        Raises:
            CacheNotInitializedError: If init_train_cache() was not called
            ValueError: If no derivative can be determined
        """
        if self._cache is None:
            raise CacheNotInitializedError()

        if derivative is None:
            if not isinstance(activation, Activation):
                raise ValueError("A derivative function is required for a plain activation callable")
            derivative = activation.derivative_for(cache_after_activation)
            derivative_vectorized = True
        else:
            derivative_vectorized = isinstance(derivative, np.ufunc)
        function, vectorized = _elementwise(activation)

        for i, (weights, bias) in enumerate(zip(self._weights, self._bias)):
            layer = self._layers[i + 1]
            cached = self._cache.derivatives[i]
            layer.mult_and_store_this(weights, self._layers[i]).add_col(bias, 0)

            if cache_after_activation:
                layer.apply_function(function, vectorized=vectorized)
                cached.assign(layer).apply_function(derivative, vectorized=derivative_vectorized)
            else:
                cached.assign(layer).apply_function(derivative, vectorized=derivative_vectorized)
                layer.apply_function(function, vectorized=vectorized)

        return self._layers[-1]

    # ------------------------------------------------------------------
    # Backward propagation
    # ------------------------------------------------------------------

    def backward_propagation(self, ideal_values: Matrix, learning_rate: float,
                             moment: float = 0.0) -> float:
        """
        One stochastic gradient descent step on the squared error.

        Must follow a forward_propagation_with_cache() call for the same input.
        Deltas and gradients are computed for every transition before any
        weight changes:

            δ_L = 2(a_L - t) ⊙ σ'_L
            δ_l = (W_{l+1}ᵀ · δ_{l+1}) ⊙ σ'_l
            dW_l = δ_l · a_{l-1}ᵀ,  db_l = δ_l
            v ← m·v + (1-m)·g,  W ← W - η·v

        Args:
            ideal_values: Target column vector, same shape as the output layer
            learning_rate: Step size η
            moment: Momentum EMA coefficient m in [0, 1)

        Returns:
            float: Squared error of the output before the update

        Raises:
            CacheNotInitializedError: If init_train_cache() was not called
            DimensionMismatchError: If ideal_values does not match the output
        """
        if self._cache is None:
            raise CacheNotInitializedError()
        expected = self._layers[-1].shape
        if ideal_values.shape != expected:
            raise DimensionMismatchError("Ideal values do not match the output layer",
                                         expected=expected, actual=ideal_values.shape)
        moment = validate_moment(moment)

        cache = self._cache
        last = self.transitions_count - 1

        # Output layer
        delta = cache.deltas[last]
        delta.assign(self._layers[-1])
        delta -= ideal_values
        squared_error = float(np.sum(np.square(delta.data)))
        delta *= 2.0
        delta.hadamard_product_this(cache.derivatives[last])

        for t in range(last, -1, -1):
            if t < last:
                Matrix.mult_transposed_to_matrix_and_store_to(
                    self._weights[t + 1], cache.deltas[t + 1], cache.deltas[t])
                cache.deltas[t].hadamard_product_this(cache.derivatives[t])

            Matrix.mult_matrix_to_transposed_and_store_to(
                cache.deltas[t], self._layers[t], cache.delta_weights[t])
            cache.delta_bias[t].assign(cache.deltas[t])

            blend_momentum(cache.momentum_weights[t], cache.delta_weights[t], moment)
            blend_momentum(cache.momentum_bias[t], cache.delta_bias[t], moment)

        # Weights adjusting
        for t in range(self.transitions_count):
            apply_update(self._weights[t], cache.momentum_weights[t], learning_rate)
            apply_update(self._bias[t], cache.momentum_bias[t], learning_rate)

        return squared_error

    # ------------------------------------------------------------------
    # Cache and weights lifecycle
    # ------------------------------------------------------------------

    def init_train_cache(self):
        """(Re)build the training cache; momentum starts at zero."""
        if self._cache is not None:
            self.clear_train_cache()
        self._cache = TrainCache(self._layer_sizes, dtype=self.dtype)
        logger.debug("Initialized training cache for %d transitions", len(self._cache))

    def clear_train_cache(self):
        """Release the training cache. No-op when there is none."""
        if self._cache is None:
            return
        self._cache.clear()
        self._cache = None
        logger.debug("Cleared training cache")

    def randomize_weights(self, rng: Union[np.random.Generator, int, None] = None,
                          low: float = -1.0, high: float = 1.0):
        """
        Fill every weight and bias with independent uniform samples.

        Args:
            rng: numpy Generator, or an integer seed for
                numpy.random.default_rng (PCG64); None draws fresh entropy
            low: Lower bound (inclusive)
            high: Upper bound (exclusive)

        Raises:
            ValueError: If low > high
        """
        if low > high:
            raise ValueError(f"Lower bound {low} exceeds upper bound {high}")
        if not isinstance(rng, np.random.Generator):
            rng = np.random.default_rng(rng)

        for weights, bias in zip(self._weights, self._bias):
            weights.assign(Matrix.from_buffer(
                weights.rows, weights.cols, rng.uniform(low, high, size=weights.shape),
                dtype=self.dtype))
            bias.assign(Matrix.from_buffer(
                bias.rows, bias.cols, rng.uniform(low, high, size=bias.shape),
                dtype=self.dtype))

        logger.debug("Randomized weights in [%s, %s)", low, high)

    # ------------------------------------------------------------------
    # Text form
    # ------------------------------------------------------------------

    def write(self, stream: TextIO):
        """
        Write transitions as text: the transition count, then for each
        transition a "rows cols" line with the weight matrix and a "rows"
        line with the bias vector.
        """
        stream.write(f"{self.transitions_count}\n")
        for weights, bias in zip(self._weights, self._bias):
            stream.write(f"{weights.rows} {weights.cols}\n")
            weights.write(stream)
            stream.write(f"{bias.rows}\n")
            bias.write(stream)

    def to_text(self) -> str:
        buffer = io.StringIO()
        self.write(buffer)
        return buffer.getvalue()

    def __str__(self):
        return self.to_text()

    def __repr__(self):
        state = "cached" if self._cache is not None else "inference"
        return f"Perceptron(layer_sizes={list(self._layer_sizes)}, dtype={self.dtype}, state={state})"
