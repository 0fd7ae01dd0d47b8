"""
Training Cache: Transient per-transition buffers used by backpropagation.

A transition i connects layer i (n_i neurons) to layer i+1 (n_{i+1} neurons).
For every transition the cache holds:

    derivatives[i]       (n_{i+1}, 1)    activation derivative of layer i+1
    deltas[i]            (n_{i+1}, 1)    error signal of layer i+1
    delta_weights[i]     (n_{i+1}, n_i)  weight gradient
    delta_bias[i]        (n_{i+1}, 1)    bias gradient
    momentum_weights[i]  (n_{i+1}, n_i)  EMA of weight gradients
    momentum_bias[i]     (n_{i+1}, 1)    EMA of bias gradients

Buffers are only needed while training; inference runs without them.
"""

from typing import Dict, List, Sequence, Tuple

from neuralnet.math.matrix import DEFAULT_DTYPE, Matrix


class TrainCache:
    """
    Gradient and momentum buffers for one perceptron topology.

    Attributes:
        layer_sizes (List[int]): Neurons per layer the buffers are sized for
        dtype: numpy floating type of every buffer
    """

    BUFFERS = ("derivatives", "deltas", "delta_weights", "delta_bias",
               "momentum_weights", "momentum_bias")

    def __init__(self, layer_sizes: Sequence[int], dtype=DEFAULT_DTYPE):
        """
        Allocate zero-filled buffers for every transition.

        Args:
            layer_sizes: Neurons per layer, at least two layers
            dtype: numpy floating type of the buffers
        """
        self.layer_sizes = list(layer_sizes)
        self.dtype = dtype
        self.derivatives: List[Matrix] = []
        self.deltas: List[Matrix] = []
        self.delta_weights: List[Matrix] = []
        self.delta_bias: List[Matrix] = []
        self.momentum_weights: List[Matrix] = []
        self.momentum_bias: List[Matrix] = []

        for current, following in zip(self.layer_sizes[:-1], self.layer_sizes[1:]):
            self.derivatives.append(Matrix(following, 1, dtype=dtype))
            self.deltas.append(Matrix(following, 1, dtype=dtype))
            self.delta_weights.append(Matrix(following, current, dtype=dtype))
            self.delta_bias.append(Matrix(following, 1, dtype=dtype))
            self.momentum_weights.append(Matrix(following, current, dtype=dtype))
            self.momentum_bias.append(Matrix(following, 1, dtype=dtype))

    def reset_momentum(self):
        """Zero both momentum accumulators of every transition."""
        for matrix in self.momentum_weights + self.momentum_bias:
            matrix.fill(0)

    def clear(self):
        """Release all buffers."""
        for name in self.BUFFERS:
            getattr(self, name).clear()

    def is_empty(self) -> bool:
        return len(self.derivatives) == 0

    def shapes(self) -> Dict[str, List[Tuple[int, int]]]:
        """
        Shapes of every buffer, keyed by buffer name.

        Returns:
            dict: name -> list of (rows, cols), one entry per transition
        """
        return {name: [matrix.shape for matrix in getattr(self, name)]
                for name in self.BUFFERS}

    def __len__(self):
        return len(self.derivatives)

    def __repr__(self):
        return f"TrainCache(transitions={len(self)}, layer_sizes={self.layer_sizes})"
