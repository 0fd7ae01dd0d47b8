"""
Utility functions for perceptron training.

Includes loss and accuracy metrics plus weight statistics for monitoring.
"""

import numpy as np
from typing import Dict, List, Sequence

from neuralnet.errors import DimensionMismatchError
from neuralnet.math.matrix import Matrix


def squared_error(output: Matrix, target: Matrix) -> float:
    """
    Sum of squared differences Σ (a_k - t_k)².

    Raises:
        DimensionMismatchError: If the shapes differ
    """
    return float(np.sum(np.square((output - target).data)))


def mean_squared_error(outputs: Sequence[Matrix], targets: Sequence[Matrix]) -> float:
    """
    Mean over samples of the per-sample squared error.

    Args:
        outputs: Network outputs, one per sample
        targets: Targets, same length and shapes

    Returns:
        float: Mean squared error (0.0 for no samples)
    """
    if len(outputs) != len(targets):
        raise DimensionMismatchError("Outputs and targets count differ",
                                     expected=len(targets), actual=len(outputs))
    if not outputs:
        return 0.0
    return sum(squared_error(o, t) for o, t in zip(outputs, targets)) / len(outputs)


def binary_accuracy(outputs: Sequence[Matrix], targets: Sequence[Matrix],
                    threshold: float = 0.0) -> float:
    """
    Fraction of samples whose thresholded outputs all match the targets.

    Values >= threshold count as 1, below as 0, on both outputs and targets;
    with threshold 0 this is the binary step used to read -1/1 tanh outputs.
    Use threshold 0.5 for 0/1 encoded targets.
    """
    if len(outputs) != len(targets):
        raise DimensionMismatchError("Outputs and targets count differ",
                                     expected=len(targets), actual=len(outputs))
    if not outputs:
        return 0.0

    correct = 0
    for output, target in zip(outputs, targets):
        if output.shape != target.shape:
            raise DimensionMismatchError("Output and target shapes differ",
                                         expected=target.shape, actual=output.shape)
        if np.array_equal(output.data >= threshold, target.data >= threshold):
            correct += 1
    return correct / len(outputs)


def weight_norms(perceptron) -> List[float]:
    """Frobenius norm of each transition's weight matrix."""
    return [float(np.linalg.norm(weights.data)) for weights in perceptron.weights]


def compute_metrics(perceptron, outputs: Sequence[Matrix], targets: Sequence[Matrix],
                    threshold: float = 0.0) -> Dict[str, float]:
    """
    Compute monitoring metrics for a set of predictions.

    Metrics include:
    - mse: mean squared error
    - accuracy: binary accuracy at the given threshold (0 for -1/1
      targets, 0.5 for 0/1 targets)
    - max_weight_norm: largest weight-matrix norm

    Returns:
        dict: Computed metrics
    """
    norms = weight_norms(perceptron)
    return {
        'mse': mean_squared_error(outputs, targets),
        'accuracy': binary_accuracy(outputs, targets, threshold),
        'max_weight_norm': max(norms) if norms else 0.0,
    }
