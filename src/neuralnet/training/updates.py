"""
Update dynamics for perceptron training.

Momentum is an exponential moving average of the per-sample gradients:

    v ← m·v + (1 - m)·g

and parameters follow the averaged gradient:

    W ← W - η·v

With m = 0 this is plain stochastic gradient descent.
"""

from neuralnet.math.matrix import Matrix


def validate_moment(moment: float) -> float:
    """
    Check a momentum coefficient.

    Raises:
        ValueError: If moment is outside [0, 1)
    """
    if not 0.0 <= moment < 1.0:
        raise ValueError(f"Moment must be in [0, 1), got {moment}")
    return float(moment)


def blend_momentum(velocity: Matrix, gradient: Matrix, moment: float) -> Matrix:
    """
    Blend a fresh gradient into the velocity in place.

    Args:
        velocity: Accumulated EMA, updated in place
        gradient: Gradient of the current sample, same shape
        moment: EMA coefficient m in [0, 1)

    Returns:
        Matrix: velocity
    """
    velocity *= moment
    velocity += gradient * (1.0 - moment)
    return velocity


def apply_update(parameter: Matrix, velocity: Matrix, learning_rate: float) -> Matrix:
    """Gradient descent step parameter ← parameter - η·velocity, in place."""
    parameter -= velocity * learning_rate
    return parameter
