"""
Training loop helpers.

Runs the per-example training sequence on a Perceptron:

    init_train_cache()
    for each epoch, for each (input, target):
        set_input_values(input)
        forward_propagation_with_cache(...)
        backward_propagation(target, ...)
    clear_train_cache()

and plain forward passes for evaluation afterwards.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple, Union

from neuralnet.math.functions import Activation, binary_step
from neuralnet.math.matrix import Matrix
from neuralnet.perceptron import Perceptron
from neuralnet.training.updates import validate_moment

logger = logging.getLogger(__name__)

Sample = Tuple[Matrix, Matrix]


@dataclass
class TrainingHistory:
    """
    Record of one train() call.

    Attributes:
        losses: Mean squared error per epoch, measured during the epoch
        epochs: Number of epochs run
        elapsed: Wall-clock seconds spent training
    """
    losses: List[float] = field(default_factory=list)
    epochs: int = 0
    elapsed: float = 0.0

    @property
    def final_loss(self) -> Optional[float]:
        return self.losses[-1] if self.losses else None


def train(perceptron: Perceptron, samples: Sequence[Sample],
          activation: Union[Activation, Callable], epochs: int, learning_rate: float,
          moment: float = 0.0, cache_after_activation: bool = False,
          derivative: Optional[Callable] = None, log_interval: int = 0) -> TrainingHistory:
    """
    Train a perceptron one example at a time.

    The training cache is created at the start and cleared at the end, even
    if an error interrupts training.

    Args:
        perceptron: Network to train, weights already initialized
        samples: (input, target) column-vector pairs
        activation: Activation variant or elementwise function
        epochs: Passes over the samples
        learning_rate: Step size η
        moment: Momentum EMA coefficient in [0, 1)
        cache_after_activation: Evaluate derivatives on layer outputs
        derivative: Explicit derivative, required for plain callables
        log_interval: Log the loss every N epochs (0 disables)

    Returns:
        TrainingHistory: Per-epoch losses and timing
    """
    if epochs < 0:
        raise ValueError(f"Epochs must be non-negative, got {epochs}")
    if not samples:
        raise ValueError("At least one training sample is required")
    validate_moment(moment)

    history = TrainingHistory()
    start = time.perf_counter()

    perceptron.init_train_cache()
    try:
        for epoch in range(epochs):
            total = 0.0
            for inputs, target in samples:
                perceptron.set_input_values(inputs)
                perceptron.forward_propagation_with_cache(
                    activation, derivative, cache_after_activation)
                total += perceptron.backward_propagation(target, learning_rate, moment)

            history.losses.append(total / len(samples))
            history.epochs = epoch + 1

            if log_interval and (epoch + 1) % log_interval == 0:
                logger.info("Epoch %d/%d: loss=%.6f", epoch + 1, epochs, history.losses[-1])
    finally:
        perceptron.clear_train_cache()

    history.elapsed = time.perf_counter() - start
    logger.info("Trained %d epochs on %d samples in %.3fs",
                history.epochs, len(samples), history.elapsed)
    return history


def evaluate(perceptron: Perceptron, inputs: Sequence[Matrix],
             activation: Union[Activation, Callable]) -> List[Matrix]:
    """
    Run plain forward passes.

    Returns:
        List[Matrix]: Copy of the output layer for each input
    """
    outputs = []
    for values in inputs:
        perceptron.set_input_values(values)
        outputs.append(perceptron.forward_propagation(activation).copy())
    return outputs


def predict_binary(perceptron: Perceptron, inputs: Sequence[Matrix],
                   activation: Union[Activation, Callable]) -> List[Matrix]:
    """Forward passes followed by a binary step on each output."""
    return [output.apply_function(binary_step, vectorized=True)
            for output in evaluate(perceptron, inputs, activation)]
