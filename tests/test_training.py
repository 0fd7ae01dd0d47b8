"""
Unit tests for training helpers.

Tests TrainCache buffers, the momentum update rules, and the train/evaluate loop.
"""

import numpy as np
import pytest
from neuralnet.datasets import logic_gate
from neuralnet.errors import DimensionMismatchError
from neuralnet.math.functions import HYPERBOLIC_TANGENT, LINEAR
from neuralnet.math.matrix import Matrix
from neuralnet.perceptron import Perceptron
from neuralnet.training import TrainCache, apply_update, blend_momentum, validate_moment
from neuralnet.training.loop import TrainingHistory, evaluate, predict_binary, train


class TestTrainCache:
    """Test TrainCache class."""

    def test_initialization(self):
        """Test one zero-filled entry per transition."""
        cache = TrainCache([2, 3, 1])

        assert len(cache) == 2
        assert not cache.is_empty()
        for name in TrainCache.BUFFERS:
            for matrix in getattr(cache, name):
                assert np.all(matrix.data == 0)

    def test_shapes(self):
        """Test derivative/delta mirror the next layer, gradients the weights."""
        shapes = TrainCache([2, 3, 1]).shapes()

        assert shapes["derivatives"] == [(3, 1), (1, 1)]
        assert shapes["delta_weights"] == [(3, 2), (1, 3)]
        assert shapes["momentum_bias"] == [(3, 1), (1, 1)]

    def test_clear(self):
        """Test clear releases every buffer."""
        cache = TrainCache([2, 3, 1])
        cache.clear()

        assert cache.is_empty()
        assert all(len(v) == 0 for v in cache.shapes().values())

    def test_reset_momentum(self):
        """Test momentum accumulators return to zero."""
        cache = TrainCache([2, 2])
        cache.momentum_weights[0].fill(3.0)
        cache.momentum_bias[0].fill(3.0)
        cache.reset_momentum()

        assert np.all(cache.momentum_weights[0].data == 0)
        assert np.all(cache.momentum_bias[0].data == 0)

    def test_dtype(self):
        cache = TrainCache([2, 2], dtype=np.float32)

        assert cache.delta_weights[0].dtype == np.float32


class TestUpdates:
    """Test momentum blending and parameter updates."""

    def test_blend_momentum_ema(self):
        """Test v ← m·v + (1-m)·g."""
        velocity = Matrix.from_rows([[1.0, 2.0]])
        gradient = Matrix.from_rows([[3.0, -1.0]])

        blend_momentum(velocity, gradient, 0.75)

        assert np.allclose(velocity.data, [[0.75 + 0.75, 1.5 - 0.25]])

    def test_zero_moment_is_plain_gradient(self):
        velocity = Matrix.from_rows([[5.0]])
        blend_momentum(velocity, Matrix.from_rows([[2.0]]), 0.0)

        assert velocity[0, 0] == 2.0

    def test_repeated_gradient_converges_to_gradient(self):
        """Test the EMA of a constant gradient approaches that gradient."""
        velocity = Matrix(1, 1)
        gradient = Matrix.from_rows([[4.0]])
        for _ in range(200):
            blend_momentum(velocity, gradient, 0.9)

        assert np.isclose(velocity[0, 0], 4.0)

    def test_apply_update(self):
        parameter = Matrix.from_rows([[1.0, 1.0]])
        apply_update(parameter, Matrix.from_rows([[2.0, -2.0]]), 0.1)

        assert np.allclose(parameter.data, [[0.8, 1.2]])

    def test_shape_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            blend_momentum(Matrix(2, 1), Matrix(1, 2), 0.5)

    @pytest.mark.parametrize("moment", [-0.1, 1.0, 1.5])
    def test_validate_moment(self, moment):
        with pytest.raises(ValueError):
            validate_moment(moment)


class TestTrainLoop:
    """Test train(), evaluate() and predict_binary()."""

    def test_history(self):
        """Test one loss per epoch and the cache cleared afterwards."""
        p = Perceptron([2, 2, 1])
        p.randomize_weights(0)
        samples = logic_gate("or", low=-1.0, high=1.0)

        history = train(p, samples, HYPERBOLIC_TANGENT, epochs=25, learning_rate=0.1)

        assert isinstance(history, TrainingHistory)
        assert history.epochs == 25
        assert len(history.losses) == 25
        assert history.final_loss == history.losses[-1]
        assert history.elapsed >= 0.0
        assert not p.cache_is_initialized

    def test_loss_decreases(self):
        """Test training on OR reduces the loss."""
        p = Perceptron([2, 3, 1])
        p.randomize_weights(4)
        samples = logic_gate("or", low=-1.0, high=1.0)

        history = train(p, samples, HYPERBOLIC_TANGENT, epochs=300, learning_rate=0.05,
                        moment=0.5, cache_after_activation=True)

        assert history.losses[-1] < history.losses[0]

    def test_cache_cleared_on_error(self):
        """Test a failing sample still leaves the perceptron without a cache."""
        p = Perceptron([2, 1])
        bad = [(Matrix(3, 1), Matrix(1, 1))]

        with pytest.raises(DimensionMismatchError):
            train(p, bad, LINEAR, epochs=1, learning_rate=0.1)
        assert not p.cache_is_initialized

    def test_rejects_bad_arguments(self):
        p = Perceptron([2, 1])
        samples = logic_gate("and")

        with pytest.raises(ValueError):
            train(p, [], LINEAR, epochs=1, learning_rate=0.1)
        with pytest.raises(ValueError):
            train(p, samples, LINEAR, epochs=-1, learning_rate=0.1)
        with pytest.raises(ValueError):
            train(p, samples, LINEAR, epochs=1, learning_rate=0.1, moment=1.0)

    def test_log_interval(self, caplog):
        """Test progress is logged every log_interval epochs."""
        p = Perceptron([2, 1])
        p.randomize_weights(0)

        with caplog.at_level("INFO", logger="neuralnet.training.loop"):
            train(p, logic_gate("and"), LINEAR, epochs=4, learning_rate=0.01, log_interval=2)

        epoch_lines = [r for r in caplog.records if r.getMessage().startswith("Epoch")]
        assert len(epoch_lines) == 2

    def test_evaluate_returns_copies(self):
        """Test evaluation outputs are independent of the output layer."""
        p = Perceptron([2, 1])
        p.randomize_weights(1)
        inputs = [x for x, _ in logic_gate("and")]

        outputs = evaluate(p, inputs, LINEAR)

        assert len(outputs) == 4
        assert outputs[0] is not p.output
        assert outputs[-1] == p.output

    def test_predict_binary(self):
        """Test outputs are mapped through the binary step."""
        p = Perceptron([2, 1])
        p.weights[0].assign(Matrix.from_rows([[1.0, 1.0]]))
        p.bias[0].assign(Matrix.from_rows([[-1.5]]))
        inputs = [x for x, _ in logic_gate("and")]

        predictions = [m[0, 0] for m in predict_binary(p, inputs, LINEAR)]

        assert predictions == [0.0, 0.0, 0.0, 1.0]
