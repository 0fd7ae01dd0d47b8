"""
test_persistence.py
~~~~~~~~~~~~~~~~~~~

Unit tests for plain-text network persistence.
"""

import io
import os

import numpy as np
import pytest
from neuralnet.errors import InvalidTopologyError
from neuralnet.math.functions import HYPERBOLIC_TANGENT
from neuralnet.math.matrix import Matrix
from neuralnet.perceptron import Perceptron
from neuralnet.persistence import dumps, load, load_network, loads, save_network


@pytest.fixture
def temp_model_dir(tmp_path):
    """Create a temporary directory for saved networks."""
    model_dir = tmp_path / "test_models"
    model_dir.mkdir()
    return str(model_dir)


@pytest.fixture
def simple_network():
    """Create a 3-4-2 network with random weights."""
    network = Perceptron([3, 4, 2])
    network.randomize_weights(17)
    return network


class TestTextLayout:
    """Test the serialized layout."""

    def test_layout(self):
        """Test count, shape lines and matrices in order."""
        p = Perceptron([2, 1])
        p.weights[0].assign(Matrix.from_rows([[1.0, -2.0]]))
        p.bias[0].assign(Matrix.from_rows([[0.5]]))

        assert dumps(p) == (
            "1\n"
            "1 2\n"
            "1.00000e+00 -2.00000e+00\n"
            "1\n"
            "5.00000e-01\n"
        )

    def test_str_matches_dumps(self, simple_network):
        assert str(simple_network) == dumps(simple_network)

    def test_write_matches_to_text(self, simple_network):
        stream = io.StringIO()
        simple_network.write(stream)

        assert stream.getvalue() == simple_network.to_text()


class TestRoundTrip:
    """Test saving and loading."""

    def test_loads_restores_topology(self, simple_network):
        """Test the layer sizes are rebuilt from the stored shapes."""
        restored = loads(dumps(simple_network))

        assert restored.layer_sizes == (3, 4, 2)

    def test_loads_preserves_weights(self, simple_network):
        """Test weights and bias survive to the stored precision."""
        restored = loads(dumps(simple_network))

        for original, loaded in zip(simple_network.weights + simple_network.bias,
                                    restored.weights + restored.bias):
            assert loaded.allclose(original, rtol=1e-5, atol=1e-6)

    def test_loaded_network_predicts_the_same(self, simple_network):
        """Test a reloaded network gives the same outputs."""
        restored = loads(dumps(simple_network))
        x = Matrix.from_rows([[0.1], [0.2], [0.3]])

        simple_network.set_input_values(x)
        restored.set_input_values(x)

        assert restored.forward_propagation(HYPERBOLIC_TANGENT).allclose(
            simple_network.forward_propagation(HYPERBOLIC_TANGENT), rtol=1e-4, atol=1e-5)

    def test_save_and_load_file(self, simple_network, temp_model_dir):
        """Test saving creates a file that loads back."""
        path = os.path.join(temp_model_dir, "nested", "network.txt")

        assert save_network(simple_network, path) == path
        assert os.path.exists(path)

        restored = load_network(path)
        assert restored.layer_sizes == simple_network.layer_sizes

    def test_load_float32(self, simple_network):
        restored = loads(dumps(simple_network), dtype=np.float32)

        assert restored.dtype == np.float32
        assert restored.weights[0].dtype == np.float32

    def test_load_missing_file(self, temp_model_dir):
        with pytest.raises(FileNotFoundError):
            load_network(os.path.join(temp_model_dir, "missing.txt"))

    def test_load_from_stream(self, simple_network):
        restored = load(io.StringIO(dumps(simple_network)))

        assert restored.transitions_count == 2


class TestMalformedInput:
    """Test rejection of inconsistent or truncated data."""

    def test_transitions_must_chain(self):
        """Test a transition whose inputs differ from the previous outputs."""
        text = (
            "2\n"
            "2 2\n1 0\n0 1\n2\n0\n0\n"
            "1 3\n1 1 1\n1\n0\n"
        )
        with pytest.raises(InvalidTopologyError):
            loads(text)

    def test_bias_must_match_weights(self):
        text = "1\n2 2\n1 0\n0 1\n1\n0\n"
        with pytest.raises(InvalidTopologyError):
            loads(text)

    def test_truncated(self, simple_network):
        text = dumps(simple_network)
        with pytest.raises(ValueError):
            loads(text[: len(text) // 2])

    def test_zero_transitions(self):
        with pytest.raises(InvalidTopologyError):
            loads("0\n")

    def test_bad_header(self):
        with pytest.raises(ValueError):
            loads("two\n")
