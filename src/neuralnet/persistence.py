"""
persistence.py
~~~~~~~~~~~~~~

Plain-text persistence for perceptron weights.

Layout (one value list per matrix row, Matrix text format):

    <transition count>
    <weight rows> <weight cols>
    <weight matrix>
    <bias rows>
    <bias vector>
    ...

Values keep 6 significant digits, so a reloaded network matches the saved
one to that precision.
"""

import io
import logging
import os
from typing import List, TextIO

from neuralnet.errors import InvalidTopologyError
from neuralnet.math.matrix import DEFAULT_DTYPE
from neuralnet.perceptron import Perceptron

# Configure module logger
logger = logging.getLogger(__name__)


def _read_ints(stream: TextIO, count: int, what: str) -> List[int]:
    line = stream.readline()
    if not line:
        raise ValueError(f"Unexpected end of data while reading {what}")
    fields = line.split()
    if len(fields) != count:
        raise ValueError(f"Expected {count} integer(s) for {what}, got {line.strip()!r}")
    try:
        return [int(value) for value in fields]
    except ValueError:
        raise ValueError(f"Invalid integer in {what}: {line.strip()!r}") from None


def dumps(perceptron: Perceptron) -> str:
    """Serialize a perceptron's transitions to text."""
    return perceptron.to_text()


def load(stream: TextIO, dtype=DEFAULT_DTYPE) -> Perceptron:
    """
    Read a perceptron from a text stream.

    The topology is rebuilt from the stored shapes: layer sizes are the
    first weight matrix's column count followed by every weight row count.

    Args:
        stream: Text stream positioned at the transition count
        dtype: numpy floating type of the rebuilt network

    Returns:
        Perceptron: Network holding the stored weights and bias

    Raises:
        InvalidTopologyError: If consecutive transitions do not chain, or
            bias and weight shapes disagree
        ValueError: If the data is truncated or malformed
    """
    (count,) = _read_ints(stream, 1, "transition count")
    if count < 1:
        raise InvalidTopologyError(f"Network must have at least one transition, got {count}")

    # Shapes first, values are read into the rebuilt perceptron afterwards
    shapes = []
    blocks = []
    for index in range(count):
        rows, cols = _read_ints(stream, 2, f"weight shape of transition {index}")
        weights_text = "".join(stream.readline() for _ in range(rows))
        (bias_rows,) = _read_ints(stream, 1, f"bias shape of transition {index}")
        bias_text = "".join(stream.readline() for _ in range(bias_rows))

        if bias_rows != rows:
            raise InvalidTopologyError(
                f"Transition {index}: bias has {bias_rows} rows but weights have {rows}")
        if shapes and shapes[-1][0] != cols:
            raise InvalidTopologyError(
                f"Transition {index} expects {cols} inputs but previous layer has {shapes[-1][0]}")
        shapes.append((rows, cols))
        blocks.append((weights_text, bias_text))

    layer_sizes = [shapes[0][1]] + [rows for rows, _ in shapes]
    perceptron = Perceptron(layer_sizes, dtype=dtype)
    for weights, bias, (weights_text, bias_text) in zip(perceptron.weights, perceptron.bias, blocks):
        weights.read_text(weights_text)
        bias.read_text(bias_text)
    return perceptron


def loads(text: str, dtype=DEFAULT_DTYPE) -> Perceptron:
    """Parse text produced by dumps()."""
    return load(io.StringIO(text), dtype=dtype)


def save_network(perceptron: Perceptron, path: str) -> str:
    """
    Save a perceptron to a text file, creating parent directories.

    Args:
        perceptron: Network to save
        path: Destination file path

    Returns:
        str: The path written
    """
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)

    with open(path, "w", encoding="utf-8") as stream:
        perceptron.write(stream)

    logger.info(f"Saved network with topology {list(perceptron.layer_sizes)} to '{path}'")
    return path


def load_network(path: str, dtype=DEFAULT_DTYPE) -> Perceptron:
    """
    Load a perceptron saved by save_network().

    Raises:
        FileNotFoundError: If path does not exist
    """
    with open(path, "r", encoding="utf-8") as stream:
        perceptron = load(stream, dtype=dtype)

    logger.info(f"Loaded network with topology {list(perceptron.layer_sizes)} from '{path}'")
    return perceptron
