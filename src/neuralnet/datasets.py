"""
Logic gate datasets.

Truth tables of two-input gates as (input, target) column-vector pairs,
over the inputs (0, 0), (1, 0), (0, 1), (1, 1) in that order.
"""

from typing import Callable, Dict, List, Tuple

from neuralnet.math.matrix import DEFAULT_DTYPE, Matrix

GATE_INPUTS = ((0.0, 0.0), (1.0, 0.0), (0.0, 1.0), (1.0, 1.0))

GATES: Dict[str, Callable[[bool, bool], bool]] = {
    "and": lambda a, b: a and b,
    "or": lambda a, b: a or b,
    "xor": lambda a, b: a != b,
}


def logic_gate(name: str, low: float = 0.0, high: float = 1.0,
               dtype=DEFAULT_DTYPE) -> List[Tuple[Matrix, Matrix]]:
    """
    Build the truth table of a logic gate.

    Args:
        name: "and", "or" or "xor" (case-insensitive)
        low: Target value encoding False (e.g. -1 for tanh outputs)
        high: Target value encoding True
        dtype: numpy floating type of the matrices

    Returns:
        List of (input (2, 1), target (1, 1)) pairs

    Raises:
        ValueError: If the gate is unknown
    """
    gate = GATES.get(name.lower())
    if gate is None:
        raise ValueError(f"Unknown gate '{name}'. Known: {', '.join(sorted(GATES))}")

    samples = []
    for a, b in GATE_INPUTS:
        inputs = Matrix.from_rows([[a], [b]], dtype=dtype)
        target = Matrix.from_rows([[high if gate(bool(a), bool(b)) else low]], dtype=dtype)
        samples.append((inputs, target))
    return samples
