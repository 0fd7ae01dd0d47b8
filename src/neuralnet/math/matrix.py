"""
Matrix: Dense 2-D numeric storage with explicit-shape arithmetic.

Every Matrix owns one contiguous, row-major numpy buffer of shape (rows, cols).
Shapes never broadcast: elementwise operations require identical shapes,
products require matching inner dimensions, and the fused "store to"
products require a destination that is already sized to the result:

    C = A·B      mult_and_store_this
    C = Aᵀ·B     mult_transposed_to_matrix_and_store_to
    C = A·Bᵀ     mult_matrix_to_transposed_and_store_to

Any violation raises DimensionMismatchError before data is touched.
"""

import io
import numbers
from typing import Callable, Iterable, Sequence, TextIO, Tuple

import numpy as np

from neuralnet.errors import DimensionMismatchError

DEFAULT_DTYPE = np.float64

# Scientific notation with 5 digits after the point (6 significant digits)
TEXT_FORMAT = "%.5e"


class Matrix:
    """
    Dense matrix with exclusively owned, row-major storage.

    Attributes:
        rows (int): Number of rows (>= 1 unless the matrix was moved from)
        cols (int): Number of columns (>= 1 unless the matrix was moved from)
        dtype (np.dtype): Element type, a numpy floating type
    """

    # Keep numpy scalars from hijacking ``scalar * matrix``
    __array_ufunc__ = None

    def __init__(self, rows: int, cols: int, fill_zero: bool = True,
                 dtype=DEFAULT_DTYPE):
        """
        Allocate a rows x cols matrix.

        Args:
            rows: Number of rows
            cols: Number of columns
            fill_zero: Zero the buffer; otherwise contents are uninitialized
            dtype: numpy floating type of the elements
        """
        if rows < 1 or cols < 1:
            raise DimensionMismatchError(
                "Matrix dimensions must be positive", expected="rows >= 1, cols >= 1",
                actual=(rows, cols))
        shape = (int(rows), int(cols))
        self._data = np.zeros(shape, dtype=dtype) if fill_zero else np.empty(shape, dtype=dtype)

    @classmethod
    def _wrap(cls, data: np.ndarray) -> "Matrix":
        """Take ownership of an existing 2-D array without copying."""
        matrix = cls.__new__(cls)
        matrix._data = np.ascontiguousarray(data)
        return matrix

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def zeros(cls, rows: int, cols: int, dtype=DEFAULT_DTYPE) -> "Matrix":
        return cls(rows, cols, fill_zero=True, dtype=dtype)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]], dtype=DEFAULT_DTYPE) -> "Matrix":
        """
        Build a matrix from literal rows.

        Args:
            rows: Sequence of equally long rows, e.g. [[1, 2], [3, 4]]
            dtype: numpy floating type of the elements

        Returns:
            Matrix: New matrix holding a copy of the values

        Raises:
            DimensionMismatchError: If the rows are empty or ragged
        """
        rows = [list(row) for row in rows]
        if not rows or not rows[0]:
            raise DimensionMismatchError("Matrix literal must have at least one row and column")
        width = len(rows[0])
        for index, row in enumerate(rows):
            if len(row) != width:
                raise DimensionMismatchError(
                    f"Row {index} length differs from first row", expected=width, actual=len(row))
        return cls._wrap(np.array(rows, dtype=dtype))

    @classmethod
    def from_buffer(cls, rows: int, cols: int, data: Iterable[float],
                    dtype=DEFAULT_DTYPE) -> "Matrix":
        """
        Copy a raw buffer (flat row-major or already 2-D) into a new matrix.

        Raises:
            DimensionMismatchError: If the buffer does not hold rows*cols values
        """
        buffer = np.array(data, dtype=dtype)
        if rows < 1 or cols < 1 or buffer.size != rows * cols:
            raise DimensionMismatchError(
                "Buffer size does not match matrix shape", expected=rows * cols, actual=buffer.size)
        return cls._wrap(buffer.reshape(rows, cols))

    @classmethod
    def from_text(cls, text: str, rows: int, cols: int, dtype=DEFAULT_DTYPE) -> "Matrix":
        """Parse text written by to_text() into a new rows x cols matrix."""
        return cls(rows, cols, fill_zero=False, dtype=dtype).read_text(text)

    @classmethod
    def identity(cls, rank: int, dtype=DEFAULT_DTYPE) -> "Matrix":
        """Square identity matrix of the given rank."""
        if rank < 1:
            raise DimensionMismatchError("Identity rank must be positive", expected=">= 1", actual=rank)
        return cls._wrap(np.eye(rank, dtype=dtype))

    # ------------------------------------------------------------------
    # Shape and ownership
    # ------------------------------------------------------------------

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def cols(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self._data.shape

    @property
    def size(self) -> int:
        return self._data.size

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def data(self) -> np.ndarray:
        """Read-only view of the underlying buffer."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    def is_empty(self) -> bool:
        """True for a matrix whose storage was moved away."""
        return self._data.size == 0

    def to_numpy(self) -> np.ndarray:
        """Independent copy of the values as a 2-D array."""
        return self._data.copy()

    def copy(self) -> "Matrix":
        """Deep copy with its own storage."""
        return Matrix._wrap(self._data.copy())

    def __copy__(self) -> "Matrix":
        return self.copy()

    def __deepcopy__(self, memo) -> "Matrix":
        return self.copy()

    def move(self) -> "Matrix":
        """
        Transfer ownership of the storage to a new Matrix.

        The source is left empty (0 x 0) and must be reassigned before reuse.

        Returns:
            Matrix: New owner of the buffer
        """
        moved = Matrix._wrap(self._data)
        self._data = np.empty((0, 0), dtype=moved.dtype)
        return moved

    def assign(self, other: "Matrix") -> "Matrix":
        """
        Copy other's values into this matrix, reallocating on shape change.

        Returns:
            Matrix: self
        """
        if self._data.shape != other._data.shape:
            self._data = other._data.astype(self._data.dtype, copy=True)
        else:
            np.copyto(self._data, other._data, casting="same_kind")
        return self

    def fill(self, value: float) -> "Matrix":
        self._data.fill(value)
        return self

    # ------------------------------------------------------------------
    # Shape checks
    # ------------------------------------------------------------------

    def _check_same_shape(self, other: "Matrix", operation: str):
        if self._data.shape != other._data.shape:
            raise DimensionMismatchError(
                f"Rows and columns must match for {operation}",
                expected=self._data.shape, actual=other._data.shape)

    @staticmethod
    def _check_destination(store_to: "Matrix", shape: Tuple[int, int]):
        if store_to._data.shape != shape:
            raise DimensionMismatchError(
                "Size of result matrix not equal size of matrix after multiplication",
                expected=shape, actual=store_to._data.shape)

    # ------------------------------------------------------------------
    # Elementwise arithmetic
    # ------------------------------------------------------------------

    def __add__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other, "addition")
        return Matrix._wrap(self._data + other._data)

    def __iadd__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other, "addition")
        np.add(self._data, other._data, out=self._data, casting="same_kind")
        return self

    def __sub__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other, "subtraction")
        return Matrix._wrap(self._data - other._data)

    def __isub__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other, "subtraction")
        np.subtract(self._data, other._data, out=self._data, casting="same_kind")
        return self

    def hadamard_product(self, other: "Matrix") -> "Matrix":
        """Elementwise product as a new matrix."""
        self._check_same_shape(other, "Hadamard product")
        return Matrix._wrap(self._data * other._data)

    def hadamard_product_this(self, other: "Matrix") -> "Matrix":
        """Elementwise product stored into self."""
        self._check_same_shape(other, "Hadamard product")
        np.multiply(self._data, other._data, out=self._data, casting="same_kind")
        return self

    # ------------------------------------------------------------------
    # Scalar arithmetic
    # ------------------------------------------------------------------

    def __mul__(self, value) -> "Matrix":
        if not isinstance(value, numbers.Real):
            return NotImplemented
        return Matrix._wrap(self._data * self._data.dtype.type(value))

    __rmul__ = __mul__

    def __imul__(self, value) -> "Matrix":
        if not isinstance(value, numbers.Real):
            return NotImplemented
        self._data *= self._data.dtype.type(value)
        return self

    def __truediv__(self, value) -> "Matrix":
        if not isinstance(value, numbers.Real):
            return NotImplemented
        return Matrix._wrap(self._data / self._data.dtype.type(value))

    def __rtruediv__(self, value) -> "Matrix":
        """value / matrix divides the scalar by every element."""
        if not isinstance(value, numbers.Real):
            return NotImplemented
        return Matrix._wrap(self._data.dtype.type(value) / self._data)

    def __itruediv__(self, value) -> "Matrix":
        if not isinstance(value, numbers.Real):
            return NotImplemented
        self._data /= self._data.dtype.type(value)
        return self

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def __matmul__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        if self.cols != other.rows:
            raise DimensionMismatchError(
                "The number of columns of the left matrix must be equal to "
                "the number of rows of the right matrix for multiplication",
                expected=self.cols, actual=other.rows)
        return Matrix._wrap(self._data @ other._data)

    def mult_and_store_this(self, lhs: "Matrix", rhs: "Matrix") -> "Matrix":
        """
        Store lhs·rhs into this matrix, which must already be sized for it.

        Args:
            lhs: Left operand of shape (n, k)
            rhs: Right operand of shape (k, m)

        Returns:
            Matrix: self, now holding the (n, m) product

        Raises:
            DimensionMismatchError: On inner-dimension mismatch or if self
                is not (n, m)
        """
        if lhs.cols != rhs.rows:
            raise DimensionMismatchError(
                "The number of columns of the left matrix must be equal to "
                "the number of rows of the right matrix for multiplication",
                expected=lhs.cols, actual=rhs.rows)
        self._check_destination(self, (lhs.rows, rhs.cols))
        np.matmul(lhs._data, rhs._data, out=self._data, casting="same_kind")
        return self

    @staticmethod
    def mult_transposed_to_matrix_and_store_to(lhs: "Matrix", rhs: "Matrix",
                                               store_to: "Matrix"):
        """
        Compute store_to = lhsᵀ·rhs without materializing the transpose.

        Args:
            lhs: Shape (k, n)
            rhs: Shape (k, m)
            store_to: Pre-sized destination of shape (n, m)
        """
        if lhs.rows != rhs.rows:
            raise DimensionMismatchError(
                "The number of rows of the left matrix must be equal to "
                "the number of rows of the right matrix for multiplication",
                expected=lhs.rows, actual=rhs.rows)
        Matrix._check_destination(store_to, (lhs.cols, rhs.cols))
        np.matmul(lhs._data.T, rhs._data, out=store_to._data, casting="same_kind")

    @staticmethod
    def mult_matrix_to_transposed_and_store_to(lhs: "Matrix", rhs: "Matrix",
                                               store_to: "Matrix"):
        """
        Compute store_to = lhs·rhsᵀ without materializing the transpose.

        Args:
            lhs: Shape (n, k)
            rhs: Shape (m, k)
            store_to: Pre-sized destination of shape (n, m)
        """
        if lhs.cols != rhs.cols:
            raise DimensionMismatchError(
                "The number of columns of the left matrix must be equal to "
                "the number of columns of the right matrix for multiplication",
                expected=lhs.cols, actual=rhs.cols)
        Matrix._check_destination(store_to, (lhs.rows, rhs.rows))
        np.matmul(lhs._data, rhs._data.T, out=store_to._data, casting="same_kind")

    # ------------------------------------------------------------------
    # Transposition and structural updates
    # ------------------------------------------------------------------

    def transpose(self) -> "Matrix":
        return Matrix._wrap(self._data.T.copy())

    @property
    def T(self) -> "Matrix":
        return self.transpose()

    def transpose_this(self) -> "Matrix":
        """Transpose a square matrix in place."""
        if self.rows != self.cols:
            raise DimensionMismatchError("Matrix is not square", expected="rows == cols",
                                         actual=self.shape)
        self._data[...] = self._data.T.copy()
        return self

    def add_row(self, other: "Matrix", row_index: int) -> "Matrix":
        """
        Add other's row ``row_index`` onto this matrix's row ``row_index``.

        Raises:
            DimensionMismatchError: If the column counts differ
        """
        if self.cols != other.cols:
            raise DimensionMismatchError("Columns count not match", expected=self.cols,
                                         actual=other.cols)
        self._data[row_index, :] += other._data[row_index, :]
        return self

    def add_col(self, other: "Matrix", col_index: int) -> "Matrix":
        """
        Add other's column ``col_index`` onto this matrix's column ``col_index``.

        Raises:
            DimensionMismatchError: If the row counts differ
        """
        if self.rows != other.rows:
            raise DimensionMismatchError("Rows count not match", expected=self.rows,
                                         actual=other.rows)
        self._data[:, col_index] += other._data[:, col_index]
        return self

    def apply_function(self, func: Callable, vectorized: bool = False) -> "Matrix":
        """
        Replace every element x with func(x).

        Args:
            func: Unary scalar function
            vectorized: func accepts a whole ndarray (numpy ufuncs and the
                functions in neuralnet.math.functions do); skips the
                per-element Python call

        Returns:
            Matrix: self
        """
        if vectorized or isinstance(func, np.ufunc):
            result = func(self._data)
        else:
            result = np.vectorize(func, otypes=[self._data.dtype])(self._data)
        self._data[...] = result
        return self

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------

    def __getitem__(self, key: Tuple[int, int]):
        row, col = key
        return self._data[row, col]

    def __setitem__(self, key: Tuple[int, int], value: float):
        row, col = key
        self._data[row, col] = value

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self._data.shape == other._data.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None

    def allclose(self, other: "Matrix", rtol: float = 1e-5, atol: float = 1e-8) -> bool:
        """Shape equality plus np.allclose on the values."""
        return self._data.shape == other._data.shape and bool(
            np.allclose(self._data, other._data, rtol=rtol, atol=atol))

    # ------------------------------------------------------------------
    # Text I/O
    # ------------------------------------------------------------------

    def to_text(self) -> str:
        """
        Serialize to text: scientific notation, space-separated columns,
        newline-terminated rows. Dimensions are not written.
        """
        return "".join(
            " ".join(TEXT_FORMAT % value for value in row) + "\n"
            for row in self._data
        )

    def write(self, stream: TextIO):
        stream.write(self.to_text())

    def read(self, stream: TextIO) -> "Matrix":
        """
        Read rows*cols values into this matrix from a text stream.

        The matrix must already have the dimensions of the stored data.
        Reading stops at the end of the line holding the last value, so
        several matrices can be read from one stream in sequence.

        Raises:
            ValueError: If the stream ends early or a line holds extra values
        """
        needed = self._data.size
        tokens = []
        while len(tokens) < needed:
            line = stream.readline()
            if not line:
                raise ValueError(
                    f"Unexpected end of data: expected {needed} values, got {len(tokens)}")
            tokens.extend(line.split())
        if len(tokens) > needed:
            raise ValueError(f"Expected {needed} values, got {len(tokens)}")
        self._data[...] = np.array(tokens, dtype=self._data.dtype).reshape(self._data.shape)
        return self

    def read_text(self, text: str) -> "Matrix":
        return self.read(io.StringIO(text))

    def __str__(self) -> str:
        return self.to_text()

    def __repr__(self) -> str:
        return f"Matrix(rows={self.rows}, cols={self.cols}, dtype={self._data.dtype})"
