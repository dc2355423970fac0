import functools
import itertools
import logging
import operator
from collections.abc import Callable, Iterable, Iterator
from typing import Any, Self

import mpmath.ctx_mp_python
import numpy as np
import numpy.typing as npt

from differentiate.autodiff.expression import (
    Expression,
    Node,
    Variable,
    add,
    divide,
    ensure,
    multiply,
    negative,
    subtract,
)

_logger = logging.getLogger(__name__)


def _isscalar(value: object) -> bool:
    return isinstance(
        value,
        Node | int | float | np.integer | np.floating | mpmath.ctx_mp_python.mpnumeric,
    )


class LinAlgError(ValueError):
    """Error raised by :mod:`differentiate.linalg` functions."""


class Matrix[T]:
    """Two-dimensional matrix of variables, expressions, or numbers.

    Parameters
    ----------
    a : Matrix | Iterable[Iterable] | Iterable
        Rows of the matrix, or its entries in row-major order if `shape` is given.
    shape : tuple[int, int], optional
        Number of rows and columns.

    Raises
    ------
    ValueError
        If the matrix would be empty, if the rows differ in length, or if the number
        of entries does not match `shape`.

    Examples
    --------
    >>> x = Matrix([1.0, 2.0, 3.0, 4.0, 5.0, 6.0], shape=(2, 3))
    >>> x.shape
    (2, 3)
    >>> x.row(1)
    [4.0, 5.0, 6.0]

    Arithmetic on matrices records expression graphs, so a gradient can be extracted
    from any entry of the result.

    >>> w = Matrix([[Variable(2.0), Variable(3.0)]])
    >>> y = Matrix([[1.0], [4.0]])
    >>> z = (w * y)[0, 0]
    >>> print(z.value)
    14.0
    >>> print(z.gradient(w))
    [[1.0, 4.0]]
    """

    __slots__ = ("_cells",)
    __array_ufunc__ = None
    _cells: npt.NDArray

    def __init__(
        self,
        a: "Matrix[T] | Iterable[Iterable[T]] | Iterable[T]",
        /,
        shape: tuple[int, int] | None = None,
        **kwargs,
    ):
        if kwargs.get("_skipcheck"):
            self._cells = a  # type: ignore
            return

        if shape is not None:
            entries = list(a)  # type: ignore
            n, m = shape

            if n < 1 or m < 1:
                raise ValueError("cannot create an empty matrix")

            if len(entries) != n * m:
                raise ValueError("number of entries does not match the shape")

            rows = [entries[i * m : (i + 1) * m] for i in range(n)]
        else:
            rows = [list(row) for row in a]  # type: ignore

        if len(rows) == 0 or len(rows[0]) == 0:
            raise ValueError("cannot create an empty matrix")

        if any(len(row) != len(rows[0]) for row in rows):
            raise ValueError("irregular shape")

        self._cells = self._emptyarray((len(rows), len(rows[0])))

        for i, j in itertools.product(*(range(n) for n in self._cells.shape)):
            self._cells[i, j] = rows[i][j]

    @property
    def shape(self) -> tuple[int, int]:
        """Tuple of matrix dimensions, i.e., the number of rows and columns."""
        return self._cells.shape  # type: ignore

    @property
    def size(self) -> int:
        return self._cells.size

    @classmethod
    def random(
        cls,
        shape: tuple[int, int],
        distribution: Callable[[float], Any] | None = None,
        *,
        dtype: Callable[[Any], T] = Variable,
        rng: np.random.Generator | None = None,
    ) -> "Matrix[T]":
        """Return a new matrix of given shape, filled with random entries.

        Parameters
        ----------
        shape : tuple[int, int]
        distribution : Callable[[float], Any], optional
            Transformation applied to samples drawn uniformly from [0, 1). Defaults to
            the identity.
        dtype : Callable, default=Variable
            Type of the entries, constructed from the transformed samples.
        rng : numpy.random.Generator, optional
            Source of the samples. Defaults to a freshly seeded generator.
        """
        if shape[0] < 1 or shape[1] < 1:
            raise ValueError("cannot create an empty matrix")

        if rng is None:
            rng = np.random.default_rng()

        samples = rng.random(shape)
        cells = cls._emptyarray(shape)

        for key in itertools.product(*(range(n) for n in shape)):
            u = float(samples[key])
            cells[key] = dtype(u if distribution is None else distribution(u))

        _logger.debug("initialized random %dx%d matrix", *shape)
        return cls(cells, _skipcheck=True)

    @classmethod
    def zeros(
        cls, shape: tuple[int, int], *, dtype: Callable[[Any], T] = Variable
    ) -> "Matrix[T]":
        """Return a new matrix of given shape, filled with zeros of type `dtype`.

        Each entry is constructed separately, so a matrix of variables holds distinct
        variables.
        """
        if shape[0] < 1 or shape[1] < 1:
            raise ValueError("cannot create an empty matrix")

        cells = cls._emptyarray(shape)

        for key in itertools.product(*(range(n) for n in shape)):
            cells[key] = dtype(0.0)

        return cls(cells, _skipcheck=True)

    @classmethod
    def _emptyarray(cls, shape: tuple[int, int]) -> npt.NDArray:
        return np.empty(shape, np.object_)

    def col(self, j: int) -> list[T]:
        """Return the `j`-th column as a list."""
        self._index(0, j)
        return list(self._cells[:, j])

    def row(self, i: int) -> list[T]:
        """Return the `i`-th row as a list."""
        self._index(i, 0)
        return list(self._cells[i, :])

    def copy(self) -> Self:
        """Return a shallow copy of the matrix."""
        return self.__class__(self._cells.copy(), _skipcheck=True)

    def flatten(self) -> list[T]:
        """Return the entries in row-major order."""
        return list(self._cells.flat)

    def map[U](self, fun: Callable[[T], U]) -> "Matrix[U]":
        """Return a new matrix obtained by applying `fun` to each entry."""
        cells = self._emptyarray(self.shape)

        for key in itertools.product(*(range(n) for n in self.shape)):
            cells[key] = fun(self._cells[key])

        return Matrix(cells, _skipcheck=True)

    def sum(self) -> Expression:
        """Return the expression adding up all the entries."""
        return functools.reduce(add, self._cells.flat, 0)  # type: ignore

    def tolist(self) -> list[list[T]]:
        return self._cells.tolist()

    def values(self) -> npt.NDArray[np.float64]:
        """Return the current values of the entries as a float array."""
        result = np.empty(self.shape, np.float64)

        for key in itertools.product(*(range(n) for n in self.shape)):
            result[key] = ensure(self._cells[key]).value

        return result

    def isvariable(self) -> bool:
        """Return ``True`` if every entry is a :class:`Variable`."""
        return all(isinstance(x, Variable) for x in self._cells.flat)

    def descend(self, gradient: "Matrix", /) -> None:
        """Subtract the values of `gradient` from the variables in place.

        Raises
        ------
        LinAlgError
            If the shapes differ.
        TypeError
            If some entry is not a variable.

        Examples
        --------
        >>> w = Matrix([[Variable(1.0), Variable(2.0)]])
        >>> w.descend(Matrix([[0.5, -0.5]]))
        >>> w.values()
        array([[0.5, 2.5]])
        """
        if self.shape != gradient.shape:
            raise LinAlgError("incompatible gradient")

        if not self.isvariable():
            raise TypeError("only a matrix of variables can be updated")

        steps = [ensure(x).value for x in gradient.flatten()]

        for x, step in zip(self._cells.flat, steps):
            x.value -= step

        _logger.debug("descended %d variables", len(steps))

    def ascend(self, gradient: "Matrix", /) -> None:
        """Add the values of `gradient` to the variables in place."""
        self.descend(-gradient)

    def _index(self, i: Any, j: Any) -> tuple[int, int]:
        i, j = operator.index(i), operator.index(j)
        n, m = self.shape

        if not (0 <= i < n and 0 <= j < m):
            raise IndexError("matrix index out of range")

        return i, j

    def _zip(self, other: "Matrix", fun: Callable[[Any, Any], Expression]) -> "Matrix":
        if self.shape != other.shape:
            raise LinAlgError("incompatible shapes")

        cells = self._emptyarray(self.shape)

        for key in itertools.product(*(range(n) for n in self.shape)):
            cells[key] = fun(self._cells[key], other._cells[key])

        return Matrix(cells, _skipcheck=True)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.tolist()!r})"

    def __str__(self) -> str:
        rows = (", ".join(str(x) for x in row) for row in self._cells)
        return "[" + ",\n ".join(f"[{row}]" for row in rows) + "]"

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[list[T]]:
        return (list(row) for row in self._cells)

    def __getitem__(self, key: tuple[int, int]) -> T:
        if not (isinstance(key, tuple) and len(key) == 2):
            raise TypeError("matrix indices must be pairs of integers")

        return self._cells[self._index(*key)]

    def __setitem__(self, key: tuple[int, int], value: Node | float | int) -> None:
        if not (isinstance(key, tuple) and len(key) == 2):
            raise TypeError("matrix indices must be pairs of integers")

        x = self._cells[self._index(*key)]

        if not isinstance(x, Variable):
            raise TypeError("only variable entries can be assigned")

        if value is not x:
            x &= value

    def __add__(self, rhs: "Matrix") -> "Matrix[Expression]":
        if not isinstance(rhs, Matrix):
            return NotImplemented

        return self._zip(rhs, add)

    def __sub__(self, rhs: "Matrix") -> "Matrix[Expression]":
        if not isinstance(rhs, Matrix):
            return NotImplemented

        return self._zip(rhs, subtract)

    def __mul__(self, rhs: "Matrix | Node | float | int") -> "Matrix[Expression]":
        if isinstance(rhs, Matrix):
            return self.__matmul__(rhs)

        if not _isscalar(rhs):
            return NotImplemented

        return self.map(lambda x: multiply(x, rhs))

    def __truediv__(self, rhs: Node | float | int) -> "Matrix[Expression]":
        if not _isscalar(rhs):
            return NotImplemented

        return self.map(lambda x: divide(x, rhs))

    def __matmul__(self, rhs: "Matrix") -> "Matrix[Expression]":
        if not isinstance(rhs, Matrix):
            return NotImplemented

        (n, k), (s, m) = self.shape, rhs.shape

        if k != s:
            raise LinAlgError("incompatible shapes")

        cells = self._emptyarray((n, m))

        for i, j in itertools.product(range(n), range(m)):
            tmp = multiply(self._cells[i, 0], rhs._cells[0, j])

            for p in range(1, k):
                tmp = add(tmp, multiply(self._cells[i, p], rhs._cells[p, j]))

            cells[i, j] = tmp

        return Matrix(cells, _skipcheck=True)

    def __neg__(self) -> "Matrix[Expression]":
        return self.map(negative)

    def __pos__(self) -> Self:
        return self.copy()

    def __rmul__(self, lhs: Node | float | int) -> "Matrix[Expression]":
        if not _isscalar(lhs):
            return NotImplemented

        return self.map(lambda x: multiply(lhs, x))

    def __iand__(self, rhs: "Matrix") -> Self:
        if not isinstance(rhs, Matrix):
            return NotImplemented

        if self.shape != rhs.shape:
            raise LinAlgError("incompatible shapes")

        if not self.isvariable():
            raise TypeError("only a matrix of variables can be assigned")

        values = [ensure(x).value for x in rhs.flatten()]

        for x, value in zip(self._cells.flat, values):
            x.value = value

        _logger.debug("assigned %d variables", len(values))
        return self

    def __iadd__(self, rhs: "Matrix") -> Self:
        if not (isinstance(rhs, Matrix) and self.isvariable()):
            return NotImplemented

        return self.__iand__(self + rhs)

    def __isub__(self, rhs: "Matrix") -> Self:
        if not (isinstance(rhs, Matrix) and self.isvariable()):
            return NotImplemented

        return self.__iand__(self - rhs)

    def __copy__(self) -> Self:
        return self.copy()
