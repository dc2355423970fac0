from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any, Final, Self, overload

import mpmath.ctx_mp_python
import numpy as np

from differentiate import function as dfn
from differentiate.autodiff.context import getcontext, localcontext
from differentiate.typing import Differentiable

ZERO: Final = 0.0
ONE: Final = 1.0


class DifferentiationError(ValueError):
    """Error raised when a derivative query cannot be resolved."""


def _isnumber(value: object) -> bool:
    return isinstance(
        value,
        int | float | np.integer | np.floating | mpmath.ctx_mp_python.mpnumeric,
    )


def _isoperand(value: object) -> bool:
    return isinstance(value, Node) or _isnumber(value)


def _noinner() -> None:
    return None


def _quotient(x: Any, y: Any) -> Any:
    if isinstance(x, mpmath.ctx_mp_python.mpnumeric) or isinstance(
        y, mpmath.ctx_mp_python.mpnumeric
    ):
        return x / y

    with np.errstate(all="ignore"):
        return float(np.divide(x, y))


class Node(Differentiable, ABC):
    """Abstract base class for nodes of an expression graph.

    Nodes can be combined with ``+``, ``-``, ``*``, ``/`` and ``**`` (in either operand
    order, also with plain numbers) to build new :class:`Expression` instances.

    Warnings
    --------
    A node holds no cached state. Its value and every derivative are recomputed from
    the leaves on each access.
    """

    __slots__ = ()

    @property
    @abstractmethod
    def value(self) -> Any:
        raise NotImplementedError

    @abstractmethod
    def isdifferentiated(self) -> bool:
        """Return ``True`` if the node depends on the variable targeted by the running
        derivative query."""
        raise NotImplementedError

    @abstractmethod
    def _derivative(self, x: "Variable") -> Any:
        raise NotImplementedError

    @overload
    def derivative(self, x: "Variable", /) -> Any: ...

    @overload
    def derivative(self, x: Iterable["Variable"], /) -> tuple[Any, ...]: ...

    def derivative(self, x, /):
        """Return the partial derivative with respect to `x`.

        Parameters
        ----------
        x : Variable | Iterable[Variable]
            Variable, or variables, the node is differentiated against.

        Returns
        -------
        Any | tuple
            Partial derivative evaluated at the current values of the variables. If
            `x` is an iterable, a tuple with one partial derivative per variable.

        Raises
        ------
        TypeError
            If `x` is an iterable holding something other than variables.
        """
        if isinstance(x, Variable):
            return self._derivative(x)

        variables = tuple(x)

        if not all(isinstance(y, Variable) for y in variables):
            raise TypeError("derivatives can only be taken against variables")

        return tuple(self._derivative(y) for y in variables)

    def gradient(self, x, /):
        """Return the matrix of partial derivatives with respect to each entry of `x`.

        Parameters
        ----------
        x : Matrix[Variable]

        Returns
        -------
        Matrix
            Matrix of the same shape as `x`.
        """
        return type(x)(self.derivative(x.flatten()), shape=x.shape)

    def __add__(self, rhs: "Node | float | int") -> "Expression":
        if not _isoperand(rhs):
            return NotImplemented

        return add(self, rhs)

    def __sub__(self, rhs: "Node | float | int") -> "Expression":
        if not _isoperand(rhs):
            return NotImplemented

        return subtract(self, rhs)

    def __mul__(self, rhs: "Node | float | int") -> "Expression":
        if not _isoperand(rhs):
            return NotImplemented

        return multiply(self, rhs)

    def __truediv__(self, rhs: "Node | float | int") -> "Expression":
        if not _isoperand(rhs):
            return NotImplemented

        return divide(self, rhs)

    def __pow__(self, rhs: "Node | float | int") -> "Expression":
        if not _isoperand(rhs):
            return NotImplemented

        return power(self, rhs)

    def __neg__(self) -> "Expression":
        return negative(self)

    def __pos__(self) -> Self:
        return self

    def __radd__(self, lhs: "Node | float | int") -> "Expression":
        if not _isoperand(lhs):
            return NotImplemented

        return add(lhs, self)

    def __rsub__(self, lhs: "Node | float | int") -> "Expression":
        if not _isoperand(lhs):
            return NotImplemented

        return subtract(lhs, self)

    def __rmul__(self, lhs: "Node | float | int") -> "Expression":
        if not _isoperand(lhs):
            return NotImplemented

        return multiply(lhs, self)

    def __rtruediv__(self, lhs: "Node | float | int") -> "Expression":
        if not _isoperand(lhs):
            return NotImplemented

        return divide(lhs, self)

    def __rpow__(self, lhs: "Node | float | int") -> "Expression":
        if not _isoperand(lhs):
            return NotImplemented

        return power(lhs, self)


class Constant(Node):
    """Numeric leaf of an expression graph.

    Parameters
    ----------
    value : float | int | mpmath.mpf
    """

    __slots__ = ("_value",)
    _value: Any

    def __init__(self, value: Any):
        self._value = value

    @property
    def value(self) -> Any:
        return self._value

    def isdifferentiated(self) -> bool:
        return False

    def _derivative(self, x: "Variable") -> Any:
        return ZERO

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    def __str__(self) -> str:
        return str(self._value)


class Variable(Node):
    """Named, mutable leaf of an expression graph.

    Variables are compared by identity: two distinct instances are never equal, even
    if their values coincide.

    Parameters
    ----------
    value : float | int | mpmath.mpf, default=0.0
    name : str, optional
        Name used when the variable is printed.

    Attributes
    ----------
    value : float | int | mpmath.mpf
    name : str | None

    Examples
    --------
    >>> x = Variable(3.0, name="x")
    >>> y = x * x + 1
    >>> print(y, y.value, y.derivative(x))
    ((x * x) + 1) 10.0 6.0
    >>> x.value = 4.0
    >>> print(y.value)
    17.0
    >>> x &= y
    >>> print(x.value)
    17.0
    """

    __slots__ = ("value", "name")
    value: Any
    name: str | None

    def __init__(self, value: Any = ZERO, name: str | None = None):
        self.value = value
        self.name = name

    def isdifferentiated(self) -> bool:
        return getcontext().target is self

    def _derivative(self, x: "Variable") -> Any:
        return ONE if x is self else ZERO

    def __repr__(self) -> str:
        if self.name is None:
            return f"{type(self).__name__}({self.value!r})"

        return f"{type(self).__name__}({self.value!r}, name={self.name!r})"

    def __str__(self) -> str:
        if self.name is not None:
            return self.name

        return f"({self.value})"

    def __iand__(self, rhs: Node | float | int) -> Self:
        match rhs:
            case Node():
                self.value = rhs.value

            case _ if _isnumber(rhs):
                self.value = rhs

            case _:
                return NotImplemented

        return self


class Expression(Node):
    r"""Non-leaf node of an expression graph.

    Parameters
    ----------
    operation : str
        Label of the operation, used only for printing.
    operands : Iterable[Node | float | int]
        One or two operands. Numbers are wrapped into :class:`Constant`.
    value : Callable[[], Any]
        Rule computing the value of the node.
    derivative : Callable[[Any, Variable], Any]
        Rule computing the derivative. It receives the value of the inner node and
        the variable differentiated against. If there is no inner node, it receives
        the value of that variable instead and must recurse into the operands
        itself.
    inner : Node | Callable[[], Node | None], optional
        Inner node of the chain rule. A callable is resolved anew on every derivative
        query. If omitted, a single operand is its own inner node and two operands
        have none.

    Raises
    ------
    ValueError
        If `operands` is empty.

    Notes
    -----
    :meth:`derivative` evaluates

    .. math::

        \frac{\partial f}{\partial x} = f'(g)\frac{\partial g}{\partial x},

    where :math:`g` is the inner node and :math:`f'` the derivative rule, while the
    variable :math:`x` is the target of the current :class:`Context`.
    """

    __slots__ = ("_operation", "_operands", "_inner", "_valuefunc", "_derivfunc")
    _operation: str
    _operands: tuple[Node, ...]
    _inner: Callable[[], Node | None]
    _valuefunc: Callable[[], Any]
    _derivfunc: Callable[[Any, Variable], Any]

    def __init__(
        self,
        operation: str,
        operands: Iterable[Node | float | int],
        *,
        value: Callable[[], Any],
        derivative: Callable[[Any, Variable], Any],
        inner: Node | Callable[[], Node | None] | None = None,
    ):
        self._operation = operation
        self._operands = tuple(ensure(x) for x in operands)

        if len(self._operands) == 0:
            raise ValueError("expression requires at least one operand")

        self._valuefunc = value
        self._derivfunc = derivative

        match inner:
            case None if len(self._operands) == 1:
                operand = self._operands[0]
                self._inner = lambda: operand

            case None:
                self._inner = _noinner

            case Node():
                self._inner = lambda: inner

            case _ if callable(inner):
                self._inner = inner

            case _:
                raise TypeError

    @property
    def operation(self) -> str:
        return self._operation

    @property
    def operands(self) -> tuple[Node, ...]:
        return self._operands

    @property
    def value(self) -> Any:
        return self._valuefunc()

    def compound(
        self,
        operation: str,
        operands: Iterable[Node | float | int],
        inner: Node | Callable[[], Node | None] | None = None,
    ) -> Self:
        """Return a new expression with the value and derivative rules of `self`.

        Useful for expressing a function through simpler ones while printing it under
        its own name.

        Parameters
        ----------
        operation : str
        operands : Iterable[Node | float | int]
        inner : Node | Callable[[], Node | None], optional
            Inner node of the new expression. Defaults to the inner node of `self`.

        Examples
        --------
        >>> x = Variable(2.0, name="x")
        >>> y = (x * x).compound("square", (x,))
        >>> print(y, y.value, y.derivative(x))
        square(x) 4.0 4.0
        """
        return self.__class__(
            operation,
            operands,
            value=self._valuefunc,
            derivative=self._derivfunc,
            inner=self._inner if inner is None else inner,
        )

    def isdifferentiated(self) -> bool:
        return any(x.isdifferentiated() for x in self._operands)

    def _derivative(self, x: Variable) -> Any:
        with localcontext(target=x):
            if (inner := self._inner()) is not None:
                return self._derivfunc(inner.value, x) * inner.derivative(x)

            return self._derivfunc(x.value, x)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(operation={self._operation!r}, "
            f"operands={self._operands!r})"
        )

    def __str__(self) -> str:
        if len(self._operands) == 1:
            return f"{self._operation}({self._operands[0]})"

        return "(" + f" {self._operation} ".join(str(x) for x in self._operands) + ")"


def ensure(value: Node | float | int) -> Node:
    """Return `value` if it is a node, or a :class:`Constant` wrapping it.

    Raises
    ------
    TypeError
        If `value` is neither a node nor a number.
    """
    if isinstance(value, Node):
        return value

    if _isnumber(value):
        return Constant(value)

    raise TypeError(f"unsupported operand type: {type(value).__name__!r}")


def add(x: Node | float | int, y: Node | float | int, /) -> Expression:
    x, y = ensure(x), ensure(y)
    return Expression(
        "+",
        (x, y),
        value=lambda: x.value + y.value,
        derivative=lambda _, t: x.derivative(t) + y.derivative(t),
    )


def subtract(x: Node | float | int, y: Node | float | int, /) -> Expression:
    x, y = ensure(x), ensure(y)
    return Expression(
        "-",
        (x, y),
        value=lambda: x.value - y.value,
        derivative=lambda _, t: x.derivative(t) - y.derivative(t),
    )


def multiply(x: Node | float | int, y: Node | float | int, /) -> Expression:
    x, y = ensure(x), ensure(y)
    return Expression(
        "*",
        (x, y),
        value=lambda: x.value * y.value,
        derivative=lambda _, t: y.value * x.derivative(t) + x.value * y.derivative(t),
    )


def divide(x: Node | float | int, y: Node | float | int, /) -> Expression:
    x, y = ensure(x), ensure(y)

    def derivative(_, t):
        s = dfn.pow(y.value, 2)
        return _quotient(y.value * x.derivative(t) - x.value * y.derivative(t), s)

    return Expression(
        "/", (x, y), value=lambda: _quotient(x.value, y.value), derivative=derivative
    )


def power(x: Node | float | int, y: Node | float | int, /) -> Expression:
    """Return the expression `x` raised to the power `y`.

    Either the base or the exponent may depend on the variable differentiated
    against, but not both.

    Raises
    ------
    DifferentiationError
        If, during a derivative query, both `x` and `y` depend on the target.

    Examples
    --------
    >>> x = Variable(3.0)
    >>> y = power(2, x)
    >>> print(y.value, format(y.derivative(x), ".6f"))
    8.0 5.545177
    """
    x, y = ensure(x), ensure(y)

    def inner() -> Node | None:
        lhs, rhs = x.isdifferentiated(), y.isdifferentiated()

        if lhs and rhs:
            raise DifferentiationError("base and exponent both depend on the target")

        if lhs:
            return x

        if rhs:
            return y

        return None

    def derivative(value, _):
        match inner():
            case None:
                return ZERO

            case z if z is x:
                return y.value * dfn.pow(value, y.value - 1)

            case _:
                return dfn.pow(x.value, value) * dfn.log(x.value)

    return Expression(
        "**",
        (x, y),
        value=lambda: dfn.pow(x.value, y.value),
        derivative=derivative,
        inner=inner,
    )


def negative(x: Node | float | int, /) -> Expression:
    x = ensure(x)
    return subtract(0, x).compound("-", (x,))
