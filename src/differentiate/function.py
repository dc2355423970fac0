"""
######################################################
Mathematical functions (:mod:`differentiate.function`)
######################################################

.. currentmodule:: differentiate.function

This module provides mathematical functions. Each function accepts either a plain
number, in which case a number is returned, or a node of an expression graph, in which
case a new :class:`~differentiate.autodiff.Expression` is returned.

Power, exponents, and logarithmic functions
===========================================

.. autosummary::
    :toctree: generated/

    exp
    ln
    log
    log10
    pow
    sqrt

Trigonometric functions
=======================

.. autosummary::
    :toctree: generated/

    sin
    cos
    tan
    csc
    sec
    cot
    asin
    acos
    atan

"""

from collections.abc import Callable
from typing import Any, overload

import mpmath
import mpmath.ctx_mp_python
import numpy as np

from differentiate.autodiff.autodiff import _defderiv, _primitive
from differentiate.autodiff.expression import Expression, Node, power


def _evaluate(x: Any, npfun: Callable, mpfun: Callable) -> Any:
    match x:
        case mpmath.ctx_mp_python.mpnumeric():
            return mpfun(x)

        case float() | int() | np.floating() | np.integer():
            with np.errstate(all="ignore"):
                return float(npfun(np.float64(x)))

        case _:
            raise TypeError


def _reciprocal(x: np.float64) -> np.float64:
    return np.divide(1.0, x)


def _dsqrt(x: np.float64) -> np.float64:
    return np.divide(0.5, np.sqrt(x))


def _dasin(x: np.float64) -> np.float64:
    return np.divide(1.0, np.sqrt(1.0 - np.square(x)))


def _dacos(x: np.float64) -> np.float64:
    return np.divide(-1.0, np.sqrt(1.0 - np.square(x)))


def _datan(x: np.float64) -> np.float64:
    return np.divide(1.0, 1.0 + np.square(x))


def _compound(result: Any, operation: str, x: Any) -> Any:
    if isinstance(result, Expression):
        return result.compound(operation, (x,))

    return result


@overload
def exp(x: Node, /) -> Expression: ...


@overload
def exp(x: float | int, /) -> float: ...


@overload
def exp(x: Any, /) -> Any: ...


@_primitive("exp")
def exp(x, /):
    """Exponential.

    Examples
    --------
    >>> print(format(exp(2), ".6f"))
    7.389056
    """
    return _evaluate(x, np.exp, mpmath.exp)


@overload
def log(x: Node, /) -> Expression: ...


@overload
def log(x: float | int, /) -> float: ...


@overload
def log(x: Any, /) -> Any: ...


@_primitive("log")
def log(x, /):
    """Natural logarithm.

    Examples
    --------
    >>> print(format(log(5), ".6f"))
    1.609438
    >>> print(log(-1.0))
    nan
    """
    return _evaluate(x, np.log, mpmath.log)


ln = log


def log10(x, /):
    """Common logarithm.

    Examples
    --------
    >>> print(format(log10(1000), ".6f"))
    3.000000
    >>> from differentiate.autodiff import Variable
    >>> x = Variable(10.0, name="x")
    >>> print(log10(x))
    log10(x)
    """
    return _compound(log(x) / log(10), "log10", x)


@overload
def pow(x: Node | float | int, y: Node, /) -> Expression: ...


@overload
def pow(x: Node, y: Node | float | int, /) -> Expression: ...


@overload
def pow(x: float | int, y: float | int, /) -> float: ...


@overload
def pow(x: Any, y: Any, /) -> Any: ...


def pow(x, y, /):
    """`x` raised to the power `y`.

    Examples
    --------
    >>> print(format(pow(3.25, 1.25), ".6f"))
    4.363693
    >>> print(pow(-8.0, 1 / 3))
    nan
    """
    if isinstance(x, Node) or isinstance(y, Node):
        return power(x, y)

    mpnumeric = mpmath.ctx_mp_python.mpnumeric
    real = float | int | np.floating | np.integer

    match x, y:
        case (mpnumeric(), _) | (_, mpnumeric()):
            return mpmath.power(x, y)

        case _ if isinstance(x, real) and isinstance(y, real):
            with np.errstate(all="ignore"):
                return float(np.power(float(x), float(y)))

        case _:
            raise TypeError


@overload
def sqrt(x: Node, /) -> Expression: ...


@overload
def sqrt(x: float | int, /) -> float: ...


@overload
def sqrt(x: Any, /) -> Any: ...


@_primitive("sqrt")
def sqrt(x, /):
    """Square root.

    Examples
    --------
    >>> print(format(sqrt(2.0), ".6f"))
    1.414214
    >>> from differentiate.autodiff import Variable
    >>> x = Variable(4.0)
    >>> y = sqrt(x)
    >>> print(y.value, y.derivative(x))
    2.0 0.25
    """
    return _evaluate(x, np.sqrt, mpmath.sqrt)


@_primitive("sin")
def sin(x, /):
    """Sine.

    Examples
    --------
    >>> from differentiate.autodiff import Variable
    >>> x = Variable(0.0)
    >>> print(sin(x).value, sin(x).derivative(x))
    0.0 1.0
    """
    return _evaluate(x, np.sin, mpmath.sin)


@_primitive("cos")
def cos(x, /):
    """Cosine."""
    return _evaluate(x, np.cos, mpmath.cos)


def tan(x, /):
    """Tangent, expressed as ``sin(x) / cos(x)``."""
    return _compound(sin(x) / cos(x), "tan", x)


def csc(x, /):
    """Cosecant, expressed as ``1 / sin(x)``."""
    return _compound(1 / sin(x), "csc", x)


def sec(x, /):
    """Secant, expressed as ``1 / cos(x)``."""
    return _compound(1 / cos(x), "sec", x)


def cot(x, /):
    """Cotangent, expressed as ``1 / tan(x)``."""
    return _compound(1 / tan(x), "cot", x)


@_primitive("asin")
def asin(x, /):
    """Inverse sine.

    No domain check is performed: outside of [-1, 1] the result is ``nan``.

    Examples
    --------
    >>> print(format(asin(0.5), ".6f"))
    0.523599
    >>> print(asin(2.0))
    nan
    """
    return _evaluate(x, np.arcsin, mpmath.asin)


@_primitive("acos")
def acos(x, /):
    """Inverse cosine.

    No domain check is performed: outside of [-1, 1] the result is ``nan``.
    """
    return _evaluate(x, np.arccos, mpmath.acos)


@_primitive("atan")
def atan(x, /):
    """Inverse tangent."""
    return _evaluate(x, np.arctan, mpmath.atan)


_defderiv(exp, exp)
_defderiv(log, lambda x: _evaluate(x, _reciprocal, lambda t: 1 / t))
_defderiv(sqrt, lambda x: _evaluate(x, _dsqrt, lambda t: 0.5 / mpmath.sqrt(t)))
_defderiv(sin, cos)
_defderiv(cos, lambda x: -sin(x))
_defderiv(asin, lambda x: _evaluate(x, _dasin, lambda t: 1 / mpmath.sqrt(1 - t**2)))
_defderiv(acos, lambda x: _evaluate(x, _dacos, lambda t: -1 / mpmath.sqrt(1 - t**2)))
_defderiv(atan, lambda x: _evaluate(x, _datan, lambda t: 1 / (1 + t**2)))
