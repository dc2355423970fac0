import functools
from collections.abc import Callable
from typing import Any

from differentiate.autodiff.expression import Expression, Node, Variable, ensure


def deriv(fun: Callable[..., Any]) -> Callable[..., Any]:
    """Return a function that evaluates the derivative of the univariate scalar-valued
    function.

    Parameters
    ----------
    fun : Callable
        Differentiated function.

    Returns
    -------
    Callable
        Derivative of `fun`.

    Examples
    --------
    >>> from differentiate import function as dfn
    >>> f = lambda x: x**2 + dfn.sqrt(x + 3)
    >>> df = deriv(f)
    >>> print(format(df(1.2), ".6g"))
    2.64398
    """

    def result(*args, **kwargs):
        variables = tuple(Variable(x) for x in args)
        return ensure(fun(*variables, **kwargs)).derivative(variables[0])

    return result


def grad(fun: Callable[..., Any]) -> Callable[..., tuple[Any, ...]]:
    """Return a function that evaluates the gradient of the multivariate scalar-valued
    function.

    Parameters
    ----------
    fun : Callable
        Differentiated function.

    Returns
    -------
    Callable
        Gradient of `fun`.

    Examples
    --------
    >>> from differentiate import function as dfn
    >>> f = lambda x, y: dfn.sqrt(x * y + 3)
    >>> df = grad(f)
    >>> c = df(0.5, 1.0)
    >>> print(format(c[0], ".6g"), format(c[1], ".6g"))
    0.267261 0.133631
    """

    def result(*args, **kwargs):
        variables = tuple(Variable(x) for x in args)
        return ensure(fun(*variables, **kwargs)).derivative(variables)

    return result


def jacobian(fun: Callable[..., tuple]) -> Callable[..., tuple[tuple[Any, ...], ...]]:
    """Return a function that evaluates the Jacobian matrix of the multivariate
    vector-valued function.

    Parameters
    ----------
    fun : Callable
        Differentiated function.

    Returns
    -------
    Callable
        Fréchet derivative of `fun`.
    """

    def result(*args, **kwargs):
        variables = tuple(Variable(x) for x in args)
        return tuple(ensure(y).derivative(variables) for y in fun(*variables, **kwargs))

    return result


def _defderiv(fun: Callable[[Any], Any], deriv: Callable[[Any], Any]) -> None:
    if "_differentiate_is_primitive" not in fun.__dict__:
        raise ValueError

    fun.__dict__["_differentiate_derivs"][0] = deriv


def _primitive(operation: str) -> Callable[[Callable[[Any], Any]], Callable[[Any], Any]]:
    def decorator(fun):
        derivs: dict[int, Callable] = {}

        @functools.wraps(fun)
        def wrapper(x, /):
            if not isinstance(x, Node):
                return fun(x)

            return Expression(
                operation,
                (x,),
                value=lambda: fun(x.value),
                derivative=lambda value, _: derivs[0](value),
            )

        wrapper.__dict__["_differentiate_is_primitive"] = True
        wrapper.__dict__["_differentiate_derivs"] = derivs
        return wrapper

    return decorator
