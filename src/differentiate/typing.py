"""
####################################
Typing (:mod:`differentiate.typing`)
####################################

This module provides type definitions commonly used between modules.

.. autoclass:: Differentiable
    :show-inheritance:
    :no-members:

"""

from abc import abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Protocol, overload, runtime_checkable

if TYPE_CHECKING:
    from differentiate.autodiff.expression import Variable


@runtime_checkable
class Differentiable(Protocol):
    """Protocol that ensures differentiable-value behavior.

    Objects implementing this protocol report their current value, whether they
    depend on the variable targeted by the running derivative query, and their
    partial derivative with respect to a variable.
    """

    __slots__ = ()

    @property
    @abstractmethod
    def value(self) -> Any: ...

    @abstractmethod
    def isdifferentiated(self) -> bool: ...

    @overload
    def derivative(self, x: "Variable", /) -> Any: ...

    @overload
    def derivative(self, x: Iterable["Variable"], /) -> tuple[Any, ...]: ...

    @abstractmethod
    def derivative(self, x, /): ...
