"""
#########################################################
Automatic differentiation (:mod:`differentiate.autodiff`)
#########################################################

.. currentmodule:: differentiate.autodiff

This module provides automatic differentiation over expression graphs. Every
operation on a :class:`Variable` records a new :class:`Expression`, whose value and
partial derivatives are recomputed from the variables' current values on each access.

Expression graphs
-----------------

.. autosummary::
    :toctree: generated/

    Node
    Constant
    Variable
    Expression
    ensure

Differential operators
----------------------

.. autosummary::
    :toctree: generated/

    deriv
    grad
    jacobian

Context
-------

.. autosummary::
    :toctree: generated/

    Context
    getcontext
    localcontext
    setcontext

Miscellaneous
-------------

.. autosummary::
    :toctree: generated/

    DifferentiationError

"""

from .autodiff import deriv, grad, jacobian
from .context import Context, getcontext, localcontext, setcontext
from .expression import (
    Constant,
    DifferentiationError,
    Expression,
    Node,
    Variable,
    ensure,
)

__all__ = [
    "deriv",
    "grad",
    "jacobian",
    "Context",
    "getcontext",
    "localcontext",
    "setcontext",
    "Constant",
    "DifferentiationError",
    "Expression",
    "Node",
    "Variable",
    "ensure",
]
