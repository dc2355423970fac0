# function must be imported before autodiff
from .function import (
    acos,
    asin,
    atan,
    cos,
    cot,
    csc,
    exp,
    ln,
    log,
    log10,
    pow,
    sec,
    sin,
    sqrt,
    tan,
)
from .autodiff import Expression, Variable
from .linalg import Matrix

__all__ = [
    "acos",
    "asin",
    "atan",
    "cos",
    "cot",
    "csc",
    "exp",
    "ln",
    "log",
    "log10",
    "pow",
    "sec",
    "sin",
    "sqrt",
    "tan",
    "Expression",
    "Variable",
    "Matrix",
]
