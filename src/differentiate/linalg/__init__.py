"""
##################################################
Linear algebra (:mod:`differentiate.linalg`)
##################################################

.. currentmodule:: differentiate.linalg

This module provides matrices of variables and expressions, built on top of
:mod:`differentiate.autodiff`.

Matrices
========

.. autosummary::
    :toctree: generated/

    Matrix

Miscellaneous
=============

.. autosummary::
    :toctree: generated/

    LinAlgError

"""

from .matrix import LinAlgError, Matrix

__all__ = ["LinAlgError", "Matrix"]
