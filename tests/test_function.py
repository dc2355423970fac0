import math

import mpmath
import pytest

from differentiate import function as dfn
from differentiate.autodiff import Expression, Variable


def test_numeric():
    assert dfn.exp(0) == 1.0
    assert dfn.sqrt(9) == 3.0
    assert dfn.pow(2, 10) == 1024.0
    assert dfn.log10(100.0) == pytest.approx(2.0)
    assert math.isnan(dfn.asin(2.0))
    assert math.isnan(dfn.acos(-1.5))
    assert math.isnan(dfn.sqrt(-1.0))

    with pytest.raises(TypeError):
        dfn.sin("0")


def test_mpmath():
    x = Variable(mpmath.mpf("0.5"))
    y = dfn.exp(x) * dfn.sin(x)
    assert isinstance(y.value, mpmath.mpf)
    expected = math.exp(0.5) * (math.sin(0.5) + math.cos(0.5))
    assert float(y.derivative(x)) == pytest.approx(expected)


def test_sin_cos():
    x = Variable(0.0)
    assert dfn.sin(x).derivative(x) == 1.0
    assert dfn.cos(x).derivative(x) == 0.0

    x.value = 1.1
    assert dfn.sin(x).derivative(x) == pytest.approx(math.cos(1.1))
    assert dfn.cos(x).derivative(x) == pytest.approx(-math.sin(1.1))


@pytest.mark.parametrize("value", [-2.3, 0.4, 1.2])
def test_derived_trig(value):
    x = Variable(value, name="x")
    sin, cos = dfn.sin(x), dfn.cos(x)
    cases = [
        (dfn.tan(x), sin / cos, "tan"),
        (dfn.csc(x), 1 / sin, "csc"),
        (dfn.sec(x), 1 / cos, "sec"),
        (dfn.cot(x), cos / sin, "cot"),
    ]

    for y, ratio, name in cases:
        assert isinstance(y, Expression)
        assert str(y) == f"{name}(x)"
        assert y.value == pytest.approx(ratio.value)
        assert y.derivative(x) == pytest.approx(ratio.derivative(x))


def test_derived_trig_closed_form():
    x = Variable(0.7)
    s, c = math.sin(0.7), math.cos(0.7)
    assert dfn.tan(x).derivative(x) == pytest.approx(1 / c**2)
    assert dfn.csc(x).derivative(x) == pytest.approx(-c / s**2)
    assert dfn.sec(x).derivative(x) == pytest.approx(s / c**2)
    assert dfn.cot(x).derivative(x) == pytest.approx(-1 / s**2)


def test_inverse_trig():
    x = Variable(0.3)
    assert dfn.asin(x).value == pytest.approx(math.asin(0.3))
    assert dfn.asin(x).derivative(x) == pytest.approx(1 / math.sqrt(1 - 0.09))
    assert dfn.acos(x).derivative(x) == pytest.approx(-1 / math.sqrt(1 - 0.09))
    assert dfn.atan(x).derivative(x) == pytest.approx(1 / 1.09)

    x.value = 3.0
    assert math.isnan(dfn.asin(x).value)
    assert math.isnan(dfn.acos(x).derivative(x))


def test_exp_log():
    x = Variable(2.0, name="x")
    assert dfn.exp(x).derivative(x) == pytest.approx(math.exp(2.0))
    assert dfn.log(x).derivative(x) == pytest.approx(0.5)
    assert dfn.ln is dfn.log
    assert dfn.sqrt(x).derivative(x) == pytest.approx(1 / (2 * math.sqrt(2.0)))

    y = dfn.log10(x)
    assert str(y) == "log10(x)"
    assert y.value == pytest.approx(math.log10(2.0))
    assert y.derivative(x) == pytest.approx(1 / (2.0 * math.log(10)))


def test_chain():
    x = Variable(0.5)
    y = dfn.exp(dfn.sin(x**2))
    expected = math.exp(math.sin(0.25)) * math.cos(0.25) * 2 * 0.5
    assert y.derivative(x) == pytest.approx(expected)


def test_pow():
    x = Variable(2.0)
    assert dfn.pow(x, 3).derivative(x) == pytest.approx(12.0)
    assert dfn.pow(3, x).derivative(x) == pytest.approx(9.0 * math.log(3.0))
    assert math.isnan(dfn.pow(-8.0, 1 / 3))


def test_domain_edges():
    x = Variable(1.0)
    assert dfn.asin(x).derivative(x) == math.inf

    x.value = -1.0
    assert dfn.acos(x).derivative(x) == -math.inf

    x.value = 0.0
    assert dfn.log(x).value == -math.inf
    assert dfn.log(x).derivative(x) == math.inf
    assert dfn.sqrt(x).value == 0.0
    assert dfn.sqrt(x).derivative(x) == math.inf
    assert dfn.csc(x).value == math.inf
    assert dfn.csc(x).derivative(x) == -math.inf
    assert dfn.cot(x).value == math.inf

    x.value = 1e200
    assert math.isnan(dfn.asin(x).derivative(x))
    assert dfn.atan(x).derivative(x) == 0.0
