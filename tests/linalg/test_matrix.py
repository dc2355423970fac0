import mpmath
import numpy as np
import pytest

from differentiate.autodiff import Expression, Variable
from differentiate.linalg import LinAlgError, Matrix


def test_init():
    x = Matrix(range(6), shape=(2, 3))
    assert x.shape == (2, 3)
    assert x.size == 6
    assert len(x) == 2
    assert x.row(0) == [0, 1, 2]
    assert x.row(1) == [3, 4, 5]
    assert x.col(2) == [2, 5]
    assert x.flatten() == list(range(6))
    assert list(x) == [[0, 1, 2], [3, 4, 5]]

    y = Matrix([[1, 2, 3], [4, 5, 6]])
    assert y.tolist() == [[1, 2, 3], [4, 5, 6]]
    assert Matrix(y).tolist() == y.tolist()


@pytest.mark.parametrize(
    "args, kwargs",
    [
        (([],), {}),
        (([[]],), {}),
        (([[1, 2], [3]],), {}),
        (([1, 2, 3],), {"shape": (2, 2)}),
        (([],), {"shape": (0, 0)}),
    ],
)
def test_init_invalid(args, kwargs):
    with pytest.raises(ValueError):
        Matrix(*args, **kwargs)


def test_getitem():
    x = Matrix([[1, 2], [3, 4]])
    assert x[1, 0] == 3

    for key in [(2, 0), (0, 2), (-1, 0)]:
        with pytest.raises(IndexError):
            x[key]

    with pytest.raises(IndexError):
        x.row(2)

    with pytest.raises(IndexError):
        x.col(-1)

    with pytest.raises(TypeError):
        x[0]


def test_setitem():
    x = Matrix.zeros((1, 2))
    first = x[0, 0]
    x[0, 0] &= 1
    x[0, 1] = Variable(5.0)
    assert x[0, 0] is first
    assert x.values().tolist() == [[1.0, 5.0]]

    with pytest.raises(TypeError):
        Matrix([[1.0]])[0, 0] = 2.0


def test_zeros():
    x = Matrix.zeros((2, 2))
    assert x.isvariable()
    assert len(set(map(id, x.flatten()))) == 4
    assert x.values().tolist() == [[0.0, 0.0], [0.0, 0.0]]

    y = Matrix.zeros((1, 3), dtype=float)
    assert y.flatten() == [0.0, 0.0, 0.0]


def test_random():
    rng = np.random.default_rng(0)
    x = Matrix.random((3, 2), rng=rng)
    assert x.shape == (3, 2)
    assert x.isvariable()
    assert all(0 <= v < 1 for v in x.values().flat)

    y = Matrix.random((2, 2), lambda u: 2 * u - 1, dtype=float, rng=rng)
    assert all(isinstance(v, float) and -1 <= v < 1 for v in y.flatten())

    with pytest.raises(ValueError):
        Matrix.random((0, 2))


def test_map_sum():
    x = Matrix([[Variable(1.0), Variable(2.0)], [Variable(3.0), Variable(4.0)]])
    y = x.map(lambda v: v * v)
    assert y.values().tolist() == [[1.0, 4.0], [9.0, 16.0]]

    s = x.sum()
    assert isinstance(s, Expression)
    assert s.value == 10.0
    assert s.gradient(x).tolist() == [[1.0, 1.0], [1.0, 1.0]]


def test_elementwise():
    x = Matrix([[Variable(1.0), Variable(2.0)]])
    y = Matrix([[0.5, 3.0]])

    z = x + y
    assert all(isinstance(v, Expression) for v in z.flatten())
    assert z.values().tolist() == [[1.5, 5.0]]
    assert (x - y).values().tolist() == [[0.5, -1.0]]
    assert (-x).values().tolist() == [[-1.0, -2.0]]
    assert (2 * x).values().tolist() == [[2.0, 4.0]]
    assert (x * x[0, 1]).values().tolist() == [[2.0, 4.0]]
    assert (x / 2).values().tolist() == [[0.5, 1.0]]
    assert (x * mpmath.mpf(2)).values().tolist() == [[2.0, 4.0]]

    with pytest.raises(LinAlgError):
        x + Matrix([[1.0], [2.0]])

    with pytest.raises(LinAlgError):
        x - Matrix([[1.0, 2.0, 3.0]])


def test_matmul():
    x = Matrix([[1.0, 2.0], [3.0, 4.0]])
    y = Matrix([[5.0], [6.0]])
    assert (x * y).values().tolist() == [[17.0], [39.0]]
    assert (x @ y).values().tolist() == [[17.0], [39.0]]
    assert (x @ y).shape == (2, 1)

    with pytest.raises(LinAlgError):
        y * x


def test_matmul_expression():
    a = Variable(2.0, name="a")
    b = Variable(3.0, name="b")
    x = Matrix([[a, b]]) * Matrix([[1.0], [4.0]])
    assert str(x[0, 0]) == "((a * 1.0) + (b * 4.0))"


@pytest.mark.parametrize("column", [0, 1, 2])
def test_gradient(column):
    inputs = Matrix.zeros((1, 1))
    inputs[0, 0] &= 1
    weights = Matrix.random((1, 3))
    output = inputs * weights

    gradient = output[0, column].gradient(weights)
    assert gradient.shape == (1, 3)
    expected = [1.0 if j == column else 0.0 for j in range(3)]
    assert gradient.values().tolist() == [expected]


def test_descend_ascend():
    weights = Matrix.random((2, 3), rng=np.random.default_rng(1))
    before = weights.values()
    gradient = Matrix.random((2, 3), dtype=float, rng=np.random.default_rng(2))

    weights.descend(gradient)
    assert np.allclose(weights.values(), before - gradient.values())

    weights.ascend(gradient)
    assert np.allclose(weights.values(), before)

    with pytest.raises(LinAlgError):
        weights.descend(Matrix([[1.0]]))

    with pytest.raises(TypeError):
        Matrix([[1.0]]).descend(Matrix([[1.0]]))


def test_descend_loss():
    w = Matrix([[Variable(0.0), Variable(0.0)]])
    target = Matrix([[1.0, -2.0]])

    for _ in range(100):
        diff = w - target
        loss = (diff * Matrix([[1.0], [0.0]]))[0, 0] ** 2 + diff[0, 1] ** 2
        w.descend(0.1 * loss.gradient(w))

    assert np.allclose(w.values(), target.values())


def test_inplace():
    x = Matrix([[Variable(1.0), Variable(2.0)]])
    variables = x.flatten()

    x += Matrix([[1.0, 1.0]])
    assert x.values().tolist() == [[2.0, 3.0]]
    x -= Matrix([[0.5, 0.5]])
    assert x.values().tolist() == [[1.5, 2.5]]
    x &= Matrix([[7.0, 8.0]])
    assert x.values().tolist() == [[7.0, 8.0]]
    assert x.flatten() == variables

    with pytest.raises(LinAlgError):
        x &= Matrix([[1.0]])

    # operands are evaluated before any entry is assigned
    x &= Matrix([[x[0, 1], x[0, 0]]])
    assert x.values().tolist() == [[8.0, 7.0]]


def test_inplace_fallback():
    x = Matrix([[1.0, 2.0]])
    y = x
    x += Matrix([[1.0, 1.0]])
    assert x is not y
    assert x.values().tolist() == [[2.0, 3.0]]

    with pytest.raises(TypeError):
        y &= Matrix([[1.0, 1.0]])


def test_recompute():
    w = Matrix([[Variable(1.0), Variable(2.0)]])
    y = (w * Matrix([[1.0], [1.0]]))[0, 0]
    assert y.value == 3.0
    w &= Matrix([[5.0, 5.0]])
    assert y.value == 10.0


def test_str():
    x = Matrix([[Variable(1.0, name="a"), 2.0]])
    assert str(x) == "[[a, 2.0]]"
    assert repr(Matrix([[1.0]])) == "Matrix([[1.0]])"


def test_derivative_against_matrix():
    w = Matrix.zeros((1, 2))
    y = w.sum()
    assert y.derivative(w.flatten()) == (1.0, 1.0)

    with pytest.raises(TypeError):
        y.derivative(w)
