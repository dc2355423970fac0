import contextlib
import contextvars
from typing import TYPE_CHECKING, Self

if TYPE_CHECKING:
    from differentiate.autodiff.expression import Variable


class Context:
    """Create a new context.

    A context records the variable targeted by the derivative query currently being
    evaluated. Operators whose derivative depends on which operand is being
    differentiated, such as exponentiation, consult it through
    :meth:`Node.isdifferentiated`.

    Parameters
    ----------
    target : Variable, optional
        Variable against which the running derivative query is evaluated.
    """

    __slots__ = ("_target",)
    _target: "Variable | None"

    def __init__(self, target: "Variable | None" = None):
        self._target = target

    @property
    def target(self) -> "Variable | None":
        return self._target

    def copy(self) -> Self:
        return self.__class__(self._target)

    def __str__(self):
        return f"{type(self).__name__}({self._target})"

    def __copy__(self) -> Self:
        return self.copy()


_var: contextvars.ContextVar[Context] = contextvars.ContextVar("autodiff")


def getcontext() -> Context:
    """Return the context consulted by derivative rules in the running thread or task.

    A context without a target is installed on first use.
    """
    if context := _var.get(None):
        return context

    context = Context()
    _var.set(context)
    return context


def setcontext(ctx: Context) -> None:
    """Install `ctx` as the context consulted by derivative rules."""
    _var.set(ctx)


@contextlib.contextmanager
def localcontext(ctx: Context | None = None, *, target: "Variable | None" = None):
    """Return a context manager targeting `target` within the with-statement.

    Inside the block, :meth:`Variable.isdifferentiated` is true only for `target`. On
    exit, whichever context was active before is reinstated, so derivative queries can
    be nested. Threads that are already running never observe the change.

    Parameters
    ----------
    ctx : Context, optional
        Context whose target is used when `target` is omitted. Defaults to the current
        context.
    target : Variable, optional
        Variable differentiated against inside the block.

    Examples
    --------
    >>> from differentiate.autodiff import Variable
    >>> x = Variable(2.0, name="x")
    >>> with localcontext(target=x):
    ...     print(getcontext().target)
    x
    >>> print(getcontext().target)
    None
    """
    if ctx is None:
        ctx = getcontext()

    if target is None:
        target = ctx._target

    ctx = Context(target)
    token = _var.set(ctx)

    try:
        yield ctx
    finally:
        _var.reset(token)
