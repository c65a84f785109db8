from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, Optional, TypeVar

from .reporter import Reporter, get_default_reporter
from .types import MultiError

T = TypeVar("T")


def _report(reporter: Optional[Reporter], exc: BaseException, parts: tuple[Any, ...], fatal: bool) -> None:
    rep = reporter if reporter is not None else get_default_reporter()
    if fatal:
        rep.fatal_if_error(exc, *parts)
    else:
        rep.report_if_error(exc, *parts)


@contextmanager
def reporting(*parts: Any, reporter: Optional[Reporter] = None, fatal: bool = False) -> Iterator[None]:
    """
    Context manager that reports (and swallows) an exception raised in its block.

    Behavior
    --------
    - fatal=False: the exception is printed, annotated with `parts`; execution
      continues after the block.
    - fatal=True: the exception is printed, then the reporter terminates the process.
    - KeyboardInterrupt and SystemExit are never intercepted.

    Usage example
    -------------
        with reporting("saving config"):
            save_config(path)
    """
    try:
        yield
    except Exception as exc:
        _report(reporter, exc, parts, fatal)


def guard(
    fn: Callable[[], T],
    *parts: Any,
    reporter: Optional[Reporter] = None,
    default: Optional[T] = None,
    fatal: bool = False,
) -> Optional[T]:
    """
    Call `fn`, reporting any exception it raises.

    Returns
    -------
    value
        The callable result on success; otherwise `default`.

    Usage example
    -------------
        cfg = guard(lambda: load_config(path), "loading ", path, default=ReporterConfig())
    """
    try:
        return fn()
    except Exception as exc:
        _report(reporter, exc, parts, fatal)
        return default


def collect(fns: Iterable[Callable[[], Any]], header: str = "") -> Optional[MultiError]:
    """
    Run every callable and group the exceptions they raise.

    All callables run even after a failure. Errors keep call order.

    Returns
    -------
    errors
        A MultiError holding the raised exceptions, or None if every call succeeded.

    Usage example
    -------------
        errs = collect([check_a, check_b], header="checks failed")
        fatal_if_error(errs)
    """
    errors: list[Optional[BaseException]] = []
    for fn in fns:
        try:
            fn()
        except Exception as exc:
            errors.append(exc)
    return MultiError.from_errors(errors, header=header)
