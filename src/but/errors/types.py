from __future__ import annotations

from typing import Iterable, Iterator, Optional

# Slot-0 placeholder used when a MultiError has no header.
NO_HEADER = "\n\t"
ITEM_SEPARATOR = "\n\t"


class WrappedError(Exception):
    """
    An error annotated with a message, keeping a reference to the original.

    ``str(err)`` renders as ``"<message>: <cause>"``. The cause is available both
    through :attr:`cause` and through ``__cause__`` so tracebacks show the chain.

    Usage example
    -------------
        err = WrappedError("saving config", OSError("disk full"))
        str(err)   # "saving config: disk full"
        err.cause  # the OSError
    """

    def __init__(self, message: str, cause: BaseException) -> None:
        super().__init__(message, cause)
        self.message = message
        self.__cause__ = cause

    @property
    def cause(self) -> BaseException:
        """Return the wrapped error."""
        return self.__cause__  # type: ignore[return-value]

    def __str__(self) -> str:
        return f"{self.message}: {self.cause}"


def wrap(err: BaseException, message: str) -> WrappedError:
    """Annotate `err` with `message`."""
    return WrappedError(message, err)


def root_cause(err: BaseException) -> BaseException:
    """Follow the ``__cause__`` chain of `err` down to the innermost error."""
    seen: set[int] = set()
    while err.__cause__ is not None and id(err) not in seen:
        seen.add(id(err))
        err = err.__cause__
    return err


class MultiError(Exception):
    """
    Groups several errors into a single reportable error.

    Rendering puts the header on the first line (or a bare ``"\\n\\t"`` when there
    is no header) and every item on its own tab-indented line. Nested MultiErrors
    are embedded verbatim, without re-indenting their lines.

    Parameters
    ----------
    header
        Optional message shown before the list of errors.
    items
        Ordered errors; insertion order is reporting order. May be empty.

    Usage example
    -------------
        errs = MultiError("validation failed")
        for row in rows:
            try:
                check(row)
            except ValueError as exc:
                errs.append(exc)
        if errs:
            raise errs
    """

    def __init__(self, header: str = "", items: Optional[list[BaseException]] = None) -> None:
        super().__init__(header)
        self.header = header
        self.items: list[BaseException] = items if items is not None else []

    @classmethod
    def from_errors(
        cls, errors: Iterable[Optional[BaseException]], header: str = ""
    ) -> Optional["MultiError"]:
        """Build a MultiError from the non-None `errors`; None when nothing is left."""
        items = [e for e in errors if e is not None]
        if not items:
            return None
        return cls(header, items)

    def describe(self) -> str:
        parts = [self.header if self.header else NO_HEADER]
        parts.extend(str(e) for e in self.items)
        return ITEM_SEPARATOR.join(parts)

    def unwrap(self) -> list[BaseException]:
        """Return the list of grouped errors."""
        return self.items

    def append(self, err: BaseException) -> "MultiError":
        self.items.append(err)
        return self

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"MultiError(header={self.header!r}, items={self.items!r})"

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[BaseException]:
        return iter(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)
