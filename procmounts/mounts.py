# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
"""Iterate over the mounted filesystems listed in /proc/mounts.

Every line of the source produces exactly one item: the parsed `MountRecord`,
or the `MountsError` describing why the line could not be read or parsed.
Errors are yielded, not raised, so a caller may keep iterating past a bad line;
use `unwrap` to raise them instead.

>>> with mounts() as m:
...     for item in m:
...         print(unwrap(item))
"""

import logging
import weakref
from types import TracebackType
from typing import Iterable, Iterator, Optional, Type, Union

from procmounts.errors import MountsError, ParseFailure, SourceReadError
from procmounts.parsing.mount_parsers import parse_line
from procmounts.schemas.mount import MountRecord
from typeguard import typechecked

logger = logging.getLogger(__name__)

PROC_MOUNTS = "/proc/mounts"

MountsItem = Union[MountRecord, MountsError]
LineSource = Iterable[Union[str, bytes]]


def _strip_newline(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


class _LineReader:
    """The line source shared by `Mounts` and its iterators.

    Lines may be `str` or UTF-8 encoded `bytes`. Bytes are decoded one line at a
    time, so an undecodable line only affects its own position.
    """

    def __init__(self, source: LineSource):
        self._source = source
        self._lines = iter(source)
        self.line_number = 0

    def _read_error(self, e: Exception) -> SourceReadError:
        logger.debug(f"Failed to read line {self.line_number}", exc_info=True)
        error = SourceReadError(e, line_number=self.line_number)
        error.__cause__ = e
        return error

    def next_item(self) -> MountsItem:
        """Read one line and parse it. Raises `StopIteration` once the source is
        exhausted.
        """
        try:
            raw = next(self._lines)
        except (OSError, UnicodeDecodeError) as e:
            self.line_number += 1
            return self._read_error(e)

        self.line_number += 1
        if isinstance(raw, bytes):
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                return self._read_error(e)
        else:
            line = raw

        try:
            return parse_line(_strip_newline(line))
        except ParseFailure:
            logger.debug(f"Line {self.line_number} is not a mount entry")
            return ParseFailure(line_number=self.line_number)

    def close(self) -> None:
        close = getattr(self._source, "close", None)
        if close is not None:
            close()


class MountsIntoIterator(Iterator[MountsItem]):
    """Consuming iterator for `Mounts`. Owns the line source and closes it once
    exhausted or closed.
    """

    def __init__(self, reader: _LineReader):
        self._reader: Optional[_LineReader] = reader

    def __iter__(self) -> "MountsIntoIterator":
        return self

    def __next__(self) -> MountsItem:
        if self._reader is None:
            raise StopIteration
        try:
            return self._reader.next_item()
        except StopIteration:
            self.close()
            raise

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None

    def __enter__(self) -> "MountsIntoIterator":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()


class MountsIteratorMut(Iterator[MountsItem]):
    """Borrowing iterator for `Mounts`. Reads the remaining lines of the source
    without taking it; the borrow ends when the iterator is exhausted, closed or
    garbage collected.
    """

    def __init__(self, reader: _LineReader):
        self._reader = reader
        self.finished = False

    def __iter__(self) -> "MountsIteratorMut":
        return self

    def __next__(self) -> MountsItem:
        if self.finished:
            raise StopIteration
        try:
            return self._reader.next_item()
        except StopIteration:
            self.finished = True
            raise

    def close(self) -> None:
        """End the borrow. The underlying source stays open."""
        self.finished = True

    def __enter__(self) -> "MountsIteratorMut":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()


class Mounts:
    """A mount table read lazily from a line source, e.g. an open /proc/mounts.

    Use `into_iter` to hand the source over to a single-pass iterator, or
    `iter_mut` (also `iter(mounts)`) to iterate over the remaining lines while
    keeping the source. At most one borrowing iterator may be active at a time.
    """

    def __init__(self, source: LineSource):
        self._reader: Optional[_LineReader] = _LineReader(source)
        self._borrow: Optional["weakref.ReferenceType[MountsIteratorMut]"] = None

    @classmethod
    def open(cls, path: str = PROC_MOUNTS) -> "Mounts":
        """Open the given mount table for reading. Raises `OSError` if it does
        not exist or is not readable. The table is read in binary mode and each
        line is decoded as UTF-8 on its own.
        """
        logger.debug(f"Opening {path}")
        return cls(open(path, "rb"))

    def _active_borrow(self) -> Optional[MountsIteratorMut]:
        if self._borrow is None:
            return None
        borrow = self._borrow()
        if borrow is None or borrow.finished:
            self._borrow = None
            return None
        return borrow

    def _require_reader(self) -> _LineReader:
        if self._reader is None:
            raise RuntimeError("The mount table has been consumed or closed")
        if self._active_borrow() is not None:
            raise RuntimeError("The mount table is already being iterated over")
        return self._reader

    def into_iter(self) -> MountsIntoIterator:
        """Consuming iterator. Afterwards this object can no longer be iterated."""
        reader = self._require_reader()
        self._reader = None
        return MountsIntoIterator(reader)

    def iter_mut(self) -> MountsIteratorMut:
        """Borrowing iterator over the lines which have not been read yet.

        >>> m = Mounts(["tmpfs /tmp tmpfs rw 0 0", "proc /proc proc rw 0 0"])
        >>> next(m.iter_mut()).mount_point
        '/tmp'
        >>> [str(r) for r in m.iter_mut()]
        ['proc on /proc type proc (rw)']
        """
        reader = self._require_reader()
        borrow = MountsIteratorMut(reader)
        self._borrow = weakref.ref(borrow)
        return borrow

    def __iter__(self) -> MountsIteratorMut:
        return self.iter_mut()

    def close(self) -> None:
        """Close the source. A live borrowing iterator is ended first."""
        borrow = self._active_borrow()
        if borrow is not None:
            borrow.close()
        if self._reader is not None:
            self._reader.close()
            self._reader = None

    def __enter__(self) -> "Mounts":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()


@typechecked
def mounts(path: str = PROC_MOUNTS) -> Mounts:
    """Convenience method equivalent to `Mounts.open(path)`."""
    return Mounts.open(path)


def unwrap(item: MountsItem) -> MountRecord:
    """Return the record, or raise the error yielded in its place."""
    if isinstance(item, MountsError):
        raise item
    return item
