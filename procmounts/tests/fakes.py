# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
from typing import Iterator, List, Union


class FakeLineSource:
    """A line source which raises the given exceptions in place of lines and
    records whether it was closed.
    """

    def __init__(self, lines: List[Union[str, BaseException]]):
        self._lines = lines
        self._position = 0
        self.closed = False
        self.reads = 0

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        if self.closed:
            raise ValueError("I/O operation on closed source.")
        if self._position >= len(self._lines):
            raise StopIteration
        line = self._lines[self._position]
        self._position += 1
        self.reads += 1
        if isinstance(line, BaseException):
            raise line
        return line

    def close(self) -> None:
        self.closed = True

    @property
    def remaining(self) -> int:
        return len(self._lines) - self._position
