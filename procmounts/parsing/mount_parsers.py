# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
"""Parsers for lines of /proc/mounts.

Each line has the shape

    <device> <mount_point> <fs_type> <opt1,opt2,...> 0 0

where fields are separated by runs of spaces or tabs. The kernel escapes
whitespace and backslashes in the device, mount point and options as octal
sequences, of which only `\\040` (space) and `\\\\` (backslash) are recognised
here. For details, refer to `man 5 fstab`.
"""

import logging
from typing import List

from procmounts.errors import ParseFailure
from procmounts.parsing.combinators import (
    all_consuming,
    at_least_zero,
    begins_with,
    chain,
    discard_result,
    first_of,
    group,
    map_parser,
    map_result,
    not_whitespace,
    Parser,
    replace_result,
    separated_list1,
    space0,
    space1,
    SPACE_OR_TAB,
    take_till1,
)
from procmounts.schemas.mount import MountRecord

from typeguard import typechecked

logger = logging.getLogger(__name__)

ESCAPE = "\\"


def escaped_space() -> Parser[str]:
    """Replace the sequence 040 with a space. Does not recognise a literal space."""
    return replace_result(begins_with("040"), " ")


def escaped_backslash() -> Parser[str]:
    return begins_with(ESCAPE)


def escaped_transform() -> Parser[str]:
    """Resolve every escape sequence in the input into the literal it stands for.

    Stops at the first backslash which does not start a recognised sequence,
    leaving it unconsumed, e.g.
        >>> escaped_transform()("abc\\\\040def\\\\\\\\g")
        (['abc def\\\\g'], '')
        >>> escaped_transform()("a\\\\bad")
        (['a'], '\\\\bad')
    """
    fragments = at_least_zero(
        first_of(
            [
                take_till1(ESCAPE),
                chain(
                    [
                        discard_result(begins_with(ESCAPE)),
                        first_of([escaped_backslash(), escaped_space()]),
                    ]
                ),
            ]
        )
    )
    return map_result(fragments, "".join)


def escaped_field() -> Parser[str]:
    """A whitespace-delimited field with its escape sequences resolved."""
    return map_parser(not_whitespace, escaped_transform())


def mount_options() -> Parser[str]:
    """A non-empty, comma separated list of mount options. The list is
    terminated by whitespace; each option may contain escaped spaces but not
    commas.
    """
    return separated_list1(
        begins_with(","),
        map_parser(take_till1("," + SPACE_OR_TAB), escaped_transform()),
    )


def _as_mount_record(fields: List) -> MountRecord:
    device, mount_point, file_system_type, options = fields
    return MountRecord(
        device=device,
        mount_point=mount_point,
        file_system_type=file_system_type,
        options=tuple(options),
    )


def mount_line() -> Parser[MountRecord]:
    """Parse a full line of /proc/mounts into a `MountRecord`.

    The two trailing fields (dump frequency and fsck pass number) are always
    written as `0 0` by the kernel; they are required but discarded. Any input
    left after the optional trailing whitespace fails the whole line, e.g.
        /dev/sda1 /mnt/disk ext4 defaults 0 0 this_should_not_be_here
    """
    fields = chain(
        [
            escaped_field(),  # device
            discard_result(space1),
            escaped_field(),  # mount point
            discard_result(space1),
            not_whitespace,  # file system type
            discard_result(space1),
            group(mount_options()),
            discard_result(space1),
            discard_result(begins_with("0")),
            discard_result(space1),
            discard_result(begins_with("0")),
            discard_result(space0),
        ]
    )
    return all_consuming(map_result(fields, _as_mount_record))


def _parse_all(parser: Parser, s: str) -> List:
    result, _ = all_consuming(parser)(s)
    if result is None:
        raise ParseFailure()
    return result


@typechecked
def decode_escapes(token: str) -> str:
    """Resolve `\\040` and `\\\\` in a token. Raises `ParseFailure` on any other
    sequence following a backslash, including a trailing lone backslash.

    >>> decode_escapes("abc\\\\040def")
    'abc def'
    """
    (decoded,) = _parse_all(escaped_transform(), token)
    return decoded


@typechecked
def parse_options(token: str) -> List[str]:
    """Parse a comma separated options token, e.g. `rw,nosuid,size=3896808k`.
    Raises `ParseFailure` if any option fails to decode or the token is empty.
    """
    return _parse_all(mount_options(), token)


_MOUNT_LINE = mount_line()


@typechecked
def parse_line(line: str) -> MountRecord:
    """Parse one line of /proc/mounts (without its newline).

    Raises `ParseFailure` if the line is not a well-formed entry; no partial
    record is ever returned.
    """
    parsed, _ = _MOUNT_LINE(line)
    if parsed is None:
        logger.debug(f"Parse failed; not a mount entry: {line!r}")
        raise ParseFailure()
    (record,) = parsed
    return record
