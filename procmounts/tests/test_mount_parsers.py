# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
"""Tests for /proc/mounts parsers"""

from typing import List

import pytest

from procmounts.errors import ParseFailure
from procmounts.parsing.combinators import ParseResult
from procmounts.parsing.mount_parsers import (
    decode_escapes,
    escaped_backslash,
    escaped_space,
    escaped_transform,
    mount_line,
    mount_options,
    parse_line,
    parse_options,
)
from procmounts.schemas.mount import MountRecord
from typeguard import typechecked


def test_escaped_space() -> None:
    assert escaped_space()("040") == ([" "], "")
    assert escaped_space()(" ") == (None, " ")


def test_escaped_backslash() -> None:
    assert escaped_backslash()("\\") == (["\\"], "")
    assert escaped_backslash()("not a backslash") == (None, "not a backslash")


@pytest.mark.parametrize(
    "s, expected",
    [
        ("abc\\040def\\\\g\\040h", (["abc def\\g h"], "")),
        ("", ([""], "")),
        ("\\bad", ([""], "\\bad")),
        ("ab\\bad", (["ab"], "\\bad")),
        ("ab\\", (["ab"], "\\")),
    ],
)
@typechecked
def test_escaped_transform(s: str, expected: ParseResult[str]) -> None:
    assert escaped_transform()(s) == expected


class TestDecodeEscapes:
    @staticmethod
    @pytest.mark.parametrize(
        "token, expected",
        [
            ("abc\\040def", "abc def"),
            ("a\\\\b", "a\\b"),
            ("", ""),
            ("\\040\\040", "  "),
            ("\\\\\\040", "\\ "),
            ("/dev/sda1", "/dev/sda1"),
            ("x\\0400", "x 0"),
        ],
    )
    @typechecked
    def test_decode_escapes(token: str, expected: str) -> None:
        assert decode_escapes(token) == expected

    @staticmethod
    @pytest.mark.parametrize(
        "token",
        [
            "\\bad",
            "trailing\\",
            "\\",
            # only \040 is recognised, not arbitrary octal sequences
            "tab\\011",
            "\\04",
            "\\n",
        ],
    )
    @typechecked
    def test_decode_escapes_throws(token: str) -> None:
        with pytest.raises(ParseFailure):
            decode_escapes(token)

    @staticmethod
    @pytest.mark.parametrize(
        "token", ["plain", "with space", "a,b", "äöü", "/tmp/x b\t"]
    )
    @typechecked
    def test_decode_escapes_identity(token: str) -> None:
        assert decode_escapes(token) == token


class TestParseOptions:
    @staticmethod
    @pytest.mark.parametrize(
        "token, expected",
        [
            ("a,bc,d\\040e", ["a", "bc", "d e"]),
            ("rw", ["rw"]),
            ("rw,rw,ro", ["rw", "rw", "ro"]),
            (
                "rw,nosuid,size=3896808k,mode=755",
                ["rw", "nosuid", "size=3896808k", "mode=755"],
            ),
        ],
    )
    @typechecked
    def test_parse_options(token: str, expected: List[str]) -> None:
        assert parse_options(token) == expected

    @staticmethod
    @pytest.mark.parametrize(
        "token", ["", "a,\\bad", "a,", ",a", "a,,b", "a b", "a\\"]
    )
    @typechecked
    def test_parse_options_throws(token: str) -> None:
        with pytest.raises(ParseFailure):
            parse_options(token)

    @staticmethod
    def test_mount_options_stops_at_whitespace() -> None:
        assert mount_options()("rw,ro 0 0") == (["rw", "ro"], " 0 0")


@pytest.mark.parametrize(
    "line, expected",
    [
        (
            "device mount_point file_system_type options,a,b=c,d\\040e 0 0",
            MountRecord(
                device="device",
                mount_point="mount_point",
                file_system_type="file_system_type",
                options=("options", "a", "b=c", "d e"),
            ),
        ),
        (
            "device mount_point fs_type optA,optB 0 0",
            MountRecord(
                device="device",
                mount_point="mount_point",
                file_system_type="fs_type",
                options=("optA", "optB"),
            ),
        ),
        (
            "tmpfs /tmp/x\\040b tmpfs rw,relatime,inode64 0 0",
            MountRecord(
                device="tmpfs",
                mount_point="/tmp/x b",
                file_system_type="tmpfs",
                options=("rw", "relatime", "inode64"),
            ),
        ),
        (
            "C:\\\\share /mnt/win cifs rw 0 0",
            MountRecord(
                device="C:\\share",
                mount_point="/mnt/win",
                file_system_type="cifs",
                options=("rw",),
            ),
        ),
        (
            "proc\t/proc \t proc  rw,nosuid\t0  0 \t ",
            MountRecord(
                device="proc",
                mount_point="/proc",
                file_system_type="proc",
                options=("rw", "nosuid"),
            ),
        ),
    ],
)
@typechecked
def test_parse_line(line: str, expected: MountRecord) -> None:
    assert parse_line(line) == expected


@pytest.mark.parametrize(
    "line",
    [
        "",
        "   ",
        "/dev/sda1 /mnt/disk ext4 defaults 0 0 this_last_part_shouldnt_be_here",
        "/dev/sda1 /mnt/disk ext4 defaults 0 00",
        "/dev/sda1 /mnt/disk ext4 defaults 0",
        "/dev/sda1 /mnt/disk ext4 defaults 0 ",
        "/dev/sda1 /mnt/disk ext4 defaults",
        "/dev/sda1 /mnt/disk ext4 defaults 1 2",
        "/dev/sda1 /mnt/disk ext4 defaults 00 0",
        "/dev/sda1 /mnt/disk ext4 0 0",
        "/dev/sda1 /mnt/disk ext4 rw, 0 0",
        "/dev/sda1 /mnt/disk\\bad ext4 rw 0 0",
        "/dev/sda\\1 /mnt/disk ext4 rw 0 0",
        "/dev/sda1 /mnt/disk ext4 rw,\\x 0 0",
        " /dev/sda1 /mnt/disk ext4 rw 0 0",
        "/dev/sda1 /mnt/disk ext4 rw 0 0\n",
    ],
)
@typechecked
def test_parse_line_throws(line: str) -> None:
    with pytest.raises(ParseFailure):
        parse_line(line)


def test_mount_line_failure_leaves_input() -> None:
    line = "/dev/sda1 /mnt/disk ext4 rw 0 1"

    assert mount_line()(line) == (None, line)


def test_file_system_type_is_not_decoded() -> None:
    record = parse_line("dev /mnt weird\\040fs rw 0 0")

    assert record.file_system_type == "weird\\040fs"
