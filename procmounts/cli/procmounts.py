# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
"""List mounted filesystems, similar to calling `mount` with no arguments."""

import json
import logging
from functools import partial
from typing import Collection, Literal, Optional

import click

from procmounts._version import __version__
from procmounts.click import log_folder_option, log_level_option, toml_config_option
from procmounts.errors import MountsError
from procmounts.mounts import Mounts, PROC_MOUNTS
from procmounts.schemas.mount import MountRecord
from procmounts.utils.log import init_logger
from typeguard import typechecked

LOGGER_NAME = "procmounts"

json_dumps_compact = partial(json.dumps, separators=(",", ":"))


def format_record(record: MountRecord, output_format: str) -> str:
    if output_format == "json":
        return json_dumps_compact(record.to_dict())
    return str(record)


@click.command(epilog=f"procmounts version: {__version__}")
@toml_config_option("procmounts")
@click.option(
    "--mounts-file",
    type=click.Path(dir_okay=False),
    default=PROC_MOUNTS,
    show_default=True,
    help="The mount table to read.",
)
@click.option(
    "-t",
    "--type",
    "fs_types",
    multiple=True,
    help="Only list filesystems of this type. May be given more than once.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["display", "json"]),
    default="display",
    show_default=True,
    help="'display' mirrors the output of mount(8); 'json' prints one object per line.",
)
@click.option(
    "--skip-invalid",
    is_flag=True,
    default=False,
    help="Log and skip lines which cannot be read or parsed instead of failing.",
)
@log_level_option
@log_folder_option
@click.version_option(__version__)
@typechecked
def main(
    mounts_file: str,
    fs_types: Collection[str],
    output_format: Literal["display", "json"],
    skip_invalid: bool,
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    log_folder: Optional[str],
) -> None:
    """Print the mounted filesystems listed in the kernel mount table."""
    logger, handler = init_logger(
        logger_name=LOGGER_NAME,
        log_dir=log_folder,
        log_name=LOGGER_NAME + ".log",
        log_level=getattr(logging, log_level),
    )
    try:
        _list_mounts(logger, mounts_file, fs_types, output_format, skip_invalid)
    finally:
        logger.removeHandler(handler)
        handler.close()


def _list_mounts(
    logger: logging.Logger,
    mounts_file: str,
    fs_types: Collection[str],
    output_format: str,
    skip_invalid: bool,
) -> None:
    try:
        table = Mounts.open(mounts_file)
    except OSError as e:
        raise click.FileError(mounts_file, hint=e.strerror or str(e)) from e

    with table.into_iter() as items:
        for item in items:
            if isinstance(item, MountsError):
                if skip_invalid:
                    logger.warning(f"Skipping {mounts_file}: {item}")
                    continue
                raise click.ClickException(f"{mounts_file}: {item}")
            if fs_types and item.file_system_type not in fs_types:
                continue
            click.echo(format_record(item, output_format))


if __name__ == "__main__":
    main()
