import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import click

import reprint_applier
import reprint_writer
from reprint_changes import Change, sort_and_verify
from reprint_constants import DIAGNOSTIC_PREFIX, QUIET_ENV_VAR, VERBOSE_ENV_VAR
from reprint_errors import (
    MalformedChange,
    OutOfRange,
    OverlappingChanges,
    PromotionFailure,
    ReadFailure,
    ReprintError,
)


@dataclass
class ReprintResult:
    """Outcome of one `reprint` call.

    Notes:
    - `error` is None on success.
    - `backup_path` is set once the original has been moved aside, which
      includes the PromotionFailure case where it holds the only copy of
      the original content.
    """

    path: Path
    error: ReprintError | None = None
    backup_path: Path | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def needs_manual_recovery(self) -> bool:
        return isinstance(self.error, PromotionFailure)


def env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true")


def sez(msg: str, ctx: str = "", quiet: bool = False):
    if not quiet:
        click.echo(DIAGNOSTIC_PREFIX + ctx + msg, err=True)


def read_file(path: Path) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise ReadFailure(path, e) from e


def describe_stage(err: ReprintError) -> str:
    match err:
        case MalformedChange() | OverlappingChanges():
            return "Verification error: "
        case ReadFailure():
            return "Error reading file: "
        case OutOfRange():
            return "Error processing changes: "
        case PromotionFailure():
            return "MANUAL RECOVERY NEEDED: "
        case _:
            return "Error writing file: "


def reprint(
    path: str | os.PathLike[str], changes: Iterable[Change], quiet: bool | None = None
) -> ReprintResult:
    """Apply `changes` to the file at `path` and durably replace its content.

    The file is only touched after every change has been verified and applied
    in memory. On success the previous content is kept at `<path>.bk`.

    Failures never raise; they are reported on stderr (unless quiet, or
    REPRINT_QUIET is set) and returned in the result."""
    if quiet is None:
        quiet = env_flag(QUIET_ENV_VAR)
    result = ReprintResult(Path(path))

    try:
        ordered = sort_and_verify(changes)
        original = read_file(result.path)
        buf = reprint_applier.apply_changes(original, ordered)
        result.backup_path = reprint_writer.write_durably(result.path, buf)
    except PromotionFailure as e:
        result.backup_path = e.backup_path
        result.error = e
    except ReprintError as e:
        result.error = e

    if result.error is not None:
        sez(str(result.error), ctx=describe_stage(result.error), quiet=quiet)
    elif env_flag(VERBOSE_ENV_VAR):
        sez(f"rewrote {result.path} (backup at {result.backup_path})", quiet=quiet)

    return result
