from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reprint_changes import Change


class ReprintError(Exception):
    """Base class for every failure `reprint` reports instead of raising."""


class MalformedChange(ReprintError):
    def __init__(self, change: Change, reason: str | None = None):
        self.change = change
        if reason is None:
            reason = f"end {change.end_byte} precedes start"
        super().__init__(f"Bad change at {change.start_byte}: {reason}")


class OverlappingChanges(ReprintError):
    def __init__(self, earlier: Change, later: Change):
        self.earlier = earlier
        self.later = later
        super().__init__(
            f"Overlapping changes: {earlier.start_byte}--{earlier.end_byte} overlaps "
            f"{later.start_byte}--{later.end_byte}"
        )


class ReadFailure(ReprintError):
    def __init__(self, path: Path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Couldn't read '{path}': {cause.strerror or cause}")


class OutOfRange(ReprintError):
    """The change's offsets do not fit the content as it is now.

    Usually means the file was edited after the offsets were computed."""

    def __init__(self, change: Change, content_len: int):
        self.change = change
        self.content_len = content_len
        super().__init__(
            f"Change out of range for input. "
            f"{change.start_byte}--{change.end_byte} > {content_len}"
        )


class PathCollision(ReprintError):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"File '{path}' already exists")


class WriteFailure(ReprintError):
    def __init__(self, path: Path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Couldn't write to '{path}': {cause.strerror or cause}")


class RenameFailure(ReprintError):
    stage = "backup"

    def __init__(self, src: Path, dst: Path, cause: OSError):
        self.src = src
        self.dst = dst
        self.cause = cause
        super().__init__(f"Couldn't rename '{src}' to '{dst}': {cause.strerror or cause}")


class PromotionFailure(RenameFailure):
    """The temp file could not be renamed onto the target path.

    The original has already been moved to `backup_path`, so the target path
    is missing. Fresh content is at `src`; recovery is manual."""

    stage = "promote"

    def __init__(self, src: Path, dst: Path, backup_path: Path, cause: OSError):
        self.backup_path = backup_path
        super().__init__(src, dst, cause)

    def __str__(self) -> str:
        return (
            f"{super().__str__()}; original content is at '{self.backup_path}', "
            f"new content is at '{self.src}'"
        )
