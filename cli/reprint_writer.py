"""
Durable replacement of a file's content.

The new content is written next to the target, flushed to disk, and only then
moved into place:

    1. write   <path>.tmp   (new content, fsync'd)
    2. rename  <path>     -> <path>.bk
    3. rename  <path>.tmp -> <path>

At every point, the old or the new content is readable under one of these
three names. The two renames are not atomic as a pair: if the process dies
between them, `<path>` is briefly absent and the content lives on in
`<path>.bk` and `<path>.tmp`. The backup is left behind on success.

Nothing here locks. Two concurrent writers on the same path can both pass
the collision check; callers must not do that.
"""

import os
import shutil
from pathlib import Path

from reprint_constants import BACKUP_SUFFIX, TMP_SUFFIX
from reprint_errors import PathCollision, PromotionFailure, RenameFailure, WriteFailure


def artifact_paths(path: Path) -> tuple[Path, Path]:
    """Returns (tmp_path, backup_path) for the given target path."""
    return (
        path.with_name(path.name + TMP_SUFFIX),
        path.with_name(path.name + BACKUP_SUFFIX),
    )


def check_no_collisions(path: Path) -> None:
    for artifact in artifact_paths(path):
        # lexists, so that a dangling symlink also counts as a leftover.
        if os.path.lexists(artifact):
            raise PathCollision(artifact)


def write_tmp_file(path: Path, tmp_path: Path, buf: bytes) -> None:
    try:
        with open(tmp_path, "xb") as f:
            f.write(buf)
            f.flush()
            os.fsync(f.fileno())
        shutil.copymode(path, tmp_path)
    except FileExistsError:
        # Appeared after check_no_collisions ran.
        raise PathCollision(tmp_path) from None
    except OSError as e:
        raise WriteFailure(tmp_path, e) from e


def write_durably(path: Path, buf: bytes) -> Path:
    """Replace the content of `path` with `buf`, keeping the old content as a backup.

    Returns the backup path. Raises PathCollision, WriteFailure, RenameFailure,
    or PromotionFailure (the rename onto `path` failed after the original was
    moved aside; see module docs)."""
    path = Path(path)
    tmp_path, bk_path = artifact_paths(path)
    check_no_collisions(path)

    write_tmp_file(path, tmp_path, buf)

    # Move the original out of the way.
    try:
        os.rename(path, bk_path)
    except OSError as e:
        raise RenameFailure(path, bk_path, e) from e

    # Promote the new content.
    try:
        os.rename(tmp_path, path)
    except OSError as e:
        raise PromotionFailure(tmp_path, path, bk_path, e) from e

    return bk_path
