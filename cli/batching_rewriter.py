from pathlib import Path

import reprint
from reprint_changes import Change
from reprint_types import FilePathStr


class BatchingRewriter:
    """
    Context manager for batching multiple rewrites to multiple files.
    Each rewrite is recorded as a Change against the file's current content.
    On exit, each file is rewritten by one `reprint` call; files are handled
    independently, so a failure in one file does not undo another.
    Exact duplicate rewrites are applied once; any other overlap fails that file.
    """

    def __init__(self, raise_on_failure: bool = False, quiet: bool | None = None):
        self.rewrites: dict[FilePathStr, list[Change]] = {}
        self.results: dict[FilePathStr, reprint.ReprintResult] = {}
        self.raise_on_failure = raise_on_failure
        self.quiet = quiet

    def add_rewrite(self, filepath: str, offset: int, length: int, replacement_text: str):
        """Add a rewrite operation for a specific file."""
        self.add_change(filepath, Change(offset, offset + length, replacement_text))

    def add_change(self, filepath: str, change: Change):
        self.rewrites.setdefault(filepath, []).append(change)

    def get_rewrites(self) -> dict[FilePathStr, list[Change]]:
        return self.rewrites

    def replace_rewrites(self, rewrites: dict[FilePathStr, list[Change]]):
        self.rewrites = rewrites

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            return False  # propagate exception

        self.apply_rewrites()

    def apply_rewrites(self) -> dict[FilePathStr, reprint.ReprintResult]:
        # Results describe the most recent batch only.
        self.results = {}
        for filepath, file_rewrites in self.rewrites.items():
            # dict.fromkeys keeps first-seen order, unlike set().
            unique_file_rewrites = list(dict.fromkeys(file_rewrites))
            self.results[filepath] = reprint.reprint(
                Path(filepath), unique_file_rewrites, quiet=self.quiet
            )
        self.rewrites = {}

        if self.raise_on_failure:
            for result in self.results.values():
                if result.error is not None:
                    raise result.error
        return self.results

    def failed(self) -> dict[FilePathStr, reprint.ReprintResult]:
        return {fp: r for fp, r in self.results.items() if not r.ok}
