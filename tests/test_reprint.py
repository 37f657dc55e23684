import errno
import os
from pathlib import Path

import reprint
import reprint_applier
import reprint_writer
from reprint_changes import Change, sort_and_verify
from reprint_errors import (
    MalformedChange,
    OutOfRange,
    OverlappingChanges,
    PathCollision,
    PromotionFailure,
    ReadFailure,
)


def artifacts(p: Path) -> tuple[Path, Path]:
    return p.with_name(p.name + ".tmp"), p.with_name(p.name + ".bk")


def test_hello_world(hello_file: Path):
    result = reprint.reprint(hello_file, [Change(7, 12, "Rust")])

    assert result.ok
    assert not result.needs_manual_recovery
    assert hello_file.read_bytes() == b"Hello, Rust!"
    tmp, bk = artifacts(hello_file)
    assert result.backup_path == bk
    assert bk.read_bytes() == b"Hello, world!"
    assert not tmp.exists()


def test_accepts_str_paths(hello_file: Path):
    result = reprint.reprint(str(hello_file), [Change(0, 0, ">> ")])
    assert result.ok
    assert result.path == hello_file
    assert hello_file.read_bytes() == b">> Hello, world!"


def test_empty_changeset_keeps_content(make_source):
    content = "fn main() {\n    println!(\"hi\");\n}\n".encode("utf-8")
    src = make_source(content)
    result = reprint.reprint(src, [])
    assert result.ok
    assert src.read_bytes() == content


def test_unsorted_changes(make_source):
    src = make_source("abc")
    result = reprint.reprint(src, [Change(3, 3, "Y"), Change(0, 0, "X")])
    assert result.ok
    assert src.read_bytes() == b"XabcY"


def test_round_trip_through_inverse(make_source):
    original = b"int a, *b[2];\nint main() { return a; }\n"
    src = make_source(original)
    changes = sort_and_verify([Change(5, 6, ";\nint"), Change(27, 33, "exit(a)")])

    assert reprint.reprint(src, changes).ok
    _, bk = artifacts(src)
    bk.unlink()

    undo = reprint_applier.inverse_changes(original, changes)
    assert reprint.reprint(src, undo).ok
    assert src.read_bytes() == original


def test_overlap_does_not_touch_file(make_source, capsys):
    src = make_source("0123456789")
    result = reprint.reprint(src, [Change(2, 5, "a"), Change(4, 8, "b")])

    assert isinstance(result.error, OverlappingChanges)
    assert result.backup_path is None
    assert src.read_bytes() == b"0123456789"
    assert not any(p.exists() for p in artifacts(src))
    assert "Verification error: Overlapping changes" in capsys.readouterr().err


def test_malformed_change_does_not_touch_file(make_source, monkeypatch):
    src = make_source("0123456789abc")

    def no_read(path):
        raise AssertionError("file should not be read")

    monkeypatch.setattr(reprint, "read_file", no_read)
    result = reprint.reprint(src, [Change(10, 5, "x")])

    assert isinstance(result.error, MalformedChange)
    assert src.read_bytes() == b"0123456789abc"


def test_missing_file_is_a_read_failure(tmp_path: Path, capsys):
    result = reprint.reprint(tmp_path / "nope.rs", [Change(0, 0, "x")])
    assert isinstance(result.error, ReadFailure)
    assert "Error reading file" in capsys.readouterr().err


def test_stale_offsets_fail_before_any_write(make_source):
    src = make_source("short")
    result = reprint.reprint(src, [Change(10, 12, "x")])

    assert isinstance(result.error, OutOfRange)
    assert src.read_bytes() == b"short"
    assert not any(p.exists() for p in artifacts(src))


def test_leftover_tmp_is_a_collision(hello_file: Path):
    tmp, bk = artifacts(hello_file)
    tmp.write_bytes(b"from a crashed run")

    result = reprint.reprint(hello_file, [Change(7, 12, "Rust")])

    assert isinstance(result.error, PathCollision)
    assert hello_file.read_bytes() == b"Hello, world!"
    assert tmp.read_bytes() == b"from a crashed run"
    assert not bk.exists()


def test_second_run_collides_with_backup_of_first(hello_file: Path):
    assert reprint.reprint(hello_file, [Change(7, 12, "Rust")]).ok
    result = reprint.reprint(hello_file, [Change(7, 11, "Python")])

    assert isinstance(result.error, PathCollision)
    assert hello_file.read_bytes() == b"Hello, Rust!"


def test_promotion_failure_needs_manual_recovery(hello_file: Path, monkeypatch, capsys):
    real_rename = os.rename
    calls = []

    def rename_once(a, b):
        calls.append(a)
        if len(calls) > 1:
            raise OSError(errno.EIO, "Input/output error")
        real_rename(a, b)

    monkeypatch.setattr(reprint_writer.os, "rename", rename_once)
    result = reprint.reprint(hello_file, [Change(7, 12, "Rust")])

    assert isinstance(result.error, PromotionFailure)
    assert result.needs_manual_recovery
    tmp, bk = artifacts(hello_file)
    assert result.backup_path == bk
    assert bk.read_bytes() == b"Hello, world!"
    assert tmp.read_bytes() == b"Hello, Rust!"
    assert "MANUAL RECOVERY NEEDED" in capsys.readouterr().err


def test_quiet_suppresses_diagnostics(make_source, capsys):
    src = make_source("abc")
    result = reprint.reprint(src, [Change(2, 1, "")], quiet=True)
    assert not result.ok
    assert capsys.readouterr().err == ""


def test_quiet_from_environment(make_source, monkeypatch, capsys):
    monkeypatch.setenv("REPRINT_QUIET", "1")
    src = make_source("abc")
    assert not reprint.reprint(src, [Change(2, 1, "")]).ok
    assert capsys.readouterr().err == ""


def test_verbose_reports_success(hello_file: Path, monkeypatch, capsys):
    monkeypatch.setenv("REPRINT_VERBOSE", "true")
    assert reprint.reprint(hello_file, [Change(0, 5, "Howdy")]).ok
    err = capsys.readouterr().err
    assert err.startswith("REPRINT SEZ: rewrote")
    assert "hello.rs.bk" in err


def test_success_is_silent(hello_file: Path, capsys):
    assert reprint.reprint(hello_file, [Change(0, 5, "Howdy")]).ok
    assert capsys.readouterr().err == ""


def test_leftover_backup_is_a_collision(hello_file: Path):
    tmp, bk = artifacts(hello_file)
    bk.write_bytes(b"backup from an earlier run")

    result = reprint.reprint(hello_file, [Change(7, 12, "Rust")], quiet=True)

    assert isinstance(result.error, PathCollision)
    assert result.error.path == bk
    assert result.backup_path is None
    assert hello_file.read_bytes() == b"Hello, world!"
    assert bk.read_bytes() == b"backup from an earlier run"
    assert not tmp.exists()
