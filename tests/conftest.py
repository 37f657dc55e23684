"""
Common definitions for tests

Definitions decorated with `pytest.fixture` are pytest test fixtures
(see pytest documentation). A test that names a fixture as a parameter
receives the fixture's return value.
"""

from pathlib import Path
from typing import Callable

import pytest

from reprint_constants import QUIET_ENV_VAR, VERBOSE_ENV_VAR


@pytest.fixture(autouse=True)
def clean_reprint_env(monkeypatch):
    """Tests should not depend on the developer's REPRINT_* settings."""
    monkeypatch.delenv(QUIET_ENV_VAR, raising=False)
    monkeypatch.delenv(VERBOSE_ENV_VAR, raising=False)


@pytest.fixture
def make_source(tmp_path) -> Callable[..., Path]:
    """Factory writing a file into the test's temporary directory.

    `make_source(b"...")` or `make_source("...", name="x.c")`."""

    def make(content: bytes | str, name: str = "hello.rs") -> Path:
        p = tmp_path / name
        if isinstance(content, str):
            p.write_text(content, encoding="utf-8")
        else:
            p.write_bytes(content)
        return p

    return make


@pytest.fixture
def hello_file(make_source) -> Path:
    """A 13-byte file: `Hello, world!`"""
    return make_source("Hello, world!")
