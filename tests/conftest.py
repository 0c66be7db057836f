"""Fixtures dung chung cho tests.

HOME duoc tro vao thu muc tam de global gitignore cua may
chay test khong anh huong ket qua discovery.
"""

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory, monkeypatch) -> Path:
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    return home


class CharCounter:
    """TokenCounter gia: 1 ky tu = 1 token, ghi lai moi text da dem."""

    def __init__(self):
        self.seen = []

    def count_tokens(self, text: str) -> int:
        self.seen.append(text)
        return len(text)


@pytest.fixture
def char_counter() -> CharCounter:
    return CharCounter()


@pytest.fixture
def sample_repo(tmp_path: Path) -> Path:
    """
    Repo nho:
        a.txt   "hello"
        b.bin   binary (co NUL)
        c.txt   "world"
    """
    (tmp_path / "a.txt").write_text("hello", encoding="utf-8")
    (tmp_path / "b.bin").write_bytes(b"\x00\x01\x02binary\x00")
    (tmp_path / "c.txt").write_text("world", encoding="utf-8")
    return tmp_path
