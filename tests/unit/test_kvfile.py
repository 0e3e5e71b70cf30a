"""Tests for the key/value line format and content hashing."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from libforge.core import kvfile
from libforge.core.hasher import sha1_file, sha1_hex


class TestParseLine:
    @pytest.mark.parametrize(
        "line,expected",
        [
            ("rustc: /usr/bin/rustc\n", ("rustc", "/usr/bin/rustc")),
            ("build: make CFLAGS='-O2: fast'", ("build", "make CFLAGS='-O2: fast'")),
            ("  name :  demo  ", ("name", "demo")),
            ("test:", ("test", "")),
        ],
    )
    def test_parses(self, line: str, expected: tuple[str, str]):
        assert kvfile.parse_line(line) == expected

    @pytest.mark.parametrize("line", ["", "   ", "# comment", "no separator", ": orphan"])
    def test_ignored(self, line: str):
        assert kvfile.parse_line(line) is None


class TestParseText:
    def test_last_value_wins_in_final_position(self):
        text = "a: 1\nb: 2\na: 3\n"
        parsed = kvfile.parse_text(text)
        assert parsed == {"b": "2", "a": "3"}
        assert list(parsed) == ["b", "a"]

    def test_render_round_trip(self):
        line = kvfile.render_line("cc", "clang -std=c11")
        assert line == "cc: clang -std=c11\n"
        assert kvfile.parse_line(line) == ("cc", "clang -std=c11")


class TestHasher:
    def test_file_digest_matches_bytes_digest(self, tmp_dir: Path):
        data = b"x" * 200_000
        path = tmp_dir / "blob"
        path.write_bytes(data)
        assert sha1_file(path) == sha1_hex(data) == hashlib.sha1(data).hexdigest()
