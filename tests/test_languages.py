"""Tests for language lists and literal content reading."""

import io

import pytest

from core.errors import ContentReadError, LanguageNotFoundError
from core.languages import list_languages, load_language, load_language_file, read_content


class TestBuiltinLanguages:
    """Tests for bundled word lists."""

    def test_english200_is_listed(self):
        assert "english200" in list_languages()

    def test_english200_loads(self):
        words = load_language("english200")
        assert len(words) == 200
        assert all(w and w == w.strip() for w in words)


class TestUserLanguages:
    """Tests for user language directories."""

    def test_user_language_listed_once(self, tmp_path):
        (tmp_path / "klingon").write_text("qapla\n")
        (tmp_path / "english200").write_text("override\n")

        names = list_languages(tmp_path)
        assert names.count("english200") == 1
        assert "klingon" in names
        assert names == sorted(names)

    def test_user_language_shadows_builtin(self, tmp_path):
        (tmp_path / "english200").write_text("override\nwords\n")
        assert load_language("english200", tmp_path) == ["override", "words"]

    def test_missing_user_dir_is_fine(self, tmp_path):
        assert "english200" in list_languages(tmp_path / "nope")

    def test_unknown_language(self, tmp_path):
        with pytest.raises(LanguageNotFoundError, match="--list-languages"):
            load_language("nonexistent_language_xyz_42", tmp_path)

    def test_path_like_name_rejected(self, tmp_path):
        (tmp_path / "secret").write_text("x\n")
        with pytest.raises(LanguageNotFoundError):
            load_language("../secret", tmp_path / "language")


class TestLanguageFile:
    """Tests for --language-file."""

    def test_blank_lines_dropped(self, tmp_path):
        path = tmp_path / "words.txt"
        path.write_text("one\n\n two \nthree\n")
        assert load_language_file(path) == ["one", "two", "three"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ContentReadError, match="Cannot read language file"):
            load_language_file(tmp_path / "missing.txt")

    def test_binary_file(self, tmp_path):
        path = tmp_path / "binary.bin"
        path.write_bytes(bytes([0xFF, 0xFE, 0x80, 0x81, 0x00, 0xC0, 0xC1]))
        with pytest.raises(ContentReadError, match="UTF-8"):
            load_language_file(path)


class TestReadContent:
    """Tests for literal content files and stdin."""

    def test_reads_file(self, tmp_path):
        path = tmp_path / "content.txt"
        path.write_text("hello world\n")
        assert read_content(str(path)) == "hello world\n"

    def test_dash_reads_stdin(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"from stdin\n")))
        assert read_content("-") == "from stdin\n"

    def test_stdin_invalid_utf8(self, monkeypatch):
        monkeypatch.setattr(
            "sys.stdin", io.TextIOWrapper(io.BytesIO(b"hello \xff\xfe world\n"))
        )
        with pytest.raises(ContentReadError, match="UTF-8"):
            read_content("-")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ContentReadError, match="Cannot open"):
            read_content(str(tmp_path / "help"))
