"""Language word lists and literal test content."""

import logging
import sys
from pathlib import Path
from typing import Optional

from core.errors import ContentReadError, LanguageNotFoundError

log = logging.getLogger("termtype.languages")

BUILTIN_LANGUAGE_DIR = Path(__file__).parent / "resources" / "language"


def _names_in(directory: Optional[Path]) -> set[str]:
    if directory is None or not directory.is_dir():
        return set()
    return {p.name for p in directory.iterdir() if p.is_file()}


def list_languages(language_dir: Optional[Path] = None) -> list[str]:
    """List built-in and user-installed language names.

    Args:
        language_dir: Directory with user language files, if any

    Returns:
        Sorted language names without duplicates
    """
    return sorted(_names_in(BUILTIN_LANGUAGE_DIR) | _names_in(language_dir))


def _decode(data: bytes, what: str) -> list[str]:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        raise ContentReadError(f"{what} has invalid UTF-8 encoding.")
    return [line.strip() for line in text.splitlines() if line.strip()]


def load_language(name: str, language_dir: Optional[Path] = None) -> list[str]:
    """Load a language word list by name.

    A file in the user language directory shadows the built-in list of the
    same name.

    Raises:
        LanguageNotFoundError: If no list with that name exists
        ContentReadError: If the list is not valid UTF-8
    """
    candidates = []
    if language_dir is not None:
        candidates.append(language_dir / name)
    candidates.append(BUILTIN_LANGUAGE_DIR / name)

    for path in candidates:
        # Names like "../x" must not escape the language directories
        if path.name != name:
            continue
        try:
            data = path.read_bytes()
        except OSError:
            continue
        log.debug(f"Loaded language '{name}' from {path}")
        return _decode(data, f"Language '{name}'")

    raise LanguageNotFoundError(name)


def load_language_file(path: Path) -> list[str]:
    """Load a word list from an explicit file.

    Raises:
        ContentReadError: If the file cannot be read or is not UTF-8
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ContentReadError(f"Cannot read language file '{path}': {e}")
    return _decode(data, f"Language file '{path}'")


def read_content(path: str) -> str:
    """Read literal test content from a file, or from stdin for "-".

    Raises:
        ContentReadError: If the content cannot be read or is not UTF-8
    """
    if path == "-":
        try:
            return sys.stdin.buffer.read().decode("utf-8")
        except UnicodeDecodeError:
            raise ContentReadError("Standard input has invalid UTF-8 encoding.")
        except OSError as e:
            raise ContentReadError(f"Cannot read standard input: {e}")
    try:
        return Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError:
        raise ContentReadError(f"Cannot open '{path}': invalid UTF-8 encoding")
    except OSError as e:
        raise ContentReadError(f"Cannot open '{path}': {e.strerror or e}")
