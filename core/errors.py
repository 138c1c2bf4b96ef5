"""Exceptions raised by termtype."""


class TermTypeError(Exception):
    """Base exception for termtype errors."""

    pass


class EmptySourceError(TermTypeError):
    """Raised when word generation yields no words to type."""

    def __init__(self, message: str = "No words to type. The word list is empty."):
        super().__init__(message)


class LanguageNotFoundError(TermTypeError):
    """Raised when a named language list cannot be found."""

    def __init__(self, language: str):
        self.language = language
        super().__init__(
            f"Language '{language}' not found. "
            "Use --list-languages to see available languages."
        )


class ContentReadError(TermTypeError):
    """Raised when test content or a language file cannot be read."""

    pass


class ConfigError(TermTypeError):
    """Raised when the configuration file is ill-formed."""

    pass


class InvalidDateFormatError(TermTypeError, ValueError):
    """Raised when a history filter date is not YYYY-MM-DD."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid date '{value}'. Expected format: YYYY-MM-DD")


class InvalidDateRangeError(TermTypeError, ValueError):
    """Raised when --since is later than --until."""

    pass


class PersistenceError(TermTypeError):
    """Raised when a result cannot be written to the history file."""

    pass


class SessionNotCompletedError(TermTypeError):
    """Raised when metrics are requested for a session that did not complete."""

    pass
