class ScreeningError(Exception):
    """Base class for every error raised while building a screening filter"""


class InvalidConfigurationError(ScreeningError, ValueError):
    """Raised when a filter, ingestor or assertion is given unusable parameters"""


class ConfigLoadError(InvalidConfigurationError):
    """Raised when a settings file or environment override can't be read"""


class WordListError(ScreeningError):
    """Base class for problems with the word list source"""


class WordListAccessError(WordListError, OSError):
    """Raised when the word list can't be opened or read"""

    def __init__(self, path, error: Exception):
        super().__init__(f"Reading the word list {path} failed:\n{error}")
        self.path = path
        self.error = error


class DataInconsistencyError(WordListError):
    """Raised when the word list changed between the counting and inserting passes"""

    def __init__(self, inserted: int, expected: int):
        super().__init__(
            f"Added {inserted} passwords but expected {expected}. Did the data file change?"
        )
        self.inserted = inserted
        self.expected = expected


class EmptyWordListError(WordListError):
    """Raised when no entry of the word list survives the length filter"""
