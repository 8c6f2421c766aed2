"""
Word list ingestion: turns raw word list lines into a populated BloomFilter.

A line is either a bare password or a tab delimited record whose first field
is the password and whose second field, when it is an integer, is the
declared length of that password.
"""
import os
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional, Union

from screening.bloom_filter import BloomFilter
from screening.errors import (
    DataInconsistencyError,
    EmptyWordListError,
    InvalidConfigurationError,
    WordListAccessError,
)
from screening.events import EventCallback, emitter

DEFAULT_DATA_FILE = os.path.join(os.path.dirname(__file__), "data", "passwords.dat")


@dataclass(frozen=True)
class WordListEntry:
    word: str
    declared_length: Optional[int] = None

    @property
    def length(self) -> int:
        return self.declared_length if self.declared_length is not None else len(self.word)


def parse_line(line: str) -> Optional[WordListEntry]:
    """Parses one word list line, blank lines give None"""
    line = line.rstrip("\r\n")
    if not line:
        return None
    fields = line.split("\t")
    declared_length = None
    if len(fields) > 1:
        try:
            declared_length = int(fields[1])
        except ValueError:
            declared_length = None
    if not fields[0]:
        return None
    return WordListEntry(fields[0], declared_length)


def _check_bound(name: str, value) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidConfigurationError(f"{name} must be a non-negative integer or None, got {value!r}")


@dataclass(frozen=True)
class IngestSettings:
    """
    Normalization and filtering rules applied while building the filter.
    None disables a bound.
    """
    false_positive_probability: float = 0.001
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    max_items: Optional[int] = None
    ignore_case: bool = False

    def __post_init__(self):
        probability = self.false_positive_probability
        if isinstance(probability, bool) or not isinstance(probability, (int, float)) or not 0 < probability < 1:
            raise InvalidConfigurationError(
                f"False positive probability must be between 0 and 1 exclusive, got {probability!r}"
            )
        _check_bound("min_length", self.min_length)
        _check_bound("max_length", self.max_length)
        if self.min_length is not None and self.max_length is not None and self.min_length > self.max_length:
            raise InvalidConfigurationError(
                f"min_length {self.min_length} is greater than max_length {self.max_length}"
            )
        if self.max_items is not None and (
                isinstance(self.max_items, bool) or not isinstance(self.max_items, int) or self.max_items <= 0):
            raise InvalidConfigurationError(f"max_items must be a positive integer or None, got {self.max_items!r}")


@dataclass(frozen=True)
class IngestResult:
    filter: BloomFilter
    expected: int
    inserted: int
    skipped: int


Source = Iterable[Union[str, WordListEntry]]


class WordListIngestor():
    """
    Builds a BloomFilter from word list entries
    Args:
        settings: the length, case and cardinality rules
        on_event: optional callback receiving progress events
    """

    def __init__(self, settings: IngestSettings = IngestSettings(), on_event: Optional[EventCallback] = None):
        self.settings = settings
        self._on_event = on_event
        self._emit = emitter(on_event)

    def normalize(self, word: str) -> str:
        """Folds case when configured. Must be used for inserts and queries alike"""
        return word.lower() if self.settings.ignore_case else word

    def accepts(self, entry: WordListEntry) -> bool:
        length = entry.length
        if self.settings.min_length is not None and length < self.settings.min_length:
            return False
        if self.settings.max_length is not None and length > self.settings.max_length:
            return False
        return True

    def _entries(self, source: Source) -> Iterator[WordListEntry]:
        for item in source:
            entry = parse_line(item) if isinstance(item, str) else item
            if entry is not None:
                yield entry

    def count(self, source: Source) -> int:
        """First pass: how many entries pass the length filter, capped at max_items"""
        total = 0
        max_items = self.settings.max_items
        for entry in self._entries(source):
            if self.accepts(entry):
                total += 1
                if max_items is not None and total >= max_items:
                    break
        return total

    def ingest(self, source: Source, expected: int) -> IngestResult:
        """
        Single pass build for a source whose accepted entry count is already known.
        Raises DataInconsistencyError if more than expected entries get inserted.
        """
        if expected <= 0:
            raise EmptyWordListError("The word list has no entries that pass the length filter")
        self._emit("ingest_started", {
            "expected": expected,
            "false_positive_probability": self.settings.false_positive_probability,
        })
        bloom = BloomFilter(expected, self.settings.false_positive_probability, on_event=self._on_event)
        max_items = self.settings.max_items
        inserted = skipped = 0
        for entry in self._entries(source):
            if max_items is not None and inserted >= max_items:
                self._emit("max_items_reached", {"max_items": max_items})
                break
            if not self.accepts(entry):
                skipped += 1
                continue
            if bloom.add(self.normalize(entry.word)):
                inserted += 1
            if inserted > expected:
                error = DataInconsistencyError(inserted, expected)
                self._emit("error", {"error": str(error)})
                raise error
        self._emit("ingest_finished", {"expected": expected, "inserted": inserted, "skipped": skipped})
        return IngestResult(bloom, expected, inserted, skipped)

    def ingest_two_pass(self, open_source: Callable[[], Source]) -> IngestResult:
        """
        Counts the entries of a fresh read of the source, then reads it again
        to insert them. The source must not change between the two reads.
        """
        expected = self.count(open_source())
        return self.ingest(open_source(), expected)


def open_word_list(path: Optional[str] = None) -> Callable[[], Iterator[str]]:
    """
    Returns a callable that yields the lines of the word list on each call.
    Falls back to the bundled list when no path is given.
    """
    data_file = path if path is not None else DEFAULT_DATA_FILE

    def read_lines() -> Iterator[str]:
        try:
            handle = open(data_file, "r", encoding="utf-8")
        except OSError as e:
            raise WordListAccessError(data_file, e) from e
        with handle:
            try:
                yield from handle
            except (OSError, UnicodeDecodeError) as e:
                raise WordListAccessError(data_file, e) from e

    return read_lines
