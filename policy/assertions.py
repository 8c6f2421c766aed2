"""
Policy assertions: single pass/fail checks over a password.

The set of assertion kinds is closed. Each kind is a frozen dataclass holding
its own parameters and ``verify`` dispatches over them, so a policy can be
matched exhaustively. Assertions compare and hash by identity.
"""
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Union

from configuration.config_manager import PassCheckConfig
from screening.bloom_filter import BloomFilter
from screening.errors import InvalidConfigurationError
from screening.events import EventCallback, emitter
from screening.word_list import Source, WordListIngestor, open_word_list


@dataclass(frozen=True)
class Result:
    """Outcome of one assertion for one password, with the reason why"""
    success: bool
    reason: str


SUCCESS = Result(True, "Password meets assertion criteria.")
NULL_VALUE = Result(False, "Supplied password value is null or empty.")
INSUFFICIENT_LENGTH = Result(False, "Password does not meet minimum length requirement.")
EXCESSIVE_LENGTH = Result(False, "Password exceeds the maximum length requirement.")
LEAKED_PASSWORD = Result(False, "Password is too common, or has been leaked.")


def _is_missing(password: Optional[str]) -> bool:
    return password is None or password == ""


@dataclass(frozen=True, eq=False)
class LengthAssertion:
    """
    Minimum and/or maximum length requirement, both bounds inclusive.
    None disables a bound, but at least one must be set.
    """
    min_length: Optional[int] = None
    max_length: Optional[int] = None

    def __post_init__(self):
        if self.min_length is None and self.max_length is None:
            raise InvalidConfigurationError(
                "Cannot create a LengthAssertion with no minimum or maximum length requirement."
            )
        for name, value in (("minimum", self.min_length), ("maximum", self.max_length)):
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfigurationError(f"The {name} length must be an integer, got {value!r}.")
            if value < 0:
                raise InvalidConfigurationError(f"Cannot create a LengthAssertion with a negative {name} length.")
        if self.min_length is not None and self.max_length is not None and self.min_length > self.max_length:
            raise InvalidConfigurationError(
                f"Minimum length {self.min_length} is greater than maximum length {self.max_length}."
            )

    def verify(self, password: Optional[str]) -> Result:
        return verify(self, password)


@dataclass(frozen=True, eq=False)
class NotLeakedAssertion:
    """
    Fails for passwords found in a word list of leaked or common passwords.
    The word list is held in a Bloom filter, so a miss is certain while a hit
    is wrong with at most the configured false positive probability.
    """
    filter: BloomFilter
    ingestor: WordListIngestor
    config: PassCheckConfig
    num_passwords: int

    @classmethod
    def from_config(cls, config: PassCheckConfig = PassCheckConfig(),
                    on_event: Optional[EventCallback] = None,
                    open_source: Optional[Callable[[], Source]] = None) -> "NotLeakedAssertion":
        """
        Reads the configured word list twice, once to size the filter and once
        to fill it. Falls back to the bundled list when no data file is set.
        """
        if open_source is None:
            open_source = open_word_list(config.password_data_file)
        emitter(on_event)("loading_word_list", {"path": config.password_data_file or "<bundled>"})
        ingestor = WordListIngestor(config.to_ingest_settings(), on_event)
        result = ingestor.ingest_two_pass(open_source)
        return cls(result.filter, ingestor, config, result.inserted)

    @classmethod
    def from_words(cls, words: Iterable[str], config: PassCheckConfig = PassCheckConfig(),
                   on_event: Optional[EventCallback] = None) -> "NotLeakedAssertion":
        """Builds from an in-memory word list in a single insert pass"""
        words = list(words)
        ingestor = WordListIngestor(config.to_ingest_settings(), on_event)
        result = ingestor.ingest(words, ingestor.count(words))
        return cls(result.filter, ingestor, config, result.inserted)

    @property
    def false_positive_probability(self) -> float:
        return self.config.false_positive_probability

    @property
    def ignore_case(self) -> bool:
        return self.config.ignore_case

    def verify(self, password: Optional[str]) -> Result:
        return verify(self, password)


PolicyAssertion = Union[LengthAssertion, NotLeakedAssertion]


def _verify_length(assertion: LengthAssertion, password: str) -> Result:
    if assertion.min_length is not None and len(password) < assertion.min_length:
        return INSUFFICIENT_LENGTH
    if assertion.max_length is not None and len(password) > assertion.max_length:
        return EXCESSIVE_LENGTH
    return SUCCESS


def _verify_not_leaked(assertion: NotLeakedAssertion, password: str) -> Result:
    if assertion.filter.contains(assertion.ingestor.normalize(password)):
        return LEAKED_PASSWORD
    return SUCCESS


def verify(assertion: PolicyAssertion, password: Optional[str]) -> Result:
    """Checks one password against one assertion. Never raises for missing input"""
    match assertion:
        case LengthAssertion():
            check = _verify_length
        case NotLeakedAssertion():
            check = _verify_not_leaked
        case _:
            raise TypeError(f"Not a policy assertion: {assertion!r}")
    if _is_missing(password):
        return NULL_VALUE
    return check(assertion, password)
