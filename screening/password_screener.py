from typing import Optional

from configuration.config_manager import PassCheckConfig
from screening.events import EventCallback, emitter, log_event
from screening.word_list import DEFAULT_DATA_FILE, WordListIngestor, open_word_list


class PasswordScreener():
    """
    Screens passwords against a single word list held in a Bloom filter
    Args:
        config: word list location and filter settings, the bundled list by default
        on_event: callback receiving build and lookup events
    """

    def __init__(self, config: Optional[PassCheckConfig] = None, on_event: Optional[EventCallback] = log_event):
        self.config = config if config is not None else PassCheckConfig()
        self._emit = emitter(on_event)
        self.ingestor = WordListIngestor(self.config.to_ingest_settings(), on_event)
        result = self.ingestor.ingest_two_pass(open_word_list(self.config.password_data_file))
        self.filter = result.filter
        self.num_passwords = result.inserted
        self.skipped = result.skipped

    def is_password_compromised(self, password: Optional[str]) -> bool:
        """True when the password is probably in the word list, False when it definitely is not"""
        if not password:
            return False
        found = self.filter.contains(self.ingestor.normalize(password))
        self._emit("lookup", {"found": found})
        return found

    def get_info(self) -> dict:
        info = self.filter.get_info()
        info["data_file"] = self.config.password_data_file or DEFAULT_DATA_FILE
        info["ignore_case"] = self.config.ignore_case
        info["skipped"] = self.skipped
        return info
