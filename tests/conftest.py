import os
import tempfile

import pytest


@pytest.fixture
def word_list_factory():
    """Factory fixture that writes temporary word list files and removes them afterwards"""
    created = []

    def _create_word_list(lines, suffix=".dat", directory=None):
        with tempfile.NamedTemporaryFile(mode='w', suffix=suffix, delete=False,
                                         encoding='utf-8', dir=directory) as f:
            f.write("\n".join(lines) + "\n")
        created.append(f.name)
        return f.name

    yield _create_word_list
    for filename in created:
        if os.path.exists(filename):
            os.unlink(filename)


@pytest.fixture
def events():
    """Collects (event, fields) pairs emitted through an on_event callback"""
    collected = []

    def _record(event, fields):
        collected.append((event, fields))

    _record.collected = collected
    return _record
