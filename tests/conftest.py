"""
Shared test fixtures for nostr-tasks tests.
Events are built unsigned with a fixed author and timestamp so ids are stable.
"""

import pytest

from nostr_tasks.engine.event import EventBuilder, Tags
from nostr_tasks.engine.primitives import PublicKey, Timestamp

AUTHOR_HEX = "79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
CREATED_AT = 1700000000


@pytest.fixture
def author():
    return PublicKey.parse(AUTHOR_HEX)


@pytest.fixture
def make_event(author):
    """Build an event from a kind, content and raw tag lists."""

    def _make(kind, content="", tags=()):
        return (
            EventBuilder(kind, content)
            .add_tags(Tags.parse(tags))
            .build(author, Timestamp(CREATED_AT))
        )

    return _make
