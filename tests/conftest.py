"""
Shared fixtures for the Momo plugin tests.
"""

from unittest.mock import MagicMock

import pytest

from momo_memory.client import MemoryBackend
from momo_memory.memory.tags import ContainerTags
from momo_memory.models import Profile, ProfileFact, SearchResult


@pytest.fixture
def tags():
    return ContainerTags(user="opencode-user-abc123", project="ocp-demo-1234abcd")


@pytest.fixture
def mock_client():
    """Backend mock returning an empty profile and no search hits."""
    client = MagicMock(spec=MemoryBackend)
    client.compute_profile.return_value = Profile()
    client.search.return_value = []
    client.list_memories.return_value = []
    return client


@pytest.fixture
def populated_client(mock_client, tags):
    """Backend mock with a profile and one hit per scope."""
    mock_client.compute_profile.return_value = Profile(
        narrative="Backend developer.",
        static_facts=[ProfileFact("prefers tabs")],
    )

    def search(query, container_tags, limit=10, mode="hybrid"):
        if container_tags == [tags.user]:
            return [SearchResult(content="was debugging auth", similarity=0.9, id="m1")]
        return [SearchResult(content="uses postgres", similarity=0.8, id="m2")]

    mock_client.search.side_effect = search
    return mock_client
