"""
Pytest configuration and shared fixtures for mnsclient tests.
"""

import os
from typing import Generator

import pytest

from fake_mns import FakeMNSServer
from mnsclient.client import Client
from mnsclient.config import ClientOptions, MNSConfig


TEST_ENDPOINT = "http://fake-mns.local"
TEST_ACCESS_ID = "test-access-id"
TEST_ACCESS_KEY = "test-access-key"


@pytest.fixture
def fake_server() -> FakeMNSServer:
    """
    Create an empty in-process fake service.

    Returns:
        FakeMNSServer accepting requests signed with the test credentials.
    """
    return FakeMNSServer(TEST_ACCESS_ID, TEST_ACCESS_KEY, base_url=TEST_ENDPOINT)


@pytest.fixture
def mns_config() -> MNSConfig:
    """Configuration pointing at the fake service."""
    return MNSConfig(
        endpoint=TEST_ENDPOINT,
        access_id=TEST_ACCESS_ID,
        access_key=TEST_ACCESS_KEY,
    )


@pytest.fixture
def client(fake_server: FakeMNSServer) -> Generator[Client, None, None]:
    """
    Client in the default deferred async mode, served by the fake.

    Yields:
        Client that is closed after the test.
    """
    mns_client = Client(
        TEST_ENDPOINT,
        TEST_ACCESS_ID,
        TEST_ACCESS_KEY,
        session=fake_server.session(),
    )
    yield mns_client
    mns_client.close()


@pytest.fixture
def background_client(fake_server: FakeMNSServer) -> Generator[Client, None, None]:
    """Client whose async requests run on a background thread pool."""
    mns_client = Client(
        TEST_ENDPOINT,
        TEST_ACCESS_ID,
        TEST_ACCESS_KEY,
        options=ClientOptions(async_mode="background", max_workers=4),
        session=fake_server.session(),
    )
    yield mns_client
    mns_client.close()


# Hypothesis settings for property-based tests
from hypothesis import settings, Verbosity

# Register custom profile for mnsclient tests
settings.register_profile("mnsclient", max_examples=100, verbosity=Verbosity.normal, deadline=None)
settings.register_profile("mnsclient-ci", max_examples=1000, verbosity=Verbosity.verbose, deadline=None)
settings.register_profile("mnsclient-dev", max_examples=10, verbosity=Verbosity.verbose, deadline=None)

# Load profile from environment or use default
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "mnsclient"))
