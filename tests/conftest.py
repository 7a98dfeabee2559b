"""Shared fixtures and Hypothesis profiles for the codec tests."""
import os

import pytest
from hypothesis import settings

settings.register_profile("default", max_examples=100, deadline=None)
settings.register_profile("ci", max_examples=500, deadline=None)
settings.register_profile("dev", max_examples=10, deadline=None)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))


# Reference vector from the BTHome v2 documentation.
VECTOR_KEY = bytes.fromhex("231d39c1d7cc1ab1aee224cd096db932")
VECTOR_MAC = bytes.fromhex("5448e68f80a5")
VECTOR_COUNTER = 0x33221100
VECTOR_PLAINTEXT = bytes([0x02, 0xCA, 0x09, 0x03, 0xBF, 0x13])


@pytest.fixture
def key() -> bytes:
    return VECTOR_KEY


@pytest.fixture
def mac() -> bytes:
    return VECTOR_MAC
