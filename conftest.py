"""
Shared pytest fixtures.
"""
import pytest

from logfmt_encoder.record_encoder import RecordEncoder


@pytest.fixture
def buffer():
    return bytearray()


@pytest.fixture
def encoder(buffer):
    return RecordEncoder(buffer)
