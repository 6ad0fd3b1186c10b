"""Pytest configuration and shared fixtures."""

import pytest

from tests.fakes import FakeChain


@pytest.fixture
def chain() -> FakeChain:
    """Provide an empty fake chain.

    Returns:
        FakeChain: Chain with no blocks, balances or tokens
    """
    return FakeChain()
