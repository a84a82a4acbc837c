"""Shared fixtures for the slot checker test suite.

No browser, network, or mailbox is touched: pages and stores come from
``tests.fakes``.
"""

import pytest

from slot_checker.config import Settings

from .fakes import FakePage


@pytest.fixture
def page() -> FakePage:
    return FakePage()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        email="traveller@example.com",
        password="s3cret",
        timeout=1,
        login_settle=0,
        probe_settle=0,
        results_file=tmp_path / "slot-results.json",
    )
