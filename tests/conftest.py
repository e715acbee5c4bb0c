"""Pytest configuration and shared fixtures."""

import logfire
import pytest


@pytest.fixture(autouse=True, scope="session")
def configure_test_logfire() -> None:
    """Keep spans local during tests."""
    logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch: pytest.MonkeyPatch) -> None:
    """Use the minimum bcrypt cost so hashing stays quick."""
    monkeypatch.setattr("src.core.config.constants.BCRYPT_ROUNDS", 4)
