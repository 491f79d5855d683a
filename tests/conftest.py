"""Shared fixtures for registry tests."""

import pytest

from tagcheck_cli.registry.client import RegistryClient


@pytest.fixture
def client():
    return RegistryClient(timeout=5)
