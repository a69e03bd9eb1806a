"""Shared fixtures for valsave tests."""

import pytest

from valsave.config import DecoderConfig
from valsave.data.tables import load_tables


@pytest.fixture
def config() -> DecoderConfig:
    """Config with the bundled tables only."""
    return DecoderConfig(tables=load_tables())


@pytest.fixture
def empty_config(config) -> DecoderConfig:
    """Config whose prefab table is empty, so every prefab id is unresolved."""
    from dataclasses import replace
    from types import MappingProxyType

    return DecoderConfig(tables=replace(config.tables, prefabs=MappingProxyType({})))
