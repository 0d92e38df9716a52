"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from fakes import FakeClock
from gallery.config import CacheSettings, GallerySettings


@pytest.fixture
def cache_settings() -> CacheSettings:
    return CacheSettings(retry_delay_seconds=0)


@pytest.fixture
def settings() -> GallerySettings:
    return GallerySettings(
        cache={"retry_delay_seconds": 0},
        scroll={"debounce_seconds": 0.01},
        search={"debounce_seconds": 0.02},
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
