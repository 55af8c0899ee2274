"""Shared test fixtures."""

from pathlib import Path

import pytest

from clipcourt.engine import TimelineEngine

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_project_path() -> Path:
    return FIXTURES_DIR / "sample_project.json"


@pytest.fixture
def engine() -> TimelineEngine:
    return TimelineEngine()
