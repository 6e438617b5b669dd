"""Shared test fixtures for the elementalify test suite."""

from __future__ import annotations

import itertools

import pytest

from elementalify.config import ElementalifyConfig
from elementalify.converter.elemental_to_editor import ElementalToEditorConverter
from elementalify.converter.markdown import MarkdownConverter


class RecordingMetrics:
    """MetricsHook that keeps every data point for assertions."""

    def __init__(self) -> None:
        self.counters: list[tuple[str, int, dict | None]] = []
        self.timings: list[tuple[str, float, dict | None]] = []

    def increment(self, name, value=1, tags=None):
        self.counters.append((name, value, tags))

    def timing(self, name, ms, tags=None):
        self.timings.append((name, ms, tags))

    def count(self, name: str) -> int:
        return sum(value for counter, value, _ in self.counters if counter == name)


def sequential_ids():
    """Zero-arg callable yielding ``id-1``, ``id-2``..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def config() -> ElementalifyConfig:
    """Default configuration with deterministic node ids."""
    return ElementalifyConfig(id_factory=sequential_ids())


@pytest.fixture
def metrics() -> RecordingMetrics:
    return RecordingMetrics()


@pytest.fixture
def converter(config: ElementalifyConfig) -> ElementalToEditorConverter:
    """Elemental-to-editor converter using the default test config."""
    return ElementalToEditorConverter(config)


@pytest.fixture
def md_converter(config: ElementalifyConfig) -> MarkdownConverter:
    """Markdown converter using the default test config."""
    return MarkdownConverter(config)
