# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, List

import pytest

from stately import StateMachine


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "property: mark test as a property-based test")


class Recorder:
    """Collects labelled calls so tests can assert on ordering."""

    def __init__(self) -> None:
        self.calls: List[str] = []

    def record(self, label: str):
        def _record(*args: Any) -> None:
            self.calls.append(label)

        _record.__qualname__ = label
        return _record

    def record_async(self, label: str):
        async def _record(*args: Any) -> None:
            self.calls.append(label)

        _record.__qualname__ = label
        return _record


@pytest.fixture
def recorder() -> Recorder:
    """Fresh call recorder."""
    return Recorder()


@pytest.fixture
def machine() -> StateMachine:
    """A machine starting in state 'A' with no configuration."""
    return StateMachine("A")


@pytest.fixture
def external_machine():
    """A machine whose state lives in a dict, with every write recorded."""
    store = {"state": "A", "writes": []}

    def mutator(state):
        store["state"] = state
        store["writes"].append(state)

    sm = StateMachine(state_accessor=lambda: store["state"], state_mutator=mutator)
    return sm, store
