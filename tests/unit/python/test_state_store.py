"""Tests for the JSON state store."""

import json

from synthetics_canary.models import CanaryState
from synthetics_canary.state_store import JsonStateStore


def test_missing_file_loads_empty_state(tmp_path):
    state = JsonStateStore(tmp_path / "none.json").load()

    assert state.is_deployed is False


def test_save_and_load(tmp_path):
    store = JsonStateStore(tmp_path / "nested" / "c1.json")
    store.save(CanaryState(name="c1", id="abc", region="us-east-1", role_name="r1"))

    state = store.load()

    assert state.name == "c1"
    assert state.id == "abc"
    assert state.role_name == "r1"
    assert state.policy_name is None
    assert json.loads(store.path.read_text())["name"] == "c1"
    assert not store.path.with_suffix(".json.tmp").exists()


def test_clear(tmp_path):
    store = JsonStateStore(tmp_path / "c1.json")
    store.save(CanaryState(name="c1"))

    store.clear()
    store.clear()

    assert not store.path.exists()
