"""Local key-value store and console notifier tests."""

import io
import json
from pathlib import Path

from libs.infra.local.kv_store import JsonFileKeyValueStore
from libs.infra.notifiers import ConsoleNotifier


def test_kv_store_round_trip_creates_parent(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    store = JsonFileKeyValueStore(path)

    assert store.get_item("fireGuardSettings") is None
    store.set_item("fireGuardSettings", '{"sensitivity": "low"}')
    store.set_item("other", "value")

    assert JsonFileKeyValueStore(path).get_item("fireGuardSettings") == '{"sensitivity": "low"}'
    assert json.loads(path.read_text(encoding="utf-8"))["other"] == "value"


def test_kv_store_ignores_unreadable_file(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{broken", encoding="utf-8")
    store = JsonFileKeyValueStore(path)

    assert store.get_item("fireGuardSettings") is None
    store.set_item("fireGuardSettings", "{}")
    assert store.get_item("fireGuardSettings") == "{}"


def test_console_notifier_rings_bell() -> None:
    stream = io.StringIO()

    ConsoleNotifier(stream=stream, beeps=2).notify(88.0)

    assert stream.getvalue() == "\a\a"


def test_console_notifier_tolerates_closed_stream() -> None:
    stream = io.StringIO()
    stream.close()

    ConsoleNotifier(stream=stream).notify(50.0)
