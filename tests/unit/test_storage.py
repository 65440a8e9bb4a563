"""Unit tests for the filter cache."""

import json

from assets.storage import FilterCache


def test_missing_file_loads_empty(tmp_path):
    assert FilterCache(tmp_path / "none.json").load() == {}


def test_save_strips_blacklisted_keys(tmp_path):
    path = tmp_path / "nested" / "filters.json"
    cache = FilterCache(path, blacklist=["serial_number"])

    cache.save({"serial_number": "SN-1", "status": "ACTIVE", "page": "2"})

    assert json.loads(path.read_text()) == {"status": "ACTIVE", "page": "2"}
    assert not path.with_suffix(".tmp").exists()


def test_load_strips_blacklisted_keys(tmp_path):
    path = tmp_path / "filters.json"
    path.write_text(json.dumps({"qr_code_id": "QR1", "facility": "F1"}))

    assert FilterCache(path, blacklist=["qr_code_id"]).load() == {"facility": "F1"}


def test_default_blacklist_from_settings(tmp_path):
    cache = FilterCache(tmp_path / "filters.json")
    assert {"name", "serial_number", "qr_code_id"} <= cache.blacklist


def test_corrupt_file_is_ignored(tmp_path):
    path = tmp_path / "filters.json"
    path.write_text("{not json")
    assert FilterCache(path).load() == {}


def test_clear(tmp_path):
    cache = FilterCache(tmp_path / "filters.json", blacklist=[])
    cache.save({"status": "ACTIVE"})
    cache.clear()
    assert cache.load() == {}
    cache.clear()
