"""Tests for data file values and layered lookup.

Verifies:
- Parsed values keep integers and floats apart
- Keys resolve from the first registered file that defines them
- JSON, YAML and TOML are all read; bad files are skipped
"""

from __future__ import annotations

import datetime
import json
from pathlib import Path

import pytest

from cypat.domain.common.errors import DataKeyNotFoundError
from cypat.infra.data import (
    DataReader,
    Float,
    Integer,
    load_document,
    to_python,
    to_value,
)


# ── Values ───────────────────────────────────────────────────────────


class TestValues:
    def test_numbers_keep_subtype(self):
        assert to_value(3) == Integer(3)
        assert to_value(2.5) == Float(2.5)
        assert to_value(True) is True

    def test_strict_accessors(self):
        with pytest.raises(TypeError):
            Integer(3).as_float()
        with pytest.raises(TypeError):
            Float(2.5).as_int()
        assert Integer(3).to_float() == 3.0
        assert Float(2.9).to_int() == 2

    def test_nested(self):
        value = to_value({"ports": [22, 80], "ratio": 0.5, 1: None})
        assert value == {"ports": [Integer(22), Integer(80)], "ratio": Float(0.5), "1": None}
        assert to_python(value) == {"ports": [22, 80], "ratio": 0.5, "1": None}

    def test_dates_become_iso_strings(self):
        assert to_value(datetime.date(2024, 3, 1)) == "2024-03-01"

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            to_value({1, 2})


# ── Documents ────────────────────────────────────────────────────────


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    (tmp_path / "answers.json").write_text(json.dumps({"forensics_1": "hunter2", "port": 22}))
    (tmp_path / "policy.yaml").write_text("port: 2222\nmin_password_length: 12\n")
    (tmp_path / "extra.toml").write_text('banner = "Authorized use only"\nratio = 0.75\n')
    return tmp_path


class TestLoadDocument:
    def test_each_format(self, data_dir: Path):
        assert load_document(data_dir / "answers.json")["port"] == 22
        assert load_document(data_dir / "policy.yaml")["min_password_length"] == 12
        assert load_document(data_dir / "extra.toml")["ratio"] == 0.75

    def test_unknown_suffix_sniffed(self, tmp_path: Path):
        path = tmp_path / "answers.conf"
        path.write_text('{"key": 1}')
        assert load_document(path) == {"key": 1}

    def test_non_mapping_skipped(self, tmp_path: Path, caplog):
        path = tmp_path / "list.json"
        path.write_text("[1, 2, 3]")
        assert load_document(path) is None
        assert "no top-level mapping" in caplog.text

    def test_missing_file(self, tmp_path: Path):
        assert load_document(tmp_path / "gone.json") is None


# ── Layered lookup ───────────────────────────────────────────────────


class TestDataReader:
    def test_first_file_wins(self, data_dir: Path):
        reader = DataReader([data_dir / "answers.json", data_dir / "policy.yaml"])
        assert reader.get("port") == Integer(22)
        assert reader.get("min_password_length") == Integer(12)

    def test_registration_order_matters(self, data_dir: Path):
        reader = DataReader()
        reader.register_file(data_dir / "policy.yaml")
        reader.register_file(data_dir / "answers.json")
        assert reader.get("port") == Integer(2222)
        assert reader.files == [data_dir / "policy.yaml", data_dir / "answers.json"]

    def test_missing_key(self, data_dir: Path):
        reader = DataReader([data_dir / "extra.toml"])
        assert reader.get("nope") is None
        assert "nope" not in reader
        with pytest.raises(DataKeyNotFoundError):
            reader.get_or_raise("nope")

    def test_broken_file_skipped(self, data_dir: Path):
        broken = data_dir / "broken.json"
        broken.write_text("{not json")
        reader = DataReader([broken, data_dir / "extra.toml"])
        assert reader.get_or_raise("banner") == "Authorized use only"
        assert reader.get("ratio") == Float(0.75)

    def test_files_reread_on_lookup(self, data_dir: Path):
        path = data_dir / "answers.json"
        reader = DataReader([path])
        path.write_text(json.dumps({"forensics_1": "changed"}))
        assert reader.get("forensics_1") == "changed"
