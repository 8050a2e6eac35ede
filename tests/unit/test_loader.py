"""
Unit tests for dump loading (compare_dumps/comparison/loader.py)
"""

import json

import pytest

from compare_dumps.comparison.exceptions import DumpIOError, FormatError
from compare_dumps.comparison.loader import load_dump
from compare_dumps.domain.dump import BlockDump, StorageOp

from tests.dump_factory import sample_blocks, write_dump


class TestLoadDump:
    """Tests for load_dump."""

    def test_loads_blocks_in_file_order(self, tmp_path):
        blocks = sample_blocks() + [{"block": 5, "size": 0, "storage": []}]
        path = write_dump(tmp_path / "dump.json", blocks)

        dump = load_dump(str(path))

        assert [b.block for b in dump] == [1000, 5]
        assert isinstance(dump[0], BlockDump)
        assert isinstance(dump[0].storage[0], StorageOp)
        assert dump[0].size == 2
        assert dump[0].to_dict() == blocks[0]

    def test_missing_value_becomes_empty(self, tmp_path):
        path = tmp_path / "dump.json"
        path.write_text(
            json.dumps([{"block": 1, "size": 1, "storage": [{"state": "Deleted", "key": "AQ=="}]}])
        )

        dump = load_dump(str(path))

        assert dump[0].storage[0].value == ""
        assert "value" not in dump[0].storage[0].to_dict()

    def test_null_storage_is_empty(self, tmp_path):
        path = tmp_path / "dump.json"
        path.write_text(json.dumps([{"block": 1, "size": 0, "storage": None}]))

        assert load_dump(str(path))[0].storage == []

    def test_extra_fields_tolerated(self, tmp_path):
        path = tmp_path / "dump.json"
        path.write_text(
            json.dumps([{"block": 1, "size": 0, "hash": "ab", "storage": []}])
        )

        assert load_dump(str(path))[0].block == 1

    def test_keys_not_decoded_at_load(self, tmp_path):
        path = tmp_path / "dump.json"
        path.write_text(
            json.dumps([{"block": 1, "size": 1, "storage": [{"state": "Added", "key": "!!"}]}])
        )

        assert load_dump(str(path))[0].storage[0].key == "!!"

    def test_missing_file_is_io_error(self, tmp_path):
        missing = tmp_path / "absent.json"

        with pytest.raises(DumpIOError) as exc_info:
            load_dump(str(missing))

        assert exc_info.value.path == str(missing)
        assert str(missing) in str(exc_info.value)

    def test_directory_is_io_error(self, tmp_path):
        with pytest.raises(DumpIOError):
            load_dump(str(tmp_path))

    def test_invalid_json_is_format_error(self, tmp_path):
        path = tmp_path / "dump.json"
        path.write_text("[{")

        with pytest.raises(FormatError, match="invalid JSON"):
            load_dump(str(path))

    @pytest.mark.parametrize(
        "document",
        [
            {"block": 1, "size": 0, "storage": []},
            [{"size": 0, "storage": []}],
            [{"block": -1, "size": 0, "storage": []}],
            [{"block": 2**32, "size": 0, "storage": []}],
            [{"block": "1", "size": 0, "storage": []}],
            [{"block": 1.0, "size": 0, "storage": []}],
            [{"block": 1, "size": 2.0, "storage": []}],
            [{"block": True, "size": 0, "storage": []}],
            [{"block": 1, "size": 0, "storage": [{"state": "Added"}]}],
            [{"block": 1, "size": 0, "storage": [{"state": "Added", "key": 5}]}],
            [{"block": 1, "size": 0, "storage": {}}],
        ],
    )
    def test_wrong_shape_is_format_error(self, tmp_path, document):
        path = tmp_path / "dump.json"
        path.write_text(json.dumps(document))

        with pytest.raises(FormatError, match="unexpected dump layout"):
            load_dump(str(path))

    def test_empty_array(self, tmp_path):
        path = tmp_path / "dump.json"
        path.write_text("[]")

        assert load_dump(str(path)) == []
