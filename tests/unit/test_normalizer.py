"""
Unit tests for dump normalization (compare_dumps/comparison/normalizer.py)

Tests covering:
- Ledger-contract key filtering
- "Changed" -> "Added" relabeling
- Canonical ordering by encoded key
- Idempotence
- Fatal handling of invalid base64 keys
"""

import copy
import struct

import pytest

from compare_dumps.comparison.exceptions import EncodingError
from compare_dumps.comparison.normalizer import DumpNormalizer, ledger_prefix
from compare_dumps.config.settings import NormalizerConfig
from compare_dumps.domain.dump import BlockDump, StorageOp

from tests.dump_factory import b64, contract_key, ledger_key


def make_block(number, ops):
    return BlockDump(block=number, size=len(ops), storage=[StorageOp(*o) for o in ops])


class TestLedgerPrefix:
    """Tests for the reserved key prefix."""

    def test_default_ledger_id_prefix(self):
        assert ledger_prefix(-2) == b"\xfe\xff\xff\xff"

    def test_positive_id_little_endian(self):
        assert ledger_prefix(0x01020304) == b"\x04\x03\x02\x01"

    def test_matches_signed_packing(self):
        assert ledger_prefix(-7) == struct.pack("<i", -7)


class TestDumpNormalizer:
    """Tests for DumpNormalizer.normalize."""

    @pytest.fixture
    def normalizer(self):
        return DumpNormalizer()

    def test_drops_ledger_contract_keys(self, normalizer):
        dump = [
            make_block(
                1,
                [
                    ("Added", b64(ledger_key(b"\x01")), b64(b"x")),
                    ("Added", b64(contract_key(3, b"\x01")), b64(b"y")),
                ],
            )
        ]

        normalizer.normalize(dump)

        assert [op.key for op in dump[0].storage] == [b64(contract_key(3, b"\x01"))]

    def test_keeps_keys_containing_prefix_later(self, normalizer):
        key = b64(b"\x00" + ledger_key())
        dump = [make_block(1, [("Added", key, "")])]

        normalizer.normalize(dump)

        assert len(dump[0].storage) == 1

    def test_bare_prefix_key_dropped(self, normalizer):
        dump = [make_block(1, [("Deleted", b64(ledger_key(b"")), "")])]

        normalizer.normalize(dump)

        assert dump[0].storage == []

    def test_custom_ledger_contract_id(self):
        normalizer = DumpNormalizer(NormalizerConfig(ledger_contract_id=3))
        dump = [
            make_block(
                1,
                [
                    ("Added", b64(contract_key(3, b"\x01")), ""),
                    ("Added", b64(ledger_key()), ""),
                ],
            )
        ]

        normalizer.normalize(dump)

        assert [op.key for op in dump[0].storage] == [b64(ledger_key())]

    def test_changed_relabeled_as_added(self, normalizer):
        dump = [
            make_block(
                1,
                [
                    ("Changed", b64(contract_key(1, b"\x01")), b64(b"a")),
                    ("Deleted", b64(contract_key(1, b"\x02")), ""),
                    ("Added", b64(contract_key(1, b"\x03")), b64(b"c")),
                    ("Unknown", b64(contract_key(1, b"\x04")), ""),
                ],
            )
        ]

        normalizer.normalize(dump)

        states = {op.key: op.state for op in dump[0].storage}
        assert states[b64(contract_key(1, b"\x01"))] == "Added"
        assert states[b64(contract_key(1, b"\x02"))] == "Deleted"
        assert states[b64(contract_key(1, b"\x03"))] == "Added"
        assert states[b64(contract_key(1, b"\x04"))] == "Unknown"

    def test_sorted_by_encoded_key_string(self, normalizer):
        # 0x3e encodes to "P..." and 0xfb to "+...": byte order and
        # encoded order disagree, the encoded order wins
        low_bytes = b"\x3e\x00\x00"
        high_bytes = b"\xfb\x00\x00"
        dump = [
            make_block(
                1,
                [
                    ("Added", b64(low_bytes), ""),
                    ("Added", b64(high_bytes), ""),
                ],
            )
        ]

        normalizer.normalize(dump)

        keys = [op.key for op in dump[0].storage]
        assert keys == [b64(high_bytes), b64(low_bytes)]
        assert keys == sorted(keys)

    def test_each_block_sorted_independently(self, normalizer):
        keys = [b64(contract_key(i, b"\x00")) for i in (9, 4, 6)]
        dump = [
            make_block(20, [("Added", k, "") for k in keys]),
            make_block(10, [("Added", k, "") for k in reversed(keys)]),
        ]

        normalizer.normalize(dump)

        assert [b.block for b in dump] == [20, 10]
        for block in dump:
            encoded = [op.key for op in block.storage]
            assert encoded == sorted(encoded)

    def test_size_untouched(self, normalizer):
        dump = [make_block(1, [("Added", b64(ledger_key()), "")])]
        dump[0].size = 42

        normalizer.normalize(dump)

        assert dump[0].size == 42

    def test_idempotent(self, normalizer):
        dump = [
            make_block(
                5,
                [
                    ("Changed", b64(contract_key(8, b"\x02")), b64(b"v")),
                    ("Added", b64(ledger_key()), b64(b"w")),
                    ("Deleted", b64(contract_key(2, b"\x01")), ""),
                ],
            )
        ]

        normalizer.normalize(dump)
        once = copy.deepcopy(dump)
        normalizer.normalize(dump)

        assert dump == once

    def test_empty_dump_and_empty_blocks(self, normalizer):
        dump = [make_block(1, [])]
        normalizer.normalize(dump)
        assert dump[0].storage == []

        empty = []
        normalizer.normalize(empty)
        assert empty == []

    @pytest.mark.parametrize(
        "bad_key",
        ["not base64!", "QQ", "QUJ", "QUJD=", "AAAA====", "QQ==QQ==", "/v///w==="],
    )
    def test_invalid_key_is_fatal(self, normalizer, bad_key):
        dump = [make_block(77, [("Added", bad_key, "")])]

        with pytest.raises(EncodingError) as exc_info:
            normalizer.normalize(dump)

        assert exc_info.value.block == 77
        assert exc_info.value.key == bad_key
        assert "block 77" in str(exc_info.value)

    @pytest.mark.parametrize("good_key", ["", "QQ==", "QUI=", "QUJD", "+/8="])
    def test_canonical_padding_accepted(self, normalizer, good_key):
        dump = [make_block(1, [("Added", good_key, "")])]

        normalizer.normalize(dump)

        assert dump[0].storage[0].key == good_key

    def test_invalid_value_not_checked(self, normalizer):
        dump = [make_block(1, [("Added", b64(b"\x01\x02\x03"), "%%%")])]

        normalizer.normalize(dump)

        assert dump[0].storage[0].value == "%%%"
