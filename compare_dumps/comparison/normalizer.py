"""
Dump Normalizer - Bring a loaded dump into canonical form for comparison

Two nodes may disagree on ledger-contract bookkeeping and on whether a key
was "Added" or "Changed"; neither is a storage divergence. The normalizer
removes both differences and orders each block's storage by encoded key.
"""

import binascii
import base64
import re
import struct
from typing import Optional

from compare_dumps.comparison.exceptions import EncodingError
from compare_dumps.config.settings import NormalizerConfig
from compare_dumps.domain.dump import Dump, STATE_ADDED, STATE_CHANGED
from compare_dumps.utils.logger import get_logger

logger = get_logger(__name__)

# Standard alphabet, length a multiple of 4, at most two trailing "="
STRICT_BASE64 = re.compile(r"(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?")


def ledger_prefix(contract_id: int) -> bytes:
    """
    Key prefix of storage entries that belong to the given contract.

    The identifier is stored as a 4-byte little-endian unsigned pattern, so a
    negative id such as -2 becomes b"\\xfe\\xff\\xff\\xff".
    """
    return struct.pack("<I", contract_id & 0xFFFFFFFF)


class DumpNormalizer:
    """
    Normalize dumps in place.

    Responsibilities:
    - Reject keys that are not valid base64 (fatal)
    - Drop storage entries of the ledger contract
    - Treat "Changed" as "Added"
    - Sort each block's storage by encoded key for stable comparison
    """

    def __init__(self, config: Optional[NormalizerConfig] = None):
        self.config = config or NormalizerConfig()
        self.prefix = ledger_prefix(self.config.ledger_contract_id)

    def normalize(self, dump: Dump) -> None:
        """
        Normalize every block of the dump in place.

        Block order is trusted as given and left untouched.

        Args:
            dump: Loaded dump, mutated in place

        Raises:
            EncodingError: If any storage key is not valid base64
        """
        dropped = 0
        relabeled = 0

        for block in dump:
            storage = []
            for op in block.storage:
                if not STRICT_BASE64.fullmatch(op.key):
                    raise EncodingError(block.block, op.key, "malformed base64 or padding")
                try:
                    key_bytes = base64.b64decode(op.key, validate=True)
                except (binascii.Error, ValueError) as e:
                    raise EncodingError(block.block, op.key, str(e)) from e

                if key_bytes.startswith(self.prefix):
                    dropped += 1
                    continue

                if op.state == STATE_CHANGED:
                    op.state = STATE_ADDED
                    relabeled += 1

                storage.append(op)

            # Encoded key string order, not decoded byte order
            storage.sort(key=lambda op: op.key)
            block.storage = storage

        logger.debug(
            "Normalized dump",
            operation="normalize",
            context={"blocks": len(dump), "dropped": dropped, "relabeled": relabeled},
        )
