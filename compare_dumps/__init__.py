"""
Storage dump comparison

Differential testing of node storage layers: checks that two captures of
per-block storage changes agree once ledger-contract bookkeeping and the
"Changed"/"Added" distinction are normalized away.
"""

__version__ = "1.0"
