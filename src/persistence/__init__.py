"""Persistence — versioned JSON storage of accounts and portfolios."""

from .json_store import (
    SCHEMA_VERSION,
    JsonLedgerStore,
    LoadResult,
    decode_account,
    decode_portfolio,
    encode_account,
    encode_portfolio,
)

__all__ = [
    "JsonLedgerStore",
    "LoadResult",
    "SCHEMA_VERSION",
    "encode_account",
    "decode_account",
    "encode_portfolio",
    "decode_portfolio",
]
