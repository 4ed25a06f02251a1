"""
Chain data providers for Cardano transaction building.

Structure:
    chain_provider/
    ├── types.py          # UTxO, OutRef, Credential, ProtocolParameters, ...
    ├── errors.py         # ProviderError hierarchy
    ├── plutus/           # Datum JSON -> CBOR, script normalization
    ├── fetching/         # ChainProvider protocol, pagination
    └── blockfrost/       # Blockfrost backend

Usage:
    from chain_provider import BlockfrostProvider, ChainProvider, OutRef
    from config import settings

    async with BlockfrostProvider.from_settings(settings) as provider:
        utxos = await provider.get_utxos("addr1...")
"""

from .types import (
    Credential, OutRef, UTxO, ScriptRef, TxSummary, Delegation, ProtocolParameters,
    AssetTransaction, LOVELACE,
)
from .errors import (
    ProviderError, BackendUnavailable, BackendError, NotFound, DatumNotFound,
    AmbiguousHolder, NativeScriptUnsupported, SubmissionError, MalformedSubmission,
    UnsupportedDatumShape,
)
from .fetching import ChainProvider, fetch_all_pages
from .blockfrost import BlockfrostClient, BlockfrostProvider

__all__ = [
    # Types
    "Credential", "OutRef", "UTxO", "ScriptRef", "TxSummary", "Delegation",
    "ProtocolParameters", "AssetTransaction", "LOVELACE",
    # Errors
    "ProviderError", "BackendUnavailable", "BackendError", "NotFound", "DatumNotFound",
    "AmbiguousHolder", "NativeScriptUnsupported", "SubmissionError", "MalformedSubmission",
    "UnsupportedDatumShape",
    # Providers
    "ChainProvider", "fetch_all_pages", "BlockfrostClient", "BlockfrostProvider",
]
