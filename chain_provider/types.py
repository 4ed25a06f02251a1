"""
Core types shared by every chain provider.

Plain value objects. Hashes, datums and scripts are carried as hex strings,
quantities as Python ints (arbitrary precision).
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

Address = str
RewardAddress = str
TxHash = str
DatumHash = str
Datum = str  # CBOR hex
Unit = str  # policy_id + asset_name (hex), or "lovelace"
Assets = Dict[Unit, int]

CredentialType = Literal["Key", "Script"]
ScriptType = Literal["PlutusV1", "PlutusV2", "PlutusV3"]

LOVELACE = "lovelace"

_HASH_RE = re.compile(r"^[0-9a-fA-F]{56}$")


@dataclass(frozen=True)
class Credential:
    """Payment or stake credential: a key hash or a script hash."""
    type: CredentialType
    hash: str  # 28 bytes, hex

    def __post_init__(self):
        if self.type not in ("Key", "Script"):
            raise ValueError(f"Unknown credential type: {self.type}")
        if not _HASH_RE.match(self.hash):
            raise ValueError(f"Credential hash must be 56 hex chars, got {self.hash!r}")


@dataclass(frozen=True)
class OutRef:
    """Output reference used as a query key."""
    tx_hash: TxHash
    output_index: int

    def __str__(self) -> str:
        return f"{self.tx_hash}#{self.output_index}"


@dataclass(frozen=True)
class ScriptRef:
    type: ScriptType
    script: str  # double CBOR encoded, hex


@dataclass(frozen=True)
class UTxO:
    """
    Unspent output as seen by the provider at query time.

    An inline datum and a datum hash are mutually exclusive.
    """
    tx_hash: TxHash
    output_index: int
    address: Address
    assets: Assets = field(hash=False)
    datum_hash: Optional[DatumHash] = None
    datum: Optional[Datum] = None
    script_ref: Optional[ScriptRef] = None

    def __post_init__(self):
        if self.datum is not None and self.datum_hash is not None:
            raise ValueError(f"UTxO {self.utxo_id} has both an inline datum and a datum hash")
        for unit, quantity in self.assets.items():
            if quantity < 0:
                raise ValueError(f"Negative quantity {quantity} for {unit} in {self.utxo_id}")

    @property
    def out_ref(self) -> OutRef:
        return OutRef(self.tx_hash, self.output_index)

    @property
    def utxo_id(self) -> str:
        return f"{self.tx_hash}#{self.output_index}"

    @property
    def lovelace(self) -> int:
        return self.assets.get(LOVELACE, 0)


@dataclass(frozen=True)
class TxSummary:
    """Metadata of a confirmed transaction."""
    tx_hash: TxHash
    block: str
    block_height: int
    block_time: int
    slot: int
    index: int
    output_amount: Assets = field(hash=False)
    fees: int
    deposit: int
    size: int
    invalid_before: Optional[int]
    invalid_hereafter: Optional[int]
    utxo_count: int
    withdrawal_count: int
    mir_cert_count: int
    delegation_count: int
    stake_cert_count: int
    pool_update_count: int
    pool_retire_count: int
    asset_mint_or_burn_count: int
    redeemer_count: int
    valid_contract: bool

    def __post_init__(self):
        if self.fees < 0 or self.deposit < 0:
            raise ValueError(f"Negative fees/deposit in tx {self.tx_hash}")


@dataclass(frozen=True)
class AssetTransaction:
    """A transaction that moved a given unit."""
    tx_hash: TxHash
    tx_index: int
    block_height: int
    block_time: int


@dataclass(frozen=True)
class Delegation:
    pool_id: Optional[str]  # None = not delegated
    rewards: int

    @property
    def is_delegated(self) -> bool:
        return self.pool_id is not None


@dataclass(frozen=True)
class ProtocolParameters:
    """Network parameters read at a point in time."""
    min_fee_a: int
    min_fee_b: int
    max_tx_size: int
    max_val_size: int
    key_deposit: int
    pool_deposit: int
    price_mem: float
    price_step: float
    max_tx_ex_mem: int
    max_tx_ex_steps: int
    coins_per_utxo_byte: int
    collateral_percentage: int
    max_collateral_inputs: int
    cost_models: Dict[str, Any] = field(hash=False)
