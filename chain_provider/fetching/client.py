"""Chain provider protocol."""

from typing import List, Optional, Protocol, Sequence, Union, runtime_checkable

from chain_provider.types import (
    Address, Credential, Datum, DatumHash, Delegation, OutRef, ProtocolParameters,
    RewardAddress, TxHash, Unit, UTxO,
)


@runtime_checkable
class ChainProvider(Protocol):
    """
    Interface for chain data providers (Blockfrost, Kupo/Ogmios, Koios, etc.).

    Transaction building only talks to this protocol, so backends can be
    swapped without touching it.
    """

    async def get_protocol_parameters(self) -> ProtocolParameters:
        """Current protocol parameters."""
        ...

    async def get_utxos(self, address_or_credential: Union[Address, Credential]) -> List[UTxO]:
        """All UTxOs at an address or payment credential."""
        ...

    async def get_utxos_with_unit(
        self, address_or_credential: Union[Address, Credential], unit: Unit,
    ) -> List[UTxO]:
        """UTxOs at an address holding the given unit."""
        ...

    async def get_utxo_by_unit(self, unit: Unit) -> UTxO:
        """The single UTxO holding an NFT-like unit."""
        ...

    async def get_utxos_by_out_ref(self, out_refs: Sequence[OutRef]) -> List[UTxO]:
        """UTxOs for the given output references (spent ones are absent)."""
        ...

    async def get_delegation(self, reward_address: RewardAddress) -> Delegation:
        ...

    async def get_datum(self, datum_hash: DatumHash) -> Datum:
        """Datum CBOR (hex) by hash."""
        ...

    async def await_tx(
        self, tx_hash: TxHash, check_interval: Optional[float] = None, timeout: Optional[float] = None,
    ) -> bool:
        """Wait until the transaction is on chain. False if ``timeout`` seconds pass first."""
        ...

    async def submit_tx(self, tx: Union[bytes, str]) -> TxHash:
        """Submit a signed transaction (CBOR bytes or hex)."""
        ...
