"""Blockfrost implementation of the ChainProvider protocol."""

import asyncio
import logging
from typing import Any, Awaitable, Dict, Iterable, List, Optional, Sequence, TypeVar, Union

from pycardano.crypto.bech32 import encode
from pycardano.hash import ScriptHash, VerificationKeyHash

from chain_provider.errors import (
    AmbiguousHolder, BackendError, BackendUnavailable, DatumNotFound,
    MalformedSubmission, NativeScriptUnsupported, NotFound, SubmissionError,
)
from chain_provider.fetching.pagination import Order, fetch_all_pages
from chain_provider.fetching.results import BAD_REQUEST, ApiError, ApiResult
from chain_provider.plutus import apply_double_cbor_encoding, datum_json_to_cbor
from chain_provider.types import (
    Address, AssetTransaction, Credential, Datum, DatumHash, Delegation, OutRef,
    ProtocolParameters, RewardAddress, ScriptRef, TxHash, TxSummary, Unit, UTxO,
)
from .client import BlockfrostClient
from .schema import optional_int, parse_amounts

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Blockfrost takes both credential kinds under addr_vkh. CIP-0005 would use
# "script" for script hashes, which Blockfrost does not resolve here.
KEY_HASH_PREFIX = "addr_vkh"
SCRIPT_HASH_PREFIX = "addr_vkh"

NATIVE_SCRIPT_TYPES = {"timelock", "native", "Native"}
PLUTUS_SCRIPT_TYPES = {"plutusV1": "PlutusV1", "plutusV2": "PlutusV2", "plutusV3": "PlutusV3"}


async def gather_or_cancel(coros: Iterable[Awaitable[T]]) -> List[T]:
    """Run concurrently; on the first failure cancel the rest and re-raise."""
    tasks = [asyncio.ensure_future(c) for c in coros]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        raise


class BlockfrostProvider:
    """Chain provider backed by the Blockfrost REST API."""

    def __init__(
        self,
        client: BlockfrostClient,
        await_tx_interval: float = 3.0,
        await_tx_timeout: Optional[float] = None,
    ):
        self.client = client
        self.await_tx_interval = await_tx_interval
        self.await_tx_timeout = await_tx_timeout

    @classmethod
    def create(
        cls,
        url: str,
        project_id: Optional[str] = None,
        client_version: str = "0.1.0",
        timeout: float = 30.0,
        transport=None,
        await_tx_interval: float = 3.0,
        await_tx_timeout: Optional[float] = None,
    ) -> "BlockfrostProvider":
        return cls(
            BlockfrostClient(url, project_id, client_version, timeout, transport),
            await_tx_interval=await_tx_interval,
            await_tx_timeout=await_tx_timeout,
        )

    @classmethod
    def from_settings(cls, settings, transport=None) -> "BlockfrostProvider":
        return cls.create(
            url=settings.blockfrost_url,
            project_id=settings.blockfrost_project_id,
            client_version=settings.client_version,
            timeout=settings.request_timeout,
            transport=transport,
            await_tx_interval=settings.await_tx_interval,
            await_tx_timeout=settings.await_tx_timeout,
        )

    async def close(self):
        await self.client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ---------------------------------------------------------------- params

    async def get_protocol_parameters(self) -> ProtocolParameters:
        result = await self.client.get("/epochs/latest/parameters")
        if isinstance(result, ApiError):
            raise BackendError(f"Could not fetch protocol parameters: {result}", result.status_code)
        r = result.payload
        return ProtocolParameters(
            min_fee_a=int(r["min_fee_a"]),
            min_fee_b=int(r["min_fee_b"]),
            max_tx_size=int(r["max_tx_size"]),
            max_val_size=int(r["max_val_size"]),
            key_deposit=int(r["key_deposit"]),
            pool_deposit=int(r["pool_deposit"]),
            price_mem=float(r["price_mem"]),
            price_step=float(r["price_step"]),
            max_tx_ex_mem=int(r["max_tx_ex_mem"]),
            max_tx_ex_steps=int(r["max_tx_ex_steps"]),
            coins_per_utxo_byte=int(r["coins_per_utxo_size"]),
            collateral_percentage=int(r["collateral_percent"]),
            max_collateral_inputs=int(r["max_collateral_inputs"]),
            cost_models=r.get("cost_models") or {},
        )

    # ----------------------------------------------------------------- utxos

    @staticmethod
    def get_query_predicate(address_or_credential: Union[Address, Credential]) -> str:
        """Address as is, credential as its bech32 hash."""
        if isinstance(address_or_credential, str):
            return address_or_credential
        if address_or_credential.type == "Key":
            return encode(KEY_HASH_PREFIX, VerificationKeyHash.from_primitive(address_or_credential.hash).payload)
        return encode(SCRIPT_HASH_PREFIX, ScriptHash.from_primitive(address_or_credential.hash).payload)

    async def get_utxos(self, address_or_credential: Union[Address, Credential]) -> List[UTxO]:
        predicate = self.get_query_predicate(address_or_credential)
        return await self._to_utxos(await fetch_all_pages(self.client, f"/addresses/{predicate}/utxos"))

    async def get_utxos_with_unit(
        self, address_or_credential: Union[Address, Credential], unit: Unit,
    ) -> List[UTxO]:
        predicate = self.get_query_predicate(address_or_credential)
        return await self._to_utxos(
            await fetch_all_pages(self.client, f"/addresses/{predicate}/utxos/{unit}")
        )

    async def get_txs_by_unit(
        self, unit: Unit, order: Order = "asc", to_page: Optional[int] = None,
    ) -> List[AssetTransaction]:
        rows = await fetch_all_pages(self.client, f"/assets/{unit}/transactions", order=order, to_page=to_page)
        return [
            AssetTransaction(
                tx_hash=r["tx_hash"],
                tx_index=r.get("tx_index", 0),
                block_height=r.get("block_height", 0),
                block_time=r.get("block_time", 0),
            )
            for r in rows
        ]

    async def get_utxos_mint_by_unit(self, unit: Unit) -> List[UTxO]:
        """Outputs of the first transaction that moved ``unit`` (its mint)."""
        txs = await self.get_txs_by_unit(unit, "asc", 1)
        if not txs:
            return []
        return await self.get_utxos_by_hash(txs[0].tx_hash)

    async def get_utxos_by_unit(self, unit: Unit) -> List[UTxO]:
        """Outputs of every transaction that ever moved ``unit``."""
        txs = await self.get_txs_by_unit(unit)
        tx_hashes = list(dict.fromkeys(t.tx_hash for t in txs))
        per_tx = await gather_or_cancel(self.get_utxos_by_hash(h) for h in tx_hashes)
        return [u for utxos in per_tx for u in utxos]

    async def get_utxo_by_unit(self, unit: Unit) -> UTxO:
        result = await self.client.get(f"/assets/{unit}/addresses", {"count": 2})
        if isinstance(result, ApiError) or not result.payload:
            raise NotFound(f"Unit not found: {unit}")
        if len(result.payload) > 1:
            raise AmbiguousHolder(unit)

        utxos = await self.get_utxos_with_unit(result.payload[0]["address"], unit)
        if len(utxos) > 1:
            raise AmbiguousHolder(unit)
        if not utxos:
            raise NotFound(f"No UTxO holds unit {unit}")
        return utxos[0]

    async def get_utxos_by_out_ref(self, out_refs: Sequence[OutRef]) -> List[UTxO]:
        wanted = {(o.tx_hash, o.output_index) for o in out_refs}
        tx_hashes = list(dict.fromkeys(o.tx_hash for o in out_refs))
        per_tx = await gather_or_cancel(self.get_utxos_by_hash(h) for h in tx_hashes)
        return [u for utxos in per_tx for u in utxos if (u.tx_hash, u.output_index) in wanted]

    async def get_utxos_by_hash(self, tx_hash: TxHash) -> List[UTxO]:
        """All outputs of a transaction, spent or not. Unknown tx gives []."""
        result = await self.client.get(f"/txs/{tx_hash}/utxos")
        if isinstance(result, ApiError):
            logger.debug(f"No outputs for {tx_hash}: {result}")
            return []
        outputs = result.payload.get("outputs", [])
        return await self._to_utxos([{**o, "tx_hash": tx_hash} for o in outputs])

    async def _to_utxos(self, records: List[Dict[str, Any]]) -> List[UTxO]:
        return await gather_or_cancel(self._to_utxo(r) for r in records)

    async def _to_utxo(self, r: Dict[str, Any]) -> UTxO:
        inline_datum = r.get("inline_datum")
        script_hash = r.get("reference_script_hash")
        return UTxO(
            tx_hash=r["tx_hash"],
            output_index=r["output_index"],
            address=r["address"],
            assets=parse_amounts(r.get("amount")),
            datum_hash=None if inline_datum else r.get("data_hash"),
            datum=inline_datum or None,
            script_ref=await self._get_script_ref(script_hash) if script_hash else None,
        )

    async def _get_script_ref(self, script_hash: str) -> ScriptRef:
        info = self._payload(await self.client.get(f"/scripts/{script_hash}"), f"script {script_hash}")
        script_type = info.get("type")
        if script_type in NATIVE_SCRIPT_TYPES:
            raise NativeScriptUnsupported(script_hash)
        if script_type not in PLUTUS_SCRIPT_TYPES:
            raise BackendError(f"Unknown script type {script_type!r} for {script_hash}")

        body = self._payload(await self.client.get(f"/scripts/{script_hash}/cbor"), f"script cbor {script_hash}")
        return ScriptRef(type=PLUTUS_SCRIPT_TYPES[script_type], script=apply_double_cbor_encoding(body["cbor"]))

    @staticmethod
    def _payload(result: ApiResult, what: str) -> Any:
        if isinstance(result, ApiError):
            raise BackendError(f"Could not fetch {what}: {result}", result.status_code)
        return result.payload

    # ------------------------------------------------------------------- txs

    async def get_tx(self, tx_hash: TxHash) -> TxSummary:
        result = await self.client.get(f"/txs/{tx_hash}")
        if isinstance(result, ApiError):
            if result.is_not_found:
                raise NotFound(f"Transaction not found: {tx_hash}")
            raise BackendError(f"{result.error}: {result.message}", result.status_code)
        r = result.payload
        return TxSummary(
            tx_hash=r["hash"] if "hash" in r else r["tx_hash"],
            block=r["block"],
            block_height=r["block_height"],
            block_time=r["block_time"],
            slot=r["slot"],
            index=r["index"],
            output_amount=parse_amounts(r.get("output_amount")),
            fees=int(r["fees"]),
            deposit=int(r["deposit"]),
            size=r["size"],
            invalid_before=optional_int(r.get("invalid_before")),
            invalid_hereafter=optional_int(r.get("invalid_hereafter")),
            utxo_count=r.get("utxo_count", 0),
            withdrawal_count=r.get("withdrawal_count", 0),
            mir_cert_count=r.get("mir_cert_count", 0),
            delegation_count=r.get("delegation_count", 0),
            stake_cert_count=r.get("stake_cert_count", 0),
            pool_update_count=r.get("pool_update_count", 0),
            pool_retire_count=r.get("pool_retire_count", 0),
            asset_mint_or_burn_count=r.get("asset_mint_or_burn_count", 0),
            redeemer_count=r.get("redeemer_count", 0),
            valid_contract=bool(r.get("valid_contract", True)),
        )

    async def get_delegation(self, reward_address: RewardAddress) -> Delegation:
        result = await self.client.get(f"/accounts/{reward_address}")
        if isinstance(result, ApiError) or not result.payload:
            # Unregistered stake accounts come back as errors
            logger.warning(f"No account for {reward_address} ({result}), treating as undelegated")
            return Delegation(pool_id=None, rewards=0)
        r = result.payload
        return Delegation(pool_id=r.get("pool_id") or None, rewards=int(r.get("withdrawable_amount") or 0))

    # ----------------------------------------------------------------- datum

    async def get_datum(self, datum_hash: DatumHash) -> Datum:
        result = await self.client.get(f"/scripts/datum/{datum_hash}/cbor")
        if isinstance(result, ApiError) or not result.payload or not result.payload.get("cbor"):
            raise DatumNotFound(datum_hash)
        return result.payload["cbor"]

    async def get_datum_json(self, datum_hash: DatumHash) -> Any:
        result = await self.client.get(f"/scripts/datum/{datum_hash}")
        if isinstance(result, ApiError) or not result.payload:
            raise DatumNotFound(datum_hash)
        return result.payload.get("json_value", result.payload)

    async def get_datum_from_json(self, datum_hash: DatumHash) -> Datum:
        """Datum CBOR rebuilt from the JSON representation."""
        return datum_json_to_cbor(await self.get_datum_json(datum_hash))

    # ------------------------------------------------------------ submission

    async def await_tx(
        self, tx_hash: TxHash, check_interval: Optional[float] = None, timeout: Optional[float] = None,
    ) -> bool:
        """Poll until ``tx_hash`` is on chain. None falls back to the provider's poll settings."""
        if check_interval is None:
            check_interval = self.await_tx_interval
        if timeout is None:
            timeout = self.await_tx_timeout
        try:
            return await asyncio.wait_for(self._poll_tx(tx_hash, check_interval), timeout)
        except asyncio.TimeoutError:
            logger.info(f"Gave up waiting for {tx_hash} after {timeout}s")
            return False

    def track_tx(
        self, tx_hash: TxHash, check_interval: Optional[float] = None, timeout: Optional[float] = None,
    ) -> "asyncio.Task[bool]":
        """Start ``await_tx`` in the background. Cancel the task to stop polling."""
        return asyncio.ensure_future(self.await_tx(tx_hash, check_interval, timeout))

    async def _poll_tx(self, tx_hash: TxHash, check_interval: float) -> bool:
        while True:
            await asyncio.sleep(check_interval)
            try:
                result = await self.client.get(f"/txs/{tx_hash}")
            except BackendUnavailable as e:
                logger.warning(f"Polling {tx_hash} failed: {e}")
                continue
            if not isinstance(result, ApiError) and result.payload:
                logger.info(f"Transaction {tx_hash} confirmed")
                return True

    async def submit_tx(self, tx: Union[bytes, str]) -> TxHash:
        body = bytes.fromhex(tx) if isinstance(tx, str) else bytes(tx)
        result = await self.client.post_cbor("/tx/submit", body)
        if isinstance(result, ApiError):
            if result.status_code == BAD_REQUEST:
                raise MalformedSubmission(result.message or result.error)
            raise SubmissionError("Could not submit transaction.")
        if not result.payload:
            raise SubmissionError("Could not submit transaction.")
        logger.info(f"Submitted transaction {result.payload}")
        return result.payload
