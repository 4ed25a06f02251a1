"""
Plutus data from the JSON datum representation returned by indexers.

The JSON form is ambiguous, so it is parsed once into a tagged union
(``PlutusInt``, ``PlutusBytes``, ``PlutusMap``, ``PlutusList``,
``PlutusConstr``) and only then serialized. Shapes are tested in the order
int, bytes, map, list, constructor; the first match wins, so a node that
carries both ``int`` and ``bytes`` is an integer.

Prefer fetching the datum CBOR directly. This conversion exists for backends
that only return the JSON form.
"""

import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

import cbor2
from cbor2 import CBOREncoder, CBORTag
from pycardano.plutus import get_tag
from pycardano.serialization import ByteString, IndefiniteList, default_encoder

from chain_provider.errors import UnsupportedDatumShape

BYTES_CHUNK_SIZE = 64
UINT64_LIMIT = 2**64

_INT_RE = re.compile(r"^-?\d+$")


@dataclass(frozen=True)
class OrderedMap:
    """Definite map written in insertion order; keys may be unhashable primitives."""
    pairs: Tuple[Tuple[Any, Any], ...]


def plutus_encoder(encoder: CBOREncoder, value: Any):
    if isinstance(value, OrderedMap):
        encoder.encode_length(5, len(value.pairs))
        for k, v in value.pairs:
            encoder.encode(k)
            encoder.encode(v)
    else:
        default_encoder(encoder, value)


def _plutus_list(items: Tuple[Any, ...]) -> Any:
    # Non-empty lists are indefinite, empty ones definite (0x80)
    return IndefiniteList(list(items)) if items else []


def _bytes(value: bytes) -> Any:
    return ByteString(value) if len(value) > BYTES_CHUNK_SIZE else value


class PlutusNode:
    """Base of the Plutus data tagged union."""

    def to_primitive(self) -> Any:
        raise NotImplementedError()

    def to_cbor(self) -> bytes:
        return cbor2.dumps(self.to_primitive(), default=plutus_encoder)

    def to_cbor_hex(self) -> str:
        return self.to_cbor().hex()


@dataclass(frozen=True)
class PlutusInt(PlutusNode):
    value: int

    def to_primitive(self) -> Any:
        if -UINT64_LIMIT <= self.value < UINT64_LIMIT:
            return self.value
        # Bignum tags 2/3; the magnitude is a byte string, chunked like any other
        n = self.value if self.value >= 0 else -1 - self.value
        magnitude = n.to_bytes((n.bit_length() + 7) // 8, "big")
        return CBORTag(2 if self.value >= 0 else 3, _bytes(magnitude))


@dataclass(frozen=True)
class PlutusBytes(PlutusNode):
    value: bytes

    def to_primitive(self) -> Any:
        return _bytes(self.value)


@dataclass(frozen=True)
class PlutusMap(PlutusNode):
    pairs: Tuple[Tuple["PlutusData", "PlutusData"], ...]

    def to_primitive(self) -> Any:
        # Duplicate key: later value wins, first position is kept
        entries = {}
        for k, v in self.pairs:
            entries[k.to_cbor()] = (k.to_primitive(), v.to_primitive())
        return OrderedMap(tuple(entries.values()))


@dataclass(frozen=True)
class PlutusList(PlutusNode):
    items: Tuple["PlutusData", ...]

    def to_primitive(self) -> Any:
        return _plutus_list(tuple(i.to_primitive() for i in self.items))


@dataclass(frozen=True)
class PlutusConstr(PlutusNode):
    constructor: int
    fields: Tuple["PlutusData", ...]

    def to_primitive(self) -> Any:
        fields = _plutus_list(tuple(f.to_primitive() for f in self.fields))
        tag = get_tag(self.constructor)
        if tag is not None:
            return CBORTag(tag, fields)
        return CBORTag(102, [self.constructor, fields])


PlutusData = Union[PlutusInt, PlutusBytes, PlutusMap, PlutusList, PlutusConstr]


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INT_RE.match(value.strip()):
        return int(value.strip())
    return None


def parse_datum_json(node: Any) -> PlutusData:
    """Parse a JSON datum node into Plutus data. Raises UnsupportedDatumShape."""
    if not isinstance(node, dict):
        raise UnsupportedDatumShape(f"Datum node must be an object, got {type(node).__name__}")

    if "int" in node:
        value = _as_int(node["int"])
        if value is not None:
            return PlutusInt(value)

    if isinstance(node.get("bytes"), str):
        try:
            return PlutusBytes(bytes.fromhex(node["bytes"]))
        except ValueError:
            raise UnsupportedDatumShape(f"Datum bytes is not hex: {node['bytes']!r}")

    if isinstance(node.get("map"), list):
        pairs = []
        for entry in node["map"]:
            if not isinstance(entry, dict) or "k" not in entry or "v" not in entry:
                raise UnsupportedDatumShape(f"Map entry needs 'k' and 'v': {entry!r}")
            pairs.append((parse_datum_json(entry["k"]), parse_datum_json(entry["v"])))
        return PlutusMap(tuple(pairs))

    if isinstance(node.get("list"), list):
        return PlutusList(tuple(parse_datum_json(i) for i in node["list"]))

    if "constructor" in node:
        index = _as_int(node["constructor"])
        fields = node.get("fields")
        if index is not None and index >= 0 and isinstance(fields, list):
            return PlutusConstr(index, tuple(parse_datum_json(f) for f in fields))

    raise UnsupportedDatumShape(f"Unsupported datum node: {node!r}")


def encode_datum(node: PlutusData) -> bytes:
    """Canonical CBOR bytes of parsed Plutus data."""
    return node.to_cbor()


def datum_json_to_cbor(json_value: Any) -> str:
    """Convert a JSON datum straight to CBOR hex."""
    return encode_datum(parse_datum_json(json_value)).hex()
