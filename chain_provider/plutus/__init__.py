"""Plutus data and script encoding."""

from .datum import (
    PlutusData, PlutusNode, PlutusInt, PlutusBytes, PlutusMap, PlutusList, PlutusConstr,
    parse_datum_json, encode_datum, datum_json_to_cbor,
)
from .script import apply_double_cbor_encoding

__all__ = [
    "PlutusData", "PlutusNode", "PlutusInt", "PlutusBytes", "PlutusMap", "PlutusList", "PlutusConstr",
    "parse_datum_json", "encode_datum", "datum_json_to_cbor",
    "apply_double_cbor_encoding",
]
