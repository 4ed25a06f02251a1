"""Tests for datum JSON -> canonical CBOR conversion."""

import pytest

from chain_provider.errors import UnsupportedDatumShape
from chain_provider.plutus import (
    PlutusBytes, PlutusConstr, PlutusInt, PlutusList, PlutusMap,
    datum_json_to_cbor, encode_datum, parse_datum_json,
)


class TestPrimitives:

    def test_int(self):
        assert encode_datum(parse_datum_json({"int": 5})) == bytes.fromhex("05")

    def test_negative_int(self):
        assert datum_json_to_cbor({"int": -1}) == "20"

    def test_int_as_string(self):
        assert datum_json_to_cbor({"int": "12"}) == "0c"

    def test_bignum(self):
        # 2**64 no longer fits major type 0
        assert datum_json_to_cbor({"int": 2**64}) == "c249010000000000000000"

    def test_bytes(self):
        assert encode_datum(parse_datum_json({"bytes": "deadbeef"})) == bytes.fromhex("44deadbeef")

    def test_empty_bytes(self):
        assert datum_json_to_cbor({"bytes": ""}) == "40"

    def test_long_bytes_are_chunked(self):
        data = "00" * 65
        expected = "5f" + "5840" + "00" * 64 + "41" + "00" + "ff"
        assert datum_json_to_cbor({"bytes": data}) == expected

    def test_exactly_64_bytes_not_chunked(self):
        assert datum_json_to_cbor({"bytes": "ab" * 64}) == "5840" + "ab" * 64

    def test_large_bignum_payload_is_chunked(self):
        # 2**600 needs 76 magnitude bytes, split 64 + 12
        expected = "c2" + "5f" + "5840" + "01" + "00" * 63 + "4c" + "00" * 12 + "ff"
        assert datum_json_to_cbor({"int": 2**600}) == expected

    def test_large_negative_bignum(self):
        # -1 - (-(2**600) - 1) == 2**600
        assert datum_json_to_cbor({"int": -(2**600) - 1}).startswith("c35f584001")


class TestContainers:

    def test_constructor_with_fields(self):
        node = {"constructor": 0, "fields": [{"int": 1}, {"int": 2}]}
        assert datum_json_to_cbor(node) == "d8799f0102ff"

    def test_constructor_without_fields(self):
        assert datum_json_to_cbor({"constructor": 1, "fields": []}) == "d87a80"

    def test_constructor_7_uses_extended_tag(self):
        assert datum_json_to_cbor({"constructor": 7, "fields": []}) == "d9050080"

    def test_constructor_200_uses_general_form(self):
        assert datum_json_to_cbor({"constructor": 200, "fields": []}) == "d8668218c880"

    def test_empty_list(self):
        assert datum_json_to_cbor({"list": []}) == "80"

    def test_list_is_indefinite(self):
        assert datum_json_to_cbor({"list": [{"int": -1}, {"bytes": "ff"}]}) == "9f2041ffff"

    def test_map_keeps_input_order(self):
        node = {"map": [
            {"k": {"int": 1}, "v": {"bytes": ""}},
            {"k": {"int": 0}, "v": {"int": 2}},
        ]}
        assert datum_json_to_cbor(node) == "a201400002"

    def test_map_duplicate_key_overwrites(self):
        node = {"map": [
            {"k": {"int": 1}, "v": {"int": 2}},
            {"k": {"int": 1}, "v": {"int": 3}},
        ]}
        assert datum_json_to_cbor(node) == "a10103"

    def test_map_with_structured_keys(self):
        node = {"map": [{"k": {"list": [{"int": 1}]}, "v": {"constructor": 0, "fields": []}}]}
        assert datum_json_to_cbor(node) == "a19f01ffd87980"

    def test_nested(self):
        node = {"constructor": 0, "fields": [
            {"bytes": "aa"},
            {"constructor": 1, "fields": [{"list": [{"int": 3}]}]},
        ]}
        assert datum_json_to_cbor(node) == "d8799f41aad87a9f9f03ffffff"


class TestParsing:

    def test_parse_builds_tagged_union(self):
        node = parse_datum_json({"constructor": 2, "fields": [
            {"map": [{"k": {"bytes": "01"}, "v": {"list": []}}]},
        ]})
        assert node == PlutusConstr(2, (PlutusMap(((PlutusBytes(b"\x01"), PlutusList(())),)),))

    def test_int_wins_over_bytes(self):
        assert parse_datum_json({"int": 5, "bytes": "00"}) == PlutusInt(5)

    def test_numeric_looking_bytes_are_bytes(self):
        assert parse_datum_json({"bytes": "1234"}) == PlutusBytes(b"\x12\x34")

    def test_non_integer_int_falls_through(self):
        assert parse_datum_json({"int": "abc", "list": []}) == PlutusList(())

    def test_deterministic(self):
        node = {"constructor": 0, "fields": [{"map": [{"k": {"int": 9}, "v": {"bytes": "ab"}}]}]}
        assert datum_json_to_cbor(node) == datum_json_to_cbor(node)

    @pytest.mark.parametrize("node", [
        {"foo": 1},
        {"bytes": "zz"},
        {"constructor": 0},
        {"constructor": -1, "fields": []},
        {"map": [{"k": {"int": 1}}]},
        {"list": [{"nope": True}]},
        [1, 2],
    ])
    def test_unsupported_shapes(self, node):
        with pytest.raises(UnsupportedDatumShape):
            parse_datum_json(node)
