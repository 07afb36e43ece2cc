"""
BCS pure arguments and the programmable transaction model.
"""
import base64

import pytest

from betting.bcs import SerializedPure, decode_vector_u8, encode_u64, string_to_vector_u8, u64, uleb128
from betting.transaction import TransactionBlock


def test_uleb128_multi_byte_lengths():
    assert uleb128(0) == b"\x00"
    assert uleb128(127) == b"\x7f"
    assert uleb128(128) == b"\x80\x01"
    assert uleb128(300) == b"\xac\x02"


def test_u64_is_little_endian_and_range_checked():
    assert encode_u64(325) == (325).to_bytes(8, "little")
    with pytest.raises(ValueError):
        encode_u64(-1)
    with pytest.raises(ValueError):
        encode_u64(2 ** 64)


def test_strings_become_tagged_vector_u8():
    pure = string_to_vector_u8("evt-42")
    assert pure.type_tag == "vector<u8>"
    assert pure.data == b"\x06evt-42"
    assert base64.b64decode(pure.to_base64()) == pure.data


def test_decode_vector_u8_from_rpc_shapes():
    assert decode_vector_u8(list(b"home")) == "home"
    assert decode_vector_u8("already text") == "already text"
    assert decode_vector_u8(None) == ""


def test_object_inputs_are_deduplicated():
    tx = TransactionBlock(sender="0xme")
    first = tx.object("0xplatform")
    second = tx.object("0xplatform")
    assert first["Input"] == second["Input"]
    assert len(tx.inputs) == 1


def test_split_then_move_call_wires_nested_result():
    tx = TransactionBlock(sender="0xme")
    tx.set_gas_budget(20_000_000)
    [coin] = tx.split_coins(tx.object("0xcoin"), [tx.pure(u64(5))])
    tx.move_call("0xpkg::betting::place_bet", [tx.object("0xplatform"), coin])

    data = tx.to_dict()
    assert data["gasData"]["budget"] == "20000000"
    assert data["commands"][0]["$kind"] == "SplitCoins"
    call = tx.move_calls()[0]
    assert (call["package"], call["module"], call["function"]) == ("0xpkg", "betting", "place_bet")
    assert call["arguments"][1] == {"$kind": "NestedResult", "NestedResult": [0, 0]}


def test_pure_input_keeps_type_tag():
    tx = TransactionBlock()
    arg = tx.pure(SerializedPure("u64", encode_u64(1)))
    assert tx.input_at(arg)["Pure"]["type"] == "u64"


def test_gas_budget_must_be_positive():
    with pytest.raises(ValueError):
        TransactionBlock().set_gas_budget(0)
