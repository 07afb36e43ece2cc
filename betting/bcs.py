"""
Minimal BCS encoding for the pure arguments of a bet transaction.

Only the shapes the betting contract takes are supported: vector<u8>
(UTF-8 strings) and u64.
"""
import base64
from dataclasses import dataclass

U64_MAX = 2 ** 64 - 1


def uleb128(value: int) -> bytes:
    """Unsigned LEB128, used by BCS for sequence lengths."""
    if value < 0:
        raise ValueError("uleb128 cannot encode negative values")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def encode_u64(value: int) -> bytes:
    if not 0 <= value <= U64_MAX:
        raise ValueError(f"u64 out of range: {value}")
    return value.to_bytes(8, "little")


def encode_vector_u8(data: bytes) -> bytes:
    return uleb128(len(data)) + data


@dataclass(frozen=True)
class SerializedPure:
    """BCS bytes that keep their Move type, so wallets decode them instead of guessing."""
    type_tag: str
    data: bytes

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


def string_to_vector_u8(value: str) -> SerializedPure:
    return SerializedPure("vector<u8>", encode_vector_u8(value.encode("utf-8")))


def u64(value: int) -> SerializedPure:
    return SerializedPure("u64", encode_u64(value))


def decode_vector_u8(value) -> str:
    """Decode a vector<u8> field as returned by the JSON-RPC (list of ints; strings pass through)."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return bytes(value).decode("utf-8", errors="replace")
