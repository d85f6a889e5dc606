"""Protobuf wire encoding helpers for building synthetic game master dumps."""

import struct

_UINT64_MASK = (1 << 64) - 1


# ── Primitives ───────────────────────────────────────────────────────


def varint(value: int) -> bytes:
    """Encode an integer (negative values as 64-bit two's complement)."""
    value &= _UINT64_MASK
    out = bytearray()
    while True:
        group = value & 0x7F
        value >>= 7
        if value:
            out.append(group | 0x80)
        else:
            out.append(group)
            return bytes(out)


def key(field_number: int, wire_type: int) -> bytes:
    return varint((field_number << 3) | wire_type)


def varint_field(field_number: int, value: int) -> bytes:
    return key(field_number, 0) + varint(value)


def fixed64_field(field_number: int, data: bytes) -> bytes:
    assert len(data) == 8
    return key(field_number, 1) + data


def bytes_field(field_number: int, payload: bytes) -> bytes:
    return key(field_number, 2) + varint(len(payload)) + payload


def text_field(field_number: int, text: str) -> bytes:
    return bytes_field(field_number, text.encode("utf-8"))


def float_field(field_number: int, value: float) -> bytes:
    return key(field_number, 5) + struct.pack("<f", value)


def packed_varints(values) -> bytes:
    return b"".join(varint(v) for v in values)


def packed_floats(values) -> bytes:
    return b"".join(struct.pack("<f", v) for v in values)


# ── Game master templates ────────────────────────────────────────────


def item_template(name: str, details_field: int, details: bytes) -> bytes:
    """Outer envelope: field 2 wrapping {1: name, details_field: details}."""
    return bytes_field(2, text_field(1, name) + bytes_field(details_field, details))


def creature_template(
    number, name, attack=100, defense=100, stamina=100,
    types=(1,), fast=(), charged=(), extra=b"",
):
    stats = varint_field(1, stamina) + varint_field(2, attack) + varint_field(3, defense)
    details = b""
    for field_number, type_id in zip((4, 5), types):
        details += varint_field(field_number, type_id)
    details += bytes_field(8, stats)
    details += bytes_field(9, packed_varints(fast))
    details += bytes_field(10, packed_varints(charged))
    details += extra
    return item_template(f"V{number:04d}_POKEMON_{name}", 2, details)


def ability_template(
    number, name, type_id=1, power=10.0, duration_ms=1000, energy=10, extra=b"",
):
    details = (
        varint_field(1, number)
        + varint_field(3, type_id)
        + float_field(4, power)
        + varint_field(12, duration_ms)
        + varint_field(15, energy)
        + extra
    )
    return item_template(f"V{number:04d}_MOVE_{name}", 4, details)


def type_template(name, type_id, effectiveness):
    details = bytes_field(1, packed_floats(effectiveness)) + varint_field(2, type_id)
    return item_template(f"POKEMON_TYPE_{name}", 8, details)


def game_master(*templates, preamble=b"") -> bytes:
    """Concatenate envelopes, optionally after unrelated outer fields."""
    return preamble + b"".join(templates)
