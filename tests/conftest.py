"""Shared fixtures: hand-assembled archives independent of the writer."""

import struct

import pytest

PAYLOAD = bytes.fromhex("BAADF00D") * 4

# One normal 16-byte entry at block 1, block size 0x20
LITTLE_ENDIAN_SAMPLE = (
    bytes.fromhex("F97D0700 01000000 20000000 00000000")
    + bytes.fromhex("0100000000000000 10000000 00000000")
    + PAYLOAD
)
BIG_ENDIAN_SAMPLE = (
    bytes.fromhex("00077DF9 00000001 00000020 00000000")
    + bytes.fromhex("0000000000000001 00000010 00000000")
    + PAYLOAD
)


def assemble_standard(entries, order="<", block_size=0x20):
    """Assemble a standard archive.

    entries: list of (payload, inflated_size) or (payload, inflated_size,
    inflated_order) tuples. Payloads start block aligned; the archive ends
    at the last payload byte.
    """
    header = struct.pack(order + "Iiii", 0x00077DF9, len(entries), block_size, 0)
    data_start = -(-(0x10 + 0x10 * len(entries)) // block_size) * block_size

    rows = b""
    body = bytearray()
    offset = data_start
    for entry in entries:
        payload, inflated_size = entry[0], entry[1]
        inflated_order = entry[2] if len(entry) > 2 else order
        rows += struct.pack(order + "qi", offset // block_size, len(payload))
        rows += struct.pack(inflated_order + "I", inflated_size)
        if payload:
            body.extend(b"\x00" * (offset - data_start - len(body)))
            body.extend(payload)
            offset = -(-(offset + len(payload)) // block_size) * block_size

    directory = header + rows
    return directory + b"\x00" * (data_start - len(directory)) + bytes(body)


def assemble_dlc(payloads, order="<"):
    """Assemble a DLC archive with contiguous payloads."""
    data = bytearray(struct.pack(order + "Iiii", 0x64, len(payloads), 0, 0))
    data.extend(b"\x00" * (0x110 - len(data)))
    offset = 0x110
    for i, payload in enumerate(payloads):
        struct.pack_into(order + "i", data, 0x10 + 4 * i, offset)
        struct.pack_into(order + "i", data, 0x90 + 4 * i, len(payload))
        data.extend(payload)
        offset += len(payload)
    return bytes(data)


@pytest.fixture
def little_endian_sample():
    return LITTLE_ENDIAN_SAMPLE


@pytest.fixture
def big_endian_sample():
    return BIG_ENDIAN_SAMPLE


@pytest.fixture
def standard_archive():
    """Factory fixture for assemble_standard."""
    return assemble_standard


@pytest.fixture
def dlc_archive():
    """Factory fixture for assemble_dlc."""
    return assemble_dlc
