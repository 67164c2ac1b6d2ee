"""Tests for header probing and directory decoding."""

import pytest

from aotbin_toolkit.bin.directory import align, directory_end, probe, read_directory
from aotbin_toolkit.bin.errors import FormatError, UnrecognizedFormatError
from aotbin_toolkit.bin.header import Variant
from aotbin_toolkit.utils.binary import Endianness


class TestProbe:
    """Tests for magic number / byte order detection."""

    def test_little_endian_standard(self, little_endian_sample):
        assert probe(little_endian_sample) == (Variant.STANDARD, Endianness.LITTLE)

    def test_big_endian_standard(self, big_endian_sample):
        assert probe(big_endian_sample) == (Variant.STANDARD, Endianness.BIG)

    def test_dlc_both_orders(self, dlc_archive):
        assert probe(dlc_archive([b"x"], "<")) == (Variant.DLC, Endianness.LITTLE)
        assert probe(dlc_archive([b"x"], ">")) == (Variant.DLC, Endianness.BIG)

    def test_bad_magic(self):
        with pytest.raises(UnrecognizedFormatError) as excinfo:
            probe(b"\x00" * 16)
        assert excinfo.value.magic == 0

    def test_bad_magic_is_format_error(self):
        with pytest.raises(FormatError, match="12345678"):
            probe(b"\x12\x34\x56\x78" + b"\x00" * 12)

    def test_too_short(self):
        with pytest.raises(FormatError, match="Not a valid BIN file"):
            probe(b"\xF9\x7D\x07\x00")


class TestReadDirectory:
    """Tests for row decoding."""

    def test_little_endian_rows(self, little_endian_sample):
        directory = read_directory(little_endian_sample)

        assert directory.header.file_count == 1
        assert directory.header.block_size == 0x20
        assert len(directory.rows) == 1
        row = directory.rows[0]
        assert (row.index, row.offset, row.size, row.inflated_size) == (1, 0x20, 0x10, 0)

    def test_big_endian_rows(self, big_endian_sample):
        directory = read_directory(big_endian_sample)

        assert directory.endianness is Endianness.BIG
        assert directory.rows[0].offset == 0x20
        assert directory.rows[0].size == 0x10

    def test_offsets_use_block_size(self, standard_archive):
        data = standard_archive([(b"a" * 5, 0), (b"b" * 40, 0), (b"c", 0)], block_size=0x20)
        rows = read_directory(data).rows

        assert [r.offset for r in rows] == [0x40, 0x60, 0xA0]
        assert [r.size for r in rows] == [5, 40, 1]

    def test_inflated_size_read_raw(self, standard_archive):
        data = standard_archive([(b"x" * 8, 0x1234)], order=">")
        assert read_directory(data).rows[0].inflated_size == 0x1234

    def test_dlc_rows(self, dlc_archive):
        directory = read_directory(dlc_archive([b"first", b"", b"third!"]))

        assert directory.variant is Variant.DLC
        assert [(r.index, r.offset, r.size) for r in directory.rows] == [
            (1, 0x110, 5),
            (2, 0x115, 0),
            (3, 0x115, 6),
        ]

    def test_row_past_end(self, little_endian_sample):
        truncated = little_endian_sample[:-1]
        with pytest.raises(FormatError, match="exceeds archive size"):
            read_directory(truncated)

    def test_truncated_directory(self):
        data = bytes.fromhex("F97D0700 05000000 20000000 00000000") + b"\x00" * 16
        with pytest.raises(FormatError, match="Truncated directory"):
            read_directory(data)

    def test_empty_entry_past_end_is_accepted(self, standard_archive):
        data = standard_archive([(b"z" * 3, 0), (b"", 0)])
        rows = read_directory(data).rows

        assert rows[1].size == 0
        assert rows[1].offset >= len(data)

    def test_too_many_dlc_files(self):
        data = bytes.fromhex("64000000 21000000 00000000 00000000") + b"\x00" * 0x100
        with pytest.raises(FormatError, match="maximum is 32"):
            read_directory(data)


class TestLayoutHelpers:
    """Tests for alignment helpers."""

    def test_align(self):
        assert align(0, 0x800) == 0
        assert align(1, 0x800) == 0x800
        assert align(0x800, 0x800) == 0x800
        assert align(0x801, 0x800) == 0x1000

    def test_directory_end(self):
        assert directory_end(1, 0x20) == 0x20
        assert directory_end(2, 0x20) == 0x40
        assert directory_end(100, 0x800) == 0x800
        assert directory_end(127, 0x800) == 0x800
        assert directory_end(128, 0x800) == 0x1000
