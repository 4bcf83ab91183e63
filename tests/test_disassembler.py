from chipvm import opcodes as op
from chipvm.disassembler import ListingLine, disassemble, format_listing


def test_disassemble_decodes_each_word() -> None:
    lines = list(disassemble(bytes([0x60, 0x0A, 0xA0, 0x00, 0x00, 0xE0])))

    assert lines == [
        ListingLine(0x200, 0x600A, op.LdByte(0, 0x0A)),
        ListingLine(0x202, 0xA000, op.LdI(0x000)),
        ListingLine(0x204, 0x00E0, op.Cls()),
    ]


def test_odd_trailing_byte_is_padded() -> None:
    lines = list(disassemble(bytes([0x12])))

    assert lines == [ListingLine(0x200, 0x1200, op.Jp(0x200))]


def test_format_listing() -> None:
    text = format_listing(bytes([0x60, 0x0A, 0xD1, 0x25]), origin=0x300)

    assert text == "0x300: 600A  LD V0, 0x0A\n0x302: D125  DRW V1, V2, 5"


def test_empty_program() -> None:
    assert format_listing(b"") == ""
