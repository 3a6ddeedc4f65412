"""Instruction set of the 6502: addressing modes, mnemonics and cycle counts."""

from __future__ import annotations

import enum
from dataclasses import dataclass

__all__ = ["AddressingMode", "Instruction", "decode", "is_legal", "ILLEGAL"]

ILLEGAL = "ILLEGAL"


class AddressingMode(enum.Enum):
    """How an instruction finds its operand."""

    ACCUMULATOR = "acc"
    IMMEDIATE = "imm"
    ABSOLUTE = "abs"
    ZERO_PAGE = "zer"
    ZERO_PAGE_X = "zex"
    ZERO_PAGE_Y = "zey"
    ABSOLUTE_X = "abx"
    ABSOLUTE_Y = "aby"
    IMPLIED = "imp"
    RELATIVE = "rel"
    INDEXED_INDIRECT = "inx"
    INDIRECT_INDEXED = "iny"
    ABSOLUTE_INDIRECT = "abi"

    @property
    def operand_size(self) -> int:
        """Number of operand bytes following the opcode."""
        if self in (AddressingMode.ACCUMULATOR, AddressingMode.IMPLIED):
            return 0
        if self in (
            AddressingMode.ABSOLUTE,
            AddressingMode.ABSOLUTE_X,
            AddressingMode.ABSOLUTE_Y,
            AddressingMode.ABSOLUTE_INDIRECT,
        ):
            return 2
        return 1


@dataclass(frozen=True)
class Instruction:
    """One entry of the decode table."""

    opcode: int
    mnemonic: str
    mode: AddressingMode
    cycles: int

    @property
    def legal(self) -> bool:
        return self.mnemonic != ILLEGAL

    @property
    def size(self) -> int:
        """Total length in bytes, opcode included."""
        return 1 + self.mode.operand_size


_ACC = AddressingMode.ACCUMULATOR
_IMM = AddressingMode.IMMEDIATE
_ABS = AddressingMode.ABSOLUTE
_ZER = AddressingMode.ZERO_PAGE
_ZEX = AddressingMode.ZERO_PAGE_X
_ZEY = AddressingMode.ZERO_PAGE_Y
_ABX = AddressingMode.ABSOLUTE_X
_ABY = AddressingMode.ABSOLUTE_Y
_IMP = AddressingMode.IMPLIED
_REL = AddressingMode.RELATIVE
_INX = AddressingMode.INDEXED_INDIRECT
_INY = AddressingMode.INDIRECT_INDEXED
_ABI = AddressingMode.ABSOLUTE_INDIRECT

_SPEC: dict[str, tuple[tuple[int, AddressingMode, int], ...]] = {
    "ADC": ((0x69, _IMM, 2), (0x6D, _ABS, 4), (0x65, _ZER, 3), (0x61, _INX, 6),
            (0x71, _INY, 6), (0x75, _ZEX, 4), (0x7D, _ABX, 4), (0x79, _ABY, 4)),
    "AND": ((0x29, _IMM, 2), (0x2D, _ABS, 4), (0x25, _ZER, 3), (0x21, _INX, 6),
            (0x31, _INY, 5), (0x35, _ZEX, 4), (0x3D, _ABX, 4), (0x39, _ABY, 4)),
    "ASL": ((0x0E, _ABS, 6), (0x06, _ZER, 5), (0x0A, _ACC, 2), (0x16, _ZEX, 6),
            (0x1E, _ABX, 7)),
    "BCC": ((0x90, _REL, 2),),
    "BCS": ((0xB0, _REL, 2),),
    "BEQ": ((0xF0, _REL, 2),),
    "BIT": ((0x2C, _ABS, 4), (0x24, _ZER, 3)),
    "BMI": ((0x30, _REL, 2),),
    "BNE": ((0xD0, _REL, 2),),
    "BPL": ((0x10, _REL, 2),),
    "BRK": ((0x00, _IMP, 7),),
    "BVC": ((0x50, _REL, 2),),
    "BVS": ((0x70, _REL, 2),),
    "CLC": ((0x18, _IMP, 2),),
    "CLD": ((0xD8, _IMP, 2),),
    "CLI": ((0x58, _IMP, 2),),
    "CLV": ((0xB8, _IMP, 2),),
    "CMP": ((0xC9, _IMM, 2), (0xCD, _ABS, 4), (0xC5, _ZER, 3), (0xC1, _INX, 6),
            (0xD1, _INY, 3), (0xD5, _ZEX, 4), (0xDD, _ABX, 4), (0xD9, _ABY, 4)),
    "CPX": ((0xE0, _IMM, 2), (0xEC, _ABS, 4), (0xE4, _ZER, 3)),
    "CPY": ((0xC0, _IMM, 2), (0xCC, _ABS, 4), (0xC4, _ZER, 3)),
    "DEC": ((0xCE, _ABS, 6), (0xC6, _ZER, 5), (0xD6, _ZEX, 6), (0xDE, _ABX, 7)),
    "DEX": ((0xCA, _IMP, 2),),
    "DEY": ((0x88, _IMP, 2),),
    "EOR": ((0x49, _IMM, 2), (0x4D, _ABS, 4), (0x45, _ZER, 3), (0x41, _INX, 6),
            (0x51, _INY, 5), (0x55, _ZEX, 4), (0x5D, _ABX, 4), (0x59, _ABY, 4)),
    "INC": ((0xEE, _ABS, 6), (0xE6, _ZER, 5), (0xF6, _ZEX, 6), (0xFE, _ABX, 7)),
    "INX": ((0xE8, _IMP, 2),),
    "INY": ((0xC8, _IMP, 2),),
    "JMP": ((0x4C, _ABS, 3), (0x6C, _ABI, 5)),
    "JSR": ((0x20, _ABS, 6),),
    "LDA": ((0xA9, _IMM, 2), (0xAD, _ABS, 4), (0xA5, _ZER, 3), (0xA1, _INX, 6),
            (0xB1, _INY, 5), (0xB5, _ZEX, 4), (0xBD, _ABX, 4), (0xB9, _ABY, 4)),
    "LDX": ((0xA2, _IMM, 2), (0xAE, _ABS, 4), (0xA6, _ZER, 3), (0xBE, _ABY, 4),
            (0xB6, _ZEY, 4)),
    "LDY": ((0xA0, _IMM, 2), (0xAC, _ABS, 4), (0xA4, _ZER, 3), (0xB4, _ZEX, 4),
            (0xBC, _ABX, 4)),
    "LSR": ((0x4E, _ABS, 6), (0x46, _ZER, 5), (0x4A, _ACC, 2), (0x56, _ZEX, 6),
            (0x5E, _ABX, 7)),
    "NOP": ((0xEA, _IMP, 2),),
    "ORA": ((0x09, _IMM, 2), (0x0D, _ABS, 4), (0x05, _ZER, 3), (0x01, _INX, 6),
            (0x11, _INY, 5), (0x15, _ZEX, 4), (0x1D, _ABX, 4), (0x19, _ABY, 4)),
    "PHA": ((0x48, _IMP, 3),),
    "PHP": ((0x08, _IMP, 3),),
    "PLA": ((0x68, _IMP, 4),),
    "PLP": ((0x28, _IMP, 4),),
    "ROL": ((0x2E, _ABS, 6), (0x26, _ZER, 5), (0x2A, _ACC, 2), (0x36, _ZEX, 6),
            (0x3E, _ABX, 7)),
    "ROR": ((0x6E, _ABS, 6), (0x66, _ZER, 5), (0x6A, _ACC, 2), (0x76, _ZEX, 6),
            (0x7E, _ABX, 7)),
    "RTI": ((0x40, _IMP, 6),),
    "RTS": ((0x60, _IMP, 6),),
    "SBC": ((0xE9, _IMM, 2), (0xED, _ABS, 4), (0xE5, _ZER, 3), (0xE1, _INX, 6),
            (0xF1, _INY, 5), (0xF5, _ZEX, 4), (0xFD, _ABX, 4), (0xF9, _ABY, 4)),
    "SEC": ((0x38, _IMP, 2),),
    "SED": ((0xF8, _IMP, 2),),
    "SEI": ((0x78, _IMP, 2),),
    "STA": ((0x8D, _ABS, 4), (0x85, _ZER, 3), (0x81, _INX, 6), (0x91, _INY, 6),
            (0x95, _ZEX, 4), (0x9D, _ABX, 5), (0x99, _ABY, 5)),
    "STX": ((0x8E, _ABS, 4), (0x86, _ZER, 3), (0x96, _ZEY, 4)),
    "STY": ((0x8C, _ABS, 4), (0x84, _ZER, 3), (0x94, _ZEX, 4)),
    "TAX": ((0xAA, _IMP, 2),),
    "TAY": ((0xA8, _IMP, 2),),
    "TSX": ((0xBA, _IMP, 2),),
    "TXA": ((0x8A, _IMP, 2),),
    "TXS": ((0x9A, _IMP, 2),),
    "TYA": ((0x98, _IMP, 2),),
}


def _build_table() -> tuple[Instruction, ...]:
    entries = {
        opcode: Instruction(opcode, mnemonic, mode, cycles)
        for mnemonic, variants in _SPEC.items()
        for opcode, mode, cycles in variants
    }
    return tuple(
        entries.get(opcode, Instruction(opcode, ILLEGAL, _IMP, 0))
        for opcode in range(256)
    )


_TABLE = _build_table()


def _check(opcode: int) -> int:
    if not 0 <= opcode <= 0xFF:
        raise ValueError(f"opcode out of range: {opcode!r}")
    return opcode


def decode(opcode: int) -> Instruction:
    """Return the decode-table entry for an opcode byte."""
    return _TABLE[_check(opcode)]


def is_legal(opcode: int) -> bool:
    """Whether the opcode byte names an implemented instruction."""
    return _TABLE[_check(opcode)].legal