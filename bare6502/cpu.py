"""A MOS 6502 processor core driven by bus read/write callbacks."""

from __future__ import annotations

import enum
from typing import Callable, Optional

from .opcodes import AddressingMode, Instruction, decode

__all__ = ["StatusFlag", "CycleMethod", "CPU"]

ReadFn = Callable[[int], int]
WriteFn = Callable[[int, int], None]


class StatusFlag(enum.IntFlag):
    """Bits of the processor status register."""

    CARRY = 0x01
    ZERO = 0x02
    INTERRUPT = 0x04
    DECIMAL = 0x08
    BREAK = 0x10
    CONSTANT = 0x20
    OVERFLOW = 0x40
    NEGATIVE = 0x80


class CycleMethod(enum.Enum):
    """What the budget given to :meth:`CPU.run` counts."""

    INST_COUNT = "instructions"
    CYCLE_COUNT = "cycles"


_C = StatusFlag.CARRY
_Z = StatusFlag.ZERO
_I = StatusFlag.INTERRUPT
_D = StatusFlag.DECIMAL
_B = StatusFlag.BREAK
_K = StatusFlag.CONSTANT
_V = StatusFlag.OVERFLOW
_N = StatusFlag.NEGATIVE

_NMI_VECTOR = 0xFFFA
_RESET_VECTOR = 0xFFFC
_IRQ_VECTOR = 0xFFFE


class CPU:
    """6502 core; memory and devices are reached through ``read`` and ``write``."""

    def __init__(
        self,
        read: ReadFn,
        write: WriteFn,
        cycle: Optional[Callable[["CPU"], None]] = None,
    ) -> None:
        self._read = read
        self._write = write
        self._cycle = cycle

        self.reset_a = 0x00
        self.reset_x = 0x00
        self.reset_y = 0x00
        self.reset_s = 0xFD
        self._reset_p = int(_K)

        self._a = 0
        self._x = 0
        self._y = 0
        self._s = 0
        self._pc = 0
        self._p = 0
        self._illegal = False

    # -- registers -------------------------------------------------------

    @property
    def pc(self) -> int:
        return self._pc

    @property
    def s(self) -> int:
        return self._s

    @property
    def p(self) -> int:
        return self._p

    @property
    def a(self) -> int:
        return self._a

    @property
    def x(self) -> int:
        return self._x

    @property
    def y(self) -> int:
        return self._y

    @property
    def illegal_opcode(self) -> bool:
        """Whether execution stopped on an unimplemented opcode."""
        return self._illegal

    @property
    def reset_p(self) -> int:
        """Status value loaded on reset; the constant and break bits are always set."""
        return self._reset_p

    @reset_p.setter
    def reset_p(self, value: int) -> None:
        self._reset_p = (value & 0xFF) | _K | _B

    # -- control ---------------------------------------------------------

    def reset(self) -> None:
        """Load reset register values and jump through the reset vector."""
        self._a = self.reset_a & 0xFF
        self._x = self.reset_x & 0xFF
        self._y = self.reset_y & 0xFF
        self._pc = self._read_word(_RESET_VECTOR)
        self._s = self.reset_s & 0xFF
        self._p = self._reset_p | _K | _B
        self._illegal = False

    def irq(self) -> None:
        """Raise a maskable interrupt; ignored while the interrupt flag is set."""
        if not self._p & _I:
            self._interrupt(_IRQ_VECTOR)

    def nmi(self) -> None:
        """Raise a non-maskable interrupt."""
        self._interrupt(_NMI_VECTOR)

    def step(self) -> Instruction:
        """Fetch, decode and execute one instruction; return what was executed."""
        instr = decode(self._fetch())
        operand = self._ADDRESSING[instr.mode](self)
        self._OPERATIONS[instr.mnemonic](self, operand)
        return instr

    def run(
        self, cycles: int, cycle_method: CycleMethod = CycleMethod.CYCLE_COUNT
    ) -> int:
        """Execute until the budget is spent or an illegal opcode is met.

        Returns the number of clock cycles the executed instructions take.
        """
        remaining = cycles
        total = 0
        last = 0
        while remaining > 0 and not self._illegal:
            self._tick(last)
            instr = self.step()
            last = instr.cycles
            total += instr.cycles
            remaining -= (
                instr.cycles if cycle_method is CycleMethod.CYCLE_COUNT else 1
            )
        return total

    def run_forever(self) -> None:
        """Execute until an illegal opcode is met."""
        last = 0
        while not self._illegal:
            self._tick(last)
            last = self.step().cycles

    # -- helpers ---------------------------------------------------------

    def _tick(self, count: int) -> None:
        if self._cycle is not None:
            for _ in range(count):
                self._cycle(self)

    def _fetch(self) -> int:
        value = self._read(self._pc)
        self._pc = (self._pc + 1) & 0xFFFF
        return value

    def _fetch_word(self) -> int:
        low = self._fetch()
        return low | (self._fetch() << 8)

    def _read_word(self, address: int) -> int:
        return self._read(address) | (self._read((address + 1) & 0xFFFF) << 8)

    def _flag(self, flag: StatusFlag, on: object) -> None:
        if on:
            self._p |= flag
        else:
            self._p &= ~flag & 0xFF

    def _set_nz(self, value: int) -> None:
        self._flag(_N, value & 0x80)
        self._flag(_Z, not value & 0xFF)

    def _push(self, value: int) -> None:
        self._write(0x0100 + self._s, value & 0xFF)
        self._s = (self._s - 1) & 0xFF

    def _pop(self) -> int:
        self._s = (self._s + 1) & 0xFF
        return self._read(0x0100 + self._s)

    def _push_pc(self) -> None:
        self._push(self._pc >> 8)
        self._push(self._pc & 0xFF)

    def _interrupt(self, vector: int) -> None:
        self._push_pc()
        self._push((self._p & ~_B & 0xFF) | _K)
        self._flag(_I, True)
        self._pc = self._read_word(vector)

    # -- addressing modes ------------------------------------------------

    def _addr_acc(self) -> Optional[int]:
        return None

    def _addr_imp(self) -> int:
        return 0

    def _addr_imm(self) -> int:
        address = self._pc
        self._pc = (self._pc + 1) & 0xFFFF
        return address

    def _addr_abs(self) -> int:
        return self._fetch_word()

    def _addr_zer(self) -> int:
        return self._fetch()

    def _addr_rel(self) -> int:
        offset = self._fetch()
        if offset & 0x80:
            offset -= 0x100
        return (self._pc + offset) & 0xFFFF

    def _addr_abi(self) -> int:
        pointer = self._fetch_word()
        low = self._read(pointer)
        # The high byte is fetched without carrying into the pointer's page.
        high = self._read((pointer & 0xFF00) | ((pointer + 1) & 0x00FF))
        return low | (high << 8)

    def _addr_zex(self) -> int:
        return (self._fetch() + self._x) & 0xFF

    def _addr_zey(self) -> int:
        return (self._fetch() + self._y) & 0xFF

    def _addr_abx(self) -> int:
        return (self._fetch_word() + self._x) & 0xFFFF

    def _addr_aby(self) -> int:
        return (self._fetch_word() + self._y) & 0xFFFF

    def _addr_inx(self) -> int:
        zero = (self._fetch() + self._x) & 0xFF
        return self._read(zero) | (self._read((zero + 1) & 0xFF) << 8)

    def _addr_iny(self) -> int:
        zero = self._fetch()
        base = self._read(zero) | (self._read((zero + 1) & 0xFF) << 8)
        return (base + self._y) & 0xFFFF

    # -- operations ------------------------------------------------------

    def _modify(self, src: Optional[int], fn: Callable[[int], int]) -> None:
        """Read-modify-write on memory, or on A when ``src`` is None."""
        if src is None:
            self._a = fn(self._a) & 0xFF
        else:
            self._write(src, fn(self._read(src)) & 0xFF)

    def _op_illegal(self, src: int) -> None:
        self._illegal = True

    def _op_nop(self, src: int) -> None:
        pass

    def _op_adc(self, src: int) -> None:
        m = self._read(src)
        a = self._a
        carry = 1 if self._p & _C else 0
        total = m + a + carry
        overflow = not (a ^ m) & 0x80 and (a ^ total) & 0x80
        if self._p & _D:
            bcd = (a & 0x0F) + (m & 0x0F) + carry
            if bcd > 9:
                bcd += 6
            bcd = (bcd & 0x0F) + (a & 0xF0) + (m & 0xF0)
            self._flag(_V, overflow)
            if bcd > 0x9F:
                bcd += 0x60
            self._flag(_C, bcd > 0xFF)
            self._a = bcd & 0xFF
        else:
            self._flag(_V, overflow)
            self._flag(_C, total > 0xFF)
            self._a = total & 0xFF
        self._set_nz(self._a)

    def _op_sbc(self, src: int) -> None:
        m = self._read(src)
        a = self._a
        borrow = 0 if self._p & _C else 1
        diff = a - m - borrow
        overflow = (a ^ diff) & 0x80 and (a ^ m) & 0x80
        self._flag(_V, overflow)
        self._flag(_C, diff >= 0)
        if self._p & _D:
            bcd = (a & 0x0F) - (m & 0x0F) - borrow
            if bcd < 0:
                bcd = ((bcd - 0x06) & 0x0F) - 0x10
            bcd = bcd + (a & 0xF0) - (m & 0xF0)
            if bcd < 0:
                bcd -= 0x60
            self._a = bcd & 0xFF
        else:
            self._a = diff & 0xFF
        self._set_nz(self._a)

    def _op_and(self, src: int) -> None:
        self._a &= self._read(src)
        self._set_nz(self._a)

    def _op_ora(self, src: int) -> None:
        self._a |= self._read(src)
        self._set_nz(self._a)

    def _op_eor(self, src: int) -> None:
        self._a ^= self._read(src)
        self._set_nz(self._a)

    def _op_asl(self, src: Optional[int]) -> None:
        def shift(value: int) -> int:
            self._flag(_C, value & 0x80)
            result = (value << 1) & 0xFF
            self._set_nz(result)
            return result

        self._modify(src, shift)

    def _op_lsr(self, src: Optional[int]) -> None:
        def shift(value: int) -> int:
            self._flag(_C, value & 0x01)
            result = value >> 1
            self._set_nz(result)
            return result

        self._modify(src, shift)

    def _op_rol(self, src: Optional[int]) -> None:
        def rotate(value: int) -> int:
            wide = (value << 1) | (1 if self._p & _C else 0)
            self._flag(_C, wide > 0xFF)
            result = wide & 0xFF
            self._set_nz(result)
            return result

        self._modify(src, rotate)

    def _op_ror(self, src: Optional[int]) -> None:
        def rotate(value: int) -> int:
            wide = value | (0x100 if self._p & _C else 0)
            self._flag(_C, wide & 0x01)
            result = (wide >> 1) & 0xFF
            self._set_nz(result)
            return result

        self._modify(src, rotate)

    def _op_inc(self, src: int) -> None:
        def bump(value: int) -> int:
            result = (value + 1) & 0xFF
            self._set_nz(result)
            return result

        self._modify(src, bump)

    def _op_dec(self, src: int) -> None:
        def drop(value: int) -> int:
            result = (value - 1) & 0xFF
            self._set_nz(result)
            return result

        self._modify(src, drop)

    def _op_inx(self, src: int) -> None:
        self._x = (self._x + 1) & 0xFF
        self._set_nz(self._x)

    def _op_iny(self, src: int) -> None:
        self._y = (self._y + 1) & 0xFF
        self._set_nz(self._y)

    def _op_dex(self, src: int) -> None:
        self._x = (self._x - 1) & 0xFF
        self._set_nz(self._x)

    def _op_dey(self, src: int) -> None:
        self._y = (self._y - 1) & 0xFF
        self._set_nz(self._y)

    def _compare(self, register: int, src: int) -> None:
        diff = register - self._read(src)
        self._flag(_C, diff >= 0)
        self._set_nz(diff & 0xFF)

    def _op_cmp(self, src: int) -> None:
        self._compare(self._a, src)

    def _op_cpx(self, src: int) -> None:
        self._compare(self._x, src)

    def _op_cpy(self, src: int) -> None:
        self._compare(self._y, src)

    def _op_bit(self, src: int) -> None:
        m = self._read(src)
        self._p = (self._p & 0x3F) | (m & 0xC0) | _K | _B
        self._flag(_Z, not m & self._a)

    def _branch(self, taken: object, src: int) -> None:
        if taken:
            self._pc = src

    def _op_bcc(self, src: int) -> None:
        self._branch(not self._p & _C, src)

    def _op_bcs(self, src: int) -> None:
        self._branch(self._p & _C, src)

    def _op_beq(self, src: int) -> None:
        self._branch(self._p & _Z, src)

    def _op_bne(self, src: int) -> None:
        self._branch(not self._p & _Z, src)

    def _op_bmi(self, src: int) -> None:
        self._branch(self._p & _N, src)

    def _op_bpl(self, src: int) -> None:
        self._branch(not self._p & _N, src)

    def _op_bvc(self, src: int) -> None:
        self._branch(not self._p & _V, src)

    def _op_bvs(self, src: int) -> None:
        self._branch(self._p & _V, src)

    def _op_brk(self, src: int) -> None:
        self._pc = (self._pc + 1) & 0xFFFF
        self._push_pc()
        self._push(self._p | _K | _B)
        self._flag(_I, True)
        self._pc = self._read_word(_IRQ_VECTOR)

    def _op_clc(self, src: int) -> None:
        self._flag(_C, False)

    def _op_cld(self, src: int) -> None:
        self._flag(_D, False)

    def _op_cli(self, src: int) -> None:
        self._flag(_I, False)

    def _op_clv(self, src: int) -> None:
        self._flag(_V, False)

    def _op_sec(self, src: int) -> None:
        self._flag(_C, True)

    def _op_sed(self, src: int) -> None:
        self._flag(_D, True)

    def _op_sei(self, src: int) -> None:
        self._flag(_I, True)

    def _op_jmp(self, src: int) -> None:
        self._pc = src

    def _op_jsr(self, src: int) -> None:
        self._pc = (self._pc - 1) & 0xFFFF
        self._push_pc()
        self._pc = src

    def _op_rts(self, src: int) -> None:
        low = self._pop()
        high = self._pop()
        self._pc = (((high << 8) | low) + 1) & 0xFFFF

    def _op_rti(self, src: int) -> None:
        self._p = self._pop() | _K | _B
        low = self._pop()
        high = self._pop()
        self._pc = (high << 8) | low

    def _op_lda(self, src: int) -> None:
        self._a = self._read(src)
        self._set_nz(self._a)

    def _op_ldx(self, src: int) -> None:
        self._x = self._read(src)
        self._set_nz(self._x)

    def _op_ldy(self, src: int) -> None:
        self._y = self._read(src)
        self._set_nz(self._y)

    def _op_sta(self, src: int) -> None:
        self._write(src, self._a)

    def _op_stx(self, src: int) -> None:
        self._write(src, self._x)

    def _op_sty(self, src: int) -> None:
        self._write(src, self._y)

    def _op_pha(self, src: int) -> None:
        self._push(self._a)

    def _op_php(self, src: int) -> None:
        self._push(self._p | _K | _B)

    def _op_pla(self, src: int) -> None:
        self._a = self._pop()
        self._set_nz(self._a)

    def _op_plp(self, src: int) -> None:
        self._p = self._pop() | _K | _B

    def _op_tax(self, src: int) -> None:
        self._x = self._a
        self._set_nz(self._x)

    def _op_tay(self, src: int) -> None:
        self._y = self._a
        self._set_nz(self._y)

    def _op_tsx(self, src: int) -> None:
        self._x = self._s
        self._set_nz(self._x)

    def _op_txa(self, src: int) -> None:
        self._a = self._x
        self._set_nz(self._a)

    def _op_txs(self, src: int) -> None:
        self._s = self._x

    def _op_tya(self, src: int) -> None:
        self._a = self._y
        self._set_nz(self._a)

    _ADDRESSING = {
        AddressingMode.ACCUMULATOR: _addr_acc,
        AddressingMode.IMMEDIATE: _addr_imm,
        AddressingMode.ABSOLUTE: _addr_abs,
        AddressingMode.ZERO_PAGE: _addr_zer,
        AddressingMode.ZERO_PAGE_X: _addr_zex,
        AddressingMode.ZERO_PAGE_Y: _addr_zey,
        AddressingMode.ABSOLUTE_X: _addr_abx,
        AddressingMode.ABSOLUTE_Y: _addr_aby,
        AddressingMode.IMPLIED: _addr_imp,
        AddressingMode.RELATIVE: _addr_rel,
        AddressingMode.INDEXED_INDIRECT: _addr_inx,
        AddressingMode.INDIRECT_INDEXED: _addr_iny,
        AddressingMode.ABSOLUTE_INDIRECT: _addr_abi,
    }

    _OPERATIONS = {
        "ILLEGAL": _op_illegal,
        "ADC": _op_adc, "AND": _op_and, "ASL": _op_asl, "BCC": _op_bcc,
        "BCS": _op_bcs, "BEQ": _op_beq, "BIT": _op_bit, "BMI": _op_bmi,
        "BNE": _op_bne, "BPL": _op_bpl, "BRK": _op_brk, "BVC": _op_bvc,
        "BVS": _op_bvs, "CLC": _op_clc, "CLD": _op_cld, "CLI": _op_cli,
        "CLV": _op_clv, "CMP": _op_cmp, "CPX": _op_cpx, "CPY": _op_cpy,
        "DEC": _op_dec, "DEX": _op_dex, "DEY": _op_dey, "EOR": _op_eor,
        "INC": _op_inc, "INX": _op_inx, "INY": _op_iny, "JMP": _op_jmp,
        "JSR": _op_jsr, "LDA": _op_lda, "LDX": _op_ldx, "LDY": _op_ldy,
        "LSR": _op_lsr, "NOP": _op_nop, "ORA": _op_ora, "PHA": _op_pha,
        "PHP": _op_php, "PLA": _op_pla, "PLP": _op_plp, "ROL": _op_rol,
        "ROR": _op_ror, "RTI": _op_rti, "RTS": _op_rts, "SBC": _op_sbc,
        "SEC": _op_sec, "SED": _op_sed, "SEI": _op_sei, "STA": _op_sta,
        "STX": _op_stx, "STY": _op_sty, "TAX": _op_tax, "TAY": _op_tay,
        "TSX": _op_tsx, "TXA": _op_txa, "TXS": _op_txs, "TYA": _op_tya,
    }