import pytest

from bare6502.cpu import CPU, CycleMethod, StatusFlag
from bare6502.opcodes import decode

ORIGIN = 0x0200


def make_cpu(program, cycle=None):
    mem = bytearray(0x10000)
    mem[ORIGIN:ORIGIN + len(program)] = bytes(program)
    mem[0xFFFC] = ORIGIN & 0xFF
    mem[0xFFFD] = ORIGIN >> 8
    cpu = CPU(mem.__getitem__, mem.__setitem__, cycle)
    cpu.reset()
    return cpu, mem


def steps(cpu, count):
    for _ in range(count):
        cpu.step()


def flag(cpu, which):
    return bool(cpu.p & which)


def test_reset_state():
    cpu, _ = make_cpu([])
    assert cpu.pc == ORIGIN
    assert cpu.s == 0xFD
    assert cpu.p == StatusFlag.CONSTANT | StatusFlag.BREAK
    assert (cpu.a, cpu.x, cpu.y) == (0, 0, 0)
    assert cpu.illegal_opcode is False


def test_reset_uses_configured_values():
    cpu, _ = make_cpu([])
    cpu.reset_a = 0x11
    cpu.reset_x = 0x22
    cpu.reset_y = 0x33
    cpu.reset_s = 0x80
    cpu.reset_p = StatusFlag.CARRY
    cpu.reset()
    assert (cpu.a, cpu.x, cpu.y, cpu.s) == (0x11, 0x22, 0x33, 0x80)
    assert cpu.reset_p == StatusFlag.CARRY | StatusFlag.CONSTANT | StatusFlag.BREAK
    assert flag(cpu, StatusFlag.CARRY) is True


@pytest.mark.parametrize("value", [0x00, 0x42, 0x80])
def test_lda_immediate_sets_flags(value):
    cpu, _ = make_cpu([0xA9, value])
    cpu.step()
    assert cpu.a == value
    assert bool(cpu.p & StatusFlag.ZERO) == (value == 0)
    assert bool(cpu.p & StatusFlag.NEGATIVE) == bool(value & 0x80)


def test_store_and_load_absolute_round_trip():
    cpu, mem = make_cpu([0xA9, 0x5A, 0x8D, 0x34, 0x12, 0xAE, 0x34, 0x12])
    steps(cpu, 3)
    assert mem[0x1234] == 0x5A
    assert cpu.x == 0x5A


def test_adc_carry_out():
    cpu, _ = make_cpu([0xA9, 0xFF, 0x18, 0x69, 0x01])
    steps(cpu, 3)
    assert cpu.a == 0
    assert flag(cpu, StatusFlag.CARRY) is True
    assert flag(cpu, StatusFlag.ZERO) is True


def test_adc_signed_overflow():
    cpu, _ = make_cpu([0xA9, 0x50, 0x18, 0x69, 0x50])
    steps(cpu, 3)
    assert cpu.a == 0xA0
    assert flag(cpu, StatusFlag.OVERFLOW) is True
    assert flag(cpu, StatusFlag.NEGATIVE) is True
    assert flag(cpu, StatusFlag.CARRY) is False


def test_sbc_then_adc_restores_accumulator():
    program = [0x38, 0xA9, 0x37, 0xE9, 0x12, 0x18, 0x69, 0x12]
    cpu, _ = make_cpu(program)
    steps(cpu, 5)
    assert cpu.a == 0x37


def test_sbc_borrow_clears_carry():
    cpu, _ = make_cpu([0x38, 0xA9, 0x01, 0xE9, 0x02])
    steps(cpu, 3)
    assert cpu.a == 0xFF
    assert flag(cpu, StatusFlag.CARRY) is False
    assert flag(cpu, StatusFlag.NEGATIVE) is True


def test_decimal_subtract_round_trip():
    cpu, _ = make_cpu([0xF8, 0x38, 0xA9, 0x47, 0xE9, 0x28])
    steps(cpu, 4)
    assert cpu.a == 0x19
    assert flag(cpu, StatusFlag.CARRY) is True


def test_compare_flags():
    cpu, _ = make_cpu([0xA9, 0x10, 0xC9, 0x10, 0xC9, 0x20])
    steps(cpu, 2)
    assert flag(cpu, StatusFlag.ZERO) is True
    assert flag(cpu, StatusFlag.CARRY) is True
    cpu.step()
    assert flag(cpu, StatusFlag.ZERO) is False
    assert flag(cpu, StatusFlag.CARRY) is False
    assert cpu.a == 0x10


def test_push_pull_round_trip():
    cpu, _ = make_cpu([0xA9, 0x77, 0x48, 0xA9, 0x00, 0x68])
    start = cpu.s
    steps(cpu, 2)
    assert cpu.s == (start - 1) & 0xFF
    steps(cpu, 2)
    assert cpu.a == 0x77
    assert cpu.s == start


def test_jsr_rts_returns_after_call():
    cpu, mem = make_cpu([0x20, 0x00, 0x03])
    mem[0x0300:0x0303] = bytes([0xA9, 0x42, 0x60])
    start = cpu.s
    cpu.step()
    assert cpu.pc == 0x0300
    steps(cpu, 2)
    assert cpu.a == 0x42
    assert cpu.pc == ORIGIN + 3
    assert cpu.s == start


def test_brk_and_rti():
    cpu, mem = make_cpu([0x00])
    mem[0xFFFE] = 0x00
    mem[0xFFFF] = 0x04
    mem[0x0400] = 0x40
    start = cpu.s
    cpu.step()
    assert cpu.pc == 0x0400
    assert flag(cpu, StatusFlag.INTERRUPT) is True
    assert cpu.s == (start - 3) & 0xFF
    assert bool(mem[0x0100 + cpu.s + 1] & StatusFlag.BREAK) is True
    cpu.step()
    assert cpu.pc == ORIGIN + 2
    assert cpu.s == start


def test_irq_masked_and_unmasked():
    cpu, mem = make_cpu([0x78, 0x58])
    mem[0xFFFE] = 0x00
    mem[0xFFFF] = 0x05
    cpu.step()
    cpu.irq()
    assert cpu.pc == ORIGIN + 1
    cpu.step()
    cpu.irq()
    assert cpu.pc == 0x0500
    assert flag(cpu, StatusFlag.INTERRUPT) is True
    pushed = mem[0x0100 + cpu.s + 1]
    assert bool(pushed & StatusFlag.BREAK) is False
    assert bool(pushed & StatusFlag.CONSTANT) is True


def test_nmi_ignores_interrupt_flag():
    cpu, mem = make_cpu([0x78])
    mem[0xFFFA] = 0x00
    mem[0xFFFB] = 0x06
    cpu.step()
    cpu.nmi()
    assert cpu.pc == 0x0600


def test_backward_branch_loop():
    cpu, _ = make_cpu([0xA2, 0x03, 0xCA, 0xD0, 0xFD, 0x02])
    cpu.run(1000)
    assert cpu.x == 0
    assert cpu.illegal_opcode is True


def test_indirect_jump_page_wrap():
    cpu, mem = make_cpu([0x6C, 0xFF, 0x10])
    mem[0x10FF] = 0x00
    mem[0x1000] = 0x03
    mem[0x1100] = 0x04
    cpu.step()
    assert cpu.pc == 0x0300


def test_zero_page_x_wraps():
    cpu, mem = make_cpu([0xA2, 0x01, 0xB5, 0xFF])
    mem[0x0000] = 0x66
    mem[0x0100] = 0x99
    steps(cpu, 2)
    assert cpu.a == 0x66


def test_rotate_round_trip_through_accumulator():
    cpu, _ = make_cpu([0xA9, 0x81, 0x18, 0x2A, 0x6A])
    steps(cpu, 3)
    assert flag(cpu, StatusFlag.CARRY) is True
    cpu.step()
    assert cpu.a == 0x81


def test_transfer_stack_pointer_round_trip():
    cpu, _ = make_cpu([0xA2, 0x40, 0x9A, 0xA2, 0x00, 0xBA])
    steps(cpu, 4)
    assert cpu.s == 0x40
    assert cpu.x == 0x40


def test_illegal_opcode_stops_run():
    cpu, _ = make_cpu([0x02])
    total = cpu.run(100)
    assert total == decode(0x02).cycles
    assert cpu.illegal_opcode is True
    assert cpu.pc == ORIGIN + 1
    cpu.reset()
    assert cpu.illegal_opcode is False


def test_run_reports_cycles_of_executed_instructions():
    program = [0xEA, 0xEA, 0xA9, 0x01, 0x02]
    cpu, _ = make_cpu(program)
    total = cpu.run(1000)
    expected = sum(decode(op).cycles for op in (0xEA, 0xEA, 0xA9, 0x02))
    assert total == expected


def test_run_by_instruction_count():
    cpu, _ = make_cpu([0xEA] * 10)
    cpu.run(2, CycleMethod.INST_COUNT)
    assert cpu.pc == ORIGIN + 2


def test_run_by_cycle_count_stops_when_budget_spent():
    cpu, _ = make_cpu([0xEA] * 10)
    nop = decode(0xEA).cycles
    total = cpu.run(nop * 3)
    assert total == nop * 3
    assert cpu.pc == ORIGIN + 3


def test_cycle_callback_ticks_for_previous_instruction():
    ticks = []
    cpu, _ = make_cpu([0xEA] * 4, cycle=ticks.append)
    cpu.run(2, CycleMethod.INST_COUNT)
    assert len(ticks) == decode(0xEA).cycles
    assert all(t is cpu for t in ticks)


def test_run_forever_stops_on_illegal_opcode():
    cpu, mem = make_cpu([0xA9, 0x09, 0x85, 0x10, 0x02])
    cpu.run_forever()
    assert mem[0x10] == 0x09
    assert cpu.illegal_opcode is True


def test_bit_copies_high_bits_of_memory():
    cpu, mem = make_cpu([0xA9, 0x01, 0x24, 0x20])
    mem[0x20] = 0xC0
    steps(cpu, 2)
    assert flag(cpu, StatusFlag.NEGATIVE) is True
    assert flag(cpu, StatusFlag.OVERFLOW) is True
    assert flag(cpu, StatusFlag.ZERO) is True
    assert cpu.a == 0x01


def test_inc_dec_memory_round_trip():
    cpu, mem = make_cpu([0xE6, 0x30, 0xC6, 0x30])
    mem[0x30] = 0xFF
    cpu.step()
    assert mem[0x30] == 0
    assert flag(cpu, StatusFlag.ZERO) is True
    cpu.step()
    assert mem[0x30] == 0xFF
    assert flag(cpu, StatusFlag.NEGATIVE) is True