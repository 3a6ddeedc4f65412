# bare6502

An emulator for the MOS 6502 processor, together with a small machine that
runs a 6502 program against plain memory, a character port for input and
output, and switchable memory banks.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running a program

```
bare6502 PROGRAM
bare6502 --origin 0x0800 PROGRAM
```

The raw program image is placed in memory at the origin address (`0x0200`
by default; `--origin` takes decimal, `0x` hex or other Python integer
literals) and the reset vector points there. The machine runs until the
program writes an exit code, jumps to address `0x0000` (exit status 0), or
meets an opcode the CPU does not implement (exit status 0). The command's
exit status is the program's exit code.

### Memory map

| Address           | Purpose                                                   |
|-------------------|-----------------------------------------------------------|
| `0x00FF`          | character out: a byte written here goes to standard output |
| `0x00FE`          | character in: reading gives the next byte of standard input, read a line at a time; `0` when none is left |
| `0x00FA`          | bank select: only the low five bits are kept, choosing one of 32 banks |
| `0x00F9`          | exit: writing a value ends the run with that exit status  |
| `0x4000`–`0x7FFF` | the 16 KiB window onto the selected bank                  |
| `0xFFFC`–`0xFFFD` | reset vector                                              |

Everything else is ordinary RAM.

## Using the CPU on its own

`bare6502.cpu.CPU` talks to memory only through the callables you give it,
so any bus can be attached:

```python
from bare6502.cpu import CPU, CycleMethod

memory = bytearray(0x10000)
memory[0xFFFC:0xFFFE] = b"\x00\x02"           # reset vector -> 0x0200
memory[0x0200:0x0205] = bytes([0xA9, 0x2A,    # LDA #$2A
                               0xAA,          # TAX
                               0xE8,          # INX
                               0x02])         # illegal opcode: stops the CPU

def read(address):
    return memory[address]

def write(address, value):
    memory[address] = value

cpu = CPU(read, write, None)
cpu.reset()
cpu.run(100, CycleMethod.CYCLE_COUNT)
print(cpu.a, cpu.x, cpu.illegal_opcode)       # 42 43 True
```

- The third callable, if given, is called with the CPU once for each clock
  cycle of the previous instruction, before the next one is fetched.
- `CPU.step()` executes a single instruction and returns its
  `bare6502.opcodes.Instruction`.
- `CPU.run(cycles, cycle_method)` executes until the budget is spent or an
  illegal opcode is met, and returns the clock cycles used. With
  `CycleMethod.INST_COUNT` the budget counts instructions instead of cycles.
- `CPU.run_forever()` keeps going until an illegal opcode is met.
- `CPU.irq()` and `CPU.nmi()` raise interrupts; `irq` is ignored while the
  interrupt flag is set.
- Registers are read through `pc`, `s`, `p`, `a`, `x` and `y`. The values
  loaded by `reset()` are `reset_a`, `reset_x`, `reset_y`, `reset_s` and
  `reset_p`; `reset_p` always keeps the constant and break bits set.
- `bare6502.cpu.StatusFlag` names the bits of the status register.

Indirect `JMP` reproduces the original chip's page-wrap behaviour when the
pointer sits at the end of a page.

## Decoding opcodes

`bare6502.opcodes.decode(opcode)` returns an `Instruction` with the
mnemonic, `AddressingMode`, cycle count and size in bytes of any opcode
byte; `bare6502.opcodes.is_legal(opcode)` tells whether the CPU implements
it. Both raise `ValueError` for values outside 0–255. Only the documented
6502 instructions are implemented; every other opcode stops the CPU.

## Using the machine from Python

```python
import io
from bare6502.machine import Machine

program = bytes([0xA9, 0x48, 0x85, 0xFF,   # LDA #'H' ; STA $FF
                 0xA9, 0x07, 0x85, 0xF9])  # LDA #7   ; STA $F9 (exit 7)
out = io.BytesIO()
machine = Machine(program, io.BytesIO(), out, 0x0200)
print(machine.run(), out.getvalue())       # 7 b'H'
```

`Machine(image, stdin, stdout, origin)` takes the program image, binary
input and output streams (standard input and output when `None`) and the
origin address; it raises `ValueError` if the image does not fit.
`Machine.run()` resets the CPU, runs the program and returns its exit code.
`Machine.read` and `Machine.write` are the bus callables, `Machine.bank` is
the selected bank, and a write to the exit port raises `MachineExit`, which
`run` catches.

## What it does not do

The machine has no display, timers or interrupt-raising devices, and the
command offers no tracing, debugging or disassembly: it only loads a raw
image and runs it.