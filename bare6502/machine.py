"""A bare 6502 machine: flat RAM, banked window, console and exit ports."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import BinaryIO, Optional, Sequence

from .cpu import CPU

__all__ = ["MachineExit", "Machine", "main"]

CHAR_OUT = 0x00FF
CHAR_IN = 0x00FE
TRACE = 0x00FC
BANK = 0x00FA
EXITCODE = 0x00F9

BANK_SIZE = 0x4000
BANK_BASE = 0x4000
BANK_COUNT = 0x20
BANK_MASK = BANK_COUNT - 1

DEFAULT_ORIGIN = 0x0200
MEMORY_SIZE = 0x10000
_LINE_LIMIT = 8192 - 1
_RESET_VECTOR = 0xFFFC


class MachineExit(Exception):
    """Raised when the running program asks the machine to stop."""

    def __init__(self, code: int) -> None:
        super().__init__(f"machine exited with code {code}")
        self.code = code


class Machine:
    """Memory map and devices around a 6502 core.

    Addresses 0x4000-0x7FFF are a window onto one of 32 banks, chosen by the
    byte at 0x00FA. Writing 0x00FF prints a byte, reading 0x00FE takes the next
    input byte (0 when none is left) and writing 0x00F9 ends the run.
    """

    def __init__(
        self,
        image: bytes,
        stdin: Optional[BinaryIO] = None,
        stdout: Optional[BinaryIO] = None,
        origin: int = DEFAULT_ORIGIN,
    ) -> None:
        if not 0 <= origin <= 0xFFFF:
            raise ValueError(f"origin out of range: {origin:#x}")
        if origin + len(image) > MEMORY_SIZE:
            raise ValueError("image does not fit in memory at the given origin")
        self.stdin = stdin if stdin is not None else sys.stdin.buffer
        self.stdout = stdout if stdout is not None else sys.stdout.buffer
        self.origin = origin

        self.memory = bytearray(MEMORY_SIZE)
        self.banks = [bytearray(BANK_SIZE) for _ in range(BANK_COUNT)]
        self.memory[BANK] = 0
        self.memory[origin:origin + len(image)] = image
        self.memory[_RESET_VECTOR] = origin & 0xFF
        self.memory[_RESET_VECTOR + 1] = origin >> 8

        self._keys = b""
        self._key_pos = 0
        self._eof = False

    @property
    def bank(self) -> int:
        """Number of the bank currently mapped into the window."""
        return self.memory[BANK]

    @staticmethod
    def _in_window(address: int) -> bool:
        return BANK_BASE <= address < BANK_BASE + BANK_SIZE

    def _next_key(self) -> int:
        if self._key_pos < len(self._keys):
            key = self._keys[self._key_pos]
            self._key_pos += 1
            return key
        if self._eof:
            return 0
        line = self.stdin.readline(_LINE_LIMIT)
        if not line:
            self._eof = True
            return 0
        self._eof = not line.endswith(b"\n") and len(line) < _LINE_LIMIT
        self._keys = line.split(b"\0", 1)[0]
        self._key_pos = 0
        if not self._keys:
            return 0
        self._key_pos = 1
        return self._keys[0]

    def read(self, address: int) -> int:
        """Bus read: serve devices, then the banked window or plain RAM."""
        address &= 0xFFFF
        if address == CHAR_IN:
            self.memory[address] = self._next_key()
        if self._in_window(address):
            return self.banks[self.memory[BANK]][address - BANK_BASE]
        return self.memory[address]

    def write(self, address: int, value: int) -> None:
        """Bus write: serve devices, then store into the window or plain RAM."""
        address &= 0xFFFF
        value &= 0xFF
        if address == EXITCODE:
            raise MachineExit(value)
        if address == BANK:
            value &= BANK_MASK
        elif address == CHAR_OUT:
            self.stdout.write(bytes((value,)))
        if self._in_window(address):
            self.banks[self.memory[BANK]][address - BANK_BASE] = value
        else:
            self.memory[address] = value

    def on_cycle(self, cpu: CPU) -> None:
        """Clock hook: a jump to address zero ends the run."""
        if cpu.pc == 0x0000:
            raise MachineExit(0)

    def run(self) -> int:
        """Reset the processor and run the image; return its exit code."""
        cpu = CPU(self.read, self.write, self.on_cycle)
        cpu.reset()
        try:
            cpu.run_forever()
        except MachineExit as stop:
            return stop.code
        finally:
            self.stdout.flush()
        return 0


def _address(text: str) -> int:
    return int(text, 0)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Load a raw binary image and run it on the bare machine."""
    parser = argparse.ArgumentParser(
        prog="bare6502", description="Run a raw 6502 binary on a bare machine."
    )
    parser.add_argument("image", type=Path, help="raw binary to load")
    parser.add_argument(
        "--origin",
        type=_address,
        default=DEFAULT_ORIGIN,
        help="load and start address (default 0x0200)",
    )
    args = parser.parse_args(argv)
    try:
        image = args.image.read_bytes()
        machine = Machine(image, origin=args.origin)
    except (OSError, ValueError) as err:
        parser.error(str(err))
    return machine.run()


if __name__ == "__main__":
    raise SystemExit(main())