"""A MOS 6502 CPU emulator, its opcode table, and a bare banked-memory machine."""

__version__ = "1.0.0"
__all__ = ["cpu", "machine", "opcodes"]