"""
CHIP-8 Virtual Machine — CPU Register Set

Register model:
  V0–VE — 8-bit general purpose registers
  VF    — 8-bit, doubles as the flag register: carry (8XY4), NOT-borrow
          (8XY5/8XY7), shifted-out bit (8XY6/8XYE) and sprite collision
          (DXYN). Every opcode that defines VF overwrites it.
  I     — 16-bit index register (memory pointer for DXYN, FX33/55/65)
  PC    — 16-bit program counter

Register indices come from 4-bit instruction fields, so they are always
0–15 and are not re-validated here.
"""

from typing import List

NUM_REGISTERS = 16
VF = 0xF


class Registers:
    """CHIP-8 CPU register set."""

    __slots__ = ('V', '_I', '_PC')

    def __init__(self):
        self.V: List[int] = [0] * NUM_REGISTERS
        self._I: int = 0
        self._PC: int = 0

    # --- General registers ---

    def read(self, index: int) -> int:
        return self.V[index]

    def write(self, index: int, value: int):
        self.V[index] = value & 0xFF

    @property
    def flag(self) -> int:
        """VF"""
        return self.V[VF]

    @flag.setter
    def flag(self, value: int):
        self.V[VF] = value & 0xFF

    # --- 16-bit registers ---

    @property
    def I(self) -> int:
        return self._I

    @I.setter
    def I(self, value: int):
        self._I = value & 0xFFFF

    @property
    def PC(self) -> int:
        return self._PC

    @PC.setter
    def PC(self, value: int):
        self._PC = value & 0xFFFF

    # --- Display ---

    def display(self) -> str:
        """Format register state for debugging."""
        v = ' '.join(f'V{i:X}={val:02X}' for i, val in enumerate(self.V))
        return f"PC={self._PC:03X} I={self._I:03X} {v}"

    def reset(self):
        """Clear all registers. PC is set by the boot sequence."""
        self.V = [0] * NUM_REGISTERS
        self._I = 0
        self._PC = 0
