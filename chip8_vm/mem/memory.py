"""
CHIP-8 Virtual Machine — Flat 4K Memory

Memory is a single zero-filled bytearray. Unlike a wrapping address bus,
every access is bounds-checked: an address at or past the end of memory
raises AddressOutOfBounds and nothing is written.

Users:
  - boot sequence (font copy to $000)
  - program loader (ROM image at $200)
  - FX33 / FX55 / FX65 / DXYN and the instruction fetch
"""

from typing import Dict

from ..config import MEMORY_SIZE
from ..errors import AddressOutOfBounds


class Memory:
    """Byte-addressable RAM with bounds-checked access."""

    def __init__(self, size: int = MEMORY_SIZE):
        self._size = size
        self._mem = bytearray(size)

    @property
    def size(self) -> int:
        return self._size

    def _check(self, addr: int):
        if not 0 <= addr < self._size:
            raise AddressOutOfBounds(addr, self._size)

    # --- Core read/write ---

    def read8(self, addr: int) -> int:
        """Read 8-bit value from address."""
        self._check(addr)
        return self._mem[addr]

    def write8(self, addr: int, value: int):
        """Write 8-bit value to address. Value is truncated to 8 bits."""
        self._check(addr)
        self._mem[addr] = value & 0xFF

    def read16(self, addr: int) -> int:
        """Read 16-bit value (big-endian, CHIP-8 instruction byte order)."""
        hi = self.read8(addr)
        lo = self.read8(addr + 1)
        return (hi << 8) | lo

    # --- Bulk load ---

    def load_binary(self, data: bytes, base_addr: int):
        """Copy data verbatim into memory starting at base_addr.

        The whole image is range-checked first, so an oversized image
        leaves memory untouched.
        """
        data = bytes(data)
        if data:
            self._check(base_addr)
            self._check(base_addr + len(data) - 1)
        self._mem[base_addr:base_addr + len(data)] = data

    # --- Snapshots / diffing ---

    def snapshot(self, start: int = 0, end: int = None) -> bytes:
        """Copy of memory from start to end (inclusive, default last byte)."""
        if end is None:
            end = self._size - 1
        self._check(start)
        self._check(end)
        return bytes(self._mem[start:end + 1])

    @staticmethod
    def diff_snapshots(snap_a: bytes, snap_b: bytes,
                       base_addr: int = 0) -> Dict[int, tuple]:
        """Compare two snapshots, return {addr: (old, new)} for changes."""
        changes = {}
        for i in range(min(len(snap_a), len(snap_b))):
            if snap_a[i] != snap_b[i]:
                changes[base_addr + i] = (snap_a[i], snap_b[i])
        return changes

    # --- Hex dump ---

    def hexdump(self, start: int, length: int = 256) -> str:
        """Produce a hex dump of memory for debugging. Stops at end of RAM."""
        lines = []
        end = min(start + length, self._size)
        for addr in range(start, end, 16):
            row = self._mem[addr:min(addr + 16, end)]
            hex_bytes = ' '.join(f'{b:02X}' for b in row)
            ascii_bytes = ''.join(chr(b) if 0x20 <= b < 0x7F else '.' for b in row)
            lines.append(f'{addr:03X}  {hex_bytes:<47s}  {ascii_bytes}')
        return '\n'.join(lines)
