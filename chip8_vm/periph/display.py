"""
CHIP-8 Virtual Machine — Monochrome Framebuffer

The framebuffer is width × height pixels packed 8 per byte, row-major,
MSB = leftmost pixel. Each row is a bytearray of width // 8 bytes.

Sprite drawing (DXYN):
  - Each sprite byte is XORed into row (row + i) mod height, starting at
    pixel column col mod width.
  - When col is not byte-aligned the byte straddles two storage bytes:
        first  ^= byte >> shift
        second ^= (byte << (8 - shift)) & 0xFF
    where the second storage byte index wraps to the start of the row.
  - Any pixel that goes 1 → 0 is an erasure; draw() returns True if any
    bit in any row of the sprite was erased.

Wraparound is unconditional on both axes; there is no clipping mode.

The built-in font (16 glyphs, 0-F, 5 bytes each) lives here because the
display owns glyph addressing; the emulator copies it into memory at boot.
"""

from typing import List

from ..config import (DISPLAY_WIDTH, DISPLAY_HEIGHT, FONT_START,
                      FONT_GLYPH_BYTES, MAX_SPRITE_BYTES)
from ..errors import InvalidSprite


# Hex digit glyphs, 4 pixels wide (high nibble), 5 rows tall
FONT_SPRITES = (
    (0xF0, 0x90, 0x90, 0x90, 0xF0),  # 0
    (0x20, 0x60, 0x20, 0x20, 0x70),  # 1
    (0xF0, 0x10, 0xF0, 0x80, 0xF0),  # 2
    (0xF0, 0x10, 0xF0, 0x10, 0xF0),  # 3
    (0x90, 0x90, 0xF0, 0x10, 0x10),  # 4
    (0xF0, 0x80, 0xF0, 0x10, 0xF0),  # 5
    (0xF0, 0x80, 0xF0, 0x90, 0xF0),  # 6
    (0xF0, 0x10, 0x20, 0x40, 0x40),  # 7
    (0xF0, 0x90, 0xF0, 0x90, 0xF0),  # 8
    (0xF0, 0x90, 0xF0, 0x10, 0xF0),  # 9
    (0xF0, 0x90, 0xF0, 0x90, 0x90),  # A
    (0xE0, 0x90, 0xE0, 0x90, 0xE0),  # B
    (0xF0, 0x80, 0x80, 0x80, 0xF0),  # C
    (0xE0, 0x90, 0x90, 0x90, 0xE0),  # D
    (0xF0, 0x80, 0xF0, 0x80, 0xF0),  # E
    (0xF0, 0x80, 0xF0, 0x80, 0x80),  # F
)


def font_bytes() -> bytes:
    """All glyphs concatenated, in digit order, ready for copying to RAM."""
    return bytes(b for glyph in FONT_SPRITES for b in glyph)


def sprite_font_address(digit: int, font_start: int = FONT_START) -> int:
    """Memory address of the built-in glyph for a hex digit (FX29)."""
    if not 0 <= digit < len(FONT_SPRITES):
        raise InvalidSprite(digit)
    return font_start + digit * FONT_GLYPH_BYTES


class Display:
    """Bit-packed monochrome framebuffer with XOR sprite drawing."""

    def __init__(self, width: int = DISPLAY_WIDTH, height: int = DISPLAY_HEIGHT):
        if width <= 0 or width % 8:
            raise ValueError(f"Display width must be a positive multiple of 8, got {width}")
        if height <= 0:
            raise ValueError(f"Display height must be positive, got {height}")
        self._width = width
        self._height = height
        self._row_len = width // 8
        self._rows: List[bytearray] = [bytearray(self._row_len) for _ in range(height)]

    sprite_font_address = staticmethod(sprite_font_address)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def clear(self):
        """00E0: turn every pixel off."""
        for row in self._rows:
            row[:] = bytes(self._row_len)

    def draw(self, row: int, col: int, sprite) -> bool:
        """XOR a sprite onto the framebuffer at (row, col).

        Returns True if any set pixel was turned off.
        """
        if len(sprite) > MAX_SPRITE_BYTES:
            raise ValueError(
                f"Sprite is {len(sprite)} bytes, at most {MAX_SPRITE_BYTES} allowed")

        col %= self._width
        index, shift = divmod(col, 8)
        erased = False

        for offset, byte in enumerate(sprite):
            line = self._rows[(row + offset) % self._height]
            byte &= 0xFF

            first = byte >> shift
            if line[index] & first:
                erased = True
            line[index] ^= first

            if shift:
                second = (byte << (8 - shift)) & 0xFF
                wrapped = (index + 1) % self._row_len
                if line[wrapped] & second:
                    erased = True
                line[wrapped] ^= second

        return erased

    # --- Read-only access for renderers ---

    def pixel(self, row: int, col: int) -> bool:
        """State of one pixel. Coordinates wrap like draw()."""
        row %= self._height
        col %= self._width
        return bool(self._rows[row][col // 8] & (0x80 >> (col % 8)))

    def row_bytes(self, row: int) -> bytes:
        """Packed storage bytes of one row (MSB = leftmost pixel)."""
        return bytes(self._rows[row % self._height])

    def framebuffer(self) -> bytes:
        """Whole framebuffer, packed, row-major."""
        return b''.join(bytes(r) for r in self._rows)

    def lit_pixels(self) -> int:
        return sum(bin(b).count('1') for r in self._rows for b in r)

    def to_text(self, on: str = '#', off: str = '.') -> str:
        """Render the framebuffer as text, one line per row."""
        lines = []
        for r in range(self._height):
            lines.append(''.join(on if self.pixel(r, c) else off
                                 for c in range(self._width)))
        return '\n'.join(lines)
