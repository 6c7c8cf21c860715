"""
CHIP-8 Virtual Machine — Machine Configuration

Memory map (defaults):
  $000–$04F  Built-in hex font (16 glyphs × 5 bytes)
  $050–$1FF  Reserved (original interpreter area, unused)
  $200–$FFF  Program image + working RAM

Timing:
  Instructions run at cpu_hz, timers decrement at timer_hz (60 Hz on the
  original hardware). The core never looks at wall-clock time; these are
  only used by run() and the CLI to derive the step/tick ratio.
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
#  MEMORY
# =============================================================================
MEMORY_SIZE = 4096          # 12-bit address space
PROGRAM_START = 0x200       # ROM load address, PC at boot
FONT_START = 0x000          # Built-in glyphs copied here at boot
FONT_GLYPH_BYTES = 5
FONT_GLYPH_COUNT = 16

# =============================================================================
#  DISPLAY
# =============================================================================
DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32
MAX_SPRITE_BYTES = 15       # N field of DXYN is 4 bits

# =============================================================================
#  STACK / TIMING
# =============================================================================
STACK_DEPTH = 16
CPU_HZ = 600
TIMER_HZ = 60


@dataclass
class EmulatorConfig:
    """Machine configuration settings."""
    # Memory
    memory_size: int = MEMORY_SIZE
    program_start: int = PROGRAM_START
    font_start: int = FONT_START

    # Display
    display_width: int = DISPLAY_WIDTH
    display_height: int = DISPLAY_HEIGHT

    # Stack
    stack_depth: int = STACK_DEPTH

    # Timing
    cpu_hz: int = CPU_HZ
    timer_hz: int = TIMER_HZ

    # CXKK random source; None = nondeterministic
    seed: Optional[int] = None

    def __post_init__(self):
        if not self.program_start < self.memory_size <= MEMORY_SIZE:
            raise ValueError(
                f"memory_size must be in (${self.program_start:03X}, ${MEMORY_SIZE:04X}], "
                f"got ${self.memory_size:04X}")
        font_end = self.font_start + FONT_GLYPH_BYTES * FONT_GLYPH_COUNT
        if self.font_start < 0 or font_end > self.program_start:
            raise ValueError(
                f"Font (${self.font_start:03X}–${font_end - 1:03X}) must fit "
                f"below program start ${self.program_start:03X}")
        if self.stack_depth <= 0:
            raise ValueError(f"stack_depth must be positive, got {self.stack_depth}")
        if self.cpu_hz <= 0 or self.timer_hz <= 0:
            raise ValueError("cpu_hz and timer_hz must be positive")
        if self.timer_hz > self.cpu_hz:
            raise ValueError(
                f"timer_hz ({self.timer_hz}) must not exceed cpu_hz ({self.cpu_hz})")

    @property
    def steps_per_timer_tick(self) -> int:
        """Instructions executed between two timer decrements."""
        return self.cpu_hz // self.timer_hz
