# CHIP-8 Virtual Machine — Pure-software CHIP-8 interpreter core
#
# Layout:
#   cpu/     registers, ALU flag helpers, opcode decoder
#   mem/     4K RAM, call stack
#   periph/  timers, framebuffer, keypad latch
#   emu.py   fetch/decode/execute engine + run loop
#   cli.py   headless ROM runner
#
# Presentation (window, pixels, audio) and host keyboard mapping are left
# to the frontend; the core exposes step(), tick_timers(), press_key()/
# release_key() and read-only display access.
"""
CHIP-8 Virtual Machine
======================
An interpreter for the CHIP-8 8-bit virtual instruction set.

    from chip8_vm import Chip8Emulator
    emu = Chip8Emulator()
    emu.load_binary(open('pong.ch8', 'rb').read())
    emu.run(max_steps=5000)
    print(emu.display.to_text())
"""

__version__ = "0.1.0"

from .config import EmulatorConfig
from .errors import *
from .emu import Chip8Emulator, StopReason
from .cpu.decoder import Opcode, decode, decode_word
