"""
CHIP-8 Virtual Machine — Main Emulator Class

This is the top-level class that integrates:
  - CPU registers (regs.py)
  - Memory + call stack (memory.py, stack.py)
  - Opcode decoder (decoder.py)
  - ALU flag helpers (alu.py)
  - Peripherals: timers, display, keypad

Execution model (one step()):
  1. Fetch the 2-byte instruction word at PC
  2. Decode it → Opcode value
  3. Advance PC by 2
  4. Execute the opcode handler → update registers, memory, peripherals;
     jumps/skips/calls set or adjust PC directly

Timers are NOT advanced by step(). The scheduler calls tick_timers() at
its own, slower cadence; run() does this on a fixed step/tick ratio.

Error contract:
  step() raises the most specific Chip8Error subclass. PC is put back on
  the faulting instruction; any other effect an opcode committed before
  failing (e.g. the first bytes of an FX55 dump) stays committed.
  run() converts errors into a StopReason instead of raising.

Termination reasons (run):
  - TIMEOUT:  max_steps executed
  - BREAK:    breakpoint address hit
  - ILLEGAL:  undefined opcode / bad address operand
  - ERROR:    any other core error (memory, stack, sprite, key)
"""

import logging
import random
from enum import Enum
from pathlib import Path
from typing import Optional, Set

from .config import EmulatorConfig
from .cpu import alu
from .cpu import decoder as ops
from .cpu.regs import Registers
from .errors import Chip8Error, InvalidOpcode, OpcodeError
from .mem.memory import Memory
from .mem.stack import CallStack
from .periph.display import Display, font_bytes, sprite_font_address
from .periph.keypad import Keypad
from .periph.timer import Timers

log = logging.getLogger(__name__)


class StopReason(Enum):
    TIMEOUT = 'TIMEOUT'
    BREAK = 'BREAK'
    ILLEGAL = 'ILLEGAL'
    ERROR = 'ERROR'


class Chip8Emulator:
    """CHIP-8 virtual machine.

    Usage:
        emu = Chip8Emulator()          # boots: font at $000, PC=$200
        emu.load_binary(rom_bytes)
        reason = emu.run(max_steps=10_000)
        print(emu.display.to_text())
    """

    def __init__(self, config: Optional[EmulatorConfig] = None):
        self.config = config or EmulatorConfig()

        # Core components
        self.regs = Registers()
        self.mem = Memory(self.config.memory_size)
        self.stack = CallStack(self.config.stack_depth)

        # Peripherals
        self.timers = Timers()
        self.display = Display(self.config.display_width, self.config.display_height)
        self.keypad = Keypad()

        self.rng = random.Random(self.config.seed)

        # Breakpoints: set of PC addresses that trigger BREAK
        self._breakpoints: Set[int] = set()

        # Trace output
        self._trace = False
        self._trace_output = []

        # Last error seen by run()
        self.last_error: Optional[Chip8Error] = None

        # Instruction dispatch table: Opcode class → handler
        self._dispatch = self._build_dispatch()

        self.boot()

    # ══════════════════════════════════════════════
    # Boot / loading
    # ══════════════════════════════════════════════

    def boot(self):
        """Power-on sequence: font into RAM, clean state, PC at program start."""
        self.mem.load_binary(font_bytes(), self.config.font_start)
        self.regs.reset()
        self.stack.reset()
        self.timers.reset()
        self.display.clear()
        self.keypad.reset()
        self.regs.PC = self.config.program_start
        log.info("Booted: font at $%03X, PC=$%03X",
                 self.config.font_start, self.regs.PC)

    def load_binary(self, path_or_data, base_addr: Optional[int] = None):
        """Copy a raw program image into memory (default: program start).

        No header, no relocation, no decodability check; undefined opcodes
        are only detected when step() reaches them.
        """
        if isinstance(path_or_data, (str, Path)):
            data = self._read_rom(path_or_data)
        else:
            data = bytes(path_or_data)
        if base_addr is None:
            base_addr = self.config.program_start
        self.mem.load_binary(data, base_addr)
        log.info("Loaded %d bytes at $%03X", len(data), base_addr)

    def load_rom_file(self, path):
        """Load a ROM file at program start. Missing file → FileNotFoundError."""
        self.load_binary(Path(path))

    @staticmethod
    def _read_rom(path) -> bytes:
        return Path(path).read_bytes()

    # ══════════════════════════════════════════════
    # Input / timers
    # ══════════════════════════════════════════════

    def press_key(self, key: str):
        self.keypad.press(key)

    def release_key(self):
        self.keypad.release()

    def tick_timers(self):
        """Timer cadence entry point (60 Hz on real hardware)."""
        self.timers.tick()

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def fetch(self) -> ops.Opcode:
        """Fetch and decode the instruction at PC without executing it."""
        pc = self.regs.PC
        high = self.mem.read8(pc)
        low = self.mem.read8(pc + 1)
        return ops.decode(high, low, self.mem.size)

    def step(self) -> ops.Opcode:
        """Execute one instruction and return the opcode that ran.

        Raises Chip8Error on failure, with PC restored to the faulting
        instruction.
        """
        pc = self.regs.PC
        opcode = self.fetch()

        if self._trace:
            # Register state before the instruction runs
            line = f"${pc:03X}: {str(opcode):16s} {self.regs.display()}"
            self._trace_output.append(line)
            log.debug(line)

        self.regs.PC = pc + 2
        try:
            self.execute(opcode)
        except Chip8Error:
            self.regs.PC = pc
            raise
        return opcode

    def execute(self, opcode: ops.Opcode):
        """Apply one decoded opcode. PC already points past the instruction."""
        handler = self._dispatch.get(type(opcode))
        if handler is None:
            raise InvalidOpcode(opcode.encode())
        handler(opcode)

    def run(self, max_steps: int,
            steps_per_timer_tick: Optional[int] = None) -> StopReason:
        """Run until a termination condition.

        A breakpoint at the starting PC is not checked, so calling run()
        again after a BREAK resumes past it.

        Args:
            max_steps: Instructions to execute before TIMEOUT
            steps_per_timer_tick: Steps between tick_timers() calls
                (default: cpu_hz // timer_hz from the config)

        Returns:
            StopReason indicating why execution stopped. The error behind
            ILLEGAL / ERROR is kept in last_error.
        """
        if steps_per_timer_tick is None:
            steps_per_timer_tick = self.config.steps_per_timer_tick
        self.last_error = None

        for count in range(max_steps):
            if count and self.regs.PC in self._breakpoints:
                log.info("Breakpoint hit at $%03X", self.regs.PC)
                return StopReason.BREAK
            try:
                self.step()
            except OpcodeError as e:
                self.last_error = e
                log.warning("Stopped at $%03X: %s", self.regs.PC, e)
                return StopReason.ILLEGAL
            except Chip8Error as e:
                self.last_error = e
                log.warning("Stopped at $%03X: %s", self.regs.PC, e)
                return StopReason.ERROR
            if (count + 1) % steps_per_timer_tick == 0:
                self.tick_timers()

        return StopReason.TIMEOUT

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════

    def _build_dispatch(self) -> dict:
        """Build opcode class → handler dispatch table."""
        return {
            # ── System ──
            ops.ClearDisplay:        self._op_cls,
            ops.Return:              self._op_ret,
            ops.SysAddr:             self._op_sys,

            # ── Jump / call ──
            ops.Jump:                self._op_jp,
            ops.Call:                self._op_call,
            ops.JumpV0:              self._op_jp_v0,

            # ── Skips ──
            ops.SkipIfEqual:         self._op_se_byte,
            ops.SkipIfNotEqual:      self._op_sne_byte,
            ops.SkipIfRegEqual:      self._op_se_reg,
            ops.SkipIfRegNotEqual:   self._op_sne_reg,

            # ── Register / ALU ──
            ops.LoadByte:            self._op_ld_byte,
            ops.AddByte:             self._op_add_byte,
            ops.LoadReg:             self._op_ld_reg,
            ops.Or:                  self._op_or,
            ops.And:                 self._op_and,
            ops.Xor:                 self._op_xor,
            ops.AddReg:              self._op_add_reg,
            ops.Sub:                 self._op_sub,
            ops.SubN:                self._op_subn,
            ops.ShiftRight:          self._op_shr,
            ops.ShiftLeft:           self._op_shl,

            # ── Index / random / display ──
            ops.SetIndex:            self._op_ld_i,
            ops.Random:              self._op_rnd,
            ops.Draw:                self._op_drw,

            # ── Keypad ──
            ops.SkipIfKeyPressed:    self._op_skp,
            ops.SkipIfKeyNotPressed: self._op_sknp,
            ops.WaitForKey:          self._op_wait_key,

            # ── Timers ──
            ops.LoadDelayTimer:      self._op_ld_vx_dt,
            ops.SetDelayTimer:       self._op_ld_dt_vx,
            ops.SetSoundTimer:       self._op_ld_st_vx,

            # ── I / memory transfer ──
            ops.AddI:                self._op_add_i,
            ops.LoadSpriteAddr:      self._op_ld_f,
            ops.StoreBCD:            self._op_ld_b,
            ops.RegDump:             self._op_reg_dump,
            ops.RegLoad:             self._op_reg_load,
        }

    def _skip_if(self, condition: bool):
        if condition:
            self.regs.PC += 2

    # ── System handlers ──

    def _op_cls(self, op):
        self.display.clear()

    def _op_ret(self, op):
        self.regs.PC = self.stack.pop()

    def _op_sys(self, op):
        # Machine-code call on the original interpreter; ignored here
        log.debug("Ignoring SYS $%03X", op.addr)

    # ── Jump / call handlers ──

    def _op_jp(self, op):
        self.regs.PC = op.addr

    def _op_call(self, op):
        self.stack.push(self.regs.PC)
        self.regs.PC = op.addr

    def _op_jp_v0(self, op):
        self.regs.PC = op.addr + self.regs.V[0]

    # ── Skip handlers ──

    def _op_se_byte(self, op):
        self._skip_if(self.regs.V[op.x] == op.kk)

    def _op_sne_byte(self, op):
        self._skip_if(self.regs.V[op.x] != op.kk)

    def _op_se_reg(self, op):
        self._skip_if(self.regs.V[op.x] == self.regs.V[op.y])

    def _op_sne_reg(self, op):
        self._skip_if(self.regs.V[op.x] != self.regs.V[op.y])

    # ── Register / ALU handlers ──
    # VF is always written after the result so it holds the flag even
    # when x == 0xF.

    def _op_ld_byte(self, op):
        self.regs.write(op.x, op.kk)

    def _op_add_byte(self, op):
        self.regs.write(op.x, alu.wrap_add8(self.regs.V[op.x], op.kk))

    def _op_ld_reg(self, op):
        self.regs.write(op.x, self.regs.V[op.y])

    def _op_or(self, op):
        self.regs.write(op.x, self.regs.V[op.x] | self.regs.V[op.y])

    def _op_and(self, op):
        self.regs.write(op.x, self.regs.V[op.x] & self.regs.V[op.y])

    def _op_xor(self, op):
        self.regs.write(op.x, self.regs.V[op.x] ^ self.regs.V[op.y])

    def _op_add_reg(self, op):
        result, vf = alu.add8(self.regs.V[op.x], self.regs.V[op.y])
        self.regs.write(op.x, result)
        self.regs.flag = vf

    def _op_sub(self, op):
        result, vf = alu.sub8(self.regs.V[op.x], self.regs.V[op.y])
        self.regs.write(op.x, result)
        self.regs.flag = vf

    def _op_subn(self, op):
        result, vf = alu.sub8(self.regs.V[op.y], self.regs.V[op.x])
        self.regs.write(op.x, result)
        self.regs.flag = vf

    def _op_shr(self, op):
        result, vf = alu.shr8(self.regs.V[op.x])
        self.regs.write(op.x, result)
        self.regs.flag = vf

    def _op_shl(self, op):
        result, vf = alu.shl8(self.regs.V[op.x])
        self.regs.write(op.x, result)
        self.regs.flag = vf

    # ── Index / random / display handlers ──

    def _op_ld_i(self, op):
        self.regs.I = op.addr

    def _op_rnd(self, op):
        self.regs.write(op.x, self.rng.randrange(256) & op.kk)

    def _op_drw(self, op):
        # Read the whole sprite first: a bad address must not touch pixels
        base = self.regs.I
        sprite = bytes(self.mem.read8(base + i) for i in range(op.n))
        erased = self.display.draw(self.regs.V[op.y], self.regs.V[op.x], sprite)
        self.regs.flag = 1 if erased else 0

    # ── Keypad handlers ──

    def _op_skp(self, op):
        key = self.keypad.peek_as_nibble()
        self._skip_if(key is not None and key == self.regs.V[op.x])

    def _op_sknp(self, op):
        key = self.keypad.peek_as_nibble()
        self._skip_if(key is None or key != self.regs.V[op.x])

    def _op_wait_key(self, op):
        key = self.keypad.peek_as_nibble()
        if key is None:
            # Busy-wait: re-execute this instruction on the next step
            self.regs.PC -= 2
        else:
            self.regs.write(op.x, key)

    # ── Timer handlers ──

    def _op_ld_vx_dt(self, op):
        self.regs.write(op.x, self.timers.get_delay())

    def _op_ld_dt_vx(self, op):
        self.timers.set_delay(self.regs.V[op.x])

    def _op_ld_st_vx(self, op):
        self.timers.set_sound(self.regs.V[op.x])

    # ── I / memory transfer handlers ──

    def _op_add_i(self, op):
        self.regs.I = self.regs.I + self.regs.V[op.x]

    def _op_ld_f(self, op):
        self.regs.I = sprite_font_address(self.regs.V[op.x], self.config.font_start)

    def _op_ld_b(self, op):
        base = self.regs.I
        for offset, digit in enumerate(alu.bcd(self.regs.V[op.x])):
            self.mem.write8(base + offset, digit)

    def _op_reg_dump(self, op):
        base = self.regs.I
        for i in range(op.x + 1):
            self.mem.write8(base + i, self.regs.V[i])

    def _op_reg_load(self, op):
        base = self.regs.I
        for i in range(op.x + 1):
            self.regs.write(i, self.mem.read8(base + i))

    # ══════════════════════════════════════════════
    # Breakpoints / trace / debug
    # ══════════════════════════════════════════════

    def add_breakpoint(self, addr: int):
        self._breakpoints.add(addr)

    def remove_breakpoint(self, addr: int):
        self._breakpoints.discard(addr)

    def enable_trace(self, enable: bool = True):
        """Enable instruction trace logging."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()

    def reset(self):
        """Re-boot, keeping the program image loaded in memory."""
        self.boot()
        self.rng.seed(self.config.seed)
        self._breakpoints.clear()
        self._trace_output.clear()
        self.last_error = None
