#!/usr/bin/env python3
"""
chip8-vm — headless CHIP-8 ROM runner

Usage:
    chip8-vm <rom.ch8> [--steps N] [--cpu-hz 600] [--timer-hz 60]
                       [--seed N] [--key K] [--trace] [--realtime]
                       [-v | -q] [--log-file PATH]

Boots the machine, loads the ROM at $200, runs it and prints the final
framebuffer as text followed by the register state and the stop reason.

Exit status:
    0  stopped on TIMEOUT or BREAK
    1  stopped on a core error (illegal opcode, memory, stack, ...)
    2  ROM could not be read / bad arguments

Examples:
    chip8-vm ibm_logo.ch8 --steps 200
    chip8-vm keypad_test.ch8 --key a --trace -v
    chip8-vm pong.ch8 --realtime --steps 6000
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import EmulatorConfig
from .emu import Chip8Emulator, StopReason
from .errors import Chip8Error

log = logging.getLogger('chip8_vm')


def parse_int_arg(value: str) -> int:
    """Parse an integer argument that may be hex (0x...), $ prefix, or decimal."""
    value = value.strip()
    if value.startswith("0x") or value.startswith("0X"):
        return int(value, 16)
    if value.startswith("$"):
        return int(value[1:], 16)
    return int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chip8-vm",
        description="Run a CHIP-8 ROM headless and dump the framebuffer",
    )
    parser.add_argument("rom", help="ROM image (raw bytes, loaded at $200)")
    parser.add_argument("--steps", type=parse_int_arg, default=1000,
                        help="Instructions to execute (default: 1000)")
    parser.add_argument("--cpu-hz", type=int, default=EmulatorConfig.cpu_hz,
                        help="Instruction rate (default: %(default)s)")
    parser.add_argument("--timer-hz", type=int, default=EmulatorConfig.timer_hz,
                        help="Timer decrement rate (default: %(default)s)")
    parser.add_argument("--seed", type=parse_int_arg, default=None,
                        help="Seed for the RND instruction")
    parser.add_argument("--key", default=None,
                        help="Hold this key (0-9, a-f) for the whole run")
    parser.add_argument("--break", dest="breakpoints", action="append",
                        type=parse_int_arg, default=[],
                        help="Stop when PC reaches this address (repeatable)")
    parser.add_argument("--trace", action="store_true",
                        help="Print an instruction trace after the run")
    parser.add_argument("--realtime", action="store_true",
                        help="Pace execution to --cpu-hz against wall-clock time")
    parser.add_argument("--on", default="#", help="Character for a lit pixel")
    parser.add_argument("--off", default=".", help="Character for a dark pixel")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase verbosity (-v, -vv)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Suppress all output except errors")
    parser.add_argument("--log-file", type=str,
                        help="Write log to file")
    parser.add_argument("--version", action="version",
                        version=f"chip8-vm {__version__}")
    return parser


def setup_logging(args):
    """Configure logging based on arguments"""
    if args.quiet:
        level = logging.ERROR
    elif args.verbose == 0:
        level = logging.WARNING
    elif args.verbose == 1:
        level = logging.INFO
    else:  # -vv or more
        level = logging.DEBUG

    handlers = []

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    handlers.append(console)

    if args.log_file:
        log_path = Path(args.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if args.log_file else level,
        handlers=handlers,
        force=True
    )


def run_realtime(emu: Chip8Emulator, max_steps: int) -> StopReason:
    """Fixed-rate loop: one step every 1/cpu_hz s, one timer tick every 1/timer_hz s."""
    step_period = 1.0 / emu.config.cpu_hz
    tick_period = 1.0 / emu.config.timer_hz
    next_step = next_tick = time.perf_counter()

    for _ in range(max_steps):
        now = time.perf_counter()
        while now >= next_tick:
            emu.tick_timers()
            next_tick += tick_period
        if next_step > now:
            time.sleep(next_step - now)
        next_step += step_period

        reason = emu.run(1, steps_per_timer_tick=max_steps + 1)
        if reason is not StopReason.TIMEOUT:
            return reason
    return StopReason.TIMEOUT


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args)

    try:
        config = EmulatorConfig(cpu_hz=args.cpu_hz, timer_hz=args.timer_hz,
                                seed=args.seed)
    except ValueError as e:
        log.error("%s", e)
        return 2

    emu = Chip8Emulator(config)
    try:
        emu.load_rom_file(args.rom)
    except OSError as e:
        log.error("Cannot read ROM %s: %s", args.rom, e)
        return 2
    except Chip8Error as e:
        log.error("ROM does not fit in memory: %s", e)
        return 2

    if args.key is not None:
        emu.press_key(args.key)
    for addr in args.breakpoints:
        emu.add_breakpoint(addr)
    emu.enable_trace(args.trace)

    if args.realtime:
        reason = run_realtime(emu, args.steps)
    else:
        reason = emu.run(args.steps)

    if not args.quiet:
        print(emu.display.to_text(args.on, args.off))
        print(emu.regs.display())
        print(f"Stopped: {reason.value}"
              + (f" ({emu.last_error})" if emu.last_error else ""))
        if args.trace:
            print(emu.get_trace())

    if reason in (StopReason.TIMEOUT, StopReason.BREAK):
        return 0
    return 1


if __name__ == '__main__':
    sys.exit(main())
