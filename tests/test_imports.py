"""
CHIP-8 Virtual Machine — Package Import Check

Verifies every module imports and runs a handful of quick smoke checks.
Instruction-level behavior is covered by test_emulator_core.py.

Usage:
  python -m tests.test_imports
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


MODULES = [
    ("Package",          "chip8_vm"),
    ("Errors",           "chip8_vm.errors"),
    ("Configuration",    "chip8_vm.config"),
    ("CPU Registers",    "chip8_vm.cpu.regs"),
    ("ALU Operations",   "chip8_vm.cpu.alu"),
    ("Opcode Decoder",   "chip8_vm.cpu.decoder"),
    ("Memory",           "chip8_vm.mem.memory"),
    ("Call Stack",       "chip8_vm.mem.stack"),
    ("Timers",           "chip8_vm.periph.timer"),
    ("Keypad",           "chip8_vm.periph.keypad"),
    ("Display",          "chip8_vm.periph.display"),
    ("Main Emulator",    "chip8_vm.emu"),
    ("CLI",              "chip8_vm.cli"),
]


def test_imports():
    """Verify all modules load without import errors."""
    print("─" * 50)
    print("  CHIP-8 VM — Import Check")
    print("─" * 50)

    failed = []
    for name, module_path in MODULES:
        try:
            __import__(module_path)
            print(f"  ✓ {name:20s} → {module_path}")
        except ImportError as e:
            failed.append((name, str(e)))
            print(f"  ✗ {name:20s} → {module_path}")
            print(f"    ERROR: {e}")

    assert not failed, f"{len(failed)} module(s) failed to import: {failed}"


def test_smoke():
    """A few one-liners across the package."""
    from chip8_vm.cpu.alu import add8, sub8, bcd
    result, carry = add8(0xFF, 0x01)
    assert result == 0x00 and carry == 1, f"$FF + $01 = ${result:02X} carry={carry}"
    result, no_borrow = sub8(0x00, 0x01)
    assert result == 0xFF and no_borrow == 0, "sub8(0,1) should borrow"
    assert bcd(254) == (2, 5, 4)
    print("    ✓ ALU add8/sub8/bcd")

    from chip8_vm.cpu.regs import Registers
    r = Registers()
    r.write(3, 0x1FF)
    assert r.read(3) == 0xFF, "register write must mask to 8 bits"
    r.PC = 0x10200
    assert r.PC == 0x0200
    print("    ✓ Register masking")

    from chip8_vm.cpu.decoder import decode, LoadByte
    op = decode(0x6A, 0x42)
    assert op == LoadByte(0xA, 0x42)
    assert str(op) == 'LD VA, $42'
    print("    ✓ Opcode decoder (6A42 → LD VA, $42)")

    from chip8_vm import Chip8Emulator
    emu = Chip8Emulator()
    emu.load_binary(bytes([0x6A, 0x42]))
    emu.step()
    assert emu.regs.V[0xA] == 0x42
    print("    ✓ Emulator boot + one step")


if __name__ == '__main__':
    test_imports()
    test_smoke()
    print("  All modules imported, smoke tests passed.")
