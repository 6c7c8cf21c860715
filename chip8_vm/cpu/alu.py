"""
CHIP-8 Virtual Machine — ALU Operations

Each 8XYN arithmetic helper returns (result, vf): the truncated 8-bit
result and the value the caller writes to VF *after* storing the result.
Writing VF last means VF holds the flag even when VF is also the
destination register.

Flag conventions (these are the COSMAC VIP ones, not the intuitive ones):
  add8:   vf = 1 on unsigned overflow (carry)
  sub8:   vf = 1 when NO borrow occurred (a >= b)
  shr8:   vf = bit 0 of the input
  shl8:   vf = bit 7 of the input
"""


# ══════════════════════════════════════════════
# 8-bit ALU functions — return (result, vf)
# ══════════════════════════════════════════════

def add8(a: int, b: int) -> tuple:
    """8XY4: a + b. vf = carry out of bit 7."""
    result = a + b
    return (result & 0xFF, 1 if result > 0xFF else 0)


def sub8(a: int, b: int) -> tuple:
    """8XY5 (a=Vx, b=Vy) and 8XY7 (a=Vy, b=Vx).

    vf = 1 when a >= b (no borrow), 0 when the subtraction wrapped.
    """
    result = a - b
    return (result & 0xFF, 1 if a >= b else 0)


def shr8(val: int) -> tuple:
    """8XY6: logical shift right. vf = bit shifted out (bit 0)."""
    return ((val & 0xFF) >> 1, val & 0x01)


def shl8(val: int) -> tuple:
    """8XYE: shift left. vf = bit shifted out (bit 7)."""
    return ((val << 1) & 0xFF, (val >> 7) & 0x01)


def wrap_add8(a: int, b: int) -> int:
    """7XKK: add without touching the flag."""
    return (a + b) & 0xFF


def bcd(val: int) -> tuple:
    """FX33: split a byte into (hundreds, tens, ones)."""
    val &= 0xFF
    return (val // 100, (val // 10) % 10, val % 10)
