"""
CHIP-8 Virtual Machine — Opcode Decoder

Maps a 16-bit instruction word to a typed Opcode value. Decoding is pure:
no machine state is read, so the decoder can be tested (and used by a
disassembler) on its own.

Instruction word fields:
  F...  family nibble (bits 15-12)
  .X..  x register index
  ..Y.  y register index
  ...N  4-bit immediate
  ..KK  8-bit immediate
  .NNN  12-bit address

Each instruction class declares its fixed bit PATTERN and its operand
fields. The decode mask is derived from the fields, so encode() and
decode() share a single table. Bits listed in DONT_CARE are accepted with
any value on decode and encoded as zero (8XY6 / 8XYE ignore Y).
"""

from dataclasses import dataclass, fields
from typing import ClassVar, Dict, List, Type

from ..config import MEMORY_SIZE
from ..errors import InvalidAddress, InvalidOpcode

__all__ = ['Opcode', 'decode', 'decode_word', 'INSTRUCTION_SET']


# Operand field name → (shift, width mask)
_FIELD_BITS = {
    'addr': (0, 0x0FFF),
    'x':    (8, 0xF),
    'y':    (4, 0xF),
    'kk':   (0, 0xFF),
    'n':    (0, 0xF),
}

INSTRUCTION_SET: List[Type['Opcode']] = []


@dataclass(frozen=True)
class Opcode:
    """Base class for a decoded instruction."""

    PATTERN: ClassVar[int] = 0x0000
    DONT_CARE: ClassVar[int] = 0x0000
    MASK: ClassVar[int] = 0xFFFF
    FORMAT: ClassVar[str] = ''

    def _operands(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def encode(self) -> int:
        """Inverse of decode(): build the 16-bit instruction word."""
        word = self.PATTERN
        for name, value in self._operands().items():
            shift, width = _FIELD_BITS[name]
            if not 0 <= value <= width:
                if name == 'addr':
                    raise InvalidAddress(value)
                raise ValueError(
                    f"{type(self).__name__}.{name}={value} does not fit in "
                    f"{width.bit_length()} bits")
            word |= value << shift
        return word

    def __str__(self) -> str:
        return self.FORMAT.format(**self._operands())


def _instruction(cls):
    """Class decorator: freeze the dataclass, derive MASK, register it."""
    cls = dataclass(frozen=True)(cls)
    operand_bits = cls.DONT_CARE
    for f in fields(cls):
        shift, width = _FIELD_BITS[f.name]
        operand_bits |= width << shift
    cls.MASK = 0xFFFF & ~operand_bits
    INSTRUCTION_SET.append(cls)
    return cls


# ──────────────────────────────────────────────
# System
# ──────────────────────────────────────────────

@_instruction
class ClearDisplay(Opcode):
    PATTERN = 0x00E0
    FORMAT = 'CLS'


@_instruction
class Return(Opcode):
    PATTERN = 0x00EE
    FORMAT = 'RET'


@_instruction
class SysAddr(Opcode):
    PATTERN = 0x0000
    FORMAT = 'SYS ${addr:03X}'
    addr: int


# ──────────────────────────────────────────────
# Jump / call
# ──────────────────────────────────────────────

@_instruction
class Jump(Opcode):
    PATTERN = 0x1000
    FORMAT = 'JP ${addr:03X}'
    addr: int


@_instruction
class Call(Opcode):
    PATTERN = 0x2000
    FORMAT = 'CALL ${addr:03X}'
    addr: int


@_instruction
class JumpV0(Opcode):
    PATTERN = 0xB000
    FORMAT = 'JP V0, ${addr:03X}'
    addr: int


# ──────────────────────────────────────────────
# Conditional skips
# ──────────────────────────────────────────────

@_instruction
class SkipIfEqual(Opcode):
    PATTERN = 0x3000
    FORMAT = 'SE V{x:X}, ${kk:02X}'
    x: int
    kk: int


@_instruction
class SkipIfNotEqual(Opcode):
    PATTERN = 0x4000
    FORMAT = 'SNE V{x:X}, ${kk:02X}'
    x: int
    kk: int


@_instruction
class SkipIfRegEqual(Opcode):
    PATTERN = 0x5000
    FORMAT = 'SE V{x:X}, V{y:X}'
    x: int
    y: int


@_instruction
class SkipIfRegNotEqual(Opcode):
    PATTERN = 0x9000
    FORMAT = 'SNE V{x:X}, V{y:X}'
    x: int
    y: int


# ──────────────────────────────────────────────
# Register / ALU
# ──────────────────────────────────────────────

@_instruction
class LoadByte(Opcode):
    PATTERN = 0x6000
    FORMAT = 'LD V{x:X}, ${kk:02X}'
    x: int
    kk: int


@_instruction
class AddByte(Opcode):
    PATTERN = 0x7000
    FORMAT = 'ADD V{x:X}, ${kk:02X}'
    x: int
    kk: int


@_instruction
class LoadReg(Opcode):
    PATTERN = 0x8000
    FORMAT = 'LD V{x:X}, V{y:X}'
    x: int
    y: int


@_instruction
class Or(Opcode):
    PATTERN = 0x8001
    FORMAT = 'OR V{x:X}, V{y:X}'
    x: int
    y: int


@_instruction
class And(Opcode):
    PATTERN = 0x8002
    FORMAT = 'AND V{x:X}, V{y:X}'
    x: int
    y: int


@_instruction
class Xor(Opcode):
    PATTERN = 0x8003
    FORMAT = 'XOR V{x:X}, V{y:X}'
    x: int
    y: int


@_instruction
class AddReg(Opcode):
    PATTERN = 0x8004
    FORMAT = 'ADD V{x:X}, V{y:X}'
    x: int
    y: int


@_instruction
class Sub(Opcode):
    PATTERN = 0x8005
    FORMAT = 'SUB V{x:X}, V{y:X}'
    x: int
    y: int


@_instruction
class ShiftRight(Opcode):
    PATTERN = 0x8006
    DONT_CARE = 0x00F0
    FORMAT = 'SHR V{x:X}'
    x: int


@_instruction
class SubN(Opcode):
    PATTERN = 0x8007
    FORMAT = 'SUBN V{x:X}, V{y:X}'
    x: int
    y: int


@_instruction
class ShiftLeft(Opcode):
    PATTERN = 0x800E
    DONT_CARE = 0x00F0
    FORMAT = 'SHL V{x:X}'
    x: int


# ──────────────────────────────────────────────
# Index / random / display
# ──────────────────────────────────────────────

@_instruction
class SetIndex(Opcode):
    PATTERN = 0xA000
    FORMAT = 'LD I, ${addr:03X}'
    addr: int


@_instruction
class Random(Opcode):
    PATTERN = 0xC000
    FORMAT = 'RND V{x:X}, ${kk:02X}'
    x: int
    kk: int


@_instruction
class Draw(Opcode):
    PATTERN = 0xD000
    FORMAT = 'DRW V{x:X}, V{y:X}, {n}'
    x: int
    y: int
    n: int


# ──────────────────────────────────────────────
# Keypad
# ──────────────────────────────────────────────

@_instruction
class SkipIfKeyPressed(Opcode):
    PATTERN = 0xE09E
    FORMAT = 'SKP V{x:X}'
    x: int


@_instruction
class SkipIfKeyNotPressed(Opcode):
    PATTERN = 0xE0A1
    FORMAT = 'SKNP V{x:X}'
    x: int


# ──────────────────────────────────────────────
# Timers / I / memory transfer
# ──────────────────────────────────────────────

@_instruction
class LoadDelayTimer(Opcode):
    PATTERN = 0xF007
    FORMAT = 'LD V{x:X}, DT'
    x: int


@_instruction
class WaitForKey(Opcode):
    PATTERN = 0xF00A
    FORMAT = 'LD V{x:X}, K'
    x: int


@_instruction
class SetDelayTimer(Opcode):
    PATTERN = 0xF015
    FORMAT = 'LD DT, V{x:X}'
    x: int


@_instruction
class SetSoundTimer(Opcode):
    PATTERN = 0xF018
    FORMAT = 'LD ST, V{x:X}'
    x: int


@_instruction
class AddI(Opcode):
    PATTERN = 0xF01E
    FORMAT = 'ADD I, V{x:X}'
    x: int


@_instruction
class LoadSpriteAddr(Opcode):
    PATTERN = 0xF029
    FORMAT = 'LD F, V{x:X}'
    x: int


@_instruction
class StoreBCD(Opcode):
    PATTERN = 0xF033
    FORMAT = 'LD B, V{x:X}'
    x: int


@_instruction
class RegDump(Opcode):
    PATTERN = 0xF055
    FORMAT = 'LD [I], V{x:X}'
    x: int


@_instruction
class RegLoad(Opcode):
    PATTERN = 0xF065
    FORMAT = 'LD V{x:X}, [I]'
    x: int


# ──────────────────────────────────────────────
# Lookup: family nibble → candidates, most specific mask first
# ──────────────────────────────────────────────

_BY_FAMILY: Dict[int, List[Type[Opcode]]] = {}
for _cls in INSTRUCTION_SET:
    _BY_FAMILY.setdefault(_cls.PATTERN >> 12, []).append(_cls)
for _candidates in _BY_FAMILY.values():
    _candidates.sort(key=lambda c: bin(c.MASK).count('1'), reverse=True)
del _cls, _candidates


def decode_word(word: int, address_limit: int = MEMORY_SIZE) -> Opcode:
    """Decode a 16-bit instruction word.

    Raises InvalidOpcode(word) for words outside the instruction table and
    InvalidAddress(addr) when an NNN operand is >= address_limit (a machine
    configured with less than 4K of RAM).
    """
    if not 0 <= word <= 0xFFFF:
        raise ValueError(f"Instruction word ${word:X} is wider than 16 bits")

    for cls in _BY_FAMILY.get(word >> 12, ()):
        if word & cls.MASK != cls.PATTERN:
            continue
        operands = {}
        for f in fields(cls):
            shift, width = _FIELD_BITS[f.name]
            operands[f.name] = (word >> shift) & width
        addr = operands.get('addr')
        if addr is not None and addr >= address_limit:
            raise InvalidAddress(addr)
        return cls(**operands)

    raise InvalidOpcode(word)


def decode(high: int, low: int, address_limit: int = MEMORY_SIZE) -> Opcode:
    """Decode an instruction from its two bytes (big-endian)."""
    if not (0 <= high <= 0xFF and 0 <= low <= 0xFF):
        raise ValueError(f"Instruction bytes must be 8-bit, got ${high:X} ${low:X}")
    return decode_word((high << 8) | low, address_limit)
