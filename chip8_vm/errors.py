"""
CHIP-8 Virtual Machine — Error Taxonomy

Every subsystem raises its own exception family. All of them derive from
Chip8Error, so the scheduler can catch one base class while tests still
check the exact leaf type and its payload.

  Chip8Error
    MemoryAccessError  → AddressOutOfBounds
    StackError         → StackOverflow, StackUnderflow
    OpcodeError        → InvalidOpcode, InvalidAddress
    DisplayError       → InvalidSprite
    InputError         → InvalidKey
"""

__all__ = [
    'Chip8Error',
    'MemoryAccessError', 'AddressOutOfBounds',
    'StackError', 'StackOverflow', 'StackUnderflow',
    'OpcodeError', 'InvalidOpcode', 'InvalidAddress',
    'DisplayError', 'InvalidSprite',
    'InputError', 'InvalidKey',
]


class Chip8Error(Exception):
    """Base class for every recoverable core error."""
    pass


# ── Memory ──

class MemoryAccessError(Chip8Error):
    pass


class AddressOutOfBounds(MemoryAccessError):
    """Read or write outside [0, memory size)."""
    def __init__(self, address: int, size: int = 0):
        self.address = address
        self.size = size
        if size:
            msg = f"Address ${address:04X} out of bounds (memory size ${size:04X})"
        else:
            msg = f"Address ${address:04X} out of bounds"
        super().__init__(msg)


# ── Call stack ──

class StackError(Chip8Error):
    pass


class StackOverflow(StackError):
    """Push onto a full call stack. `address` is the value that was refused."""
    def __init__(self, address: int, depth: int = 0):
        self.address = address
        self.depth = depth
        super().__init__(f"Call stack overflow pushing ${address:03X} (depth {depth})")


class StackUnderflow(StackError):
    """Pop from an empty call stack."""
    def __init__(self):
        super().__init__("Call stack underflow")


# ── Decoder ──

class OpcodeError(Chip8Error):
    pass


class InvalidOpcode(OpcodeError):
    """Instruction word with no entry in the instruction table."""
    def __init__(self, word: int):
        self.word = word
        super().__init__(f"Invalid opcode ${word:04X}")


class InvalidAddress(OpcodeError):
    """Address operand outside the machine's address space."""
    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Invalid address operand ${address:03X}")


# ── Display ──

class DisplayError(Chip8Error):
    pass


class InvalidSprite(DisplayError):
    """Font lookup for a digit with no built-in glyph."""
    def __init__(self, digit: int):
        self.digit = digit
        super().__init__(f"No built-in sprite for digit ${digit:02X}")


# ── Input ──

class InputError(Chip8Error):
    pass


class InvalidKey(InputError):
    """Held key is not a single hexadecimal digit."""
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Invalid key {key!r} (expected one of 0-9, a-f)")
