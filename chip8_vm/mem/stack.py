"""
CHIP-8 Virtual Machine — Call Stack

Fixed-depth LIFO of 16-bit return addresses, kept outside addressable
memory (the original interpreter reserved its own area; programs cannot
see it). Overflow and underflow are errors, never silent wraps.
"""

from typing import List

from ..config import STACK_DEPTH
from ..errors import StackOverflow, StackUnderflow


class CallStack:
    """Return-address stack used by 2NNN / 00EE."""

    def __init__(self, capacity: int = STACK_DEPTH):
        self._capacity = capacity
        self._entries: List[int] = [0] * capacity
        self._sp = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def depth(self) -> int:
        """Number of addresses currently on the stack."""
        return self._sp

    def push(self, addr: int):
        """Push a return address. Raises StackOverflow when full."""
        if self._sp >= self._capacity:
            raise StackOverflow(addr, self._capacity)
        self._entries[self._sp] = addr & 0xFFFF
        self._sp += 1

    def pop(self) -> int:
        """Pop the most recent return address. Raises StackUnderflow when empty."""
        if self._sp == 0:
            raise StackUnderflow()
        self._sp -= 1
        return self._entries[self._sp]

    def peek(self) -> int:
        if self._sp == 0:
            raise StackUnderflow()
        return self._entries[self._sp - 1]

    def entries(self) -> List[int]:
        """Live entries, bottom first."""
        return self._entries[:self._sp]

    def reset(self):
        self._entries = [0] * self._capacity
        self._sp = 0
