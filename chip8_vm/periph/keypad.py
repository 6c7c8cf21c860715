"""
CHIP-8 Virtual Machine — Single-Key Input Latch

The hex keypad is modelled as one latch holding the currently pressed
logical key ('0'-'9', 'a'-'f'). Pressing a key replaces whatever was held.
Mapping physical host keys onto this alphabet is the frontend's job.

The key is stored as given and only converted to a number when an opcode
(EX9E, EXA1, FX0A) asks for it, so a bad key from the frontend surfaces as
InvalidKey at that point rather than at press time.
"""

from typing import Optional

from ..errors import InvalidKey

HEX_DIGITS = '0123456789abcdef'


class Keypad:
    """Holds at most one pressed key."""

    def __init__(self):
        self._key: Optional[str] = None

    def press(self, key: str):
        self._key = key

    def release(self):
        self._key = None

    def peek(self) -> Optional[str]:
        return self._key

    def peek_as_nibble(self) -> Optional[int]:
        """Numeric value of the held key, or None when nothing is pressed.

        Raises InvalidKey if the held key is not exactly one hex digit.
        """
        if self._key is None:
            return None
        if len(self._key) != 1 or self._key.lower() not in HEX_DIGITS:
            raise InvalidKey(self._key)
        return HEX_DIGITS.index(self._key.lower())

    def reset(self):
        self._key = None
