"""
CHIP-8 Virtual Machine — Delay / Sound Timers

Two independent 8-bit down-counters. Both decrement by one on each
external timer tick (60 Hz on the original hardware) and stop at zero.
The core never looks at wall-clock time; the scheduler calls tick().

Registers:
  DT  — delay timer, readable via FX07, writable via FX15
  ST  — sound timer, writable via FX18. The buzzer is "on" while ST > 0;
        no tone is generated here, sound_active is exposed for a frontend.
"""


class Timers:
    """Delay and sound timer pair."""

    def __init__(self):
        self._delay = 0
        self._sound = 0

    def get_delay(self) -> int:
        return self._delay

    def set_delay(self, value: int):
        self._delay = value & 0xFF

    def get_sound(self) -> int:
        return self._sound

    def set_sound(self, value: int):
        self._sound = value & 0xFF

    @property
    def sound_active(self) -> bool:
        return self._sound > 0

    def tick(self):
        """Decrement both timers by one, flooring each at zero."""
        if self._delay > 0:
            self._delay -= 1
        if self._sound > 0:
            self._sound -= 1

    def reset(self):
        self._delay = 0
        self._sound = 0
