"""
CHIP-8 Virtual Machine — Peripheral Tests (timers, keypad, display)
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from chip8_vm.periph.timer import Timers
from chip8_vm.periph.keypad import Keypad
from chip8_vm.periph.display import (Display, FONT_SPRITES, font_bytes,
                                     sprite_font_address)
from chip8_vm.errors import InvalidKey, InvalidSprite


class TestTimers:

    def test_new_timers(self):
        timers = Timers()
        assert timers.get_delay() == 0
        assert timers.get_sound() == 0
        assert not timers.sound_active

    def test_set_and_get(self):
        timers = Timers()
        timers.set_delay(5)
        timers.set_sound(3)
        assert timers.get_delay() == 5
        assert timers.get_sound() == 3
        assert timers.sound_active

    def test_tick_independent_floor_zero(self):
        """Each counter decrements on its own and stops at 0."""
        timers = Timers()
        timers.set_delay(5)
        timers.set_sound(3)
        seen = []
        for _ in range(6):
            timers.tick()
            seen.append((timers.get_delay(), timers.get_sound()))
        assert seen == [(4, 2), (3, 1), (2, 0), (1, 0), (0, 0), (0, 0)]

    def test_values_are_bytes(self):
        timers = Timers()
        timers.set_delay(0x1FF)
        assert timers.get_delay() == 0xFF

    def test_reset(self):
        timers = Timers()
        timers.set_delay(9)
        timers.set_sound(9)
        timers.reset()
        assert (timers.get_delay(), timers.get_sound()) == (0, 0)


class TestKeypad:

    def test_nothing_pressed(self):
        """Unpressed latch peeks as None, not an error."""
        keypad = Keypad()
        assert keypad.peek() is None
        assert keypad.peek_as_nibble() is None

    def test_press_and_release(self):
        keypad = Keypad()
        keypad.press('a')
        assert keypad.peek() == 'a'
        keypad.release()
        assert keypad.peek() is None

    def test_press_replaces(self):
        """Only one key is held at a time."""
        keypad = Keypad()
        keypad.press('1')
        keypad.press('f')
        assert keypad.peek() == 'f'
        assert keypad.peek_as_nibble() == 0xF

    @pytest.mark.parametrize("key,value", [
        ('0', 0), ('9', 9), ('a', 10), ('c', 12), ('f', 15), ('B', 11),
    ])
    def test_nibble_values(self, key, value):
        keypad = Keypad()
        keypad.press(key)
        assert keypad.peek_as_nibble() == value

    @pytest.mark.parametrize("key", ['g', 'G', '10', '', ' 1', '0x1', '-1'])
    def test_invalid_key(self, key):
        """Anything but one hex digit raises InvalidKey when read numerically."""
        keypad = Keypad()
        keypad.press(key)
        assert keypad.peek() == key
        with pytest.raises(InvalidKey) as exc:
            keypad.peek_as_nibble()
        assert exc.value.key == key


class TestFont:

    def test_sixteen_glyphs(self):
        assert len(FONT_SPRITES) == 16
        assert all(len(g) == 5 for g in FONT_SPRITES)
        assert len(font_bytes()) == 80

    def test_glyph_zero_and_f(self):
        assert FONT_SPRITES[0x0] == (0xF0, 0x90, 0x90, 0x90, 0xF0)
        assert FONT_SPRITES[0xF] == (0xF0, 0x80, 0xF0, 0x80, 0x80)

    @pytest.mark.parametrize("digit", range(16))
    def test_sprite_address(self, digit):
        assert sprite_font_address(digit) == digit * 5
        assert Display.sprite_font_address(digit) == digit * 5

    def test_sprite_address_custom_base(self):
        assert sprite_font_address(0xA, font_start=0x50) == 0x50 + 50

    @pytest.mark.parametrize("digit", [0x10, 0xFF, -1])
    def test_invalid_sprite(self, digit):
        with pytest.raises(InvalidSprite) as exc:
            sprite_font_address(digit)
        assert exc.value.digit == digit


class TestDisplay:

    SPRITE = bytes([0xF0, 0x90, 0x90, 0x90, 0xF0])

    def test_dimensions(self):
        display = Display()
        assert (display.width, display.height) == (64, 32)
        assert len(display.framebuffer()) == 64 * 32 // 8

    @pytest.mark.parametrize("width,height", [(60, 32), (0, 32), (64, 0)])
    def test_bad_dimensions(self, width, height):
        with pytest.raises(ValueError):
            Display(width, height)

    def test_draw_aligned(self):
        display = Display()
        erased = display.draw(0, 0, self.SPRITE)
        assert not erased
        assert display.row_bytes(0)[0] == 0xF0
        assert display.row_bytes(1)[0] == 0x90
        assert display.pixel(0, 0) and display.pixel(0, 3)
        assert not display.pixel(0, 4)
        assert display.lit_pixels() == 4 + 2 + 2 + 2 + 4

    def test_draw_twice_erases(self):
        """Drawing the same sprite twice clears it and reports erased=True."""
        display = Display()
        display.draw(5, 10, self.SPRITE)
        erased = display.draw(5, 10, self.SPRITE)
        assert erased
        assert display.lit_pixels() == 0

    def test_non_overlapping(self):
        display = Display()
        assert not display.draw(0, 0, self.SPRITE)
        assert not display.draw(0, 8, self.SPRITE)
        assert not display.draw(10, 0, self.SPRITE)

    def test_collision_in_first_row_only(self):
        """Erasure on any row is reported, not only the last one."""
        display = Display()
        display.draw(0, 0, bytes([0x80]))
        assert display.draw(0, 0, bytes([0x80, 0x00, 0x00]))

    def test_collision_in_second_storage_byte(self):
        """Erasure inside the straddled second storage byte counts."""
        display = Display()
        display.draw(0, 8, bytes([0x10]))             # pixel (0, 11)
        assert not display.draw(0, 4, bytes([0x02]))  # pixel (0, 10)
        assert display.draw(0, 4, bytes([0x01]))      # pixel (0, 11) again
        assert not display.pixel(0, 11)
        assert display.pixel(0, 10)

    def test_unaligned_straddle(self):
        display = Display()
        display.draw(0, 4, bytes([0xFF]))
        row = display.row_bytes(0)
        assert row[0] == 0x0F
        assert row[1] == 0xF0

    def test_wraparound_columns(self):
        """A sprite at col = width - 4 splits between the last and first byte."""
        display = Display()
        display.draw(0, display.width - 4, bytes([0xAB]))
        row = display.row_bytes(0)
        assert row[-1] == 0xAB >> 4
        assert row[0] == (0xAB << 4) & 0xFF
        assert (row[-1] << 4) | (row[0] >> 4) == 0xAB
        assert display.lit_pixels() == bin(0xAB).count('1')

    def test_wraparound_rows(self):
        """Rows past the bottom continue at the top."""
        display = Display()
        display.draw(display.height - 2, 0, self.SPRITE)
        assert display.row_bytes(30)[0] == 0xF0
        assert display.row_bytes(31)[0] == 0x90
        assert display.row_bytes(0)[0] == 0x90
        assert display.row_bytes(1)[0] == 0x90
        assert display.row_bytes(2)[0] == 0xF0

    def test_coordinates_wrap(self):
        """Coordinates beyond the screen are taken modulo width/height."""
        display = Display()
        display.draw(32 + 3, 64 + 8, bytes([0x80]))
        assert display.pixel(3, 8)

    def test_clear(self):
        display = Display()
        display.draw(0, 0, self.SPRITE)
        display.clear()
        assert display.framebuffer() == bytes(256)

    def test_sprite_too_long(self):
        display = Display()
        with pytest.raises(ValueError):
            display.draw(0, 0, bytes(16))

    def test_empty_sprite(self):
        display = Display()
        assert not display.draw(0, 0, b'')
        assert display.lit_pixels() == 0

    def test_to_text(self):
        display = Display(16, 2)
        display.draw(0, 0, bytes([0xC0]))
        assert display.to_text() == '##..............\n................'
        assert display.to_text('X', ' ').splitlines()[0] == 'XX' + ' ' * 14
