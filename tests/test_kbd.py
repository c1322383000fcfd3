import pytest

from xv6tools.kbd import (
    KEY_DEL,
    KEY_UP,
    KeyboardDecoder,
    Modifier,
    ctrl,
    decode,
)


def test_plain_letter():
    assert decode([0x1E]) == "a"


def test_digits_row():
    assert decode([0x02, 0x03, 0x0B]) == "120"


def test_shift_held_and_released():
    # Left shift down, 'a', left shift up, 'a'.
    assert decode([0x2A, 0x1E, 0xAA, 0x1E]) == "Aa"


def test_shift_symbols():
    assert decode([0x36, 0x02]) == "!"


def test_control_letter():
    assert decode([0x1D, 0x1E]) == chr(ctrl("A"))
    assert ctrl("A") == 1


def test_enter_and_control_enter():
    assert decode([0x1C]) == "\n"
    assert decode([0x1D, 0x1C]) == "\r"


def test_capslock_toggles_case():
    # Caps lock press and release, then 'a'.
    assert decode([0x3A, 0xBA, 0x1E]) == "A"
    # Caps lock with shift gives lower case.
    assert decode([0x3A, 0xBA, 0x2A, 0x1E]) == "a"
    # Pressing caps lock twice turns it off again.
    assert decode([0x3A, 0xBA, 0x3A, 0xBA, 0x1E]) == "a"


def test_escaped_arrow_key():
    assert decode([0xE0, 0x48]) == chr(KEY_UP)
    assert decode([0xE0, 0x53]) == chr(KEY_DEL)


def test_keypad_enter_and_divide():
    assert decode([0xE0, 0x1C]) == "\n"
    assert decode([0xE0, 0x35]) == "/"


def test_feed_returns_zero_for_prefix_and_release():
    dec = KeyboardDecoder()
    assert dec.feed(0xE0) == 0
    assert dec.shift & Modifier.E0ESC
    assert dec.feed(0x9E) == 0
    assert not dec.shift & Modifier.E0ESC


def test_right_control_via_escape_is_released():
    dec = KeyboardDecoder()
    assert dec.feed(0xE0) == 0
    assert dec.feed(0x1D) == 0
    assert dec.shift & Modifier.CTL
    dec.feed(0xE0)
    dec.feed(0x9D)
    assert not dec.shift & Modifier.CTL
    assert dec.feed(0x1E) == ord("a")


def test_state_persists_between_feeds():
    dec = KeyboardDecoder()
    dec.feed(0x2A)
    assert dec.feed(0x10) == ord("Q")
    dec.feed(0xAA)
    assert dec.feed(0x10) == ord("q")


def test_unmapped_key_yields_nothing():
    assert decode([0x3B]) == ""


@pytest.mark.parametrize("bad", [-1, 256, 1000])
def test_out_of_range_scancode(bad):
    with pytest.raises(ValueError):
        KeyboardDecoder().feed(bad)