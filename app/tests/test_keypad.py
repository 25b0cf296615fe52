import pytest

from pychip8.exception import InvalidKey
from pychip8.keypad import Keypad


def test_set_and_release():
    keys = Keypad()
    assert keys.last_pressed() is None
    keys.set_key(0xA, True)
    assert keys.is_pressed(0xA)
    assert keys.last_pressed() == 0xA
    keys.set_key(0xA, False)
    assert not keys.is_pressed(0xA)


def test_last_pressed_is_highest_held():
    keys = Keypad()
    assert keys.last_pressed() is None
    keys.set_key(0x3, True)
    keys.set_key(0xB, True)
    assert keys.last_pressed() == 0xB


@pytest.mark.parametrize("key", [-1, 16, 0xFF])
def test_invalid_key_raises(key):
    with pytest.raises(InvalidKey):
        Keypad().set_key(key, True)


def test_invalid_key_is_also_value_error():
    with pytest.raises(ValueError):
        Keypad().set_key(16, True)


def test_out_of_range_is_never_pressed():
    keys = Keypad()
    for k in range(16):
        keys.set_key(k, True)
    assert not keys.is_pressed(16)
    assert not keys.is_pressed(0xFF)


def test_release_all():
    keys = Keypad()
    keys.set_key(1, True)
    keys.set_key(2, True)
    keys.release_all()
    assert keys.last_pressed() is None
