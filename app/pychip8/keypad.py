from typing import Final, Optional

from bitarray import bitarray  # type: ignore

from pychip8.exception import InvalidKey


class Keypad:
    """
    16-key hex keypad latch.

    The original keypad layout was::

        1 2 3 C
        4 5 6 D
        7 8 9 E
        A 0 B F

    Keys are indexed by their hex value. The driver sets and clears them;
    instructions only read.
    """

    KEY_COUNT: Final[int] = 0x10

    def __init__(self) -> None:
        self._bits = bitarray(self.KEY_COUNT)
        self._bits.setall(0)

    def __repr__(self) -> str:
        held = ",".join(f"{k:X}" for k in range(self.KEY_COUNT) if self._bits[k])
        return f"<Keypad pressed=[{held}]>"

    def set_key(self, key: int, pressed: bool) -> None:
        if not 0 <= key < self.KEY_COUNT:
            raise InvalidKey(key)
        self._bits[key] = bool(pressed)

    def is_pressed(self, key: int) -> bool:
        """Keys outside 0-F are never pressed."""
        if not 0 <= key < self.KEY_COUNT:
            return False
        return bool(self._bits[key])

    def last_pressed(self) -> Optional[int]:
        """Highest-numbered key currently held, or None."""
        for key in range(self.KEY_COUNT - 1, -1, -1):
            if self._bits[key]:
                return key
        return None

    def release_all(self) -> None:
        self._bits.setall(0)
