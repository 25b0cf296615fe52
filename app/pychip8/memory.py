from typing import Final, Union

import numpy as np
from numpy.typing import NDArray

from pychip8.exception import MemoryAccessError, RomTooLarge

MEMORY_SIZE: Final[int] = 0x1000  # 4096 bytes
PROGRAM_START: Final[int] = 0x200  # 512
ROM_SIZE_MAX: Final[int] = MEMORY_SIZE - PROGRAM_START

FONT_START: Final[int] = 0x000
GLYPH_SIZE: Final[int] = 5

# Hex digit glyphs 0-F, one byte per row, high nibble used.
#   0xF0 = 1111 0000
#   0x90 = 1001 0000
#   0x90 = 1001 0000
#   0x90 = 1001 0000
#   0xF0 = 1111 0000
FONT: Final[bytes] = bytes(
    [
        0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
        0x20, 0x60, 0x20, 0x20, 0x70,  # 1
        0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
        0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
        0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
        0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
        0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
        0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
        0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
        0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
        0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
        0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
        0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
        0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
        0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
        0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
    ]
)


class Memory:
    """
    Flat 4 KB byte-addressable memory.

    The font is written to ``[0, 80)`` on construction; programs are copied
    in at ``PROGRAM_START``. Accesses outside the array raise
    ``MemoryAccessError`` instead of wrapping.
    """

    def __init__(self, size: int = MEMORY_SIZE) -> None:
        self.RAM: NDArray[np.uint8] = np.zeros(size, dtype=np.uint8)
        self.RAM[FONT_START : FONT_START + len(FONT)] = np.frombuffer(FONT, dtype=np.uint8)

    def __len__(self) -> int:
        return len(self.RAM)

    def _check(self, address: int, length: int = 1) -> None:
        if address < 0 or address + length > len(self.RAM):
            raise MemoryAccessError(address if address < 0 else max(address, len(self.RAM)), len(self.RAM))

    def read(self, address: int) -> int:
        self._check(address)
        return int(self.RAM[address])

    def write(self, address: int, value: int) -> None:
        self._check(address)
        self.RAM[address] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read a 16-bit big-endian word."""
        self._check(address, 2)
        return (int(self.RAM[address]) << 8) | int(self.RAM[address + 1])

    def read_block(self, address: int, length: int) -> bytes:
        self._check(address, length)
        return self.RAM[address : address + length].tobytes()

    def write_block(self, address: int, data: Union[bytes, bytearray]) -> None:
        self._check(address, len(data))
        self.RAM[address : address + len(data)] = np.frombuffer(bytes(data), dtype=np.uint8)

    def load_program(self, data: Union[bytes, bytearray]) -> None:
        """Copy program bytes to ``PROGRAM_START``; nothing is written if they do not fit."""
        capacity = len(self.RAM) - PROGRAM_START
        if len(data) > capacity:
            raise RomTooLarge(len(data), capacity)
        self.write_block(PROGRAM_START, data)

    def copy(self) -> "Memory":
        clone = Memory.__new__(Memory)
        clone.RAM = self.RAM.copy()
        return clone
