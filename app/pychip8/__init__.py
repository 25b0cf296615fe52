from pychip8.emulator import Chip8, UnknownOpcode
from pychip8.exception import (
    Chip8Error,
    InvalidKey,
    MemoryAccessError,
    RomTooLarge,
    StackError,
    StackOverflow,
    StackUnderflow,
    UnknownOpcodeError,
)
from pychip8.rom import Rom

__all__ = [
    "Chip8",
    "Chip8Error",
    "InvalidKey",
    "MemoryAccessError",
    "Rom",
    "RomTooLarge",
    "StackError",
    "StackOverflow",
    "StackUnderflow",
    "UnknownOpcode",
    "UnknownOpcodeError",
]
