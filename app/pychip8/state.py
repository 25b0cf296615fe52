from dataclasses import dataclass, field
from typing import Final, List

from pychip8.framebuffer import Framebuffer
from pychip8.keypad import Keypad
from pychip8.memory import PROGRAM_START, Memory

REGISTER_COUNT: Final[int] = 0x10
STACK_DEPTH: Final[int] = 0x10
FLAG: Final[int] = 0xF  # VF, written by carry/borrow/shift/draw
SOUND_TIMER_THRESHOLD: Final[int] = 1


@dataclass
class Flags:
    """Behavior toggles, set once before a program runs."""

    Legacy: bool = True
    IndexOverflow: bool = False
    TickTimersOnStep: bool = True


@dataclass
class Architecture:
    """
    All mutable machine state.

    ``V`` holds Python ints in [0, 255]. ``Stack`` has fixed depth;
    ``StackPointer`` is the number of addresses currently pushed.
    """

    V: List[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)
    I: int = 0
    ProgramCounter: int = PROGRAM_START
    Stack: List[int] = field(default_factory=lambda: [0] * STACK_DEPTH)
    StackPointer: int = 0
    DelayTimer: int = 0
    SoundTimer: int = 0
    OpCode: int = 0
    DrawFlag: bool = False
    Halted: bool = False
    memory: Memory = field(default_factory=Memory)
    screen: Framebuffer = field(default_factory=Framebuffer)
    keypad: Keypad = field(default_factory=Keypad)
    flags: Flags = field(default_factory=Flags)

    def advance(self, skip: bool = False) -> None:
        """Move past the current instruction, or past the next one too when ``skip``."""
        self.ProgramCounter += 4 if skip else 2

    def tick_timers(self) -> None:
        if self.DelayTimer > 0:
            self.DelayTimer -= 1
        if self.SoundTimer > 0:
            self.SoundTimer -= 1

    def sound_active(self) -> bool:
        return self.SoundTimer > SOUND_TIMER_THRESHOLD
