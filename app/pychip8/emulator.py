from dataclasses import dataclass
from typing import Final, Optional, Union

import numpy as np
from numpy.typing import NDArray
from returns.result import Success

from pychip8.config import MachineConfig, default_machine_config
from pychip8.decoder import Instruction, Op, decode
from pychip8.exception import Chip8Error, UnknownOpcodeError
from pychip8.framebuffer import Framebuffer
from pychip8.logger import log as _logger
from pychip8.memory import MEMORY_SIZE, PROGRAM_START, Memory
from pychip8.ops import DISPATCH
from pychip8.rng import NumpyRandom, RandomSource
from pychip8.rom import Rom
from pychip8.state import Architecture, Flags


@dataclass(frozen=True)
class UnknownOpcode:
    """Diagnostic returned by ``step`` when the fetched word decodes to nothing."""

    word: int
    address: int

    def __str__(self) -> str:
        return f"Unknown opcode ${self.word:04X} at ${self.address:04X}"


@dataclass
class HaltOn:
    UnknownOpcode: bool = False


class Chip8:
    """
    PyChip8 is a CHIP-8 interpreter.

    One instance owns one machine: memory, registers, stack, timers, screen
    and keypad. Drivers call ``step`` in a loop, feed keys with ``set_key``,
    render when ``draw_flag`` is set (and clear it), and beep while
    ``sound_active()``. Nothing here sleeps or spawns threads.
    """

    WIDTH: Final[int] = Framebuffer.WIDTH
    HEIGHT: Final[int] = Framebuffer.HEIGHT
    MEMORY_SIZE: Final[int] = MEMORY_SIZE
    PROGRAM_START: Final[int] = PROGRAM_START
    ROM_SIZE_MAX: Final[int] = MEMORY_SIZE - PROGRAM_START

    def __init__(self, config: Optional[MachineConfig] = None, rng: Optional[RandomSource] = None) -> None:
        self.config: MachineConfig = {**default_machine_config(), **(config or {})}  # type: ignore[typeddict-item]
        self.rng: RandomSource = NumpyRandom(self.config["seed"]) if rng is None else rng
        self.halt_on: HaltOn = HaltOn(UnknownOpcode=self.config["halt_on_unknown_opcode"])
        self.rom: Rom = Rom()
        self.Architecture: Architecture = self._power_on()

    def _power_on(self) -> Architecture:
        return Architecture(
            flags=Flags(
                Legacy=self.config["legacy_mode"],
                IndexOverflow=self.config["index_overflow_flag"],
                TickTimersOnStep=self.config["tick_timers_on_step"],
            )
        )

    def __repr__(self) -> str:
        arch = self.Architecture
        return (
            f"<Chip8 PC=${arch.ProgramCounter:04X} I=${arch.I:04X} SP={arch.StackPointer} "
            f"DT={arch.DelayTimer} ST={arch.SoundTimer} halted={arch.Halted}>"
        )

    # --- Program loading ---

    def load(self, program: Union[bytes, bytearray, Rom]) -> None:
        """
        Copy a program into memory at ``PROGRAM_START``.

        Raises:
            RomTooLarge: the program exceeds ``ROM_SIZE_MAX``; memory is left untouched.
        """
        if isinstance(program, Rom):
            rom = program
        else:
            result = Rom.from_bytes(program)
            if not isinstance(result, Success):
                raise result.failure()
            rom = result.unwrap()

        self.Architecture.memory.load_program(rom.data)
        self.rom = rom
        _logger.info(f"Loaded {len(rom)} bytes{f' from {rom.file}' if rom.file else ''}")

    def reset(self) -> None:
        """Return to power-on state and reload the last program."""
        _logger.info("Resetting emulator...")
        self.Architecture = self._power_on()
        if len(self.rom):
            self.Architecture.memory.load_program(self.rom.data)

    # --- Execution ---

    def step(self) -> Optional[UnknownOpcode]:
        """
        Execute one instruction, then apply the timer policy.

        Returns an ``UnknownOpcode`` diagnostic when the word at pc is not an
        instruction (pc stays put), otherwise None. A halted machine does
        nothing and returns None.

        Raises:
            StackOverflow, StackUnderflow, MemoryAccessError: the machine is
                halted before the error propagates.
            UnknownOpcodeError: only when halting on unknown opcodes is enabled.
        """
        arch = self.Architecture
        if arch.Halted:
            return None

        diagnostic = None
        try:
            pc = arch.ProgramCounter
            arch.OpCode = arch.memory.read_word(pc)
            instruction = decode(arch.OpCode)

            if instruction.op is Op.UNKNOWN:
                diagnostic = self._unknown(instruction, pc)
            else:
                DISPATCH[instruction.op](arch, instruction, self.rng)
        except Chip8Error as e:
            arch.Halted = True
            _logger.error(f"Machine halted: {e}")
            raise

        if arch.flags.TickTimersOnStep:
            arch.tick_timers()
        return diagnostic

    def _unknown(self, instruction: Instruction, pc: int) -> UnknownOpcode:
        _logger.error(f"Unknown OpCode: ${instruction.word:04X} at PC=${pc:04X}")
        if self.halt_on.UnknownOpcode:
            raise UnknownOpcodeError(instruction.word, pc)
        return UnknownOpcode(instruction.word, pc)

    def tick_timers(self) -> None:
        """One 60 Hz timer tick: delay and sound timers count down toward zero."""
        self.Architecture.tick_timers()

    # --- Outputs ---

    def get_pixel(self, x: int, y: int) -> bool:
        return self.Architecture.screen.get_pixel(x, y)

    @property
    def framebuffer(self) -> NDArray[np.bool_]:
        """Copy of the screen, indexed ``[y, x]``."""
        return self.Architecture.screen.to_array()

    @property
    def draw_flag(self) -> bool:
        return self.Architecture.DrawFlag

    @draw_flag.setter
    def draw_flag(self, value: bool) -> None:
        self.Architecture.DrawFlag = bool(value)

    def sound_active(self) -> bool:
        return self.Architecture.sound_active()

    # --- Inputs and configuration ---

    def set_key(self, key: int, pressed: bool) -> None:
        self.Architecture.keypad.set_key(key, pressed)

    def release_keys(self) -> None:
        """Let go of every key, e.g. when the window loses focus mid-press."""
        self.Architecture.keypad.release_all()

    def set_legacy_mode(self, value: bool) -> None:
        """Select the original shift/subtract variants. Set before running; changing it mid-run is unsupported."""
        self.config["legacy_mode"] = value
        self.Architecture.flags.Legacy = value

    def set_index_overflow_flag(self, value: bool) -> None:
        """Make FX1E report I + VX > 0xFFF in VF. Set before running, like ``set_legacy_mode``."""
        self.config["index_overflow_flag"] = value
        self.Architecture.flags.IndexOverflow = value

    # --- Introspection ---

    @property
    def state(self) -> Architecture:
        return self.Architecture

    @property
    def memory(self) -> Memory:
        """Copy of the machine's memory."""
        return self.Architecture.memory.copy()

    @property
    def halted(self) -> bool:
        return self.Architecture.Halted

    @property
    def timers_decoupled(self) -> bool:
        """True when the driver, not ``step``, is responsible for ``tick_timers``."""
        return not self.Architecture.flags.TickTimersOnStep
