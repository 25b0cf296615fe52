"""
Instruction handlers.

Each handler takes the machine state, the decoded instruction and the random
source, mutates the state in place and moves the program counter. Operands
are read before VF is written, so an instruction that targets VF with its
result still ends with the flag value in VF.
"""

from typing import Callable, Dict, Final

from pychip8.decoder import Instruction, Op
from pychip8.exception import StackOverflow, StackUnderflow
from pychip8.memory import FONT_START, GLYPH_SIZE
from pychip8.rng import RandomSource
from pychip8.state import FLAG, STACK_DEPTH, Architecture

Handler = Callable[[Architecture, Instruction, RandomSource], None]


# 0???


def _do_op_CLS(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.screen.clear()
    arch.DrawFlag = True
    arch.advance()


def _do_op_RET(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    if arch.StackPointer == 0:
        raise StackUnderflow(f"Return with empty call stack at ${arch.ProgramCounter:04X}")
    arch.StackPointer -= 1
    arch.ProgramCounter = arch.Stack[arch.StackPointer] + 2


# Flow control


def _do_op_JP(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.ProgramCounter = ins.nnn


def _do_op_CALL(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    if arch.StackPointer >= STACK_DEPTH:
        raise StackOverflow(f"Call depth exceeds {STACK_DEPTH} at ${arch.ProgramCounter:04X}")
    arch.Stack[arch.StackPointer] = arch.ProgramCounter
    arch.StackPointer += 1
    arch.ProgramCounter = ins.nnn


def _do_op_JP_V0(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.ProgramCounter = ins.nnn + arch.V[0]


def _do_op_SE_IMM(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.advance(skip=arch.V[ins.x] == ins.nn)


def _do_op_SNE_IMM(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.advance(skip=arch.V[ins.x] != ins.nn)


def _do_op_SE_REG(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.advance(skip=arch.V[ins.x] == arch.V[ins.y])


def _do_op_SNE_REG(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.advance(skip=arch.V[ins.x] != arch.V[ins.y])


# Immediates


def _do_op_LD_IMM(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.V[ins.x] = ins.nn
    arch.advance()


def _do_op_ADD_IMM(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    # No carry flag for 7XNN
    arch.V[ins.x] = (arch.V[ins.x] + ins.nn) & 0xFF
    arch.advance()


# 8XY?


def _do_op_LD_REG(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.V[ins.x] = arch.V[ins.y]
    arch.advance()


def _do_op_OR(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.V[ins.x] |= arch.V[ins.y]
    arch.advance()


def _do_op_AND(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.V[ins.x] &= arch.V[ins.y]
    arch.advance()


def _do_op_XOR(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.V[ins.x] ^= arch.V[ins.y]
    arch.advance()


def _do_op_ADD_REG(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    total = arch.V[ins.x] + arch.V[ins.y]
    arch.V[ins.x] = total & 0xFF
    arch.V[FLAG] = 1 if total > 0xFF else 0
    arch.advance()


def _do_op_SUB(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    vx, vy = arch.V[ins.x], arch.V[ins.y]
    arch.V[ins.x] = (vx - vy) & 0xFF
    arch.V[FLAG] = 0 if vx < vy else 1
    arch.advance()


def _do_op_SUBN(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    vx, vy = arch.V[ins.x], arch.V[ins.y]
    arch.V[ins.x] = (vy - vx) & 0xFF
    if arch.flags.Legacy:
        arch.V[FLAG] = 0 if vy < vx else 1
    else:
        # Cowgod's reference: VF set only when VY > VX, so equal operands clear it
        arch.V[FLAG] = 1 if vy > vx else 0
    arch.advance()


def _do_op_SHR(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    source = arch.V[ins.y] if arch.flags.Legacy else arch.V[ins.x]
    arch.V[ins.x] = source >> 1
    arch.V[FLAG] = source & 0x01
    arch.advance()


def _do_op_SHL(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    source = arch.V[ins.y] if arch.flags.Legacy else arch.V[ins.x]
    arch.V[ins.x] = (source << 1) & 0xFF
    arch.V[FLAG] = source >> 7
    arch.advance()


# Index register, random, graphics


def _do_op_LD_I(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.I = ins.nnn
    arch.advance()


def _do_op_RND(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.V[ins.x] = rng.next_byte() & ins.nn
    arch.advance()


def _do_op_DRW(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    """DXYN: XOR N rows of sprite data from memory[I] at (VX, VY); VF = collision."""
    x, y = arch.V[ins.x], arch.V[ins.y]
    rows = arch.memory.read_block(arch.I, ins.n)
    collision = arch.screen.draw_sprite(x, y, rows)
    arch.V[FLAG] = 1 if collision else 0
    arch.DrawFlag = True
    arch.advance()


# EX??


def _do_op_SKP(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.advance(skip=arch.keypad.is_pressed(arch.V[ins.x]))


def _do_op_SKNP(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.advance(skip=not arch.keypad.is_pressed(arch.V[ins.x]))


# FX??


def _do_op_LD_VX_DT(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.V[ins.x] = arch.DelayTimer
    arch.advance()


def _do_op_LD_VX_K(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    """FX0A: without a key held, leave pc alone so this instruction runs again next step."""
    key = arch.keypad.last_pressed()
    if key is None:
        return
    arch.V[ins.x] = key
    arch.advance()


def _do_op_LD_DT_VX(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.DelayTimer = arch.V[ins.x]
    arch.advance()


def _do_op_LD_ST_VX(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.SoundTimer = arch.V[ins.x]
    arch.advance()


def _do_op_ADD_I(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    total = arch.I + arch.V[ins.x]
    arch.I = total & 0xFFFF
    if arch.flags.IndexOverflow:
        arch.V[FLAG] = 1 if total > 0xFFF else 0
    arch.advance()


def _do_op_LD_F(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.I = FONT_START + arch.V[ins.x] * GLYPH_SIZE
    arch.advance()


def _do_op_BCD(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    value = arch.V[ins.x]
    arch.memory.write_block(arch.I, bytes((value // 100, (value // 10) % 10, value % 10)))
    arch.advance()


def _do_op_STORE(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    arch.memory.write_block(arch.I, bytes(arch.V[: ins.x + 1]))
    arch.I = arch.I + ins.x + 1
    arch.advance()


def _do_op_LOAD(arch: Architecture, ins: Instruction, rng: RandomSource) -> None:
    data = arch.memory.read_block(arch.I, ins.x + 1)
    arch.V[: ins.x + 1] = list(data)
    arch.I = arch.I + ins.x + 1
    arch.advance()


DISPATCH: Final[Dict[Op, Handler]] = {
    Op.CLS: _do_op_CLS,
    Op.RET: _do_op_RET,
    Op.JP: _do_op_JP,
    Op.CALL: _do_op_CALL,
    Op.SE_IMM: _do_op_SE_IMM,
    Op.SNE_IMM: _do_op_SNE_IMM,
    Op.SE_REG: _do_op_SE_REG,
    Op.LD_IMM: _do_op_LD_IMM,
    Op.ADD_IMM: _do_op_ADD_IMM,
    Op.LD_REG: _do_op_LD_REG,
    Op.OR: _do_op_OR,
    Op.AND: _do_op_AND,
    Op.XOR: _do_op_XOR,
    Op.ADD_REG: _do_op_ADD_REG,
    Op.SUB: _do_op_SUB,
    Op.SHR: _do_op_SHR,
    Op.SUBN: _do_op_SUBN,
    Op.SHL: _do_op_SHL,
    Op.SNE_REG: _do_op_SNE_REG,
    Op.LD_I: _do_op_LD_I,
    Op.JP_V0: _do_op_JP_V0,
    Op.RND: _do_op_RND,
    Op.DRW: _do_op_DRW,
    Op.SKP: _do_op_SKP,
    Op.SKNP: _do_op_SKNP,
    Op.LD_VX_DT: _do_op_LD_VX_DT,
    Op.LD_VX_K: _do_op_LD_VX_K,
    Op.LD_DT_VX: _do_op_LD_DT_VX,
    Op.LD_ST_VX: _do_op_LD_ST_VX,
    Op.ADD_I: _do_op_ADD_I,
    Op.LD_F: _do_op_LD_F,
    Op.BCD: _do_op_BCD,
    Op.STORE: _do_op_STORE,
    Op.LOAD: _do_op_LOAD,
}
