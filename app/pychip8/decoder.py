from dataclasses import dataclass
from enum import Enum


class Op(Enum):
    """
    Every instruction the interpreter knows, plus UNKNOWN.

    Values are the usual mnemonic-style names, used in log messages.
    """

    UNKNOWN = "???"
    CLS = "00E0"
    RET = "00EE"
    JP = "1NNN"
    CALL = "2NNN"
    SE_IMM = "3XNN"
    SNE_IMM = "4XNN"
    SE_REG = "5XY0"
    LD_IMM = "6XNN"
    ADD_IMM = "7XNN"
    LD_REG = "8XY0"
    OR = "8XY1"
    AND = "8XY2"
    XOR = "8XY3"
    ADD_REG = "8XY4"
    SUB = "8XY5"
    SHR = "8XY6"
    SUBN = "8XY7"
    SHL = "8XYE"
    SNE_REG = "9XY0"
    LD_I = "ANNN"
    JP_V0 = "BNNN"
    RND = "CXNN"
    DRW = "DXYN"
    SKP = "EX9E"
    SKNP = "EXA1"
    LD_VX_DT = "FX07"
    LD_VX_K = "FX0A"
    LD_DT_VX = "FX15"
    LD_ST_VX = "FX18"
    ADD_I = "FX1E"
    LD_F = "FX29"
    BCD = "FX33"
    STORE = "FX55"
    LOAD = "FX65"


@dataclass(frozen=True)
class Instruction:
    op: Op
    word: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int

    def __repr__(self) -> str:
        return f"<Instruction {self.op.name} ${self.word:04X}>"


_ALU: dict[int, Op] = {
    0x0: Op.LD_REG,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_REG,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

_MISC: dict[int, Op] = {
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_VX_K,
    0x15: Op.LD_DT_VX,
    0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I,
    0x29: Op.LD_F,
    0x33: Op.BCD,
    0x55: Op.STORE,
    0x65: Op.LOAD,
}


def _classify(word: int) -> Op:
    n = word & 0x000F
    nn = word & 0x00FF

    match word >> 12:
        case 0x0:
            if word == 0x00E0:
                return Op.CLS
            if word == 0x00EE:
                return Op.RET
            return Op.UNKNOWN
        case 0x1:
            return Op.JP
        case 0x2:
            return Op.CALL
        case 0x3:
            return Op.SE_IMM
        case 0x4:
            return Op.SNE_IMM
        case 0x5:
            return Op.SE_REG
        case 0x6:
            return Op.LD_IMM
        case 0x7:
            return Op.ADD_IMM
        case 0x8:
            return _ALU.get(n, Op.UNKNOWN)
        case 0x9:
            return Op.SNE_REG
        case 0xA:
            return Op.LD_I
        case 0xB:
            return Op.JP_V0
        case 0xC:
            return Op.RND
        case 0xD:
            return Op.DRW
        case 0xE:
            if nn == 0x9E:
                return Op.SKP
            if nn == 0xA1:
                return Op.SKNP
            return Op.UNKNOWN
        case _:  # 0xF
            return _MISC.get(nn, Op.UNKNOWN)


def decode(word: int) -> Instruction:
    """Split a 16-bit instruction word into its operation and operand fields."""
    word &= 0xFFFF
    return Instruction(
        op=_classify(word),
        word=word,
        x=(word & 0x0F00) >> 8,  # .X..
        y=(word & 0x00F0) >> 4,  # ..Y.
        n=word & 0x000F,  # ...N
        nn=word & 0x00FF,  # ..NN
        nnn=word & 0x0FFF,  # .NNN
    )
