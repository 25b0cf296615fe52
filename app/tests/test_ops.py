import pytest

from conftest import run
from pychip8.emulator import Chip8
from pychip8.memory import PROGRAM_START
from pychip8.rng import FixedSequence


# Arithmetic


def test_add_with_carry(chip8):
    run(chip8, [0x6AFA, 0x6B0A, 0x8AB4])
    assert chip8.state.V[0xA] == 4
    assert chip8.state.V[0xF] == 1


def test_add_without_carry(chip8):
    run(chip8, [0x6A0A, 0x6B14, 0x8AB4])
    assert chip8.state.V[0xA] == 30
    assert chip8.state.V[0xF] == 0


def test_add_immediate_wraps_and_leaves_flag(chip8):
    run(chip8, [0x6F07, 0x6A02, 0x7AFF])
    assert chip8.state.V[0xA] == 1
    assert chip8.state.V[0xF] == 7


@pytest.mark.parametrize("vx, vy, result, flag", [(10, 5, 5, 1), (5, 10, 251, 0), (7, 7, 0, 1)])
def test_sub(chip8, vx, vy, result, flag):
    run(chip8, [0x6A00 | vx, 0x6B00 | vy, 0x8AB5])
    assert chip8.state.V[0xA] == result
    assert chip8.state.V[0xF] == flag


@pytest.mark.parametrize("vx, vy, result, flag", [(5, 10, 5, 1), (10, 5, 251, 0), (7, 7, 0, 1)])
def test_subn_legacy(chip8, vx, vy, result, flag):
    run(chip8, [0x6A00 | vx, 0x6B00 | vy, 0x8AB7])
    assert chip8.state.V[0xA] == result
    assert chip8.state.V[0xF] == flag


def test_subn_modern_flag_requires_vy_strictly_greater(modern):
    run(modern, [0x6A07, 0x6B07, 0x8AB7])
    assert modern.state.V[0xA] == 0
    assert modern.state.V[0xF] == 0


@pytest.mark.parametrize("word, vx, vy, result", [(0x8AB1, 0x0C, 0x0A, 0x0E), (0x8AB2, 0x0C, 0x0A, 0x08), (0x8AB3, 0x0C, 0x0A, 0x06)])
def test_bitwise(chip8, word, vx, vy, result):
    run(chip8, [0x6A00 | vx, 0x6B00 | vy, word])
    assert chip8.state.V[0xA] == result


def test_ld_reg(chip8):
    run(chip8, [0x6B42, 0x8AB0])
    assert chip8.state.V[0xA] == 0x42


def test_flag_register_as_destination_ends_with_flag(chip8):
    run(chip8, [0x6F05, 0x6105, 0x8F14])
    assert chip8.state.V[0xF] == 0


# Shifts


def test_shr_legacy_uses_vy(chip8):
    run(chip8, [0x6A00, 0x6B03, 0x8AB6])
    assert chip8.state.V[0xA] == 1
    assert chip8.state.V[0xF] == 1


def test_shr_modern_uses_vx(modern):
    run(modern, [0x6A06, 0x6B03, 0x8AB6])
    assert modern.state.V[0xA] == 3
    assert modern.state.V[0xF] == 0


def test_shl_legacy_uses_vy(chip8):
    run(chip8, [0x6A00, 0x6B81, 0x8ABE])
    assert chip8.state.V[0xA] == 0x02
    assert chip8.state.V[0xF] == 1


def test_shl_modern_uses_vx(modern):
    run(modern, [0x6A41, 0x6B81, 0x8ABE])
    assert modern.state.V[0xA] == 0x82
    assert modern.state.V[0xF] == 0


def test_set_legacy_mode_switches_variant(chip8):
    chip8.set_legacy_mode(False)
    run(chip8, [0x6A06, 0x6B03, 0x8AB6])
    assert chip8.state.V[0xA] == 3


# Flow control


def test_jump(chip8):
    run(chip8, [0x1ABC])
    assert chip8.state.ProgramCounter == 0xABC


def test_jump_plus_v0(chip8):
    run(chip8, [0x6005, 0xB300])
    assert chip8.state.ProgramCounter == 0x305


@pytest.mark.parametrize(
    "word, expected",
    [(0x3A05, 4), (0x3A06, 2), (0x4A05, 2), (0x4A06, 4), (0x5AB0, 4), (0x9AB0, 2)],
)
def test_skips(chip8, word, expected):
    run(chip8, [0x6A05, 0x6B05], steps=2)
    pc = chip8.state.ProgramCounter
    chip8.state.memory.write_block(pc, word.to_bytes(2, "big"))
    chip8.step()
    assert chip8.state.ProgramCounter == pc + expected


def test_call_ret_round_trip(chip8):
    # 200: CALL 206 / 202: LD VA, 1 / 204: JP 204 / 206: RET
    run(chip8, [0x2206, 0x6A01, 0x1204, 0x00EE], steps=1)
    arch = chip8.state
    assert arch.ProgramCounter == 0x206
    assert arch.StackPointer == 1
    assert arch.Stack[0] == PROGRAM_START

    chip8.step()
    assert arch.ProgramCounter == PROGRAM_START + 2
    assert arch.StackPointer == 0

    chip8.step()
    assert arch.V[0xA] == 1


# Index register, memory


def test_ld_i(chip8):
    run(chip8, [0xA123])
    assert chip8.state.I == 0x123


def test_add_i_without_flag_toggle(chip8):
    run(chip8, [0x6F07, 0x6002, 0xAFFF, 0xF01E])
    assert chip8.state.I == 0x1001
    assert chip8.state.V[0xF] == 7


@pytest.mark.parametrize("v0, flag", [(0x02, 1), (0x00, 0)])
def test_add_i_with_overflow_flag(chip8, v0, flag):
    chip8.set_index_overflow_flag(True)
    run(chip8, [0x6F07, 0x6000 | v0, 0xAFFF, 0xF01E])
    assert chip8.state.V[0xF] == flag


def test_font_address(chip8):
    run(chip8, [0x6A0B, 0xFA29])
    assert chip8.state.I == 0x0B * 5


def test_bcd(chip8):
    run(chip8, [0x6A9C, 0xA300, 0xFA33])
    assert chip8.state.memory.read_block(0x300, 3) == bytes([1, 5, 6])
    assert chip8.state.I == 0x300


def test_store_and_load_advance_i(chip8):
    run(chip8, [0x6011, 0x6122, 0x6233, 0xA300, 0xF255])
    arch = chip8.state
    assert arch.memory.read_block(0x300, 4) == bytes([0x11, 0x22, 0x33, 0x00])
    assert arch.I == 0x303

    arch.V[:3] = [0, 0, 0]
    arch.I = 0x300
    arch.memory.write_block(arch.ProgramCounter, (0xF165).to_bytes(2, "big"))
    chip8.step()
    assert arch.V[:3] == [0x11, 0x22, 0]
    assert arch.I == 0x302


def test_random_is_masked(chip8):
    run(chip8, [0xCA0F])
    assert chip8.state.V[0xA] == 0x0B


def test_random_with_injected_sequence():
    chip8 = Chip8(rng=FixedSequence([1, 2]))
    run(chip8, [0xC0FF, 0xC1FF, 0xC2FF])
    assert chip8.state.V[:3] == [1, 2, 1]


# Graphics


def test_cls(chip8):
    chip8.state.screen.set_pixel(3, 3, True)
    run(chip8, [0x00E0])
    assert chip8.state.screen.lit_count() == 0
    assert chip8.draw_flag


def test_double_draw_restores_screen(chip8):
    run(chip8, [0xA000, 0x6005, 0x6103, 0xD015])
    assert chip8.get_pixel(5, 3)
    assert chip8.state.V[0xF] == 0
    assert chip8.draw_flag
    before = chip8.framebuffer

    chip8.draw_flag = False
    chip8.state.memory.write_block(chip8.state.ProgramCounter, (0xD015).to_bytes(2, "big"))
    chip8.step()
    assert chip8.state.V[0xF] == 1
    assert chip8.draw_flag
    assert not chip8.framebuffer.any()
    assert before.sum() == 14


def test_draw_zero_rows_sets_draw_flag_only(chip8):
    run(chip8, [0xD010])
    assert chip8.draw_flag
    assert chip8.state.screen.lit_count() == 0
    assert chip8.state.V[0xF] == 0


# Keypad


def test_skip_if_pressed(chip8):
    chip8.set_key(5, True)
    run(chip8, [0x6A05, 0xEA9E])
    assert chip8.state.ProgramCounter == PROGRAM_START + 6


def test_skip_if_not_pressed(chip8):
    run(chip8, [0x6A05, 0xEAA1])
    assert chip8.state.ProgramCounter == PROGRAM_START + 6


@pytest.mark.parametrize("word, expected", [(0xEA9E, 2), (0xEAA1, 4)])
def test_key_register_out_of_range_is_not_pressed(chip8, word, expected):
    for k in range(16):
        chip8.set_key(k, True)
    run(chip8, [0x6AFF, word])
    assert chip8.state.ProgramCounter == PROGRAM_START + 2 + expected


def test_wait_for_key_replays_until_pressed(chip8):
    run(chip8, [0xF30A], steps=3)
    assert chip8.state.ProgramCounter == PROGRAM_START

    chip8.set_key(7, True)
    chip8.step()
    assert chip8.state.V[3] == 7
    assert chip8.state.ProgramCounter == PROGRAM_START + 2


def test_wait_for_key_stores_highest_held(chip8):
    chip8.set_key(2, True)
    chip8.set_key(0xC, True)
    run(chip8, [0xF30A])
    assert chip8.state.V[3] == 0xC


# Timers


def test_delay_timer_set_and_read(chip8):
    run(chip8, [0x6A05, 0xFA15, 0xFB07])
    # set to 5, ticked after that step and after the read
    assert chip8.state.V[0xB] == 4
    assert chip8.state.DelayTimer == 3


def test_sound_timer_set(chip8):
    run(chip8, [0x6A03, 0xFA18])
    assert chip8.state.SoundTimer == 2
    assert chip8.sound_active()
