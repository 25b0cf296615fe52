from typing import Iterable

import pytest

from pychip8.emulator import Chip8
from pychip8.rng import FixedSequence


def program(*words: int) -> bytes:
    """Assemble instruction words into big-endian program bytes."""
    return b"".join(w.to_bytes(2, "big") for w in words)


def run(chip8: Chip8, words: Iterable[int], steps: int = -1) -> Chip8:
    words = list(words)
    chip8.load(program(*words))
    for _ in range(len(words) if steps < 0 else steps):
        chip8.step()
    return chip8


@pytest.fixture
def chip8() -> Chip8:
    return Chip8(rng=FixedSequence([0xAB]))


@pytest.fixture
def modern() -> Chip8:
    return Chip8({"legacy_mode": False}, rng=FixedSequence([0xAB]))
