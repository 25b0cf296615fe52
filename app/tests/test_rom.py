from returns.result import Failure, Success

from pychip8.exception import RomTooLarge
from pychip8.rom import Rom


def test_from_bytes_success():
    result = Rom.from_bytes(b"\x00\xe0")
    assert isinstance(result, Success)
    rom = result.unwrap()
    assert rom.data == b"\x00\xe0"
    assert len(rom) == 2


def test_from_bytes_accepts_max_size():
    assert isinstance(Rom.from_bytes(bytes(Rom.MAX_SIZE)), Success)


def test_from_bytes_too_large():
    result = Rom.from_bytes(bytes(Rom.MAX_SIZE + 1))
    assert isinstance(result, Failure)
    error = result.failure()
    assert isinstance(error, RomTooLarge)
    assert error.size == Rom.MAX_SIZE + 1


def test_from_file(tmp_path):
    path = tmp_path / "pong.ch8"
    path.write_bytes(b"\x6a\x02\x6b\x0c")
    result = Rom.from_file(path)
    assert isinstance(result, Success)
    rom = result.unwrap()
    assert rom.data == b"\x6a\x02\x6b\x0c"
    assert rom.file == str(path)


def test_from_file_missing(tmp_path):
    result = Rom.from_file(tmp_path / "missing.ch8")
    assert isinstance(result, Failure)
    assert "Failed to read file" in result.failure()


def test_from_file_empty(tmp_path):
    path = tmp_path / "empty.ch8"
    path.write_bytes(b"")
    result = Rom.from_file(path)
    assert isinstance(result, Failure)
    assert "empty" in result.failure()


def test_from_file_too_large_is_a_message(tmp_path):
    path = tmp_path / "big.ch8"
    path.write_bytes(bytes(Rom.MAX_SIZE + 1))
    result = Rom.from_file(path)
    assert isinstance(result, Failure)
    assert "ROM too large" in result.failure()


def test_is_valid_file(tmp_path):
    good = tmp_path / "good.ch8"
    good.write_bytes(b"\x12\x00")
    assert Rom.is_valid_file(good) == (True, None)

    ok, error = Rom.is_valid_file(tmp_path / "nope.ch8")
    assert not ok
    assert error
