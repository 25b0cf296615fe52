from pathlib import Path
from typing import Final, Optional, Tuple, Union

from returns.result import Failure, Result, Success

from pychip8.exception import RomTooLarge
from pychip8.logger import log
from pychip8.memory import ROM_SIZE_MAX


class Rom:
    """
    A raw CHIP-8 program image.

    There is no header or file format: the file is the bytes that get copied
    to the program start offset. The only validation is the size limit.
    """

    MAX_SIZE: Final[int] = ROM_SIZE_MAX

    def __init__(self, data: bytes = b"", file: str = "") -> None:
        self.data: bytes = bytes(data)
        self.file: str = file

    def __repr__(self) -> str:
        return f"<Rom file={self.file!r} size={len(self.data)} bytes>"

    def __len__(self) -> int:
        return len(self.data)

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray]) -> Result["Rom", RomTooLarge]:
        """
        Wrap program bytes, checking they fit in memory.

        Returns:
            Success with the Rom, or Failure carrying the RomTooLarge error.
        """
        if len(data) > cls.MAX_SIZE:
            return Failure(RomTooLarge(len(data), cls.MAX_SIZE))
        return Success(cls(bytes(data)))

    @classmethod
    def from_file(cls, filepath: Union[Path, str]) -> Result["Rom", str]:
        """
        Load a program from disk.

        Returns:
            Result containing either a Rom instance or an error string.
        """
        try:
            with open(filepath, "rb") as f:
                data = f.read()
        except OSError as e:
            return Failure(f"Failed to read file {filepath}: {e}")

        if not data:
            return Failure(f"ROM file {filepath} is empty")

        def attach_file(rom: "Rom") -> "Rom":
            rom.file = str(filepath)
            log.debug(f"Read {len(rom)} bytes from {filepath}")
            return rom

        return cls.from_bytes(data).map(attach_file).alt(str)

    @classmethod
    def is_valid_file(cls, filepath: Union[Path, str]) -> Tuple[bool, Optional[str]]:
        """
        Check whether a file can be loaded as a program.

        Returns:
            (True, None) if it can, otherwise (False, error message).
        """
        result = cls.from_file(filepath)
        if isinstance(result, Success):
            return True, None
        return False, result.failure()
