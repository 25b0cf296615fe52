class Chip8Error(Exception):
    """Base exception for all PyChip8 related errors."""

    pass


class RomTooLarge(Chip8Error):
    """Program does not fit between the program start offset and the end of memory."""

    def __init__(self, size: int, capacity: int):
        self.size = size
        self.capacity = capacity
        super().__init__(f"ROM too large: {size} bytes, maximum {capacity}")


class MemoryAccessError(Chip8Error):
    def __init__(self, address: int, size: int):
        self.address = address
        super().__init__(f"Memory access out of range: ${address:04X} (memory is {size} bytes)")


class StackError(Chip8Error):
    """Call stack misuse. Fatal for the machine instance that raised it."""

    pass


class StackOverflow(StackError):
    pass


class StackUnderflow(StackError):
    pass


class UnknownOpcodeError(Chip8Error):
    def __init__(self, word: int, address: int):
        self.word = word
        self.address = address
        super().__init__(f"Unknown opcode ${word:04X} at ${address:04X}")


class InvalidKey(Chip8Error, ValueError):
    def __init__(self, key: int):
        self.key = key
        super().__init__(f"Invalid key index {key}. Use 0x0 - 0xF.")


class ExitException(BaseException):
    """Exception to signal the front-end to exit."""

    pass
