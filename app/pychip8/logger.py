import logging
from datetime import datetime
from pathlib import Path
from typing import Final, List, Optional, Tuple, Union

from rich.console import Console
from rich.logging import RichHandler

console: Final[Console] = Console()

log: Final[logging.Logger] = logging.getLogger("PyChip8")

time_format: Final[str] = "%Y-%m-%d %H:%M:%S"
log_format: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Chip8FileHandler(logging.Handler):
    """Appends formatted records to a file, holding back records that failed to write."""

    def __init__(self, file_name: Union[str, Path]):
        super().__init__()
        self._file_name = Path(file_name)
        self._log_hold: List[Tuple[logging.LogRecord, Exception]] = []

    def _write_log_entry(self, log_entry: str) -> None:
        with open(self._file_name, "a", encoding="utf-8") as f:
            f.write(log_entry + "\n")

    def emit(self, record: logging.LogRecord) -> None:
        log_entry = self.format(record)

        self.acquire()
        try:
            if self._log_hold:
                still_failed = []
                for old_record, _ in self._log_hold:
                    try:
                        self._write_log_entry(self.format(old_record))
                    except OSError as e:
                        still_failed.append((old_record, e))
                self._log_hold = still_failed

            try:
                self._write_log_entry(log_entry)
            except OSError as e:
                self._log_hold.append((record, e))
        finally:
            self.release()


def get_time() -> str:
    return datetime.now().strftime("%Y-%m-%d_%H-%M-%S")


def setup_logging(debug: bool = False, log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Install the console (rich) handler and, if ``log_dir`` is given, a file handler.

    Library code only logs through ``log``; the front-end decides where it goes.
    """
    handlers: List[logging.Handler] = [
        RichHandler(
            rich_tracebacks=True,
            show_path=True,
            enable_link_path=True,
            tracebacks_show_locals=debug,
            show_level=False,
            console=console,
        )
    ]

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = Chip8FileHandler(log_dir / f"pychip8_{get_time()}.log")
        file_handler.setFormatter(logging.Formatter(log_format, datefmt=time_format))
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=log_format,
        datefmt=time_format,
        handlers=handlers,
        force=True,
    )
    return log
