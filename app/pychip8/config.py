from __future__ import annotations

import tomllib
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional, TypedDict, Union

from pychip8.logger import log as _log


class MachineConfig(TypedDict):
    legacy_mode: bool
    index_overflow_flag: bool
    tick_timers_on_step: bool
    halt_on_unknown_opcode: bool
    seed: Optional[int]


class TimingConfig(TypedDict):
    step_hz: int
    timer_hz: int
    max_frame_time: float


class DisplayConfig(TypedDict):
    width: int
    height: int
    fps: int
    background: str
    foreground: str
    tone_hz: int


class Config(TypedDict):
    machine: MachineConfig
    timing: TimingConfig
    display: DisplayConfig
    keypad: Dict[str, str]


# 123C      1234
# 456D  <-  QWER
# 789E      ASDF
# A0BF      ZXCV
DEFAULT_KEYPAD: Dict[str, str] = {
    "1": "1", "2": "2", "3": "3", "C": "4",
    "4": "q", "5": "w", "6": "e", "D": "r",
    "7": "a", "8": "s", "9": "d", "E": "f",
    "A": "z", "0": "x", "B": "c", "F": "v",
}

DEFAULT_CONFIG: Config = {
    "machine": {
        "legacy_mode": True,
        "index_overflow_flag": False,
        "tick_timers_on_step": True,
        "halt_on_unknown_opcode": False,
        "seed": None,
    },
    "timing": {"step_hz": 600, "timer_hz": 60, "max_frame_time": 0.25},
    "display": {
        "width": 1024,
        "height": 512,
        "fps": 60,
        "background": "#1C2841",
        "foreground": "#FFFFFF",
        "tone_hz": 440,
    },
    "keypad": DEFAULT_KEYPAD,
}

_HEX_DIGITS = frozenset("0123456789ABCDEF")


def default_machine_config() -> MachineConfig:
    return deepcopy(DEFAULT_CONFIG["machine"])


def _deep_merge(
    target: MutableMapping[str, Any],
    overrides: Mapping[str, Any],
) -> MutableMapping[str, Any]:
    for key, value in overrides.items():
        if isinstance(target.get(key), dict) and isinstance(value, dict):
            _deep_merge(target[key], value)
        else:
            target[key] = value
    return target


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_color(value: Any) -> bool:
    if not isinstance(value, str) or len(value) != 7 or not value.startswith("#"):
        return False
    return all(c in "0123456789abcdefABCDEF" for c in value[1:])


def _validate_config(cfg: Config) -> None:
    machine = cfg["machine"]
    for name in ("legacy_mode", "index_overflow_flag", "tick_timers_on_step", "halt_on_unknown_opcode"):
        if not isinstance(machine[name], bool):
            raise ValueError(f"machine.{name} must be a boolean")
    seed = machine["seed"]
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool) or seed < 0):
        raise ValueError("machine.seed must be a non-negative integer")

    timing = cfg["timing"]
    if not _is_positive_int(timing["step_hz"]):
        raise ValueError("timing.step_hz must be a positive integer")
    if not _is_positive_int(timing["timer_hz"]):
        raise ValueError("timing.timer_hz must be a positive integer")
    if not isinstance(timing["max_frame_time"], (int, float)) or timing["max_frame_time"] <= 0:
        raise ValueError("timing.max_frame_time must be a positive number")

    display = cfg["display"]
    for name in ("width", "height", "fps", "tone_hz"):
        if not _is_positive_int(display[name]):
            raise ValueError(f"display.{name} must be a positive integer")
    for name in ("background", "foreground"):
        if not _is_color(display[name]):
            raise ValueError(f"display.{name} must be a color like '#RRGGBB'")

    keypad = cfg["keypad"]
    if set(k.upper() for k in keypad) != _HEX_DIGITS:
        raise ValueError("keypad must map every hex digit 0-F to a key name")
    if not all(isinstance(v, str) and v for v in keypad.values()):
        raise ValueError("keypad key names must be non-empty strings")


def load_config(config_file: Optional[Union[str, Path]] = None) -> Config:
    """
    Read a TOML config file on top of ``DEFAULT_CONFIG``.

    A missing file gives the defaults. A file that cannot be parsed or fails
    validation is logged and the defaults are used instead.
    """
    if config_file is None or not Path(config_file).exists():
        return deepcopy(DEFAULT_CONFIG)

    config = deepcopy(DEFAULT_CONFIG)

    try:
        with open(config_file, "rb") as f:
            data = tomllib.load(f)

        if not isinstance(data, dict):
            raise ValueError("Config file root must be a table (dict).")

        # keypad is replaced as a whole, partial keypads are not meaningful
        if "keypad" in data:
            config["keypad"] = {}

        _deep_merge(config, data)  # type: ignore[arg-type]
        _validate_config(config)

    except (OSError, tomllib.TOMLDecodeError, ValueError, TypeError, KeyError) as e:
        _log.error(f"Failed to load config: {e}", exc_info=(type(e), e, e.__traceback__))
        return deepcopy(DEFAULT_CONFIG)

    config["keypad"] = {k.upper(): v for k, v in config["keypad"].items()}
    return config
