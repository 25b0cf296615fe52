from os import environ

environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"

import argparse
import sys
from pathlib import Path
from typing import Dict, Optional, Tuple

import numpy as np
import pygame
from rich import box
from rich.panel import Panel
from rich.table import Table
from returns.result import Success
from rich.traceback import install

sys.path.insert(0, str(Path(__file__).parent / "app"))

from __version__ import __version_string__  # noqa: E402
from pychip8.clock import Pacer, Timer  # noqa: E402
from pychip8.config import Config, load_config  # noqa: E402
from pychip8.emulator import Chip8  # noqa: E402
from pychip8.exception import Chip8Error, ExitException  # noqa: E402
from pychip8.logger import console, setup_logging  # noqa: E402
from pychip8.rom import Rom  # noqa: E402

install()  # for cool traceback

SAMPLE_RATE = 44100


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pychip8", description="A CHIP-8 emulator.")
    parser.add_argument("rom", type=Path, help="path to the ROM file")
    parser.add_argument("-w", "--width", type=int, default=None, help="window width (default: 1024)")
    parser.add_argument("-H", "--height", type=int, default=None, help="window height (default: 512)")
    parser.add_argument("-c", "--config", type=Path, default=Path(__file__).parent / "config.toml", help="TOML config file")
    parser.add_argument("--debug", action="store_true", help="debug logging, written to ./log as well")
    args = parser.parse_args(argv)

    for name in ("width", "height"):
        value = getattr(args, name)
        if value is not None and value <= 0:
            parser.error(f"--{name} must be a positive integer, got {value}")
    return args


def build_keymap(keypad: Dict[str, str]) -> Dict[int, int]:
    """pygame key code -> hex keypad index."""
    keymap: Dict[int, int] = {}
    for digit, key_name in keypad.items():
        try:
            keymap[pygame.key.key_code(key_name)] = int(digit, 16)
        except ValueError:
            console.print(f"[bold yellow]Unknown key name {key_name!r} for keypad {digit}, ignored[/bold yellow]")
    return keymap


def viewport(window_size: Tuple[int, int]) -> pygame.Rect:
    """Largest 2:1 area that fits the window, centered (black bars elsewhere)."""
    width, height = window_size
    pixel_size = max(1, min(width // Chip8.WIDTH, height // Chip8.HEIGHT))
    view_w, view_h = Chip8.WIDTH * pixel_size, Chip8.HEIGHT * pixel_size
    return pygame.Rect((width - view_w) // 2, (height - view_h) // 2, view_w, view_h)


def make_tone(frequency: int) -> Optional[pygame.mixer.Sound]:
    if pygame.mixer.get_init() is None:
        return None
    _, _, channels = pygame.mixer.get_init()
    t = np.arange(SAMPLE_RATE // 10) / SAMPLE_RATE
    wave = np.where(np.sin(2 * np.pi * frequency * t) >= 0, 4096, -4096).astype(np.int16)
    if channels > 1:
        wave = np.repeat(wave[:, None], channels, axis=1)
    return pygame.sndarray.make_sound(np.ascontiguousarray(wave))


def render(screen: pygame.Surface, chip8: Chip8, config: Config) -> None:
    display = config["display"]
    background = pygame.Color(display["background"])
    foreground = pygame.Color(display["foreground"])

    pixels = chip8.framebuffer.T  # surfarray wants [x, y]
    rgb = np.empty((Chip8.WIDTH, Chip8.HEIGHT, 3), dtype=np.uint8)
    rgb[:] = (background.r, background.g, background.b)
    rgb[pixels] = (foreground.r, foreground.g, foreground.b)

    area = viewport(screen.get_size())
    surf = pygame.transform.scale(pygame.surfarray.make_surface(rgb), area.size)
    screen.fill((0, 0, 0))
    screen.blit(surf, area.topleft)
    pygame.display.flip()


def print_banner(rom: Rom) -> None:
    console.print(Panel.fit(f"[bold cyan]PyChip8 [red]{__version_string__}[/red][/]", border_style="bright_blue"))
    console.print(f"[green]Loaded:[/green] {rom.file} ({len(rom)} bytes)\n")

    table = Table(title="Controls", box=box.ROUNDED, border_style="cyan")
    table.add_column("Key", justify="center")
    table.add_column("Action", justify="left")
    table.add_row("1234 / QWER / ASDF / ZXCV", "Keypad 123C / 456D / 789E / A0BF")
    table.add_row("P / Pause", "Pause/Unpause")
    table.add_row("F5", "Reset")
    table.add_row("ESC", "Quit")
    console.print(table)


def handle_events(chip8: Chip8, keymap: Dict[int, int], state: Dict[str, bool]) -> None:
    for event in pygame.event.get():
        if event.type == pygame.QUIT:
            raise ExitException()
        elif event.type == pygame.WINDOWFOCUSLOST:
            state["focus"] = False
            chip8.release_keys()
        elif event.type == pygame.WINDOWFOCUSGAINED:
            state["focus"] = True
        elif event.type == pygame.VIDEORESIZE:
            state["redraw"] = True
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                raise ExitException()
            elif event.key in (pygame.K_p, pygame.K_PAUSE):
                state["paused"] = not state["paused"]
                console.print(f"[bold yellow]{'Paused' if state['paused'] else 'Unpaused'}[/bold yellow]")
            elif event.key == pygame.K_F5:
                console.print("[bold red]Resetting emulator...[/bold red]")
                chip8.reset()
                state["redraw"] = True
            elif event.key in keymap:
                chip8.set_key(keymap[event.key], True)
        elif event.type == pygame.KEYUP:
            if event.key in keymap:
                chip8.set_key(keymap[event.key], False)


def run(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    if args.width is not None:
        config["display"]["width"] = args.width
    if args.height is not None:
        config["display"]["height"] = args.height

    result = Rom.from_file(args.rom)
    if not isinstance(result, Success):
        console.print(f"[bold red]{result.failure()}[/bold red]")
        return 1
    rom = result.unwrap()

    chip8 = Chip8(config["machine"])
    chip8.load(rom)

    timing = config["timing"]
    pacer = Pacer(timing["step_hz"], timing["timer_hz"], timing["max_frame_time"])

    pygame.init()
    screen = pygame.display.set_mode((config["display"]["width"], config["display"]["height"]), pygame.RESIZABLE)
    pygame.display.set_caption("PyChip8")
    keymap = build_keymap(config["keypad"])
    tone = make_tone(config["display"]["tone_hz"])
    clock = pygame.time.Clock()
    frame_timer = Timer()

    print_banner(rom)

    state = {"paused": False, "focus": True, "redraw": True}
    playing = False
    frame_timer.start()
    try:
        while True:
            handle_events(chip8, keymap, state)
            elapsed = frame_timer.lap()

            if state["focus"] and not state["paused"]:
                pacer.run(chip8, elapsed)
            else:
                pacer.reset()

            if chip8.draw_flag or state["redraw"]:
                render(screen, chip8, config)
                chip8.draw_flag = False
                state["redraw"] = False

            should_play = chip8.sound_active() and not state["paused"]
            if tone is not None and should_play != playing:
                if should_play:
                    tone.play(loops=-1)
                else:
                    tone.stop()
                playing = should_play

            title = "PyChip8"
            if state["paused"]:
                title += " [PAUSED]"
            pygame.display.set_caption(title)
            clock.tick(config["display"]["fps"])
    except ExitException:
        pass
    except Chip8Error as e:
        console.print(f"\n[bold red]Failed to run ({e}). Shutting down.[/bold red]")
        return 1
    finally:
        pygame.quit()

    console.print("\n[bold cyan]Emulator closed.[/bold cyan]")
    return 0


def main() -> int:
    args = parse_args()
    setup_logging(debug=args.debug, log_dir=Path("log") if args.debug else None)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
