from typing import Final, Iterable

import numpy as np
from numpy.typing import NDArray


class Framebuffer:
    """
    Monochrome 64x32 screen.

    Pixels are stored as ``pixels[y, x]`` with the origin at the upper-left
    corner. Every coordinate passed in is taken modulo the screen size, so
    sprites drawn past an edge come back in on the other side.
    """

    WIDTH: Final[int] = 64
    HEIGHT: Final[int] = 32
    ASPECT_RATIO: Final[int] = WIDTH // HEIGHT

    def __init__(self) -> None:
        self.pixels: NDArray[np.bool_] = np.zeros((self.HEIGHT, self.WIDTH), dtype=np.bool_)

    def __repr__(self) -> str:
        return f"<Framebuffer {self.WIDTH}x{self.HEIGHT} lit={self.lit_count()}>"

    def get_pixel(self, x: int, y: int) -> bool:
        return bool(self.pixels[y % self.HEIGHT, x % self.WIDTH])

    def set_pixel(self, x: int, y: int, value: bool) -> None:
        self.pixels[y % self.HEIGHT, x % self.WIDTH] = value

    def clear(self) -> None:
        self.pixels.fill(False)

    def lit_count(self) -> int:
        return int(np.count_nonzero(self.pixels))

    def draw_sprite(self, x: int, y: int, rows: Iterable[int]) -> bool:
        """
        XOR an 8-pixel-wide sprite onto the screen at (x, y).

        Each entry of ``rows`` is one byte, most significant bit leftmost.
        Returns True if any pixel was switched from set to unset.
        """
        collision = False
        for row, sprite_row in enumerate(rows):
            for col in range(8):
                if not sprite_row & (0x80 >> col):
                    continue
                px = (x + col) % self.WIDTH
                py = (y + row) % self.HEIGHT
                if self.pixels[py, px]:
                    collision = True
                self.pixels[py, px] = not self.pixels[py, px]
        return collision

    def to_array(self) -> NDArray[np.bool_]:
        """Copy of the pixel grid for renderers."""
        return self.pixels.copy()
