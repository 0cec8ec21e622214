"""
Immutable, bounds-checked view over a decoded RGBA image
"""
from typing import Optional, Tuple, Union

import numpy as np
from PIL import Image

from .exceptions import InvalidBufferError

CHANNELS = 4

Sample = Tuple[int, int, int, int]


class PixelBuffer:
    """
    Row-major RGBA samples of one decoded image.

    The backing array is marked read-only so that extractors running on
    different threads can share it without copying.
    """

    def __init__(self, width: int, height: int, samples: Union[bytes, bytearray, memoryview, np.ndarray]):
        if width <= 0 or height <= 0:
            raise InvalidBufferError(f"Invalid dimensions {width}x{height}")

        expected = width * height * CHANNELS
        if isinstance(samples, np.ndarray):
            # Casting would wrap out-of-range values and zero out normalized floats
            if samples.dtype != np.uint8:
                raise InvalidBufferError(f"Expected uint8 samples, got {samples.dtype}")
            flat = samples.reshape(-1)
        else:
            flat = np.frombuffer(bytes(samples), dtype=np.uint8)

        if flat.size != expected:
            raise InvalidBufferError(
                f"Buffer holds {flat.size} samples, expected {expected} for {width}x{height} RGBA"
            )

        rgba = flat.reshape(height, width, CHANNELS).copy()
        rgba.setflags(write=False)

        gray = rgba[:, :, :3].astype(np.float64).sum(axis=2) / 3.0
        gray.setflags(write=False)

        self._width = width
        self._height = height
        self._rgba = rgba
        self._gray = gray

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Build from an (height, width, 4) array"""
        if array.ndim != 3 or array.shape[2] != CHANNELS:
            raise InvalidBufferError(f"Expected an (h, w, 4) array, got shape {array.shape}")
        height, width = array.shape[:2]
        return cls(width, height, array)

    @classmethod
    def from_pil(cls, image: Image.Image) -> "PixelBuffer":
        """Build from an already decoded Pillow image"""
        rgba = image.convert("RGBA")
        return cls(rgba.width, rgba.height, rgba.tobytes())

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def pixel_count(self) -> int:
        return self._width * self._height

    @property
    def rgba(self) -> np.ndarray:
        """Read-only (height, width, 4) uint8 view"""
        return self._rgba

    @property
    def gray(self) -> np.ndarray:
        """Read-only (height, width) float64 plane of (r + g + b) / 3"""
        return self._gray

    @property
    def alpha(self) -> np.ndarray:
        return self._rgba[:, :, 3]

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def get(self, x: int, y: int) -> Optional[Sample]:
        """Return (r, g, b, a) at (x, y), or None outside the image"""
        if not self.contains(x, y):
            return None
        r, g, b, a = self._rgba[y, x]
        return int(r), int(g), int(b), int(a)

    def get_block(self, x: int, y: int, size: int) -> np.ndarray:
        """
        Return the size x size block whose top-left corner is (x, y).

        Cells outside the image are dropped, so blocks near the edges come
        back smaller, possibly with zero rows or columns.
        """
        x0 = min(max(x, 0), self._width)
        y0 = min(max(y, 0), self._height)
        x1 = min(max(x + size, 0), self._width)
        y1 = min(max(y + size, 0), self._height)
        return self._rgba[y0:y1, x0:x1]

    def __repr__(self) -> str:
        return f"PixelBuffer({self._width}x{self._height})"
