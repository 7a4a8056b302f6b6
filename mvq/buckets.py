import numpy as np
from typing import List

BUCKET_COUNT = 4096 # 12-bit downsampled color space
MAX_COLORS = 256


def downsample444(color: int) -> int:
    """
    Downsample a 24-bit color into a 12-bit bucket key.

    Keeps the top 4 bits of each channel, packed as (R4 << 8) | (G4 << 4) | B4.
    """
    return (((color >> 20 & 0xf) << 8) | ((color >> 12 & 0xf) << 4) | (color >> 4 & 0xf)) & 0xfff


def downsample444_array(colors: np.ndarray) -> np.ndarray:
    """Vectorized downsample444 over an array of packed colors."""
    colors = colors.astype(np.int64, copy=False)
    return (((colors >> 20) & 0xf) << 8) | (((colors >> 12) & 0xf) << 4) | ((colors >> 4) & 0xf)


class Bucket:
    """A group of colors: per-channel totals and the number of colors added."""

    __slots__ = ("r", "g", "b", "n")

    def __init__(self):
        self.r = self.g = self.b = self.n = 0

    def add(self, color: int):
        self.r += color >> 16 & 0xff
        self.g += color >> 8 & 0xff
        self.b += color & 0xff
        self.n += 1

    def merge(self, other: "Bucket"):
        self.r += other.r
        self.g += other.g
        self.b += other.b
        self.n += other.n

    def average(self) -> int:
        """Rounded channel average as a packed 24-bit color (0 for an empty bucket)."""
        if self.n == 0:
            return 0
        half = self.n >> 1
        r = (self.r + half) // self.n & 0xff
        g = (self.g + half) // self.n & 0xff
        b = (self.b + half) // self.n & 0xff
        return (r << 16 | g << 8 | b) & 0xffffff

    def clear(self):
        self.r = self.g = self.b = self.n = 0

    def __repr__(self):
        return f"Bucket(r={self.r}, g={self.g}, b={self.b}, n={self.n})"


class BucketTable:
    """
    Fixed table of BUCKET_COUNT buckets indexed by downsample444 key.

    Index order matters: pruning folds a bucket into its immediate
    predecessor, so a table must be scanned in ascending order.
    """

    def __init__(self):
        self.buckets: List[Bucket] = [Bucket() for _ in range(BUCKET_COUNT)]

    def __len__(self):
        return len(self.buckets)

    def __getitem__(self, index: int) -> Bucket:
        return self.buckets[index]

    def __iter__(self):
        return iter(self.buckets)

    def reset(self):
        for bucket in self.buckets:
            bucket.clear()

    def add(self, color: int):
        color &= 0xffffff
        self.buckets[downsample444(color)].add(color)

    def fill(self, pixels: np.ndarray):
        """
        Reset the table, then accumulate every pixel into its bucket.

        Args:
            pixels (np.ndarray): Flat array of packed 0xRRGGBB colors. Read only.
        """
        self.reset()
        pixels = np.asarray(pixels, dtype=np.int64) & 0xffffff
        if pixels.size == 0:
            return

        keys = downsample444_array(pixels)
        # bincount sums in float64, exact for any realistic pixel count
        counts = np.bincount(keys, minlength=BUCKET_COUNT)
        red = np.bincount(keys, weights=(pixels >> 16) & 0xff, minlength=BUCKET_COUNT).astype(np.int64)
        green = np.bincount(keys, weights=(pixels >> 8) & 0xff, minlength=BUCKET_COUNT).astype(np.int64)
        blue = np.bincount(keys, weights=pixels & 0xff, minlength=BUCKET_COUNT).astype(np.int64)

        for key in np.flatnonzero(counts).tolist():
            bucket = self.buckets[key]
            bucket.r = int(red[key])
            bucket.g = int(green[key])
            bucket.b = int(blue[key])
            bucket.n = int(counts[key])

    def count_nonempty(self) -> int:
        return sum(1 for bucket in self.buckets if bucket.n != 0)
