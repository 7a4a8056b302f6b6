import numpy as np
from typing import List, Sequence

from mvq.buckets import BucketTable

CHUNK_SIZE = 8192 # colors per distance block in nearest_indices


def build_palette(table: BucketTable) -> List[int]:
    """
    Create the palette from the averages of the non-empty buckets.

    Args:
        table (BucketTable): A pruned bucket table. Not modified.

    Returns:
        List[int]: Packed 0xRRGGBB colors in ascending bucket index order.
    """
    return [bucket.average() for bucket in table if bucket.n != 0]


def color_distance(a: int, b: int) -> float:
    """
    Low-cost "redmean" color distance between two packed colors.

    See https://www.compuphase.com/cmetric.htm. No square root is taken;
    only the ordering of distances is used.
    """
    ra, rb = a >> 16 & 0xff, b >> 16 & 0xff
    rbar = (ra + rb) / 2.0
    dr = ra - rb
    dg = (a >> 8 & 0xff) - (b >> 8 & 0xff)
    db = (a & 0xff) - (b & 0xff)
    return (2.0 + rbar / 256.0) * (dr * dr) + 4 * (dg * dg) + (2.0 + (255.0 - rbar) / 256.0) * (db * db)


def nearest_entry(palette: Sequence[int], color: int) -> int:
    """
    Index of the palette entry closest to color. Ties keep the lowest index.

    Raises:
        ValueError: If the palette is empty.
    """
    if len(palette) == 0:
        raise ValueError("Cannot match a color against an empty palette.")
    index = 0
    best = color_distance(color, palette[0])
    for i in range(1, len(palette)):
        d = color_distance(color, palette[i])
        if d < best:
            best = d
            index = i
    return index


def _split_channels(colors: np.ndarray):
    colors = colors.astype(np.int64, copy=False)
    return (colors >> 16) & 0xff, (colors >> 8) & 0xff, colors & 0xff


def nearest_indices(palette: Sequence[int], colors: np.ndarray) -> np.ndarray:
    """
    Vectorized nearest_entry for many colors at once.

    Each distinct color is matched once. Results agree with nearest_entry,
    including the lowest-index tie-break (argmin keeps the first minimum).

    Args:
        palette (Sequence[int]): Packed palette colors.
        colors (np.ndarray): Flat array of packed colors.

    Returns:
        np.ndarray: Palette index (int64) for every element of colors.
    """
    colors = np.asarray(colors, dtype=np.int64) & 0xffffff
    if colors.size == 0:
        return np.zeros(0, dtype=np.int64)
    if len(palette) == 0:
        raise ValueError("Cannot match colors against an empty palette.")

    unique_colors, inverse = np.unique(colors, return_inverse=True)
    pal_r, pal_g, pal_b = _split_channels(np.asarray(palette, dtype=np.int64))
    unique_indices = np.empty(unique_colors.shape[0], dtype=np.int64)

    for start in range(0, unique_colors.shape[0], CHUNK_SIZE):
        r, g, b = _split_channels(unique_colors[start:start + CHUNK_SIZE])
        r, g, b = r[:, None], g[:, None], b[:, None]

        # Same operation order as color_distance so both give identical floats
        rbar = (r + pal_r[None, :]) / 2.0
        dr = r - pal_r[None, :]
        dg = g - pal_g[None, :]
        db = b - pal_b[None, :]
        dists = (2.0 + rbar / 256.0) * (dr * dr) + 4 * (dg * dg) + (2.0 + (255.0 - rbar) / 256.0) * (db * db)
        unique_indices[start:start + CHUNK_SIZE] = np.argmin(dists, axis=1)

    return unique_indices[inverse.reshape(-1)]


def map_image_to_palette(pixels: np.ndarray, palette: Sequence[int]) -> np.ndarray:
    """
    Map every pixel to the color of its nearest palette entry.

    Args:
        pixels (np.ndarray): Flat array of packed colors.
        palette (Sequence[int]): Packed palette colors.

    Returns:
        np.ndarray: Flat uint32 array of palette colors, same length as pixels.
    """
    indices = nearest_indices(palette, pixels)
    return np.asarray(palette, dtype=np.uint32)[indices] if indices.size else np.zeros(0, dtype=np.uint32)


def index_image(pixels: np.ndarray, palette: Sequence[int]) -> np.ndarray:
    """Like map_image_to_palette, but returns palette indices (uint8) instead of colors."""
    return nearest_indices(palette, pixels).astype(np.uint8)
