import re
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, PngImagePlugin

METADATA_PREFIX = "mvqgen:"


def image_to_packed(image: Image.Image) -> np.ndarray:
    """
    Flatten a PIL image into a buffer of packed 0xRRGGBB colors.

    Any alpha channel is dropped; palette and greyscale images are converted to RGB first.

    Returns:
        np.ndarray: Flat uint32 array in row-major pixel order.
    """
    rgb = np.asarray(image.convert("RGB"), dtype=np.uint32).reshape((-1, 3))
    return (rgb[:, 0] << 16) | (rgb[:, 1] << 8) | rgb[:, 2]


def packed_to_rgb(colors: Sequence[int]) -> np.ndarray:
    """Unpack packed 0xRRGGBB colors into an (N, 3) uint8 array."""
    colors = np.asarray(colors, dtype=np.uint32).reshape(-1)
    rgb = np.empty((colors.shape[0], 3), dtype=np.uint8)
    rgb[:, 0] = (colors >> 16) & 0xff
    rgb[:, 1] = (colors >> 8) & 0xff
    rgb[:, 2] = colors & 0xff
    return rgb


def packed_to_image(colors: np.ndarray, size: Tuple[int, int]) -> Image.Image:
    """
    Rebuild an RGB PIL image from a flat buffer of packed colors.

    Args:
        colors (np.ndarray): Flat packed colors, width * height of them.
        size (Tuple[int, int]): (width, height) of the image.
    """
    width, height = size
    return Image.fromarray(packed_to_rgb(colors).reshape((height, width, 3)))


def indices_to_image(indices: np.ndarray, palette: Sequence[int], size: Tuple[int, int]) -> Image.Image:
    """Build a paletted ("P" mode) image from palette indices."""
    width, height = size
    image = Image.frombytes("P", (width, height), np.asarray(indices, dtype=np.uint8).tobytes())
    image.putpalette(packed_to_rgb(palette).reshape(-1).tolist())
    return image


def save_mvq_png(
    image_to_save: Image.Image,
    output_path: Path,
    command_line_invocation: Optional[str] = None,
    additional_metadata: Optional[Dict[str, str]] = None
):
    """
    Saves a PIL Image object as a PNG file, embedding mvqgen metadata as tEXt chunks.
    """
    if not isinstance(output_path, Path):
        output_path = Path(output_path)

    if not output_path.parent.exists():
        output_path.parent.mkdir(parents=True, exist_ok=True)

    png_info = PngImagePlugin.PngInfo()

    if command_line_invocation:
        png_info.add_text(f"{METADATA_PREFIX}command_line", command_line_invocation)

    png_info.add_text("Software", "mvqgen 256 color quantizer")

    if additional_metadata:
        for key, value in additional_metadata.items():
            key_clean = re.sub(r'\s+', '_', key)
            key_clean = re.sub(r'[^a-zA-Z0-9_.-]', '', key_clean)
            if not re.match(r'^[a-zA-Z_]', key_clean): # must start with letter or underscore
                key_clean = "mvqgen_" + key_clean

            # tEXt keywords are limited to 79 bytes, leave room for the prefix
            key_clean = key_clean[:70]

            png_info.add_text(f"{METADATA_PREFIX}{key_clean}", str(value))

    image_to_save.save(output_path, "PNG", pnginfo=png_info)
