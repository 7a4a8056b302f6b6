from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from mvq.buckets import BucketTable
from mvq.errors import InvalidInputError
from mvq.file_utils import image_to_packed, indices_to_image, packed_to_image, packed_to_rgb
from mvq.palette_tools import build_palette, index_image, map_image_to_palette
from mvq.prune import prune


@dataclass
class ReductionResult:
    """
    Outcome of one quantization run.

    palette: packed 0xRRGGBB colors in ascending bucket order (at most 256).
    colors:  non-empty buckets left after pruning ("Reduced to N colors").
    passes:  pruning passes run, including the initial survey pass.
    """
    palette: List[int] = field(default_factory=list)
    colors: int = 0
    passes: int = 0


def _write_back(image, values: np.ndarray):
    """Overwrite the caller's buffer in place."""
    if isinstance(image, np.ndarray):
        image[...] = values.reshape(image.shape).astype(image.dtype, copy=False)
    elif isinstance(image, list):
        image[:] = values.tolist()
    else:
        for i, value in enumerate(values.tolist()):
            image[i] = value


class Quantizer:
    """
    256 color quantizer.

    Owns its bucket table, which is reset at the start of every run. One
    instance must not be shared by concurrent callers; use one per thread.
    """

    def __init__(self):
        self.table = BucketTable()

    def reduce(self, image, indices: bool = False) -> ReductionResult:
        """
        Quantize a flat image buffer in place.

        Args:
            image: Mutable flat sequence of packed colors (list or 1-D numpy array).
                Bits above the low 24 are ignored.
            indices (bool): Write palette indices into the image instead of colors.

        Returns:
            ReductionResult: The palette plus run diagnostics.

        Raises:
            InvalidInputError: If image is None.
        """
        if image is None:
            raise InvalidInputError("No image given to quantize.")

        pixels = np.asarray(image, dtype=np.int64).reshape(-1) & 0xffffff

        self.table.fill(pixels)
        colors, passes = prune(self.table)
        palette = build_palette(self.table)

        # Palette is final from here on
        if pixels.size:
            if indices:
                _write_back(image, index_image(pixels, palette))
            else:
                _write_back(image, map_image_to_palette(pixels, palette))

        return ReductionResult(palette=palette, colors=colors, passes=passes)


def quantize(image, indices: bool = False) -> List[int]:
    """
    Reduce image to at most 256 colors in place and return the palette.

    A fresh Quantizer is used per call, so calls never share state.
    """
    return Quantizer().reduce(image, indices=indices).palette


def quantize_pil_image(
    image: Image.Image,
    indexed: bool = False,
    quantizer: Optional[Quantizer] = None
) -> Tuple[Image.Image, np.ndarray, ReductionResult]:
    """
    Quantize a PIL image to at most 256 colors.

    Args:
        image (PIL.Image.Image): Source image. Alpha is ignored.
        indexed (bool): Return a paletted ("P" mode) image instead of RGB.
        quantizer (Quantizer, optional): Engine to reuse. A new one is made if None.

    Returns:
        Tuple[PIL.Image.Image, np.ndarray, ReductionResult]:
            - The quantized image (RGB, or P when indexed).
            - Palette as an (N, 3) uint8 array, in palette index order.
            - The run diagnostics.
    """
    if image is None:
        raise InvalidInputError("No image given to quantize.")
    quantizer = quantizer or Quantizer()

    pixels = image_to_packed(image)
    result = quantizer.reduce(pixels, indices=indexed)

    if indexed:
        output = indices_to_image(pixels, result.palette, image.size)
    else:
        output = packed_to_image(pixels, image.size)

    return output, packed_to_rgb(result.palette), result


def quantize_image(
    input_path: Union[str, Path],
    indexed: bool = False
) -> Tuple[Image.Image, np.ndarray, ReductionResult]:
    """
    Open an image file and quantize it with quantize_pil_image.

    Raises:
        InvalidInputError: If the file does not exist or is not a readable image.
    """
    try:
        with Image.open(input_path) as source:
            source.load()
            return quantize_pil_image(source, indexed=indexed)
    except FileNotFoundError:
        raise InvalidInputError(f"Input file not found at {input_path}")
    except UnidentifiedImageError as e:
        raise InvalidInputError(f"Error opening image {input_path}: {e}")
