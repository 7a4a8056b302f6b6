from PIL import Image, ImageDraw, ImageFont
import os


def _text_fill(fill_color):
    # Black labels on light swatches, white on dark ones
    r, g, b = fill_color
    return (0, 0, 0) if (299 * r + 587 * g + 114 * b) >= 128000 else (255, 255, 255)


def create_legend_image(palette, font_path=None, font_size=10, swatch_size=24, padding=4, columns=16):
    """
    Creates a palette legend PIL Image object: a grid of swatches labeled with their index.

    Args:
        palette (list or np.ndarray): Palette colors, each an RGB tuple/list, an
            ndarray row, or a packed 0xRRGGBB int.
        font_path (str, optional): Path to a TTF font file.
        font_size (int): Font size for the index numbers.
        swatch_size (int): Width/height of each color swatch.
        padding (int): Space around elements and between swatches.
        columns (int): Swatches per row.

    Returns:
        PIL.Image.Image: The generated legend image, or None if the palette is empty.
    """
    num_colors = len(palette)
    if num_colors == 0:
        return None

    columns = max(1, min(columns, num_colors))
    rows = (num_colors + columns - 1) // columns

    width = (swatch_size * columns) + (padding * (columns + 1))
    height = (swatch_size * rows) + (padding * (rows + 1))

    image = Image.new("RGB", (width, height), color=(255, 255, 255))
    draw = ImageDraw.Draw(image)

    loaded_font = None
    try:
        if font_path and os.path.isfile(font_path):
            loaded_font = ImageFont.truetype(font_path, font_size)
    except IOError:
        pass # fall through to the default font

    if not loaded_font:
        try:
            loaded_font = ImageFont.load_default(size=font_size)
        except TypeError: # Pillow < 10.1 has no size argument
            loaded_font = ImageFont.load_default()

    for idx, color_data in enumerate(palette):
        row, col = divmod(idx, columns)
        x_start_swatch = padding + col * (swatch_size + padding)
        y_start_swatch = padding + row * (swatch_size + padding)

        if hasattr(color_data, 'tolist'): # numpy rows and scalars
            color_data = color_data.tolist()
        if isinstance(color_data, int):
            fill_color = (color_data >> 16 & 0xff, color_data >> 8 & 0xff, color_data & 0xff)
        elif isinstance(color_data, (list, tuple)) and len(color_data) == 3:
            fill_color = tuple(int(c) for c in color_data)
        else:
            raise ValueError(f"Unsupported palette entry at index {idx}: {color_data!r}")

        draw.rectangle(
            [x_start_swatch, y_start_swatch, x_start_swatch + swatch_size - 1, y_start_swatch + swatch_size - 1],
            fill=fill_color,
            outline=(0, 0, 0)
        )

        text_content = str(idx)
        bbox = draw.textbbox((0, 0), text_content, font=loaded_font)
        text_w = bbox[2] - bbox[0]
        text_h = bbox[3] - bbox[1]

        # Center text within the swatch, offset by the glyph's own bbox origin
        text_x_position = x_start_swatch + (swatch_size - text_w) / 2.0 - bbox[0]
        text_y_position = y_start_swatch + (swatch_size - text_h) / 2.0 - bbox[1]

        draw.text((text_x_position, text_y_position), text_content, fill=_text_fill(fill_color), font=loaded_font)

    return image
