#!/usr/bin/env python3
import sys
from pathlib import Path
from typing import Dict
from PIL import Image, UnidentifiedImageError

PNG_METADATA_PREFIX = "mvqgen:"


def read_png_metadata(filepath: Path) -> Dict[str, str]:
    """
    Returns the mvqgen metadata of a PNG file, keys without the prefix.
    """
    with Image.open(filepath) as img:
        return {
            key[len(PNG_METADATA_PREFIX):]: value
            for key, value in img.info.items()
            if isinstance(key, str) and key.startswith(PNG_METADATA_PREFIX)
        }


def extract_png_metadata(filepath: Path):
    """
    Extracts and prints mvqgen metadata from a PNG file.
    """
    print(f"--- mvqgen Metadata for PNG: {filepath.name} ---")
    try:
        metadata = read_png_metadata(filepath)
        if metadata:
            for key, value in metadata.items():
                print(f"  {key}: {value}")
        else:
            print("  No mvqgen-specific metadata found.")
    except FileNotFoundError:
        print(f"Error: File not found at {filepath}")
    except UnidentifiedImageError as e:
        print(f"Error processing PNG file {filepath}: {e}")
    print("-" * (30 + len(filepath.name)))


def main():
    if len(sys.argv) < 2:
        print("Usage: python extract_mvqgen_meta.py <filename.png>")
        sys.exit(1)

    filepath = Path(sys.argv[1])

    if not filepath.is_file():
        print(f"Error: File not found: {filepath}")
        sys.exit(1)

    if filepath.suffix.lower() != ".png":
        print(f"Error: Unsupported file type '{filepath.suffix.lower()}'. Please provide a .png file.")
        sys.exit(1)

    extract_png_metadata(filepath)

if __name__ == "__main__":
    main()
