import typer
from mvq import quantize, legend, file_utils
from mvq.errors import InvalidInputError
import sys
import traceback
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

import rich.traceback


class MVQFile(Enum):
    QUANTIZED_OUTPUT = "quantized_output"
    PALETTE_LEGEND = "palette_legend"

# Map MVQFile enum members to their base filenames
MVQ_FILE_BASENAMES: Dict[MVQFile, str] = {
    MVQFile.QUANTIZED_OUTPUT: "mvq-quantized.png",
    MVQFile.PALETTE_LEGEND: "mvq-palette_legend.png",
}


def validate_output_dir(
    output_dir: Path, overwrite: bool = False, expect: Optional[List[MVQFile]] = None,
) -> Dict[MVQFile, Path]:
    files_to_check_for_clobber = [output_dir / MVQ_FILE_BASENAMES[key] for key in (expect or [])]

    if not overwrite:
        clobbered_files_found = [str(p) for p in files_to_check_for_clobber if p.exists()]
        if clobbered_files_found:
            typer.secho("Error: Files already exist:", fg=typer.colors.RED)
            for path_str in clobbered_files_found: typer.secho(f"  {path_str}", fg=typer.colors.RED)
            typer.secho("Use --yes (-y) to overwrite.", fg=typer.colors.YELLOW); raise typer.Exit(code=1)

    return {key: output_dir / name for key, name in MVQ_FILE_BASENAMES.items()}


def mvq_cli(
    input_path: Path = typer.Argument(
        ...,
        help="Input image file (e.g., image.jpg).",
        metavar="INPUT_FILE",
        exists=True, file_okay=True, dir_okay=False, readable=True, resolve_path=True,
    ),
    output_dir: Path = typer.Argument(
        ...,
        help="Directory for output files. Will be created if it doesn't exist.",
        metavar="OUTPUT_DIRECTORY",
        file_okay=False, dir_okay=True, writable=True, resolve_path=True,
    ),
    indexed: bool = typer.Option(
        False, "--indexed",
        help="Save the quantized image as a paletted (P mode) PNG instead of RGB."
    ),
    skip_legend: bool = typer.Option(
        False, "--skip-legend", help="Do not write the palette legend image."
    ),
    swatch_size: int = typer.Option(
        24, "--swatch-size", min=8, help="Size of each palette swatch in the legend. Default: 24."
    ),
    columns: int = typer.Option(
        16, "--columns", min=1, help="Swatches per row in the legend. Default: 16."
    ),
    font_path: Optional[Path] = typer.Option(
        None, "--font-path", help="TTF font for legend labels.",
        exists=True, file_okay=True, dir_okay=False, readable=True, resolve_path=True,
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Overwrite existing output files without asking."
    ),
):
    """
    Reduces an image to at most 256 colors and writes the result plus a palette legend.
    """
    command_line_str = " ".join(sys.argv)

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        typer.echo(f"Using output directory: {output_dir}")
    except OSError as e:
        typer.secho(f"Error creating output directory {output_dir}: {e}", fg=typer.colors.RED); raise typer.Exit(code=1)

    expected_outputs: List[MVQFile] = [MVQFile.QUANTIZED_OUTPUT]
    if not skip_legend:
        expected_outputs.append(MVQFile.PALETTE_LEGEND)

    output_paths = validate_output_dir(output_dir, overwrite=yes, expect=expected_outputs)
    quantized_path = output_paths[MVQFile.QUANTIZED_OUTPUT]
    legend_path = output_paths[MVQFile.PALETTE_LEGEND]

    typer.echo(f"Quantizing {input_path.name}{' (indexed output)' if indexed else ''}...")
    try:
        quantized_img, palette_rgb, result = quantize.quantize_image(input_path, indexed=indexed)
    except InvalidInputError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED); raise typer.Exit(code=1)

    typer.echo(f"Reduced to {result.colors} colors.")
    typer.echo(f"  Pruning passes: {result.passes}")

    try:
        file_utils.save_mvq_png(
            quantized_img,
            quantized_path,
            command_line_invocation=command_line_str,
            additional_metadata={
                "FileType": "Quantized Image",
                "SourceImage": str(input_path.name),
                "PaletteColors": str(len(palette_rgb)),
                "PruningPasses": str(result.passes),
                "Indexed": str(indexed),
            }
        )
        typer.echo(f"Quantized image saved to: {quantized_path}")
    except OSError as e:
        typer.secho(f"Error saving quantized image: {e}", fg=typer.colors.RED)
        traceback.print_exc()
        raise typer.Exit(code=1)

    if not skip_legend:
        legend_pil_image = legend.create_legend_image(
            palette_rgb,
            font_path=str(font_path) if font_path else None,
            swatch_size=swatch_size,
            columns=columns,
        )

        if legend_pil_image:
            try:
                file_utils.save_mvq_png(
                    legend_pil_image,
                    legend_path,
                    command_line_invocation=command_line_str,
                    additional_metadata={
                        "FileType": "Palette Legend",
                        "PaletteColors": str(len(palette_rgb)),
                        "SwatchSize": str(swatch_size),
                    }
                )
                typer.echo(f"Palette legend saved to: {legend_path}")
            except OSError as e:
                typer.secho(f"Error saving palette legend: {e}", fg=typer.colors.RED)
                traceback.print_exc()
        else:
            typer.secho("Warning: Palette legend image could not be generated (empty palette).", fg=typer.colors.YELLOW)

    typer.secho("\nProcessing complete!", fg=typer.colors.GREEN)
    typer.echo(f"Outputs in: {output_dir.resolve()}")


def main():
    typer.run(mvq_cli)


if __name__ == "__main__":
    rich.traceback.install(show_locals=False, suppress=[typer]) # type: ignore
    main()
