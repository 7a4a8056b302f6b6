import subprocess
import sys
from pathlib import Path
from PIL import Image, ImageDraw

REPO_ROOT = Path(__file__).resolve().parent.parent


def create_dummy_image(path: Path):
    img = Image.new("RGB", (64, 64), color=(150, 120, 200))
    draw = ImageDraw.Draw(img)
    draw.rectangle([(10, 10), (30, 30)], fill=(200, 50, 50))
    draw.ellipse([(20, 20), (50, 50)], fill=(50, 200, 50))
    img.save(path)


def run_cli(*args):
    return subprocess.run(
        [sys.executable, "mvqgen.py", *args],
        capture_output=True,
        text=True,
        cwd=REPO_ROOT
    )


def test_mvqgen_cli_writes_outputs(tmp_path):
    input_image = tmp_path / "dummy_input.png"
    create_dummy_image(input_image)
    output_dir = tmp_path / "output"

    result = run_cli(str(input_image), str(output_dir))

    assert result.returncode == 0, f"CLI failed: {result.stderr}"
    for filename in ["mvq-quantized.png", "mvq-palette_legend.png"]:
        assert (output_dir / filename).exists(), f"Expected output file not found: {filename}"

    assert "Reduced to 3 colors." in result.stdout
    with Image.open(output_dir / "mvq-quantized.png") as im:
        assert im.mode == "RGB"
        assert im.info["mvqgen:PaletteColors"] == "3"


def test_mvqgen_cli_refuses_to_clobber(tmp_path):
    input_image = tmp_path / "dummy_input.png"
    create_dummy_image(input_image)
    output_dir = tmp_path / "output"

    assert run_cli(str(input_image), str(output_dir), "--skip-legend").returncode == 0
    assert not (output_dir / "mvq-palette_legend.png").exists()

    second = run_cli(str(input_image), str(output_dir), "--skip-legend")
    assert second.returncode == 1
    assert "already exist" in second.stdout

    forced = run_cli(str(input_image), str(output_dir), "--skip-legend", "--yes", "--indexed")
    assert forced.returncode == 0, forced.stderr
    with Image.open(output_dir / "mvq-quantized.png") as im:
        assert im.mode == "P"


def test_mvqgen_cli_help_output():
    result = run_cli("--help")
    assert result.returncode == 0
    assert "usage:" in result.stdout.lower()
