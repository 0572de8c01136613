#!/usr/bin/env python3
"""Basic usage example for texrecolor."""

import subprocess
import sys
from pathlib import Path

import numpy as np

from texrecolor import TextureRecolorer, analyze
from texrecolor.image.bitmap import load_texture, save_texture


def make_sample_bundle(root: Path) -> Path:
    """Create a bundle directory holding one synthetic color texture."""
    bundle = root / "pm0025_00_00"
    texture = np.zeros((64, 64, 4), dtype=np.uint8)
    texture[..., 3] = 255
    texture[:, :32, :3] = (230, 200, 40)   # body
    texture[:, 32:, :3] = (120, 60, 30)    # stripes
    texture[:8, :8, :3] = (250, 250, 250)  # small white detail
    save_texture(texture, bundle / "pm0025_00_00_body_col.png")
    return bundle


def run_api_example(root: Path) -> None:
    """Recolor the sample texture through the Python API."""
    bundle = make_sample_bundle(root)
    texture_path = next(bundle.glob("*_col.png"))

    pixels = load_texture(texture_path)
    analysis = analyze(pixels, texture_path.stem)
    print(f"Found {len(analysis.dominant_colors)} dominant colors:")
    for dominant in analysis.dominant_colors:
        print(f"   {dominant.color.hex} {dominant.frequency:6.1%} {dominant.role.value}")

    recolorer = TextureRecolorer()
    params = recolorer.parameters_for_category("water")
    recolored = recolorer.recolor(pixels, params, texture_path.stem)
    output = save_texture(recolored, root / "api" / texture_path.name)
    print(f"Saved water-palette texture to {output}")


def run_cli_example(root: Path) -> bool:
    """Recolor the sample bundle through the command line."""
    cmd = [
        "texrecolor", "recolor", str(root),
        "--output", str(root / "cli"),
        "--category", "fire",
        "--workers", "2",
    ]

    print(f"Command: {' '.join(cmd)}")
    print("=" * 60)

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True)
        print(result.stdout)
    except subprocess.CalledProcessError as e:
        print(f"Command failed with return code {e.returncode}")
        print(f"\nSTDERR:\n{e.stderr}")
        return False
    except FileNotFoundError:
        print("texrecolor CLI not found. Install with: pip install -e .")
        return False

    return True


def main():
    """Run the API and CLI examples."""
    root = Path("./outputs/example")
    root.mkdir(parents=True, exist_ok=True)

    run_api_example(root)
    if not run_cli_example(root):
        sys.exit(1)


if __name__ == "__main__":
    main()
