#!/usr/bin/env python3
"""Render an STL mesh to an image file.

The mesh is drawn as a single group of triangles with one Phong material,
lit by one point light and seen through a look-at pinhole camera.

Usage:
    python -m examples.render_mesh MESH [options]

Options:
    --width WIDTH           Image width in pixels (default: 400)
    --height HEIGHT         Image height in pixels (default: 400)
    --from X Y Z            Camera position (default: 0 -2.5 -10)
    --to X Y Z              Point the camera looks at (default: 0 -5 0)
    --up X Y Z              Camera up direction (default: 0 1 0)
    --fov RADIANS           Field of view (default: pi/2)
    --color R G B           Mesh color (default: 0.0196 0.65 0.874)
    --light X Y Z           Light position (default: -10 -10 -5)
    --format FORMAT         png, jpeg or ppm (default: from the output suffix)
    --output OUTPUT         Output file path (default: render.jpg)
    --arch {cpu,gpu}        Taichi backend (default: cpu)
    --threads N             CPU worker threads (default: all cores)
    --serial                Shade pixels one at a time
    --verbose / --quiet     More or less logging

Example:
    python -m examples.render_mesh part.stl --width 256 --height 256 --output part.png
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_mesh")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render an STL mesh to an image file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("mesh", type=str, help="Path to a binary or ASCII STL file")
    parser.add_argument("--width", type=int, default=400, help="Image width in pixels (default: 400)")
    parser.add_argument("--height", type=int, default=400, help="Image height in pixels (default: 400)")
    parser.add_argument(
        "--from",
        dest="from_point",
        type=float,
        nargs=3,
        default=(0.0, -2.5, -10.0),
        metavar=("X", "Y", "Z"),
        help="Camera position (default: 0 -2.5 -10)",
    )
    parser.add_argument(
        "--to",
        dest="to_point",
        type=float,
        nargs=3,
        default=(0.0, -5.0, 0.0),
        metavar=("X", "Y", "Z"),
        help="Point the camera looks at (default: 0 -5 0)",
    )
    parser.add_argument(
        "--up",
        type=float,
        nargs=3,
        default=(0.0, 1.0, 0.0),
        metavar=("X", "Y", "Z"),
        help="Camera up direction (default: 0 1 0)",
    )
    parser.add_argument("--fov", type=float, default=math.pi / 2, help="Field of view in radians (default: pi/2)")
    parser.add_argument(
        "--color",
        type=float,
        nargs=3,
        default=(0.0196, 0.65, 0.874),
        metavar=("R", "G", "B"),
        help="Mesh color (default: 0.0196 0.65 0.874)",
    )
    parser.add_argument(
        "--light",
        type=float,
        nargs=3,
        default=(-10.0, -10.0, -5.0),
        metavar=("X", "Y", "Z"),
        help="Light position (default: -10 -10 -5)",
    )
    parser.add_argument("--format", type=str, default=None, help="png, jpeg or ppm (default: from output suffix)")
    parser.add_argument("--output", type=str, default="render.jpg", help="Output file path (default: render.jpg)")
    parser.add_argument("--arch", choices=("cpu", "gpu"), default="cpu", help="Taichi backend (default: cpu)")
    parser.add_argument("--threads", type=int, default=None, help="CPU worker threads (default: all cores)")
    parser.add_argument("--serial", action="store_true", help="Shade pixels one at a time")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", action="store_true", help="Enable debug logging")
    verbosity.add_argument("--quiet", action="store_true", help="Only log errors")
    return parser.parse_args()


def render_mesh(args: argparse.Namespace) -> Path:
    """Load the mesh, render it and write the image.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.raycast.core.config import RenderOptions
    from src.raycast.pipeline import render
    from src.raycast.scene.stl import load_stl

    output_file = Path(args.output)
    image_format = args.format if args.format is not None else output_file.suffix.lstrip(".")

    options = RenderOptions(
        width_pixels=args.width,
        height_pixels=args.height,
        from_point=args.from_point,
        to_point=args.to_point,
        up=args.up,
        fov_radians=args.fov,
        material_color=args.color,
        image_format=image_format,
        light_position=args.light,
        parallel=not args.serial,
    )

    mesh = load_stl(args.mesh)
    logger.info("Loaded %s (%d triangles)", args.mesh, len(mesh))

    data = render(mesh, options)
    output_file.write_bytes(data)
    logger.info("Saved to: %s", output_file.absolute())
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # Parallel and serial renders only match bit for bit without fast math
    init_kwargs = {"fast_math": False}
    if args.threads is not None:
        init_kwargs["cpu_max_num_threads"] = args.threads
    ti.init(arch=ti.gpu if args.arch == "gpu" else ti.cpu, **init_kwargs)

    try:
        render_mesh(args)
        return 0
    except Exception as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
