#!/usr/bin/env python
"""
Annotate images with the default outline and export the results.

Usage:
    python scripts/annotate_images.py <image> [<image>] -o <output_dir>
        [--click X,Y ...] [--no-json] [--no-png]
"""

import sys
import argparse
import os
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.errors import AnnotatorError, ImageDecodeError
from core.export_json import export_bundle
from core.images import detect_content_type
from core.models import AnnotationSettings, ImageHandle, Point
from core.polygons import normalize_polygon
from core.rasterize import rasterize_snapshot
from core.session import Workspace
from core.validate import validate_workspace


def parse_click(value: str) -> Point:
    try:
        x, y = (float(v) for v in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected X,Y but got {value!r}")
    return Point(x, y)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Annotate images and export outlines")
    parser.add_argument("images", nargs="+", help="Image files (at most --max-images)")
    parser.add_argument("-o", "--output-dir", required=True, help="Output directory")
    parser.add_argument("--click", type=parse_click, action="append", default=[],
                        help="Edge click X,Y applied to every image (repeatable)")
    parser.add_argument("--vertices", type=int, default=16, help="Default shape vertices (default: 16)")
    parser.add_argument("--max-images", type=int, default=2, help="Maximum images (default: 2)")
    parser.add_argument("--no-json", action="store_true", help="Skip the JSON bundle")
    parser.add_argument("--no-png", action="store_true", help="Skip annotated PNGs")

    args = parser.parse_args(argv)
    if args.vertices < 1:
        parser.error("--vertices must be at least 1")
    if args.max_images < 1:
        parser.error("--max-images must be at least 1")

    settings = AnnotationSettings(
        default_vertex_count=args.vertices,
        max_sessions=args.max_images,
    )
    workspace = Workspace(settings)
    out_path = Path(args.output_dir)
    out_path.mkdir(parents=True, exist_ok=True)

    if len(args.images) > settings.max_sessions:
        print(f"⚠ Maximum {settings.max_sessions} images allowed, ignoring the rest")

    for index, path in enumerate(args.images[:settings.max_sessions]):
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            print(f"✗ {path}: {e.strerror or e}")
            continue

        image = ImageHandle(
            id=f"{index}-{Path(path).stem}",
            name=os.path.basename(path),
            content_type=detect_content_type(data),
            data=data,
        )
        try:
            workspace.create_session(image)
        except (ImageDecodeError, ValueError) as e:
            print(f"✗ {path}: {e}")
            workspace.remove_session(image.id)
            continue

        session = workspace.get_session(image.id)
        for click in args.click:
            result = session.insert_at(click)
            if result is None:
                print(f"  {image.name}: click ({click.x:g}, {click.y:g}) is not on the outline")
            else:
                print(f"  {image.name}: added node after {result.edge_index}, "
                      f"total {len(session.polygon)}")

    print("-" * 50)
    for session in workspace.sessions():
        dims = session.dimensions
        print(f"{session.image.name}: {dims.width:.0f}x{dims.height:.0f}, "
              f"{len(session.polygon)} nodes, area {session.polygon.area():.1f}px")
        if not session.polygon.is_empty:
            norm = normalize_polygon(session.polygon.to_list(), dims.width, dims.height)
            print(f"  first node (normalized): ({norm[0][0]:.4f}, {norm[0][1]:.4f})")

    report = validate_workspace(workspace.snapshots())
    print(f"\n{report.summary()}")

    try:
        if not args.no_json:
            bundle = export_bundle(workspace.snapshots())
            (out_path / bundle.filename).write_bytes(bundle.content)
            print(f"\n✓ Wrote {bundle.filename} "
                  f"({len(bundle.records)} image(s), {bundle.total_points} nodes)")
            for warning in bundle.warnings:
                print(f"  ⚠ {warning}")

        if not args.no_png:
            for snapshot in workspace.snapshots():
                raster = rasterize_snapshot(snapshot)
                (out_path / raster.filename).write_bytes(raster.content)
                print(f"✓ Wrote {raster.filename}")
    except AnnotatorError as e:
        print(f"✗ Export failed: {e}")
        sys.exit(1)
    finally:
        workspace.clear()

    print(f"\n✓ Export complete: {args.output_dir}")


if __name__ == "__main__":
    main()
