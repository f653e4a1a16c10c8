"""Headless text-behind renderer - CLI entry point.

Composites a background photo, text layers and a foreground cutout without
opening a window and writes the export to disk.

Usage:
    python -m textbehind.headless <background> <cutout> [-t TEXT ...] [-o OUTPUT]

Examples:
    python -m textbehind.headless photo.jpg photo_cutout.png -t "WILD"
    python -m textbehind.headless photo.jpg cutout.png -t "TOP" --y 25 -t "BOTTOM" --y 75 -o out.png
    python -m textbehind.headless photo.jpg cutout.png --layers layers.json --scale 1.0
"""

import argparse
import json
import logging
import os
import sys

from textbehind.constants import (
    DEFAULT_FONT_FAMILY, DEFAULT_FONT_SIZE, DEFAULT_TEXT_COLOR,
    DEFAULT_POSITION_X, DEFAULT_POSITION_Y, EXPORT_FILENAME, EXPORT_QUALITY, EXPORT_SCALE,
)
from textbehind.errors import TextBehindError
from textbehind.utils.logger import configure_logging

logger = logging.getLogger(__name__)


def _ensure_qapp():
    """Return existing QGuiApplication or create an offscreen one (fonts need it)."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PyQt5.QtGui import QGuiApplication

    app = QGuiApplication.instance()
    if app is None:
        app = QGuiApplication(sys.argv[:1])
    return app


def _per_text(values, index, default):
    """Per-layer option value: the index-th one given, else the last one, else default."""
    if not values:
        return default
    return values[index] if index < len(values) else values[-1]


def _load_layers_file(path):
    """Read a JSON list of layer dicts (TextLayer field names)."""
    from textbehind.models.text_layer import TextLayer

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of layers")
    return [TextLayer.from_dict(item) for item in data]


def build_parser():
    parser = argparse.ArgumentParser(
        description='Render text behind the subject of a photo (headless).',
    )
    parser.add_argument('background', help='Original photo.')
    parser.add_argument('cutout', help='Background-removed cutout, same size as the photo.')
    parser.add_argument(
        '-t', '--text', action='append', default=[],
        help='Text layer content; repeat for several layers.',
    )
    parser.add_argument('--layers', help='JSON file with a list of layer definitions.')
    parser.add_argument('--font', action='append', type=str, help=f'Font family (default: {DEFAULT_FONT_FAMILY}).')
    parser.add_argument('--size', action='append', type=float, help=f'Font size 10-300 (default: {DEFAULT_FONT_SIZE}).')
    parser.add_argument('--color', action='append', type=str, help=f'Text color (default: {DEFAULT_TEXT_COLOR}).')
    parser.add_argument('--x', action='append', type=float, help='Horizontal position, percent of image width.')
    parser.add_argument('--y', action='append', type=float, help='Vertical position, percent of image height.')
    parser.add_argument('--rotation', action='append', type=float, help='Text rotation in degrees.')
    parser.add_argument('--font-file', action='append', default=[], help='Extra font file to register; repeatable.')
    parser.add_argument('--no-bold', action='store_true', help='Use regular weight.')
    parser.add_argument('--image-rotation', type=float, default=0.0, help='Rotate the whole composition.')
    parser.add_argument(
        '--scale', type=float, default=EXPORT_SCALE,
        help=f'Output size relative to the photo (default: {EXPORT_SCALE}).',
    )
    parser.add_argument('--quality', type=int, default=EXPORT_QUALITY, help='JPEG/WEBP quality.')
    parser.add_argument(
        '-o', '--output', default=EXPORT_FILENAME,
        help=f'Output file; format from the extension (default: {EXPORT_FILENAME}).',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging.')
    return parser


def build_layers(args):
    """TextLayers from --layers and/or the repeated per-text options."""
    from textbehind.models.text_layer import TextLayer

    layers = _load_layers_file(args.layers) if args.layers else []
    for index, text in enumerate(args.text):
        layers.append(TextLayer(
            text=text,
            font_family=_per_text(args.font, index, DEFAULT_FONT_FAMILY),
            bold=not args.no_bold,
            color=_per_text(args.color, index, DEFAULT_TEXT_COLOR),
            position_x=_per_text(args.x, index, DEFAULT_POSITION_X),
            position_y=_per_text(args.y, index, DEFAULT_POSITION_Y),
            font_size=_per_text(args.size, index, DEFAULT_FONT_SIZE),
            rotation=_per_text(args.rotation, index, 0.0),
        ))
    return layers


def render(args):
    """Load assets, build the scene, export it. Returns the written path."""
    _ensure_qapp()

    from textbehind.main import load_image
    from textbehind.services.text_metrics import register_font_files
    from textbehind.models.scene import Scene
    from textbehind.services.export_renderer import ExportRenderer
    from textbehind.services.hit_testing import constrain_all
    from textbehind.services.text_metrics import TextMeasurer
    from textbehind.utils.layout import resolve_for_scene

    if args.font_file:
        families = register_font_files(args.font_file)
        logger.info("Registered font families: %s", ", ".join(families) or "none")

    scene = Scene(layers=build_layers(args))
    scene.set_images(load_image(args.background), load_image(args.cutout))
    scene.image_rotation = args.image_rotation

    # Keep every layer inside the image, as the editor does
    renderer = ExportRenderer()
    width, height = renderer.export_size(scene, args.scale)
    constrain_all(scene, resolve_for_scene(scene, width, height), TextMeasurer())

    return renderer.save_export(scene, args.output, args.scale, quality=args.quality)


def main(argv=None):
    args = build_parser().parse_args(argv)

    # Logging
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    for path in (args.background, args.cutout):
        if not os.path.isfile(path):
            logger.error("Input file not found: %s", path)
            return 1

    try:
        written = render(args)
    except (TextBehindError, ValueError, OSError) as e:
        logger.error("Render failed: %s", e)
        return 1

    print(f"Saved {written}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
