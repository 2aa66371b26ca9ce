"""
ImageKit command line.

Loads one image, applies the transforms given as flags (or a JSON recipe),
and writes the result to a file or to standard output.

Example:
    image_kit.py photo.jpg --resize 200x200 --policy cover \
        --monochrome "#FFF" "#223" --format png --quality 90 --output thumbs/
    image_kit.py --list-operations --tag geometry
"""

import argparse
import logging
import sys
from typing import List, Optional

from IK_Libs.RecipeLib import OperationRegistry, Recipe, get_default_registry, load_recipe, run_recipe
from IK_Libs.SessionLib import ImageSession, StreamSink
from IK_Libs.constants import (
    AXIS_BOTH,
    AXIS_HORIZONTAL,
    AXIS_VERTICAL,
    DEFAULT_EXPORT_FORMAT,
    DEFAULT_EXPORT_QUALITY,
    DEFAULT_ROTATE_BACKGROUND,
    EXPORT_FORMATS,
    FIELD_EXPORT_DESTINATION,
    FIELD_EXPORT_FORMAT,
    FIELD_EXPORT_QUALITY,
    POLICY_FIT,
    RESIZE_POLICIES,
)
from IK_Libs.errors import ImageKitError, InvalidDimensionsError

logger = logging.getLogger(__name__)


def parse_resize_argument(value: str) -> List[Optional[int]]:
    """
    Parse "WxH", "W" or "xH" into resize dimensions.

    Raises:
        InvalidDimensionsError: If the value is not one of those forms
    """
    text = str(value).strip().lower()
    width_text, separator, height_text = text.partition("x")

    try:
        width = int(width_text) if width_text else None
        height = int(height_text) if height_text else None
    except ValueError as exc:
        raise InvalidDimensionsError(f"Resize must look like WxH, W or xH, got '{value}'") from exc

    if not separator:
        return [width]
    return [width, height]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Transform a single image and export it")
    parser.add_argument("input", nargs="?", help="Image file to load (JPEG, PNG, GIF, WEBP or BMP)")
    parser.add_argument("--list-operations", dest="list_operations", action="store_true",
                        help="Print the operations recipes can use and exit")
    parser.add_argument("--tag", help="With --list-operations, only show operations carrying this tag")
    parser.add_argument("--recipe", help="JSON recipe to run before the flag operations")
    parser.add_argument("--scale", help="Scale factor: a multiplier (0.5) or a percentage (50%%)")
    parser.add_argument("--resize", help="Target size: WxH, W or xH")
    parser.add_argument("--policy", choices=sorted(RESIZE_POLICIES), default=POLICY_FIT,
                        help="How WxH resizes treat the aspect ratio (default: fit)")
    parser.add_argument("--rotate", type=float, help="Rotate counter-clockwise by this many degrees")
    parser.add_argument("--background", default=None,
                        help="Fill color for corners exposed by --rotate (default: white)")
    parser.add_argument("--flip", choices=[AXIS_VERTICAL, AXIS_HORIZONTAL, AXIS_BOTH], help="Flip axis")
    parser.add_argument("--grayscale", action="store_true", help="Convert to grayscale")
    parser.add_argument("--monochrome", nargs=2, metavar=("WHITE", "BLACK"),
                        help="Duotone remap: colors for light and dark areas")
    parser.add_argument("--format", dest="export_format", choices=sorted(EXPORT_FORMATS), default=None,
                        help=f"Export format (default: {DEFAULT_EXPORT_FORMAT})")
    parser.add_argument("--quality", type=int, default=None,
                        help=f"Export quality 0-100 (default: {DEFAULT_EXPORT_QUALITY})")

    output = parser.add_mutually_exclusive_group()
    output.add_argument("--output", help="Output file, or a directory when it has no extension")
    output.add_argument("--stdout", action="store_true", help="Write the encoded image to standard output")
    parser.add_argument("--content-type", dest="content_type", action="store_true",
                        help="With --stdout, write a Content-Type header before the image")

    parser.add_argument("-v", "--verbose", action="count", default=0, help="Verbose logging (-vv for debug)")
    return parser


def build_recipe(args: argparse.Namespace) -> Recipe:
    """
    Turn parsed flags into a Recipe.

    Recipe file steps come first, followed by flag operations in the order
    scale, resize, rotate, flip, grayscale, monochrome. Export flags override
    the recipe's export block. Without any output choice the image is
    written to standard output.
    """
    recipe = load_recipe(args.recipe) if args.recipe else Recipe()

    if args.scale is not None:
        recipe.add_step("scale", factor=args.scale)
    if args.resize is not None:
        recipe.add_step("resize", dimensions=parse_resize_argument(args.resize), policy=args.policy)
    if args.rotate is not None:
        background = args.background if args.background is not None else DEFAULT_ROTATE_BACKGROUND
        recipe.add_step("rotate", angle=args.rotate, background=background)
    if args.flip is not None:
        recipe.add_step("flip", axis=args.flip)
    if args.grayscale:
        recipe.add_step("grayscale")
    if args.monochrome is not None:
        white, black = args.monochrome
        recipe.add_step("monochrome", white=white, black=black)

    export = dict(recipe.export or {})
    if args.export_format is not None:
        export[FIELD_EXPORT_FORMAT] = args.export_format
    if args.quality is not None:
        export[FIELD_EXPORT_QUALITY] = args.quality
    if args.output is not None:
        export[FIELD_EXPORT_DESTINATION] = args.output
    elif args.stdout or FIELD_EXPORT_DESTINATION not in export:
        export[FIELD_EXPORT_DESTINATION] = None
    recipe.export = export

    return recipe


def format_operations(registry: OperationRegistry, tag: Optional[str] = None) -> List[str]:
    """One line per operation: name, parameters, description and tags."""
    if tag is None:
        catalog = registry.get_all_metadata()
    else:
        catalog = {name: registry.get_metadata(name) for name in registry.filter_by_tag(tag)}

    lines = []
    for name, meta in catalog.items():
        signature = f"{name}({', '.join(meta['parameters'])})"
        lines.append(f"{signature:<40} {meta['description']}  [{', '.join(meta['tags'])}]")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_operations:
        lines = format_operations(get_default_registry(), args.tag)
        if not lines:
            print(f"No operations tagged '{args.tag}'", file=sys.stderr)
            return 1
        print("\n".join(lines))
        return 0
    if args.input is None:
        parser.error("the following arguments are required: input")

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)

    try:
        recipe = build_recipe(args)
        session = ImageSession(args.input)
        sink = StreamSink(emit_header=args.content_type)
        written = run_recipe(session, recipe, get_default_registry(), sink=sink)
    except (ImageKitError, FileNotFoundError, ValueError) as exc:
        logger.error(str(exc))
        return 1

    if written is not None:
        logger.info(f"Wrote {written}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
