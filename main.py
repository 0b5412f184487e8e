import argparse
import asyncio
import time
from pathlib import Path

from layer.config import LayerConfig, OutputConfig
from layer.document import LayerDocument
from layer.scene import build_scene, load_scene
from utils.logging import log_message


def parse_font_arguments(values):
    """Splits repeated ALIAS=PATH arguments into (alias, path) pairs."""
    fonts = []
    for value in values or []:
        alias, separator, path = value.partition("=")
        if not separator or not alias or not path:
            raise ValueError(f"Font must be given as ALIAS=PATH, got '{value}'")
        fonts.append((alias, path))
    return fonts


def main():
    parser = argparse.ArgumentParser(
        description="Render an overlay layer from a JSON scene file"
    )
    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="Path to a JSON scene file (list of draw commands)",
    )
    parser.add_argument(
        "--output",
        type=str,
        required=False,
        help="Path to save the rendered layer (.png, .jpg or .webp)",
    )
    parser.add_argument(
        "--narrow",
        dest="widescreen",
        action="store_false",
        help="Render a 1280x960 (4:3) layer instead of 1280x720",
    )
    parser.set_defaults(widescreen=True)
    parser.add_argument(
        "--format",
        dest="image_format",
        type=str,
        default=None,
        choices=["png", "jpeg", "webp"],
        help="Output format (default: from the output file extension)",
    )
    parser.add_argument(
        "--quality",
        type=int,
        default=None,
        help="JPEG/WEBP quality (1-100) or PNG compression level (0-9)",
    )
    parser.add_argument(
        "--font",
        action="append",
        default=[],
        metavar="ALIAS=PATH",
        help="Register a font file under an alias usable in font strings (repeatable)",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Print detailed rendering logs"
    )

    args = parser.parse_args()

    try:
        fonts = parse_font_arguments(args.font)
    except ValueError as e:
        parser.error(str(e))

    for alias, path in fonts:
        if not LayerDocument.register_font(path, alias):
            log_message(f"Warning: Font '{alias}' could not be registered from {path}", always_print=True)

    config = LayerConfig(
        widescreen=args.widescreen,
        verbose=args.verbose,
        output=OutputConfig(image_format=args.image_format or "png"),
    )

    input_path = Path(args.input)
    if args.output:
        output_path = Path(args.output)
    else:
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        output_path = Path("./output") / f"{input_path.stem}_{timestamp}.{args.image_format or 'png'}"
        log_message(f"--output not specified, using default: {output_path}", always_print=True)

    try:
        entries = load_scene(input_path)
        document = LayerDocument(config=config)
        asyncio.run(build_scene(document, entries))
        written = document.write_file(output_path, args.image_format, args.quality)
        log_message(f"Layer saved to {written}", always_print=True)
    except Exception as e:
        log_message(f"Error rendering {input_path}: {e}", always_print=True)
        exit(1)


if __name__ == "__main__":
    main()
