from __future__ import annotations

import argparse
import logging
import mimetypes
from pathlib import Path
from typing import List

from ..errors import HandwerkError
from ..services.image_optimizer import (
    FORMATS,
    ImageFile,
    OptimizeOptions,
    format_file_size,
    optimize_many,
    validate_image_file,
)


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resize and recompress catalog images before upload")
    parser.add_argument("inputs", nargs="+", type=Path, help="Image files to optimize")
    parser.add_argument("--output", type=Path, default=Path("optimized"), help="Directory for optimized images")
    parser.add_argument("--max-width", type=int, default=1920, help="Maximum width (px)")
    parser.add_argument("--max-height", type=int, default=1920, help="Maximum height (px)")
    parser.add_argument("--quality", type=float, default=0.8, help="Encoder quality in (0, 1]")
    parser.add_argument("--format", choices=FORMATS, default="jpeg", help="Output format")
    parser.add_argument("--max-size-mb", type=float, default=10, help="Reject originals larger than this")
    return parser.parse_args(argv)


def _load(path: Path) -> ImageFile:
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return ImageFile(filename=path.name, content=path.read_bytes(), content_type=content_type)


def _output_path(output: Path, filename: str, fmt: str) -> Path:
    suffix = ".jpg" if fmt == "jpeg" else f".{fmt}"
    return output / (Path(filename).stem + suffix)


def main(argv: List[str] | None = None) -> None:
    args = parse_args(argv)
    try:
        options = OptimizeOptions(
            max_width=args.max_width, max_height=args.max_height, quality=args.quality, format=args.format
        )
        files = [_load(path) for path in args.inputs]
        for f in files:
            validate_image_file(f, args.max_size_mb)
        results = optimize_many(files, options)
    except (HandwerkError, OSError) as exc:
        logger.error("Optimization failed: %s", exc)
        raise SystemExit(1) from exc

    args.output.mkdir(parents=True, exist_ok=True)
    for result in results:
        target = _output_path(args.output, result.file.filename, args.format)
        target.write_bytes(result.file.content)
        logger.info(
            "%s: %dx%d, %s → %s (%.1f%%)",
            target, result.width, result.height,
            format_file_size(result.original_size), format_file_size(result.optimized_size),
            result.compression_ratio,
        )


if __name__ == "__main__":
    main()
