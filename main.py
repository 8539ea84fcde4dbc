"""Command line interface for batch grayscale enhancement with SSIM scoring."""

from __future__ import annotations

import argparse
import csv
import logging
import math
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from imgenhance.errors import EnhancementError
from imgenhance.io import IMG_EXTS, gather_images, load_image, save_image, unique_destination
from imgenhance.pipeline import METHODS, EnhancementResult, enhance
from imgenhance.settings import Settings

REPORT_HEADER = ["path", "method", "width", "height", "ssim", "output", "decision", "reason"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Grayscale image enhancement with SSIM scoring")
    parser.add_argument("--input", required=True, help="Input image file or directory containing images")
    parser.add_argument(
        "--method",
        choices=sorted(METHODS),
        help="Enhancement method (default taken from settings)",
    )
    parser.add_argument("--radius", type=int, help="Window radius for the median and wiener filters")
    parser.add_argument("--noise-variance", type=float, help="Assumed noise variance for the wiener filter")
    parser.add_argument("--window-size", type=int, help="SSIM window size")
    parser.add_argument("--output-dir", help="Directory to write enhanced images into")
    parser.add_argument(
        "--format",
        choices=sorted(IMG_EXTS),
        help="Container for enhanced images (default taken from settings)",
    )
    parser.add_argument("--report", help="Optional CSV file to store SSIM scores and decisions")
    parser.add_argument("--settings", help="JSON settings file holding default method and parameters")
    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Persist the effective method and parameters to the settings file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def resolve_options(args: argparse.Namespace, settings: Settings) -> Dict[str, object]:
    """Merge command line flags over persisted settings and validate them."""
    try:
        params = settings.as_params()
    except (TypeError, ValueError) as exc:
        raise SystemExit(f"Invalid parameter in settings file {settings.settings_file}: {exc}")
    method = args.method or settings.get("method")
    radius = args.radius if args.radius is not None else params["radius"]
    noise_variance = args.noise_variance if args.noise_variance is not None else params["noise_variance"]
    window_size = args.window_size if args.window_size is not None else params["window_size"]
    fmt = (args.format or settings.get("output_format") or ".png").lower()

    if not isinstance(method, str) or method.lower() not in METHODS:
        raise SystemExit(f"Unknown method in settings: {method!r}")
    method = method.lower()
    if radius < 0:
        raise SystemExit("--radius must be a non-negative integer")
    if not math.isfinite(noise_variance) or noise_variance < 0:
        raise SystemExit("--noise-variance must be a finite non-negative number")
    if window_size <= 0:
        raise SystemExit("--window-size must be a positive integer")
    if fmt not in IMG_EXTS:
        raise SystemExit(f"Unsupported output format: {fmt}")

    return {
        "method": method,
        "radius": radius,
        "noise_variance": noise_variance,
        "window_size": window_size,
        "format": fmt,
        "suffix": settings.get("output_suffix", "_enhanced"),
    }


def process_image(path: Path, options: Dict[str, object], output_dir: Optional[Path]) -> Tuple[EnhancementResult, Optional[Path]]:
    image = load_image(path)
    result = enhance(
        image,
        options["method"],
        radius=options["radius"],
        noise_variance=options["noise_variance"],
        window_size=options["window_size"],
    )
    written = None
    if output_dir is not None:
        dest = unique_destination(path, output_dir, suffix=options["suffix"], ext=options["format"])
        written = save_image(result.enhanced, dest)
    return result, written


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, format="%(message)s")

    settings = Settings(args.settings)
    options = resolve_options(args, settings)

    input_path = Path(args.input).expanduser().resolve()
    if not input_path.exists():
        raise SystemExit(f"Input path does not exist: {input_path}")

    if args.save_settings:
        for key in ("method", "radius", "noise_variance", "window_size"):
            settings.settings[key] = options[key]
        settings.settings["output_format"] = options["format"]
        settings.save()
        logging.info("Saved settings to %s", settings.settings_file)

    images = gather_images(input_path)
    if not images:
        logging.info("No image files found under %s", input_path)
        return 0

    logging.info("Collected %d images", len(images))
    logging.info(
        "Method: %s (radius=%d, noise_variance=%.3f, window_size=%d)",
        METHODS[options["method"]].label,
        options["radius"],
        options["noise_variance"],
        options["window_size"],
    )

    output_dir = Path(args.output_dir).expanduser() if args.output_dir else None

    writer = None
    csv_file = None
    if args.report:
        csv_path = Path(args.report)
        csv_path.parent.mkdir(parents=True, exist_ok=True)
        csv_file = csv_path.open("w", newline="", encoding="utf-8")
        writer = csv.writer(csv_file)
        writer.writerow(REPORT_HEADER)

    counts = {"enhanced": 0, "error": 0}
    scores: List[float] = []

    try:
        for path in images:
            try:
                result, written = process_image(path, options, output_dir)
            except EnhancementError as exc:
                counts["error"] += 1
                if writer:
                    writer.writerow([str(path), options["method"], "", "", "", "", "error", str(exc)])
                logging.warning("Failed to process %s: %s", path, exc)
                continue

            counts["enhanced"] += 1
            scores.append(result.ssim)
            logging.info("%s: %s", path.name, result.title)
            if writer:
                writer.writerow([
                    str(path),
                    result.method,
                    result.enhanced.width,
                    result.enhanced.height,
                    f"{result.ssim:.6f}",
                    str(written) if written else "",
                    "enhanced",
                    "saved" if written else "ok",
                ])
    finally:
        if csv_file:
            csv_file.close()

    logging.info("Decisions: enhanced=%d, error=%d", counts["enhanced"], counts["error"])
    if scores:
        logging.info("Mean SSIM: %.4f", sum(scores) / len(scores))
    if output_dir is not None:
        logging.info("Wrote %d enhanced images to %s", counts["enhanced"], output_dir)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
