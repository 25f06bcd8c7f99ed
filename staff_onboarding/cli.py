"""Command-line interface for checking onboarding documents offline.

Runs the same AI checks as the upload widgets against local files, and
extracts a folder of passport scans into a CSV for bulk data entry.
"""

import argparse
import csv
import json
import mimetypes
import sys
import time
from pathlib import Path

from staff_onboarding.imaging.compress import compress_image_for_ai, to_data_url
from staff_onboarding.utils.config import VisionConfig, load_config
from staff_onboarding.utils.logger import get_logger, setup_logging
from staff_onboarding.vision.passport_extraction import extract_passport
from staff_onboarding.vision.passport_page import (
    PassportPageType,
    check_expected_page,
    validate_passport_page,
)
from staff_onboarding.vision.photo import validate_photo

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.png", "*.jpg", "*.jpeg", "*.webp", "*.gif")
_META_COLUMNS = [
    "filename",
    "status",
    "processing_time_s",
    "mrz_verified",
    "error",
]


def _find_images(input_dir: Path) -> list[Path]:
    """Find all supported image files in a directory.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted list of image paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def load_image(file_path: Path, config: VisionConfig) -> str:
    """Read a local file as the data URL the vision calls expect.

    Images are downscaled like browser uploads; PDFs are passed through
    unchanged so extraction can refuse them with its usual message.
    """
    content = file_path.read_bytes()
    media_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
    if media_type == "application/pdf":
        return to_data_url(content, media_type)
    return compress_image_for_ai(
        content, max_dimension=config.max_image_dimension, quality=config.jpeg_quality
    )


def check_photo(file_path: Path) -> dict[str, object]:
    config = load_config().vision
    result = validate_photo(load_image(file_path, config), config)
    return {"filename": file_path.name, **result.to_dict()}


def check_page(file_path: Path, expected: str | None = None) -> dict[str, object]:
    """Classify a passport page and optionally compare it with what was expected."""
    config = load_config().vision
    result = validate_passport_page(load_image(file_path, config), config)
    matches, error_message = check_expected_page(
        result, PassportPageType(expected) if expected else None
    )
    return {
        "filename": file_path.name,
        **result.to_dict(),
        "matches": matches,
        "errorMessage": error_message,
    }


def extract_single(file_path: Path) -> dict[str, object]:
    """Extract passport data from one file.

    Args:
        file_path: Passport image.

    Returns:
        Dictionary with the filename and the extraction result.
    """
    config = load_config().vision
    result = extract_passport(load_image(file_path, config), config)
    return {"filename": file_path.name, **result.to_dict()}


def process_folder(
    input_dir: Path, output_csv: Path, verbose: bool = False
) -> dict[str, int]:
    """Extract every passport image in a folder and export to CSV.

    Args:
        input_dir: Directory containing passport images.
        output_csv: Path for the output CSV file.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    config = load_config().vision

    files = _find_images(input_dir)
    if not files:
        logger.warning("No images found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d images to process", len(files))

    results: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            extraction = extract_passport(load_image(file_path, config), config)
        except Exception as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            results.append(
                {"filename": file_path.name, "status": "failed", "error": str(exc)}
            )
            failed += 1
            continue

        row: dict[str, object] = {
            "filename": file_path.name,
            "status": "success" if extraction.success else "failed",
            "processing_time_s": round(time.time() - start_time, 2),
            "mrz_verified": extraction.mrz_verified,
            "error": extraction.error,
        }
        row.update(extraction.data)
        results.append(row)
        if extraction.success:
            successful += 1
        else:
            failed += 1

    _write_csv(results, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _write_csv(results: list[dict[str, object]], output_path: Path) -> None:
    if not results:
        return

    all_keys: set[str] = set()
    for r in results:
        all_keys.update(r.keys())

    field_columns = sorted(all_keys - set(_META_COLUMNS))
    columns = [c for c in _META_COLUMNS if c in all_keys] + field_columns

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(results)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    print(f"\n{'=' * 50}")
    print("Passport Extraction Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def _require_file(path: Path) -> None:
    if not path.exists():
        print(f"Error: {path} does not exist", file=sys.stderr)
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Staff onboarding document checks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    photo_parser = subparsers.add_parser("photo", help="Check a visa photo")
    photo_parser.add_argument("file", type=Path, help="Photo file")

    page_parser = subparsers.add_parser("page", help="Classify a passport page")
    page_parser.add_argument("file", type=Path, help="Passport page image")
    page_parser.add_argument(
        "--expect",
        choices=[PassportPageType.COVER.value, PassportPageType.INSIDE_PAGES.value],
        help="Page type the image should show",
    )

    single_parser = subparsers.add_parser("extract", help="Extract one passport")
    single_parser.add_argument("file", type=Path, help="Passport image")
    single_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser(
        "batch", help="Extract a folder of passports to CSV"
    )
    batch_parser.add_argument("input_dir", type=Path, help="Directory of passport images")
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    args = parser.parse_args(argv)

    setup_logging()

    if args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, args.verbose)
    elif args.command == "photo":
        _require_file(args.file)
        print(json.dumps(check_photo(args.file), indent=2))
    elif args.command == "page":
        _require_file(args.file)
        print(json.dumps(check_page(args.file, args.expect), indent=2))
    elif args.command == "extract":
        _require_file(args.file)
        output_str = json.dumps(extract_single(args.file), indent=2)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output_str)
            print(f"Output written to {args.output}")
        else:
            print(output_str)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
