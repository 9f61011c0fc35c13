"""Command line entry point.

Usage:
  s3console upload my-bucket ./report.pdf
  s3console upload my-bucket ./backup.tar --part-size 16
  s3console upload my-bucket ./backup.tar --multipart
  s3console download my-bucket docs/report.pdf ./downloads --overwrite
  s3console download-bucket my-bucket ./mirror

S3 endpoint, region and credentials come from the environment (see
``s3console.common.config``).
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from s3console.common.config import get_settings
from s3console.common.logging import setup_logging
from s3console.infra.observability.metrics import write_metrics
from s3console.services.bundle import TransferServiceBundle, get_service_bundle
from s3console.services.errors import TransferResult
from s3console.services.progress import (
    ConsoleProgressReporter,
    LoggingProgressReporter,
    ProgressReporter,
)

logger = logging.getLogger("s3console.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s3console",
        description="Upload files to and download files from an S3 bucket",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Log progress at DEBUG level instead of printing the percentage",
    )
    parser.add_argument(
        "--metrics-file",
        default=None,
        metavar="PATH",
        help="Write transfer counters in Prometheus text format to PATH on exit",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    upload = commands.add_parser("upload", help="Upload a local file")
    upload.add_argument("bucket", help="Target bucket name")
    upload.add_argument("file", help="Path of the local file")
    upload.add_argument(
        "--part-size",
        type=int,
        default=None,
        metavar="MIB",
        help="Upload in parts of MIB mebibytes (minimum 5); implies --multipart",
    )
    upload.add_argument(
        "--multipart",
        action="store_true",
        help="Upload in parts of TRANSFER_PART_SIZE_MB unless --part-size is given",
    )

    download = commands.add_parser("download", help="Download one object")
    download.add_argument("bucket", help="Source bucket name")
    download.add_argument("key", help="Object key")
    download.add_argument("destination", help="Local directory to write into")
    download.add_argument(
        "--overwrite", action="store_true", help="Replace an existing local file"
    )

    mirror = commands.add_parser(
        "download-bucket", help="Download every object of a bucket"
    )
    mirror.add_argument("bucket", help="Source bucket name")
    mirror.add_argument("destination", help="Local directory to write into")
    mirror.add_argument(
        "--overwrite", action="store_true", help="Replace existing local files"
    )
    return parser


def _report_result(result: TransferResult) -> int:
    if result.ok:
        return 0
    logger.error("%s: %s", result.error.code, result.error)
    if result.abort_error is not None:
        logger.error(
            "abort failed, parts may remain on the store: %s", result.abort_error
        )
    return 1


def _dispatch(args: argparse.Namespace, bundle: TransferServiceBundle) -> int:
    if args.command == "upload":
        if args.multipart or args.part_size is not None:
            result = bundle.multipart().upload(args.bucket, args.file, args.part_size)
        else:
            result = bundle.single().upload_whole(args.bucket, args.file)
        return _report_result(result)

    if args.command == "download":
        result = bundle.single().download_one(
            args.bucket, args.key, args.destination, overwrite=args.overwrite
        )
        return _report_result(result)

    report = bundle.bucket().download_bucket(
        args.bucket, args.destination, overwrite=args.overwrite
    )
    if not report.ok:
        logger.error("%s: %s", report.error.code, report.error)
        return 1
    for key, error in report.failed:
        logger.error("%s %s: %s", key, error.code, error)
    logger.info(
        "downloaded %s, skipped %s, failed %s",
        len(report.downloaded),
        len(report.skipped),
        len(report.failed),
    )
    return 0 if report.complete else 1


def run(
    argv: Sequence[str] | None = None,
    *,
    bundle: TransferServiceBundle | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    reporter: ProgressReporter = (
        LoggingProgressReporter() if args.no_progress else ConsoleProgressReporter()
    )
    if bundle is None:
        bundle = get_service_bundle(settings, reporter=reporter)

    try:
        return _dispatch(args, bundle)
    finally:
        if args.metrics_file:
            write_metrics(args.metrics_file)


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
