# CLI argument parsing for skillcarver

import argparse
import sys

from skillcarver import config


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="skillcarver",
        description="Fetch, list and extract skill tarballs (.tar.gz).",
    )
    p.add_argument(
        "--fetch",
        dest="fetch_url",
        help="GitHub source to fetch (gh:owner/repo/path or https://github.com/owner/repo/tree/ref/path)",
    )
    p.add_argument(
        "--extract", "-x",
        dest="extract_file",
        help="Local .tar.gz file to extract",
    )
    p.add_argument(
        "--list", "-t",
        dest="list_file",
        help="Local .tar.gz file to list without extracting",
    )
    p.add_argument(
        "--output-dir", "-o",
        dest="output_dir",
        default=config.DEFAULT_OUTPUT_DIR,
        help=f"Destination directory (default: {config.DEFAULT_OUTPUT_DIR})",
    )
    p.add_argument(
        "--strip",
        type=int,
        default=0,
        help="Strip N leading path components when extracting a local file",
    )
    p.add_argument(
        "--path",
        dest="path",
        default=None,
        help="Only extract entries at or under this path (after stripping)",
    )
    p.add_argument(
        "--simple-output",
        action="store_true",
        help="Use simple output format instead of ls -la style",
    )
    p.add_argument(
        "--log-file", "-l",
        dest="log_file",
        help="Path to save a complete log of output",
    )
    p.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress detailed progress output",
    )
    return p


def parse_args(argv=None):
    p = build_parser()
    args = p.parse_args(argv)
    # Show help if no mode selected
    if not any([args.fetch_url, args.extract_file, args.list_file]):
        p.print_help()
        sys.exit(0)
    if args.strip < 0:
        p.error("--strip must be non-negative")
    return args
