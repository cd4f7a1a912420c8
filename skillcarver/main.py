#  skillcarver main CLI: fetch, list and extract modes, with optional logging
import sys

from skillcarver.modules.cli import parse_args
from skillcarver.modules.errors import SkillcarverError
from skillcarver.modules.finders.peekers import peek_archive
from skillcarver.modules.formatters import Tee, format_entry_line, human_readable_size
from skillcarver.modules.keepers.downloaders import path_filter, fetch_skill
from skillcarver.modules.keepers.extractor import ExtractOptions, extract_tar_gz


def _run_list(args) -> int:
    with open(args.list_file, "rb") as f:
        result = peek_archive(f.read())

    if result.error:
        print(f"[!] Error: {result.error}")
        return 1

    if not args.quiet:
        print(f"[*] {args.list_file}: {human_readable_size(result.bytes_compressed)} compressed, "
              f"{human_readable_size(result.bytes_decompressed)} decompressed, "
              f"{result.entries_found} entries\n")
    for entry in result.entries:
        print(format_entry_line(entry, show_permissions=not args.simple_output))
    return 0


def _run_extract(args) -> int:
    options = ExtractOptions(strip=args.strip, filter=path_filter(args.path))
    files = extract_tar_gz(args.extract_file, args.output_dir, options)
    if not args.quiet:
        for name in files:
            print(f"  {name}")
        print(f"\n[+] Extracted {len(files)} path(s) to {args.output_dir}")
    return 0


def _run_fetch(args) -> int:
    result = fetch_skill(
        args.fetch_url,
        output_dir=args.output_dir,
        verbose=not args.quiet,
    )
    if not args.quiet:
        for name in result.files:
            print(f"  {name}")
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)

    # set up logging/tee if requested
    log_f = None
    saved_streams = sys.stdout, sys.stderr
    if args.log_file:
        log_f = open(args.log_file, "w", encoding="utf-8")
        sys.stdout = Tee(sys.stdout, log_f)
        sys.stderr = Tee(sys.stderr, log_f)

    try:
        if args.list_file:
            return _run_list(args)
        if args.extract_file:
            return _run_extract(args)
        return _run_fetch(args)
    except SkillcarverError as e:
        print(f"X Error: {e.message}")
        if e.hint:
            print(f"   - {e.hint}")
        return 1
    finally:
        if log_f:
            sys.stdout, sys.stderr = saved_streams
            log_f.close()


if __name__ == "__main__":
    sys.exit(main())
