import argparse
import logging
import sys
from typing import Callable, List, Optional

from arcfs.archive import Arc
from arcfs.dumper import extract_files
from arcfs.errors import ArcError
from arcfs.hashes import HashRegistry, get_default_registry

logger = logging.getLogger("arcfs")


def build_shared_parser():
    parser = argparse.ArgumentParser(description="Shared arguments. This should never be seen.", add_help=False)
    parser.add_argument("archive", type=str, help="The ARC container to read.")
    parser.add_argument("--hashes", type=str, required=False, help="A label file (one path per line) used to name hashed paths. Defaults to the Hashes.txt shipped next to the package.")
    parser.add_argument("-r", "--region", type=str, default="0", help="Region code (jp_ja, us_en, ...) or index used for regional files. (0 by default.)")
    parser.add_argument("-e", "--error", action='store_true', required=False, help="Execution will stop on an error.")
    parser.add_argument("-v", "--verbose", action='store_true', required=False, help="Debug output will be printed to the console.")
    parser.add_argument("-q", "--quiet", action='store_true', required=False, help="Only errors will be printed.")
    return parser


SharedParser = build_shared_parser()


def func_print_help(arg_parser: argparse.ArgumentParser, exit_code: int = 0) -> Callable[[argparse.Namespace], int]:
    def wrapper(_: argparse.Namespace) -> int:
        arg_parser.print_help()
        return exit_code

    return wrapper


def configure_logging(args: argparse.Namespace) -> None:
    if getattr(args, "verbose", False):
        level = logging.DEBUG
    elif getattr(args, "quiet", False):
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def open_archive(args: argparse.Namespace) -> Arc:
    registry = HashRegistry(args.hashes) if args.hashes else get_default_registry()
    arc = Arc.open(args.archive, registry)
    if not arc.initialized:
        raise ArcError(f"`{args.archive}` is not a readable archive")
    return arc


def run_list(args: argparse.Namespace) -> int:
    arc = open_archive(args)
    if args.long:
        for entry in arc.entries(args.region):
            if entry.stream != args.streams:
                continue
            flags = ("R" if entry.redirected else "-") + ("G" if entry.regional else "-")
            print(f"{flags} 0x{entry.offset:010X} {entry.comp_size:>10} {entry.decomp_size:>10} {entry.path}")
    else:
        for path in (arc.list_stream_files() if args.streams else arc.list_files()):
            print(path)
    return 0


def run_info(args: argparse.Namespace) -> int:
    arc = open_archive(args)
    info = arc.get_file_information(args.path, args.region)
    if not info.found:
        logger.error("`%s` is not in `%s`", args.path, args.archive)
        return 1
    print(f"Path: {args.path}")
    print(f"Offset: 0x{info.offset:X}")
    print(f"Compressed Size: {info.comp_size}")
    print(f"Decompressed Size: {info.decomp_size}")
    print(f"Regional: {info.regional}")
    print(f"Redirected: {arc.is_redirected(args.path)}")
    return 0


def run_extract(args: argparse.Namespace) -> int:
    arc = open_archive(args)
    written = extract_files(arc, args.paths or None, args.output, args.compressed, args.with_offset, args.region, args.error)
    if not args.quiet:
        print(f"Wrote {len(written)} file(s) to \"{args.output}\"")
    return 0


def run_shared(args: argparse.Namespace) -> int:
    arc = open_archive(args)
    shared = arc.get_shared_files(args.path, args.region)
    if not shared:
        logger.error("`%s` is not in `%s`", args.path, args.archive)
        return 1
    for path in shared:
        print(path)
    return 0


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="arcfs", description="Read-only access to Smash Ultimate style ARC containers.")
    parser.set_defaults(func=func_print_help(parser, 2))
    sub_parsers = parser.add_subparsers(description="Operations on an archive.", help="Operations on an archive.")

    list_parser = sub_parsers.add_parser("list", parents=[SharedParser], help="Lists every file path.")
    list_parser.add_argument("--streams", action="store_true", help="List stream files instead of regular files.")
    list_parser.add_argument("-l", "--long", action="store_true", help="Include flags, offsets and sizes.")
    list_parser.set_defaults(func=run_list)

    info_parser = sub_parsers.add_parser("info", parents=[SharedParser], help="Prints where a file lives.")
    info_parser.add_argument("path", type=str, help="The archive path of the file.")
    info_parser.set_defaults(func=run_info)

    extract_parser = sub_parsers.add_parser("extract", parents=[SharedParser], help="Writes files to disk.")
    extract_parser.add_argument("paths", type=str, nargs="*", help="Archive paths to extract. (Every file when omitted.)")
    extract_parser.add_argument("-o", "--output", type=str, required=True, help="The directory to write to.")
    extract_parser.add_argument("--compressed", action="store_true", help="Write the stored bytes without decompressing.")
    extract_parser.add_argument("--with-offset", action="store_true", help="Append the hex offset of each file to its name.")
    extract_parser.set_defaults(func=run_extract)

    shared_parser = sub_parsers.add_parser("shared", parents=[SharedParser], help="Lists every path sharing a file's data.")
    shared_parser.add_argument("path", type=str, help="The archive path of the file.")
    shared_parser.set_defaults(func=run_shared)
    return parser


Parser = create_parser()


def main(args: Optional[List[str]] = None) -> int:
    args = Parser.parse_args(args if args is not None else sys.argv[1:])
    configure_logging(args)
    try:
        return args.func(args)
    except (ArcError, OSError, ValueError) as e:
        if getattr(args, "error", False):
            raise
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
