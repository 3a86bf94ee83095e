import argparse
import logging
import sys
from pathlib import Path

from unpack_unitypackage.unitypackage import (
    ensure_output_dir,
    pack_unitypackage,
    unpack_unitypackage,
)
from unpack_unitypackage.utils import UnpackError

UNITYPACKAGE_SUFFIX = ".unitypackage"


def derive_output_dir(archive: Path) -> Path:
    """Name the output directory after the package, without its extension."""
    return Path(archive.stem)


def _describe(error: UnpackError) -> str:
    """Describe an error along with the underlying cause, if any."""
    if error.__cause__ is None:
        return str(error)
    return f"{error}: {error.__cause__}"


def call_unpack_unitypackage(args) -> None:
    output_dir = args.output_dir
    if output_dir is None:
        output_dir = derive_output_dir(args.archive)
    try:
        ensure_output_dir(output_dir)
        summary = unpack_unitypackage(
            args.archive,
            output_dir,
            staging_parent=args.staging_dir,
            keep_going=args.keep_going,
        )
    except UnpackError as e:
        print(f"Failed to unpack {args.archive}: {_describe(e)}")
        sys.exit(1)
    if not summary.ok:
        print(
            f"Failed to unpack {len(summary.failed)} assets from {args.archive} "
            f"into {output_dir}"
        )
        sys.exit(1)
    print(f"Successfully unpacked {args.archive} into {output_dir}")


def call_pack_unitypackage(args) -> None:
    dest = args.output_file
    if dest is None:
        dest = Path(args.src.resolve().name + UNITYPACKAGE_SUFFIX)
    try:
        count = pack_unitypackage(args.src, dest, force=args.force)
    except UnpackError as e:
        print(f"Failed to pack {args.src}: {_describe(e)}")
        sys.exit(1)
    print(f"Successfully packed {count} assets from {args.src} into {dest}")


def _add_verbose_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _run(parser: argparse.ArgumentParser) -> None:
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    args.func(args)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Unpack a .unitypackage into a project directory tree",
    )
    parser.set_defaults(func=call_unpack_unitypackage)
    parser.add_argument(
        "archive",
        type=Path,
        help="Path to the .unitypackage file",
    )
    parser.add_argument(
        "output_dir",
        type=Path,
        nargs="?",
        help=(
            "Directory to unpack into. (Default: the package's file name "
            "without its extension, in the current directory)"
        ),
        default=None,
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help=(
            "Carry on when an asset cannot be moved into place, and report the "
            "failures at the end instead of stopping at the first one"
        ),
    )
    parser.add_argument(
        "--staging-dir",
        type=Path,
        help=(
            "Directory in which to create the temporary staging directory. "
            "Using a directory on the same volume as the output avoids copying."
        ),
        default=None,
    )
    _add_verbose_argument(parser)
    _run(parser)


def pack_main() -> None:
    parser = argparse.ArgumentParser(
        description="Pack a project directory tree into a .unitypackage",
    )
    parser.set_defaults(func=call_pack_unitypackage)
    parser.add_argument(
        "src",
        type=Path,
        help="Root of the directory tree to pack",
    )
    parser.add_argument(
        "output_file",
        type=Path,
        nargs="?",
        help=(
            "Package to create. (Default: the source directory's name with a "
            f"'{UNITYPACKAGE_SUFFIX}' extension, in the current directory)"
        ),
        default=None,
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Overwrite the package if it already exists",
    )
    _add_verbose_argument(parser)
    _run(parser)


if __name__ == "__main__":
    main()
