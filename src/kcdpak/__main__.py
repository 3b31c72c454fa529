"""
Run as kcd-toolkit, or python -m kcdpak:
  kcd-toolkit pack DIR out.pak            # pack directory into a .pak (alias: compress)
  kcd-toolkit unpack in.pak DIR           # extract a .pak into DIR (alias: extract)
  kcd-toolkit list in.pak                 # list contents
  kcd-toolkit create MODNAME              # placeholder, not implemented yet
  kcd-toolkit -v pack DIR out.pak         # log every entry to stderr

Defaults for --level, --follow-symlinks and -v can be set in
~/.config/KCDToolkit/settings.json.
"""

from __future__ import annotations

import argparse
import sys

from kcdpak import __version__
from kcdpak.app_log import set_app_log
from kcdpak.errors import PakError
from kcdpak.reader import extract_pak, list_pak
from kcdpak.settings import Settings, load_settings
from kcdpak.writer import pack_pak


def _cmd_pack(args: argparse.Namespace, settings: Settings) -> int:
    level = args.level if args.level is not None else settings.compress_level
    try:
        pack_pak(
            args.input_dir,
            args.output_pak,
            compress_level=level,
            follow_symlinks=args.follow_symlinks or settings.follow_symlinks,
        )
    except PakError as e:
        print(f"Error packing: {e}", file=sys.stderr)
        return 1
    print(f"Packed: {args.input_dir} -> {args.output_pak}")
    return 0


def _cmd_unpack(args: argparse.Namespace, settings: Settings) -> int:
    try:
        extract_pak(args.input_pak, args.output_dir)
    except PakError as e:
        print(f"Error unpacking: {e}", file=sys.stderr)
        return 1
    print(f"Unpacked: {args.input_pak} -> {args.output_dir}")
    return 0


def _cmd_list(args: argparse.Namespace, settings: Settings) -> int:
    try:
        entries = list_pak(args.input_pak)
    except PakError as e:
        print(f"Error listing: {e}", file=sys.stderr)
        return 1
    print(f"{args.input_pak}: {len(entries)} entr{'y' if len(entries) == 1 else 'ies'}")
    for e in entries[:50]:
        size = "<dir>" if e.is_dir else e.file_size
        print(f"  {size:>10}  {e.name}")
    if len(entries) > 50:
        print(f"  ... and {len(entries) - 50} more")
    return 0


def _cmd_create(args: argparse.Namespace, settings: Settings) -> int:
    print(f"Mod '{args.modname}' will be created here (not yet implemented).")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="kcd-toolkit",
        description="A toolkit for managing and creating Kingdom Come: Deliverance mod files.",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log every archive entry to stderr")
    sub = ap.add_subparsers(dest="command", metavar="COMMAND", required=True)

    p = sub.add_parser("pack", aliases=["compress"], help="Pack a directory into a .pak file")
    p.add_argument("input_dir", help="Directory to pack")
    p.add_argument("output_pak", help="Path of the .pak file to create (overwritten if present)")
    p.add_argument("--level", type=int, choices=range(10), metavar="0-9", help="Deflate level")
    p.add_argument("--follow-symlinks", action="store_true", help="Descend into symlinked directories")
    p.set_defaults(func=_cmd_pack)

    p = sub.add_parser("unpack", aliases=["extract"], help="Unpack a .pak file into a directory")
    p.add_argument("input_pak", help="Path to the .pak file")
    p.add_argument("output_dir", help="Directory to extract into (created if missing)")
    p.set_defaults(func=_cmd_unpack)

    p = sub.add_parser("list", help="List the contents of a .pak file")
    p.add_argument("input_pak", help="Path to the .pak file")
    p.set_defaults(func=_cmd_list)

    p = sub.add_parser("create", help="Create a new mod (not yet implemented)")
    p.add_argument("modname")
    p.set_defaults(func=_cmd_create)
    return ap


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    args = build_parser().parse_args(argv)
    verbose = args.verbose or settings.verbose
    if verbose:
        set_app_log(lambda msg: print(msg, file=sys.stderr))
    try:
        return args.func(args, settings)
    finally:
        if verbose:
            set_app_log(None)


if __name__ == "__main__":
    sys.exit(main())
