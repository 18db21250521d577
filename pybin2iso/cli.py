from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import Bin2IsoConfig, default_config_path
from .converter import SectorConverter, convert_file
from .errors import ConversionError
from .io import open_source


def _log_cb(level: str, msg: str) -> None:
    print(f"[{level}] {msg}", file=sys.stderr)


def derive_iso_path(src: str) -> str:
    """image.bin -> image.iso; any other name gets .iso appended."""
    if len(src) > 4 and src.endswith(".bin"):
        return src[:-4] + ".iso"
    return src + ".iso"


def _load_config(args: argparse.Namespace) -> Bin2IsoConfig:
    path = Path(args.config) if args.config else default_config_path()
    return Bin2IsoConfig.load(path)


def _cmd_convert(args: argparse.Namespace) -> int:
    cfg = _load_config(args)
    dst = args.destination or derive_iso_path(args.source)
    result = convert_file(
        Path(args.source),
        Path(dst),
        strict_alignment=cfg.strict_alignment if args.strict is None else args.strict,
        check_modes=cfg.check_modes if args.mode_check is None else args.mode_check,
        overwrite=cfg.overwrite if args.clobber is None else args.clobber,
        log_cb=_log_cb,
        log_interval_s=cfg.log_interval_s,
    )
    print(f"{args.source} -> {dst}: {result.sectors_written} sectors ({result.layout.label})")
    return 0


def _cmd_info(args: argparse.Namespace) -> int:
    with open_source(args.source) as src:
        layout, geometry = SectorConverter().probe(src.stream, src.size())
    print(f"layout={layout.label} header={layout.header_size} sector={layout.sector_size}")
    print(f"sectors={geometry.sector_count} tail={geometry.tail_bytes} iso_size={geometry.payload_size}")
    return 0


def _cmd_verify(args: argparse.Namespace) -> int:
    from .tskimg import BinImg, list_root

    if args.iso:
        import pytsk3

        for name in list_root(pytsk3.Img_Info(args.source)):
            print(name)
        return 0

    with open_source(args.source) as src:
        layout, geometry = SectorConverter().probe(src.stream, src.size())
        for name in list_root(BinImg(src.stream, layout, geometry, url=src.path)):
            print(name)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pybin2iso", add_help=True)
    p.add_argument("--config", default=None, help="INI file (default: ./pybin2iso.ini)")
    sub = p.add_subparsers(dest="cmd", required=True)

    conv = sub.add_parser("convert", help="Convert a BIN image to ISO")
    conv.add_argument("source", help="image.bin (2352 or 2336 bytes/sector)")
    conv.add_argument("destination", nargs="?", default=None, help="image.iso (default: derived from source)")
    # Unset flags (None) fall back to the config file.
    conv.add_argument(
        "--strict", action=argparse.BooleanOptionalAction, default=None,
        help="Fail if the image ends in a partial sector",
    )
    conv.add_argument(
        "--clobber", action=argparse.BooleanOptionalAction, default=None,
        help="Overwrite an existing destination",
    )
    conv.add_argument(
        "--mode-check", action=argparse.BooleanOptionalAction, default=None,
        help="Check each sector's mode byte against the first sector",
    )
    conv.set_defaults(func=_cmd_convert)

    info = sub.add_parser("info", help="Show detected layout and geometry")
    info.add_argument("source")
    info.set_defaults(func=_cmd_info)

    verify = sub.add_parser("verify", help="List the root directory of the image filesystem (needs pytsk3)")
    verify.add_argument("source")
    verify.add_argument("--iso", action="store_true", help="Source is already a 2048-byte ISO")
    verify.set_defaults(func=_cmd_verify)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args))
    except (ConversionError, OSError, ValueError) as e:
        _log_cb("ERROR", str(e))
        return 1
