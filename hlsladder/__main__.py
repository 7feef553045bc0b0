"""
Command line entry point.

    hlsladder encode [options] <input> <output_dir>
    hlsladder serve <output_dir>
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import HLSLadderConfig, load_config, set_config
from .exceptions import HLSLadderError
from .logging_config import setup_logging

logger = logging.getLogger("hlsladder")

EPILOG = """\
Examples:
  hlsladder encode input/video.mp4 output/my-video
  hlsladder encode -t -S --thumb-interval 8 input.mp4 out_dir
  HLSLADDER_THUMBNAILS__ENABLED=1 hlsladder encode input.mp4 out_dir
  hlsladder serve out_dir --port 8766
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hlsladder",
        description="Package a video as an adaptive bitrate HLS ladder",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR")
    sub = parser.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encode", help="Encode a source into an HLS ladder")
    enc.add_argument("input")
    enc.add_argument("output_dir")
    enc.add_argument("-s", "--seg", type=int, help="HLS segment duration in seconds")
    enc.add_argument("-p", "--parallel", type=int, help="Parallel renditions")
    enc.add_argument("-l", "--ladder", help="File with lines: WxH:vbit:buf:maxrate:audio_kbps")

    thumbs = enc.add_argument_group("thumbnails")
    thumbs.add_argument("-t", "--thumbs", action="store_true", help="Enable thumbnail generation")
    thumbs.add_argument("-S", "--sprites", action="store_true", help="Use sprite sheets (implies --thumbs)")
    thumbs.add_argument("--thumb-interval", type=int, help="Seconds between thumbs")
    thumbs.add_argument("--thumb-width", type=int, help="Width per thumb")
    thumbs.add_argument("--thumb-fmt", choices=["webp", "jpg", "png"], help="Thumbnail image format")
    thumbs.add_argument("--sprite-cols", type=int, help="Columns per sprite")
    thumbs.add_argument("--sprite-rows", type=int, help="Rows per sprite")

    srv = sub.add_parser("serve", help="Serve a packaged directory for preview")
    srv.add_argument("output_dir")
    srv.add_argument("--host")
    srv.add_argument("--port", type=int)

    return parser


def apply_overrides(config: HLSLadderConfig, args: argparse.Namespace) -> HLSLadderConfig:
    """Return a copy of config with command line flags applied."""
    data = config.model_dump()
    tc, th, srv = data["transcoding"], data["thumbnails"], data["server"]

    if args.log_level:
        data["logging"]["level"] = args.log_level

    if args.command == "encode":
        for key, value in (
            ("segment_duration", args.seg),
            ("parallel", args.parallel),
            ("ladder_file", args.ladder),
        ):
            if value is not None:
                tc[key] = value

        if args.thumbs or args.sprites:
            th["enabled"] = True
        if args.sprites:
            th["sprites"] = True
        for key, value in (
            ("interval", args.thumb_interval),
            ("width", args.thumb_width),
            ("format", args.thumb_fmt),
            ("sprite_cols", args.sprite_cols),
            ("sprite_rows", args.sprite_rows),
        ):
            if value is not None:
                th[key] = value

    elif args.command == "serve":
        if args.host:
            srv["host"] = args.host
        if args.port:
            srv["port"] = args.port

    return HLSLadderConfig.model_validate(data)


def run_encode(config: HLSLadderConfig, args: argparse.Namespace) -> int:
    from .transcoding import PackagingEngine

    engine = PackagingEngine(config)
    result = asyncio.run(engine.package(args.input, args.output_dir))

    if result.thumbnails is not None and result.thumbnails.skipped:
        logger.warning(f"Thumbnails skipped: {result.thumbnails.reason}")
    print(f"Encoded HLS -> {result.output_dir} ({len(result.manifest.entries)} rung(s))")
    return 0


def run_serve(config: HLSLadderConfig, args: argparse.Namespace) -> int:
    import uvicorn

    from .api import create_app

    uvicorn.run(
        create_app(args.output_dir),
        host=config.server.host,
        port=config.server.port,
        log_config=None,
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = apply_overrides(load_config(args.config), args)
    except ValueError as e:
        # pydantic.ValidationError is a ValueError
        parser.error(str(e))

    set_config(config)
    setup_logging(config.logging)

    try:
        if args.command == "encode":
            return run_encode(config, args)
        return run_serve(config, args)
    except HLSLadderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
