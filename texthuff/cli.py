# filename: cli.py

import argparse
import logging
import sys

from .errors import HuffmanError
from .huffman_service import HuffmanService

logger = logging.getLogger(__name__)

LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def build_parser():
    parser = argparse.ArgumentParser(prog="texthuff", description="Huffman-code a text file, or restore one.")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="log progress; repeat for debug output")
    commands = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (("encode", "compress a UTF-8 text file"),
                            ("decode", "restore a text file compressed by 'encode'")):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("input", help="file to read")
        command.add_argument("output", help="file to create or overwrite")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    level = LOG_LEVELS[min(args.verbose, len(LOG_LEVELS) - 1)]
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    service = HuffmanService()
    try:
        if args.command == "encode":
            service.compress_file(args.input, args.output)
        else:
            service.decompress_file(args.input, args.output)
    except (HuffmanError, OSError) as e:
        logger.error("%s %s failed: %s", args.command, args.input, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
