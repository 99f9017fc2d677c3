from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from ssrnbib.bibtex_build import render_report
from ssrnbib.exceptions import FILE_WRITE_ERRORS, NETWORK_ERRORS, InvalidIdentifierError
from ssrnbib.id_utils import normalize_identifier
from ssrnbib.io_utils import write_bibtex_file
from ssrnbib.log_utils import logger, LogCategory
from ssrnbib.pipeline import get_ssrn_entry


USAGE_EXAMPLES = (
    "Usage:\n"
    "ssrnbib 3846655\n"
    "ssrnbib https://papers.ssrn.com/sol3/papers.cfm?abstract_id=3846655\n"
)
MSG_BAD_INPUT = "Check your inputs, give it some time, or use the URL instead."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ssrnbib",
        description="Build a BibTeX entry for an SSRN paper. Please add the SSRN # or url string.",
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("identifier", help="SSRN abstract number or full abstract page URL")
    parser.add_argument("--save", metavar="DIR", default=None,
                        help="also write the entry to DIR/<key>.bib")
    parser.add_argument("--log-file", metavar="PATH", default=None,
                        help="mirror log messages to PATH")
    parser.add_argument("--quiet", action="store_true",
                        help="only show warnings and errors on the console")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Look up one SSRN paper and print its author roster and BibTeX entry.

    Returns 0 on success, 2 when the input is neither a number nor a URL, and
    1 when the page could not be fetched or the entry could not be saved.
    """
    args = build_parser().parse_args(argv)
    if args.quiet:
        logger.set_level(logging.WARNING)
    if args.log_file:
        logger.set_log_file(args.log_file)
    logger.step(f"Looking up {args.identifier}", category=LogCategory.PLAN)
    try:
        return _run(args)
    finally:
        logger.close()


def _run(args: argparse.Namespace) -> int:
    try:
        identifier = normalize_identifier(args.identifier)
    except InvalidIdentifierError as e:
        logger.error(str(e), category=LogCategory.ERROR)
        print(MSG_BAD_INPUT)
        return 2

    try:
        entry = get_ssrn_entry(identifier)
    except NETWORK_ERRORS as e:
        logger.error(f"Giving up on {args.identifier}: {e}", category=LogCategory.ERROR)
        print(MSG_BAD_INPUT)
        return 1

    print(render_report(entry))

    if args.save:
        try:
            write_bibtex_file(entry, args.save)
        except FILE_WRITE_ERRORS as e:
            logger.error(f"Cannot write to '{args.save}': {e}", category=LogCategory.ERROR)
            return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
