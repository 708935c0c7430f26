"""
CLI entry point — read and edit documents of a file store by semantic path.
"""

import argparse
import asyncio
import json
import sys

from .api import create_engine
from .config import Config
from .errors import DocError
from .logging_utils import setup_logger
from .store import FileStore
from .types import INTROSPECT_PATH, Edit, EditOp, Selector, as_path


def _parse_range(value: str) -> tuple[int, int]:
    start, sep, end = value.partition(":")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected START:END, got {value!r}")
    try:
        return int(start), int(end)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected integer offsets, got {value!r}")


def _selector(args) -> Selector:
    return Selector(path=as_path(args.path), field=args.field, range=args.range)


def _add_selector_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path",
                        help="'/'-separated slug path ('*' for the index, '' for the root)")
    parser.add_argument("--field", default=None,
                        help="Fenced block language tag under PATH")
    parser.add_argument("--range", type=_parse_range, default=None,
                        help="Byte range fallback START:END")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doc-engine",
        description="Read and edit Markdown documents by semantic path")
    parser.add_argument("--config", default=None,
                        help="Path to .docengine.yaml config file")
    parser.add_argument("--store-dir", default=None,
                        help="Document directory (default: from config)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_index = sub.add_parser("index", help="Print the path index as JSON")
    p_index.add_argument("doc_id", help="Document id within the store")

    p_read = sub.add_parser("read", help="Print the slice addressed by PATH")
    p_read.add_argument("doc_id", help="Document id within the store")
    _add_selector_args(p_read)

    p_apply = sub.add_parser("apply", help="Apply an edit and print its envelope")
    p_apply.add_argument("doc_id", help="Document id within the store")
    p_apply.add_argument("op", choices=[op.value for op in EditOp])
    _add_selector_args(p_apply)
    p_apply.add_argument("--revision", required=True,
                         help="Revision the edit was computed against")
    p_apply.add_argument("--author", default="cli", help="Recorded in metrics and logs")
    text_group = p_apply.add_mutually_exclusive_group()
    text_group.add_argument("--text", default=None, help="Replacement/inserted text")
    text_group.add_argument("--text-file", default=None,
                            help="Read replacement/inserted text from a file")
    return parser


async def _run(engine, args) -> int:
    if args.command == "index":
        result = await engine.read(args.doc_id, Selector(path=INTROSPECT_PATH))
        print(result.text)
        print(f"revision: {result.revision}", file=sys.stderr)
        return 0

    if args.command == "read":
        result = await engine.read(args.doc_id, _selector(args))
        sys.stdout.write(result.text)
        if result.text and not result.text.endswith("\n"):
            sys.stdout.write("\n")
        print(f"revision: {result.revision}", file=sys.stderr)
        return 0

    text = args.text
    if args.text_file:
        with open(args.text_file, "r", encoding="utf-8") as f:
            text = f.read()
    edit = Edit(op=args.op, selector=_selector(args), text=text)
    envelope = await engine.apply(edit, args.doc_id, args.revision, author=args.author)
    print(json.dumps(envelope.to_dict(), indent=2, ensure_ascii=False))
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # ── 0. Load config ──
    cfg = Config.load(args.config)
    setup_logger(cfg.LOG_DIR, cfg.LOG_LEVEL)

    # The CLI always works against a directory of documents.
    store = FileStore(args.store_dir or cfg.STORE_DIR)
    engine = create_engine(cfg, store=store)

    try:
        return asyncio.run(_run(engine, args))
    except DocError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2 if exc.retryable else 1


if __name__ == "__main__":
    sys.exit(main())
