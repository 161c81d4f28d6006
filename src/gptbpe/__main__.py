"""Command line entry point: ``python -m gptbpe encode|decode``."""

import argparse
import logging
import sys

from .errors import GptBpeError
from .factory import from_pretrained


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gptbpe", description="Encode text to GPT-2 token ids and back."
    )
    parser.add_argument(
        "--model",
        type=str,
        default="gpt2",
        help="Pretrained name or directory with encoder.json and vocab.bpe (default: gpt2).",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encode", help="Print token ids for TEXT (stdin when omitted).")
    enc.add_argument("text", nargs="?", default=None)

    dec = sub.add_parser("decode", help="Print the text for the given token ids.")
    dec.add_argument("tokens", nargs="+", type=int)
    dec.add_argument(
        "--strict",
        action="store_true",
        help="Fail on invalid UTF-8 instead of inserting U+FFFD.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level, format="%(levelname)s %(name)s: %(message)s"
    )

    try:
        tokenizer = from_pretrained(args.model)
        if args.command == "encode":
            text = args.text if args.text is not None else sys.stdin.read()
            print(" ".join(str(tok) for tok in tokenizer.encode(text)))
        else:
            errors = "strict" if args.strict else "replace"
            print(tokenizer.decode(args.tokens, errors=errors))
    except GptBpeError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
