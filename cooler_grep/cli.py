import argparse
import logging
import sys

from .ast_tracer import ASTTracer, persist_ast, visualize_ast
from .compiler import PatternError, compile
from .matcher import search

logger = logging.getLogger(__name__)

# Usage: echo <input_text> | cooler-grep -E <pattern>
# Exit status: 0 on match, 1 on no match, 2 on a bad pattern or bad arguments.


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cooler-grep",
        description="Match one line from stdin against a restricted regex.",
    )
    parser.add_argument(
        "-E",
        dest="pattern",
        metavar="PATTERN",
        required=True,
        help="Pattern to match against the input line",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log the compiled pattern and the match outcome",
    )
    parser.add_argument(
        "--dump-ast",
        metavar="FILE",
        help="Write the compiled pattern as JSON before matching",
    )
    parser.add_argument(
        "--render-ast",
        metavar="PATH",
        help="Render the compiled pattern with graphviz before matching",
    )
    parser.add_argument(
        "--format",
        choices=["png", "svg", "pdf"],
        default="png",
        help="Output format for --render-ast",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Print every node the matcher visits to stderr",
    )
    return parser


def _read_line(stream) -> str:
    line = stream.readline()
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # basicConfig is a no-op once the root logger has handlers, so the
    # package logger carries the level itself
    logging.getLogger(__package__).setLevel(level)

    try:
        nodes = compile(args.pattern)
    except PatternError as exc:
        print(f"cooler-grep: {exc}", file=sys.stderr)
        return 2

    if args.dump_ast:
        persist_ast(nodes, args.dump_ast)
        logger.debug("wrote AST to %s", args.dump_ast)
    if args.render_ast:
        rendered = visualize_ast(nodes, output_path=args.render_ast, format=args.format)
        logger.debug("rendered AST to %s", rendered)

    tracer = ASTTracer() if args.trace else None
    line = _read_line(sys.stdin)
    span = search(nodes, line, tracer=tracer)

    if tracer is not None:
        for event in tracer.get_trace():
            print(event, file=sys.stderr)

    if span is None:
        logger.debug("no match for %r in %r", args.pattern, line)
        return 1
    logger.debug("matched %r at %d..%d", line[span[0]:span[1]], span[0], span[1])
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
