"""
monk CLI Entrypoint.

This module provides the command-line interface for parsing monk source code.

Features:
    - Read source from `.monk` files or inline strings.
    - Lex and parse the source, then print the canonical rendering, the AST as JSON,
      or the raw token stream.
    - Output to console or file.
    - Report parser diagnostics on stderr and exit non-zero when there are any.
    - Launch an interactive REPL.

Example usage:
    monk hello.monk
    monk -s "let x = 5;" --json
    monk hello.monk -o hello.ast.json -j
    monk --repl

Functions:
    run_monk(source: str, is_string: bool = False, ...) -> list[str]:
        Executes the pipeline (read → lex → parse → render → output) and returns
        the parser diagnostics.

    main() -> None:
        Parses CLI arguments and invokes the appropriate action (REPL or parse).
"""

import argparse
import json
import logging
import sys

from monk.monk_ast import Program
from monk.monk_lexer import CharacterStream, Lexer, tokenize
from monk.monk_parser import DEFAULT_MAX_DEPTH, Parser

logger = logging.getLogger(__name__)

# deeper caps let nested function literals exhaust the interpreter stack
MAX_DEPTH_LIMIT = 150


def render_tokens(source: str) -> str:
    return "\n".join(
        f"{tok.line}:{tok.col}\t{tok.type}\t{tok.value!r}" for tok in tokenize(source)
    )


def render_json(program: Program) -> str:
    """Indented JSON for `program`; ValueError when it nests too deeply for `json`."""
    try:
        return json.dumps(program.to_dict(), indent=2)
    except RecursionError as e:
        raise ValueError("program nests too deeply to serialise as JSON") from e


def max_depth_arg(value: str) -> int:
    """argparse type for `--max-depth`: an int within 1..MAX_DEPTH_LIMIT."""
    depth = int(value)
    if not 1 <= depth <= MAX_DEPTH_LIMIT:
        raise argparse.ArgumentTypeError(
            f"must be between 1 and {MAX_DEPTH_LIMIT}, got {depth}"
        )
    return depth


def run_monk(
    source: str,
    is_string: bool = False,
    json_output: bool = False,
    tokens: bool = False,
    out: str | None = None,
    pretty: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[str]:
    """
    Run the monk front end: read, lex, parse, and print or write the result.

    Args:
        source (str): The monk source code or path to a `.monk` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        json_output (bool): Emit the AST as indented JSON instead of canonical source.
        tokens (bool): Emit the token stream instead of parsing.
        out (str | None): Optional path to write the output to. If None, prints to stdout.
        pretty (bool): If True, prints banners around the output.
        max_depth (int): Nesting cap passed to the parser.

    Returns:
        list[str]: Parser diagnostics, empty when the parse succeeded.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.monk'.
            Also raised when the AST is too deep to serialise as JSON.
    """
    if not is_string and not source.endswith(".monk"):
        raise ValueError("Only .monk files are supported.")
    # 1. Read source
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    errors: list[str] = []
    if tokens:
        # 2a. Token dump only
        title = "Tokens"
        text = render_tokens(source)
    else:
        # 2b. Lex + parse
        parser = Parser(Lexer(CharacterStream(source)), max_depth=max_depth)
        program = parser.parse_program()
        errors = parser.errors
        if json_output:
            title = "AST"
            text = render_json(program)
        else:
            title = "Program"
            text = str(program)

    # 3. Report diagnostics
    for err in errors:
        print(f"parser error: {err}", file=sys.stderr)
    if errors:
        logger.info("%d parser error(s)", len(errors))

    # 4. Output result
    if pretty:
        banner = "=" * 20
        print(f"{banner}\n{title}\n{banner}\n{text}\n{banner}\n")
    elif not out:
        print(text)

    # 5. Optional write to file
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        if pretty:
            print(f"(wrote to {out})")

    return errors


def main() -> None:
    """
    Entry point for the monk CLI.

    - Launches the REPL if no arguments are passed or `--repl` is specified.
    - Otherwise parses the given file or string and exits with status 1 when the
      parser reported any diagnostics.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `-j`, `--json`: Print the AST as JSON.
        - `-t`, `--tokens`: Print the token stream instead of the AST.
        - `-o`, `--out`: Write output to a file.
        - `-p`, `--pretty`: Show banners around output sections.
        - `--max-depth`: Maximum expression nesting depth, 1..MAX_DEPTH_LIMIT.
        - `--repl`: Launch the interactive REPL.
        - `--verbose`: Enable debug logging.
    """
    if len(sys.argv) == 1:
        # No args passed: open REPL instead
        from monk.monk_repl import start_repl

        start_repl()
        return
    parser = argparse.ArgumentParser(prog="monk")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-j", "--json", dest="json_output", action="store_true", help="Print AST as JSON"
    )
    parser.add_argument(
        "-t", "--tokens", action="store_true", help="Print the token stream and stop"
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "-p", "--pretty", action="store_true", help="Show output with banners"
    )
    parser.add_argument(
        "--max-depth",
        type=max_depth_arg,
        default=DEFAULT_MAX_DEPTH,
        help=(
            f"Maximum expression nesting depth, 1..{MAX_DEPTH_LIMIT} "
            f"(default: {DEFAULT_MAX_DEPTH})"
        ),
    )
    parser.add_argument(
        "--repl", action="store_true", help="Launch interactive REPL instead of parsing"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s - %(levelname)s - %(message)s",
    )

    if args.repl or args.source is None:
        from monk.monk_repl import start_repl

        start_repl(max_depth=args.max_depth)
        return

    try:
        errors = run_monk(
            source=args.source,
            is_string=args.string,
            json_output=args.json_output,
            tokens=args.tokens,
            out=args.out,
            pretty=args.pretty,
            max_depth=args.max_depth,
        )
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)
    if errors:
        sys.exit(1)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
