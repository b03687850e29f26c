"""
Interactive read-parse-print loop for monk.

Each entry is lexed and parsed by a fresh parser, then echoed back in canonical
(fully parenthesised) form, as JSON, or as a token listing. Entries whose braces are
unbalanced continue on the next line.

Commands:
    exit, quit   leave the REPL
    :json        toggle JSON output of the AST
    :tokens      toggle token listing instead of parsing
"""

from monk.monk_cli import render_json, render_tokens
from monk.monk_lexer import CharacterStream, Lexer
from monk.monk_parser import DEFAULT_MAX_DEPTH, Parser

PROMPT = ">> "
CONTINUATION_PROMPT = ".. "


def read_entry() -> str | None:
    """Read one entry, joining lines until braces balance. Returns None on exit."""
    src_lines: list[str] = []
    brace_count = 0
    while True:
        line = input(PROMPT if not src_lines else CONTINUATION_PROMPT)
        if line.strip() in ("exit", "quit") and not src_lines:
            return None
        src_lines.append(line)
        brace_count += line.count("{") - line.count("}")
        if brace_count <= 0:
            return "\n".join(src_lines).strip()


def print_parser_errors(errors: list[str]) -> None:
    print("[error] >>> parser errors:")
    for err in errors:
        print(f"\t{err}")


def eval_entry(src: str, json_output: bool = False, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
    parser = Parser(Lexer(CharacterStream(src)), max_depth=max_depth)
    program = parser.parse_program()
    if parser.errors:
        print_parser_errors(parser.errors)
        return
    if json_output:
        try:
            print(render_json(program))
        except ValueError as e:
            print(f"[error] >>> {e}")
    else:
        print(program)


def start_repl(max_depth: int = DEFAULT_MAX_DEPTH) -> None:
    print("monk REPL. Type 'exit' or 'quit' to leave.")
    json_output = False
    show_tokens = False

    while True:
        try:
            src = read_entry()
        except (EOFError, KeyboardInterrupt):
            print()
            src = None
        if src is None:
            print("Exiting monk REPL.")
            return
        if not src or src.startswith("#"):
            continue
        if src == ":json":
            json_output = not json_output
            print(f"[mode] >>> JSON output {'ON' if json_output else 'OFF'}")
            continue
        if src == ":tokens":
            show_tokens = not show_tokens
            print(f"[mode] >>> Token listing {'ON' if show_tokens else 'OFF'}")
            continue

        if show_tokens:
            print(render_tokens(src))
        else:
            eval_entry(src, json_output=json_output, max_depth=max_depth)
