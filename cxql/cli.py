"""CXQL CLI — cxql parse, cxql check, cxql fmt."""
import json
import logging
import os
import sys

from cxql.ast_nodes import to_dict, to_sexp
from cxql.config import get_config, parser_options
from cxql.errors import CxqlError
from cxql.formatter import Formatter
from cxql.parser import parse

COMMANDS = ("parse", "check", "fmt")
FLAGS = ("--json", "--verbose")


def _usage() -> None:
    print("Usage: cxql <command> [--json] [--verbose] <file.cxql> [...]", file=sys.stderr)
    print("Commands: parse, check, fmt", file=sys.stderr)


def _read_source(filepath: str) -> str | None:
    if not os.path.exists(filepath):
        print(f"Error: file not found: {filepath}", file=sys.stderr)
        return None
    with open(filepath, encoding="utf-8") as f:
        return f.read()


def _report(filepath: str, errors) -> None:
    for err in errors:
        print(f"{filepath}:{err.line}:{err.column}: {err.message}", file=sys.stderr)


def main():
    args = sys.argv[1:]
    flags = [a for a in args if a.startswith("--")]
    args = [a for a in args if not a.startswith("--")]

    if not args:
        _usage()
        sys.exit(1)

    for flag in flags:
        if flag not in FLAGS:
            print(f"Unknown option: {flag}", file=sys.stderr)
            sys.exit(1)

    if "--verbose" in flags:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    command, files = args[0], args[1:]
    if command not in COMMANDS:
        print(f"Unknown command: {command}", file=sys.stderr)
        sys.exit(1)

    if not files or (command != "check" and len(files) > 1):
        print(f"Usage: cxql {command} <file.cxql>{' [...]' if command == 'check' else ''}", file=sys.stderr)
        sys.exit(1)

    try:
        config = get_config()
        options = parser_options(config)
    except CxqlError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)

    failed = False
    for filepath in files:
        source = _read_source(filepath)
        if source is None:
            failed = True
            continue

        result = parse(source, options)

        if command == "check":
            if result.ok:
                print(f"OK: {filepath}")
            else:
                _report(filepath, result.errors)
                failed = True

        elif command == "parse":
            if "--json" in flags or config["cli"]["output"] == "json":
                print(json.dumps(to_dict(result.tree), indent=2))
            else:
                print(to_sexp(result.tree))
            _report(filepath, result.errors)
            failed = failed or not result.ok

        elif command == "fmt":
            if not result.ok:
                _report(filepath, result.errors)
                sys.exit(1)
            try:
                print(Formatter(result.tree, config["formatter"]["indent"]).format(), end="")
            except CxqlError as e:
                print(f"Error: {e}", file=sys.stderr)
                sys.exit(1)

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
