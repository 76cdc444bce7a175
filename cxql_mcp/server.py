"""CXQL MCP Server — exposes CXQL parser tools via MCP protocol."""

import os

from mcp.server.fastmcp import FastMCP

from cxql.ast_nodes import to_sexp
from cxql.config import get_config, parser_options
from cxql.errors import CxqlError
from cxql.formatter import Formatter
from cxql.parser import parse, ParseResult

mcp = FastMCP("cxql")


def _load(filepath: str) -> str:
    with open(filepath, encoding="utf-8") as f:
        return f.read()


def _diagnostics(filepath: str, result: ParseResult) -> str:
    return "\n".join(f"{filepath}:{err.line}:{err.column}: {err.message}" for err in result.errors)


@mcp.tool()
def cxql_write(filepath: str, source: str) -> str:
    """Write CXQL source code to a file. Use this to create new .cxql programs.

    Args:
        filepath: Path to the .cxql file to create (e.g. "pipeline.cxql")
        source: The CXQL source code to write
    """
    return write_cxql_file(filepath, source)


def write_cxql_file(filepath: str, source: str) -> str:
    """Core logic for writing a cxql file — testable without MCP."""
    if not filepath.endswith(".cxql"):
        return "Error: filepath must end with .cxql"
    try:
        os.makedirs(os.path.dirname(filepath) if os.path.dirname(filepath) else ".", exist_ok=True)
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(source)
        return f"Saved: {filepath}"
    except OSError as e:
        return f"Error writing file: {e}"


@mcp.tool()
def cxql_check(filepath: str) -> str:
    """Check CXQL syntax. Lists every syntax error, or reports OK.

    Args:
        filepath: Path to the .cxql file to check
    """
    return check_cxql_file(filepath)


def check_cxql_file(filepath: str) -> str:
    """Core logic for checking a cxql file — testable without MCP."""
    try:
        source = _load(filepath)
    except FileNotFoundError:
        return f"Error: file not found: {filepath}"
    except OSError as e:
        return f"Error reading file: {e}"

    try:
        result = parse(source, parser_options())
    except CxqlError as e:
        return f"Error: {e.message}"
    if result.ok:
        return f"OK: {filepath}"
    return _diagnostics(filepath, result)


@mcp.tool()
def cxql_parse(filepath: str) -> str:
    """Parse a CXQL file and return its syntax tree as an S-expression.

    Syntax errors, if any, are appended after the tree.

    Args:
        filepath: Path to the .cxql file to parse
    """
    return parse_cxql_file(filepath)


def parse_cxql_file(filepath: str) -> str:
    """Core logic for parsing a cxql file — testable without MCP."""
    try:
        source = _load(filepath)
    except FileNotFoundError:
        return f"Error: file not found: {filepath}"
    except OSError as e:
        return f"Error reading file: {e}"

    try:
        result = parse(source, parser_options())
    except CxqlError as e:
        return f"Error: {e.message}"
    output = to_sexp(result.tree)
    if not result.ok:
        output += "\n\n" + _diagnostics(filepath, result)
    return output


@mcp.tool()
def cxql_format(filepath: str) -> str:
    """Return the canonically formatted source of a CXQL file.

    Args:
        filepath: Path to the .cxql file to format
    """
    return format_cxql_file(filepath)


def format_cxql_file(filepath: str) -> str:
    """Core logic for formatting a cxql file — testable without MCP."""
    try:
        source = _load(filepath)
    except FileNotFoundError:
        return f"Error: file not found: {filepath}"
    except OSError as e:
        return f"Error reading file: {e}"

    try:
        config = get_config()
        result = parse(source, parser_options(config))
        if not result.ok:
            return _diagnostics(filepath, result)
        return Formatter(result.tree, config["formatter"]["indent"]).format()
    except CxqlError as e:
        return f"Error: {e.message}"


CXQL_LANGUAGE_GUIDE = """\
# Writing CXQL Programs

CXQL describes data-pipeline and API-integration steps. It is syntax only:
these tools check, parse and format programs, they do not run them.
Use cxql_write to create .cxql files, then cxql_check to validate them.

## Statements
```
let limit = 50                      # bind a name
connect(postgres(url), as="db")     # register a connection
with db {                           # scope a block to a connection
  let rows = query("select 1")
  rows
}
```

## Literals
```
42  3.5  1e-3  "text"  'text'  true  false  null  $env_var
[1, 2, 3,]                          # trailing commas are fine
{name: "Ada", "full name": "Ada L"} # records: identifier or string keys
$"Total: {items | sum()}"           # f-strings take any expression
```

## Pipelines and functions
```
fetch(url) | parse() | filter(x => x.active)
request(url, method="POST", params { limit: 10 }, where: Filter { active: true })
```
Labeled blocks (`where`, `with`, `set`, `using`, `params`) always take a record.

## Operators (tightest first)
`.`  call  unary `-`  `* / %`  `+ - |`  `< > <= >=`  `== !=`  `not`  `and`  `or`  `=>`

## Control flow
```
if { score > 90 } { "excellent" } else { "keep going" }
```
Conditions and branches are always blocks; an empty `{}` there is an empty block,
anywhere else it is an empty record.

## Important Rules
1. Comments start with #
2. Identifiers may contain '-': write `a - b` with spaces for subtraction
3. let, connect, if, else, with, as are reserved
4. Files must end with .cxql
"""


@mcp.prompt()
def cxql_guide() -> str:
    """Complete guide to writing CXQL programs. Use this when writing .cxql files."""
    return CXQL_LANGUAGE_GUIDE


if __name__ == "__main__":
    mcp.run(transport="stdio")
