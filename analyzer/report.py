"""
Display boundary: rows, tables and the JSON analysis report.

Everything here only reads the tokens, diagnostics, symbol table and tree an
analysis produced; nothing is recomputed.
"""
from datetime import datetime

from analyzer.errors import format_diagnostic
from analyzer.tree import to_dict


def token_rows(tokens):
    """``(lexeme, kind-name, line, column)`` per token, in stream order."""
    return [token.display() for token in tokens]


def symbol_rows(symbol_table):
    """``(ID, identifier, dataType, value)`` ascending by ID."""
    return symbol_table.rows()


def diagnostic_lines(diagnostics, source_code=None):
    return [format_diagnostic(diagnostic, source_code) for diagnostic in diagnostics]


def _printable(value):
    return str(value).replace("\n", "\\n")


def format_table(headers, rows):
    """Box-drawn table sized to its widest cell per column."""
    cells = [[_printable(value) for value in row] for row in rows]
    widths = [len(header) for header in headers]
    for row in cells:
        for i, value in enumerate(row):
            widths[i] = max(widths[i], len(value))

    def line(left, middle, right):
        return left + middle.join("─" * (width + 2) for width in widths) + right

    def row_text(values):
        return "│" + "│".join(f" {value.ljust(width)} " for value, width in zip(values, widths)) + "│"

    out = [line("┌", "┬", "┐"), row_text(list(headers)), line("├", "┼", "┤")]
    out.extend(row_text(row) for row in cells)
    out.append(line("└", "┴", "┘"))
    return "\n".join(out)


def format_token_table(tokens):
    return format_table(("Lexeme", "Kind", "Line", "Column"), token_rows(tokens))


def format_symbol_table(symbol_table):
    return format_table(("ID", "Identifier", "Data Type", "Value"), symbol_rows(symbol_table))


def build_report(result, filename):
    """JSON-serialisable summary of one analysis run."""
    return {
        "filename": filename,
        "timestamp": datetime.now().isoformat(),
        "status": result.status_message(),
        "tokens": [
            {"lexeme": lexeme, "kind": kind, "line": line, "column": column}
            for lexeme, kind, line, column in token_rows(result.tokens)
        ],
        "lexical_errors": [error.model_dump() for error in result.lexical_errors],
        "syntax_errors": [error.model_dump() for error in result.syntax_errors],
        "symbols": [
            {"id": id_, "identifier": name, "data_type": data_type, "value": value}
            for id_, name, data_type, value in symbol_rows(result.symbol_table)
        ],
        "tree": to_dict(result.tree) if result.tree_displayable else None,
    }
