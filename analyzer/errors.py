"""
Error handling for the analyzer.

Two kinds of problems are reported:

- Diagnostics (LexicalError, ParseError) are non-fatal records collected in
  append-only lists while scanning and parsing continue.
- Exceptions (AnalyzerError, EvaluationError and subclasses) are raised for
  front-end failures and for constant-expression evaluation; the folder turns
  the latter back into lexical diagnostics.
"""
import re
from typing import ClassVar

from pydantic import BaseModel


class Diagnostic(BaseModel):
    """A message anchored at a 1-based line and column."""
    message: str
    line: int
    column: int

    channel: ClassVar[str] = "Diagnostic"

    def __str__(self):
        return f"[Line {self.line}:{self.column}] {self.channel}: {self.message}"


class LexicalError(Diagnostic):
    """Problem found while scanning characters or folding constants."""
    channel: ClassVar[str] = "Lexical Error"


class ParseError(Diagnostic):
    """Problem found by the recursive-descent parser."""
    channel: ClassVar[str] = "Syntax Error"


class AnalyzerError(Exception):
    """Fatal front-end error with an optional line number, context and hint."""
    def __init__(self, message, line_number=None, column=None, context=None, suggestion=None):
        self.message = message
        self.line_number = line_number
        self.column = column
        self.context = context  # The offending line
        self.suggestion = suggestion  # How to fix it
        super().__init__(self._format_error())

    def _format_error(self):
        """Format the error message with context and suggestion."""
        lines = ["\n❌ Analysis Error"]
        if self.line_number:
            lines.append(f" at line {self.line_number}")
            if self.column:
                lines.append(f", column {self.column}")
        lines.append(":\n")

        lines.append(f"   {self.message}\n")

        if self.context:
            lines.append(f"   > {self.context}\n")

        if self.suggestion:
            lines.append(f"   💡 {self.suggestion}\n")

        return "".join(lines)


class EvaluationError(Exception):
    """Constant-expression evaluation failed for one assignment."""


class UndefinedIdentifierError(EvaluationError):
    pass


class UninitializedVariableError(EvaluationError):
    pass


class NonNumericOperandError(EvaluationError):
    pass


class DivisionByZeroError(EvaluationError):
    pass


class ModuloByZeroError(EvaluationError):
    pass


class MismatchedParenthesesError(EvaluationError):
    pass


class InvalidExpressionError(EvaluationError):
    pass


def get_line_context(source_code, line_number):
    """Extract the line of code from source by line number (1-based)."""
    if not source_code or line_number is None:
        return None
    source_lines = source_code.split('\n')
    if 0 < line_number <= len(source_lines):
        return source_lines[line_number - 1].strip()
    return None


_HINTS = [
    (r"leading zeros", "Drop the leading zeros, or write octal with a '0o' prefix"),
    (r"complex numbers", "Complex literals are not supported; use a float instead"),
    (r"underscore", "Underscores may only separate digits, one at a time"),
    (r"did you mean '=='", "Use '==' to compare values inside a condition"),
    (r"Expected indented block", "Indent the statement following the ':' header"),
    (r"Unterminated", "Close the literal with the same quote it was opened with"),
    (r"Invalid assignment operator", "Only '=', '+=', '-=' and '*=' are supported"),
    (r"Inconsistent indentation", "Dedent to a column used by an enclosing block"),
    (r"without matching 'if'", "Place the clause directly after an 'if' block"),
    (r"by zero", "The right-hand side divides by a constant zero"),
]


def suggest_fix(message):
    """Return a hint for a diagnostic message, or None when none applies."""
    for pattern, hint in _HINTS:
        if re.search(pattern, message):
            return hint
    return None


def format_diagnostic(diagnostic, source_code=None):
    """Render a diagnostic with its source line and hint, one item per line."""
    lines = [str(diagnostic)]
    context = get_line_context(source_code, diagnostic.line)
    if context:
        lines.append(f"   > {context}")
    hint = suggest_fix(diagnostic.message)
    if hint:
        lines.append(f"   💡 {hint}")
    return "\n".join(lines)
