"""
Hand-written lexer for the Python subset.

A single left-to-right pass dispatches on the current character class and
appends tokens and lexical errors. Line starts run the indentation machine,
which keeps a stack of open block widths and emits INDENT/DEDENT tokens.
Identifiers are registered in the symbol table while scanning; once the
END_OF_FILE token is appended the constant folder infers assignment types.

Every run re-initialises all state, so one Lexer may be reused but never
shares anything with another instance.
"""
import string
from typing import List, Optional, Tuple

from analyzer.config import AnalyzerConfig
from analyzer.errors import LexicalError
from analyzer.folding import ConstantFolder
from analyzer.symbols import SymbolTable
from analyzer.tokens import Token, TokenType
from analyzer.trace import debug_log

EOF = "\0"

KEYWORDS = (
    "False", "None", "True", "and", "as", "assert", "async", "await",
    "break", "class", "continue", "def", "del", "elif", "else", "except",
    "finally", "for", "from", "global", "if", "import", "in", "is",
    "lambda", "nonlocal", "not", "or", "pass", "raise", "return",
    "try", "while", "with", "yield",
)

DIGITS = string.digits
IDENTIFIER_START = string.ascii_letters + "_"
IDENTIFIER_CHARS = string.ascii_letters + string.digits + "_"
WHITESPACE = " \r\t\v\f"
INLINE_SPACE = " \t\r\v\f"
OPERATOR_CHARS = "+-*/%=&|<>!^~."
DELIMITERS = ":,;()[]{}@"
INVALID_IDENTIFIER_STARTS = "@$`\\"
VALID_ESCAPES = "nt\\\"'"

TWO_CHAR_OPERATORS = {
    "==": TokenType.COMPARE_OPERATOR,
    "!=": TokenType.COMPARE_OPERATOR,
    "<=": TokenType.COMPARE_OPERATOR,
    ">=": TokenType.COMPARE_OPERATOR,
    "<<": TokenType.OPERATOR,
    ">>": TokenType.OPERATOR,
    "**": TokenType.POWER_OPERATOR,
    "+=": TokenType.ADD_ASSIGN,
    "-=": TokenType.SUB_ASSIGN,
    "*=": TokenType.MULTIPLY_ASSIGN,
}

ONE_CHAR_OPERATORS = {
    "=": TokenType.EQUAL_OPERATOR,
    "!": TokenType.NOT_OPERATOR,
    "<": TokenType.COMPARE_OPERATOR,
    ">": TokenType.COMPARE_OPERATOR,
    "+": TokenType.ADD_OPERATOR,
    "-": TokenType.MINUS_OPERATOR,
    "*": TokenType.MULTIPLY_OPERATOR,
    "/": TokenType.DIVIDE_OPERATOR,
    "%": TokenType.PERCENTAGE_OPERATOR,
    "&": TokenType.BITWISE_AND_OPERATOR,
    "|": TokenType.BITWISE_OR_OPERATOR,
    "^": TokenType.OPERATOR,
    ".": TokenType.OPERATOR,
}

# Compound assignments outside the supported subset.
REJECTED_ASSIGNMENTS = ("/=", "%=")

# prefix letter -> (name, digit set, token kind)
RADIXES = {
    "x": ("hexadecimal", string.hexdigits, TokenType.HEXADECIMAL_NUMBER),
    "b": ("binary", "01", TokenType.BINARY_NUMBER),
    "o": ("octal", string.octdigits, TokenType.OCTAL_NUMBER),
}


def _valid_underscores(text):
    """No trailing and no doubled underscores."""
    return not text.endswith("_") and "__" not in text


class Lexer:
    """Scans source text into tokens, lexical errors and a symbol table."""

    def __init__(self, source: str, config: Optional[AnalyzerConfig] = None):
        self.source = source
        self.config = config or AnalyzerConfig()
        self._keywords = {keyword.lower() for keyword in KEYWORDS}
        self._builtins = {name.lower() for name in self.config.builtin_functions}
        self._type_hints = {name.lower() for name in self.config.type_hints}
        self._reset()

    def _reset(self):
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []
        self.errors: List[LexicalError] = []
        self.symbol_table = SymbolTable()
        self.indent_stack: List[int] = [0]
        self._registered_builtins = set()

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------

    def _current(self):
        return self.source[self.pos] if self.pos < len(self.source) else EOF

    def _peek(self, offset=1):
        index = self.pos + offset
        return self.source[index] if index < len(self.source) else EOF

    def _advance(self):
        if self._current() == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1

    def _consume_while(self, charset):
        text = []
        while self._current() != EOF and self._current() in charset:
            text.append(self._current())
            self._advance()
        return "".join(text)

    def _mark(self):
        return self.pos, self.line, self.column

    def _rewind(self, mark):
        self.pos, self.line, self.column = mark

    def _add_token(self, lexeme, kind, line, column):
        self.tokens.append(Token(lexeme=lexeme, kind=kind, line=line, column=column))

    def _add_error(self, message, line=None, column=None):
        error = LexicalError(
            message=message,
            line=self.line if line is None else line,
            column=self.column if column is None else column,
        )
        debug_log(f"Lexical error: {error}")
        self.errors.append(error)

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def tokenize(self) -> Tuple[List[Token], List[LexicalError]]:
        """Scan the whole source, then fold constant assignments."""
        self._reset()
        self._handle_indentation()
        while self.pos < len(self.source):
            c = self._current()
            if c == "\n":
                self._add_token("\n", TokenType.NEWLINE, self.line, self.column)
                self._advance()
                self._handle_indentation()
            elif c in WHITESPACE:
                self._advance()
            elif c == "#":
                self._scan_comment()
            elif c in DIGITS:
                self._scan_number()
            elif c in "\"'":
                self._scan_string(c)
            elif c in IDENTIFIER_START:
                if not self._scan_type_annotation():
                    self._scan_identifier()
            elif c in INVALID_IDENTIFIER_STARTS:
                self._scan_invalid_identifier()
            elif c == ":" and self._peek() == "=":
                self._add_error("Invalid assignment operator: := "
                                "(only '=' is allowed for variable assignments)")
                self._advance()
                self._advance()
            elif c in OPERATOR_CHARS:
                self._scan_operator()
            elif c in DELIMITERS:
                self._add_token(c, TokenType.DELIMITER, self.line, self.column)
                self._advance()
            else:
                self._scan_unknown()

        self._add_token("", TokenType.END_OF_FILE, self.line, self.column)
        debug_log(f"Scanned {len(self.tokens)} tokens, {len(self.errors)} lexical error(s)")
        ConstantFolder(self.symbol_table).fold(self.tokens, self.errors)
        return self.tokens, self.errors

    # ------------------------------------------------------------------
    # Indentation
    # ------------------------------------------------------------------

    def _handle_indentation(self):
        """Measure the line's leading width and open or close blocks."""
        width = 0
        while self._current() in (" ", "\t"):
            width += self.config.tab_width if self._current() == "\t" else 1
            self._advance()

        c = self._current()
        if c == EOF:
            while len(self.indent_stack) > 1:
                self.indent_stack.pop()
                self._add_token("", TokenType.DEDENT, self.line, self.column)
            return
        if c in ("\n", "\r", "#"):
            # blank or comment-only line
            return

        if width > self.indent_stack[-1]:
            self.indent_stack.append(width)
            self._add_token("", TokenType.INDENT, self.line, self.column)
        elif width < self.indent_stack[-1]:
            while width < self.indent_stack[-1]:
                self.indent_stack.pop()
                self._add_token("", TokenType.DEDENT, self.line, self.column)
            if self.indent_stack[-1] != width:
                self._add_error("Inconsistent indentation level")

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def _scan_comment(self):
        line, column = self.line, self.column
        self._advance()  # '#'

        quote = self._current()
        if quote in ("\"", "'") and self._peek() == quote and self._peek(2) == quote:
            for _ in range(3):
                self._advance()
            text = []
            while True:
                if self._current() == EOF:
                    self._add_error("Unterminated multi-line comment (docstring)", line, column)
                    return
                if self._at_triple(quote):
                    for _ in range(3):
                        self._advance()
                    break
                text.append(self._current())
                self._advance()
            self._add_token("".join(text), TokenType.COMMENT, line, column)
            return

        text = []
        while self._current() not in ("\n", EOF):
            text.append(self._current())
            self._advance()
        self._add_token("".join(text), TokenType.COMMENT, line, column)

    def _at_triple(self, quote):
        return self._current() == quote and self._peek() == quote and self._peek(2) == quote

    # ------------------------------------------------------------------
    # Numerals
    # ------------------------------------------------------------------

    def _scan_number(self):
        line, column = self.line, self.column
        prefix = self._peek().lower()
        if self._current() == "0" and prefix in RADIXES:
            self._scan_radix_number(prefix, line, column)
        else:
            self._scan_decimal_number(line, column)

    def _scan_trailing(self, text):
        """Extend ``text`` with the identifier-character run at the cursor."""
        return text + self._consume_while(IDENTIFIER_CHARS)

    def _scan_radix_number(self, prefix, line, column):
        name, digits, kind = RADIXES[prefix]
        num = self._current() + self._peek()
        self._advance()
        self._advance()
        num += self._consume_while(digits + "_")

        body = num[2:]
        if not body.replace("_", ""):
            num = self._scan_trailing(num)
            self._add_error(f"Invalid {name} number: {num} "
                            f"(no {name} digits after 0{prefix})", line, column)
            return

        if not _valid_underscores(num):
            self._add_error(f"Invalid underscore placement in {name} number: {num}", line, column)
            return

        if kind == TokenType.OCTAL_NUMBER and self._current() in ("8", "9"):
            invalid = num + self._consume_while(DIGITS)
            self._add_error(f"Invalid octal number: {invalid} (contains digits 8 or 9)", line, column)
            return

        if self._current() in IDENTIFIER_CHARS:
            invalid = self._scan_trailing(num)
            self._add_error(f"Invalid {name} number: {invalid} "
                            "(invalid trailing characters)", line, column)
            return

        self._add_token(num, kind, line, column)

    def _scan_decimal_number(self, line, column):
        num = self._consume_while(DIGITS + "_")
        integer_part = num

        has_decimal = False
        if self._current() == ".":
            has_decimal = True
            num += "."
            self._advance()
            num += self._consume_while(DIGITS + "_")
            if self._current() == ".":
                while self._current() != EOF and self._current() in DIGITS + "._":
                    num += self._current()
                    self._advance()
                self._add_error(f"Invalid floating-point number: {num} "
                                "(multiple decimal points)", line, column)
                return

        has_exponent = False
        if self._current() in ("e", "E"):
            has_exponent = True
            num += self._current()
            self._advance()
            doubled_sign = False
            if self._current() in ("+", "-"):
                num += self._current()
                self._advance()
                if self._current() in ("+", "-"):
                    doubled_sign = True
                    num += self._current()
                    self._advance()
            exponent = self._consume_while(DIGITS + "_")
            num += exponent
            if doubled_sign:
                self._add_error(f"Invalid scientific notation: {num} "
                                "(invalid exponent sign combination)", line, column)
                return
            if not exponent.replace("_", ""):
                self._add_error(f"Invalid scientific notation: {num} "
                                "(missing exponent digits)", line, column)
                return

        if "_" in num and not self._check_decimal_underscores(num, has_decimal, has_exponent,
                                                              line, column):
            return

        if self._current() in ("j", "J"):
            num = self._scan_trailing(num)
            self._add_error(f"Invalid token: {num} (complex numbers are not supported)", line, column)
            return

        if self._current() in IDENTIFIER_CHARS:
            invalid = self._scan_trailing(num)
            self._add_error(f"Invalid number: {invalid} (invalid trailing characters)", line, column)
            return

        if not has_decimal and not has_exponent:
            digits = integer_part.replace("_", "")
            if len(digits) > 1 and digits[0] == "0" and digits.strip("0"):
                self._add_error(f"Invalid number: {num} "
                                "(leading zeros are not allowed in decimal numbers)", line, column)
                return

        self._add_token(num, TokenType.NUMBER, line, column)

    def _check_decimal_underscores(self, num, has_decimal, has_exponent, line, column):
        if not _valid_underscores(num):
            self._add_error(f"Invalid underscore placement in number: {num}", line, column)
            return False
        if has_decimal and ("._" in num or "_." in num):
            self._add_error(f"Invalid underscore placement in number: {num} "
                            "(underscore adjacent to decimal point)", line, column)
            return False
        if has_exponent:
            marker = num.lower().index("e")
            if num[marker - 1] == "_":
                self._add_error(f"Invalid underscore placement in number: {num} "
                                "(underscore before 'e'/'E')", line, column)
                return False
            following = num[marker + 1:marker + 2]
            if following == "_":
                self._add_error(f"Invalid underscore placement in number: {num} "
                                "(underscore after 'e'/'E')", line, column)
                return False
            if following in ("+", "-") and num[marker + 2:marker + 3] == "_":
                self._add_error(f"Invalid underscore placement in number: {num} "
                                "(underscore after exponent sign)", line, column)
                return False
        return True

    # ------------------------------------------------------------------
    # Strings
    # ------------------------------------------------------------------

    def _scan_string(self, quote):
        line, column = self.line, self.column
        self._advance()

        triple = self._current() == quote and self._peek() == quote
        if triple:
            self._advance()
            self._advance()

        if self._current() == "\\" and self._peek() not in VALID_ESCAPES:
            self._add_error(f"Invalid escape sequence: \\{self._peek()}")

        text = []
        if triple:
            while not self._at_triple(quote):
                if self._current() == EOF:
                    self._add_error(f"Unterminated triple-quoted string starting at line {line} "
                                    f"column {column}", line, column)
                    return
                text.append(self._current())
                self._advance()
            for _ in range(3):
                self._advance()
            self._add_token("".join(text), TokenType.STRING, line, column)
            return

        while self._current() != quote:
            if self._current() in ("\n", EOF):
                self._add_error(f"Unterminated string literal starting at line {line} "
                                f"column {column}", line, column)
                return
            if self._current() == "\\" and self._peek() != EOF:
                text.append(self._current())
                self._advance()
            text.append(self._current())
            self._advance()
        self._advance()
        self._add_token("".join(text), TokenType.STRING, line, column)

    # ------------------------------------------------------------------
    # Identifiers and keywords
    # ------------------------------------------------------------------

    def _scan_type_annotation(self):
        """Try ``TypeWord Identifier``; rewind and return False on mismatch."""
        mark = self._mark()
        type_word = self._consume_while(IDENTIFIER_CHARS)
        if type_word.lower() not in self._type_hints:
            self._rewind(mark)
            return False

        while self._current() != EOF and self._current() in INLINE_SPACE:
            self._advance()

        c = self._current()
        if c == EOF or c not in IDENTIFIER_START or (c == "_" and self._peek() in DIGITS):
            self._rewind(mark)
            return False

        line, column = self.line, self.column
        ident = self._consume_while(IDENTIFIER_CHARS)
        if ident.lower() in self._keywords:
            self._rewind(mark)
            return False

        debug_log(f"Type annotation '{type_word} {ident}' at line {line}")
        self.symbol_table.add_identifier(ident)
        self._add_token(ident, TokenType.IDENTIFIER, line, column)
        return True

    def _scan_identifier(self):
        line, column = self.line, self.column

        if self._current() == "_" and self._peek() != EOF and self._peek() in DIGITS:
            invalid = self._consume_while(IDENTIFIER_CHARS)
            self._add_error("Invalid identifier starts with underscore followed by digit: "
                            f"{invalid}", line, column)
            return

        ident = self._consume_while(IDENTIFIER_CHARS)
        lowered = ident.lower()

        if lowered in self._keywords:
            self._add_token(ident, TokenType.KEYWORD, line, column)
        elif lowered in self._builtins:
            self._add_token(ident, TokenType.IDENTIFIER, line, column)
            if lowered not in self._registered_builtins:
                self.symbol_table.add_identifier(ident)
                self.symbol_table.set_identifier_info(ident, "function", "built-in")
                self._registered_builtins.add(lowered)
        else:
            if self._next_significant_char() != "(":
                self.symbol_table.add_identifier(ident)
            self._add_token(ident, TokenType.IDENTIFIER, line, column)

    def _next_significant_char(self):
        """Character after same-line whitespace, without moving the cursor."""
        index = self.pos
        while index < len(self.source) and self.source[index] in INLINE_SPACE:
            index += 1
        return self.source[index] if index < len(self.source) else EOF

    def _scan_invalid_identifier(self):
        line, column = self.line, self.column
        bad = self._current()
        self._advance()
        bad = self._scan_trailing(bad)
        self._add_error(f"Invalid identifier at line {line} column {column}: '{bad}' "
                        "(identifiers must start with a letter or underscore)", line, column)

    def _scan_unknown(self):
        line, column = self.line, self.column
        bad = self._current()
        self._advance()
        bad = self._scan_trailing(bad)
        self._add_error(f"Invalid character sequence at line {line} column {column}: '{bad}' "
                        "(unknown or unsupported characters)", line, column)

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def _scan_operator(self):
        line, column = self.line, self.column
        pair = self._current() + self._peek()

        if pair in REJECTED_ASSIGNMENTS:
            self._add_error(f"Invalid assignment operator: {pair} "
                            "(only '=' is allowed for variable assignments)")
            self._advance()
            self._advance()
            return

        if pair in TWO_CHAR_OPERATORS:
            self._add_token(pair, TWO_CHAR_OPERATORS[pair], line, column)
            self._advance()
            self._advance()
            return

        c = self._current()
        if c in ONE_CHAR_OPERATORS:
            self._add_token(c, ONE_CHAR_OPERATORS[c], line, column)
            self._advance()
            return

        self._add_error(f"Unexpected operator: {c}")
        self._advance()


def tokenize(source: str, config: Optional[AnalyzerConfig] = None):
    """Tokenize ``source`` and return ``(tokens, lexical_errors)``."""
    return Lexer(source, config).tokenize()
