"""
Token model for the Python-subset analyzer.

Tokens are produced by the lexer and consumed by the constant folder, the
parser and the display layer. The kind names shown to users come from a fixed
mapping that existing consumers depend on.
"""
from enum import Enum

from pydantic import BaseModel, ConfigDict


class TokenType(str, Enum):
    """Closed set of token kinds."""
    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    HEXADECIMAL_NUMBER = "hexadecimal_number"
    BINARY_NUMBER = "binary_number"
    OCTAL_NUMBER = "octal_number"
    NUMBER = "number"
    COMPLEX_NUMBER = "complex_number"
    STRING = "string"
    OPERATOR = "operator"
    ADD_OPERATOR = "add_operator"
    MINUS_OPERATOR = "minus_operator"
    MULTIPLY_OPERATOR = "multiply_operator"
    DIVIDE_OPERATOR = "divide_operator"
    PERCENTAGE_OPERATOR = "percentage_operator"
    POWER_OPERATOR = "power_operator"
    COMPARE_OPERATOR = "compare_operator"
    EQUAL_OPERATOR = "equal_operator"
    BITWISE_OR_OPERATOR = "bitwise_or_operator"
    BITWISE_AND_OPERATOR = "bitwise_and_operator"
    NOT_OPERATOR = "not_operator"
    ADD_ASSIGN = "add_assign"
    SUB_ASSIGN = "sub_assign"
    MULTIPLY_ASSIGN = "multiply_assign"
    DELIMITER = "delimiter"
    WHITESPACE = "whitespace"
    INDENT = "indent"
    DEDENT = "dedent"
    NEWLINE = "newline"
    COMMENT = "comment"
    END_OF_FILE = "end_of_file"


# Display names, including the historical spellings consumers depend on.
_KIND_NAMES = {
    TokenType.KEYWORD: "KEYWORD",
    TokenType.IDENTIFIER: "IDENTIFIER",
    TokenType.HEXADECIMAL_NUMBER: "HEXADDECIMAL_NUMBER",
    TokenType.BINARY_NUMBER: "BINARY_NUMBER",
    TokenType.OCTAL_NUMBER: "OCTAL_NUMBER",
    TokenType.NUMBER: "NUMBER",
    TokenType.COMPLEX_NUMBER: "COMPLEX_NUMBER",
    TokenType.STRING: "STRING",
    TokenType.OPERATOR: "OPERATOR",
    TokenType.ADD_OPERATOR: "ADD_OPERATOR",
    TokenType.MINUS_OPERATOR: "MINUS_OPERATOR",
    TokenType.MULTIPLY_OPERATOR: "MULTIPLY_OPERATOR",
    TokenType.DELIMITER: "DELIMITER",
    TokenType.EQUAL_OPERATOR: "EQUAL_OPERATOR",
    TokenType.BITWISE_OR_OPERATOR: "BITWISE_OR_OPERATOR",
    TokenType.BITWISE_AND_OPERATOR: "BITWISE_AND_OPERATOR",
    TokenType.PERCENTAGE_OPERATOR: "PERCENTAGE_OPERATOR",
    TokenType.COMPARE_OPERATOR: "COMPARE_OPERATOR",
    TokenType.DIVIDE_OPERATOR: "DIVIDE_OPERATOR",
    TokenType.POWER_OPERATOR: "POWER_OPERATOR",
    TokenType.INDENT: "INDENT",
    TokenType.DEDENT: "DEDENT",
    TokenType.NEWLINE: "NEWLINE",
    TokenType.COMMENT: "COMMENT",
    TokenType.END_OF_FILE: "ENDOFFILE",
    TokenType.ADD_ASSIGN: "Plusequal",
    TokenType.SUB_ASSIGN: "minusequal",
}

NUMERAL_TYPES = (
    TokenType.NUMBER,
    TokenType.HEXADECIMAL_NUMBER,
    TokenType.BINARY_NUMBER,
    TokenType.OCTAL_NUMBER,
)


def token_type_name(kind):
    """Return the display name for a token kind ("UNKNOWN" when unmapped)."""
    return _KIND_NAMES.get(kind, "UNKNOWN")


class Token(BaseModel):
    """A single lexeme with its kind and 1-based start position."""
    model_config = ConfigDict(frozen=True)

    lexeme: str
    kind: TokenType
    line: int
    column: int

    @property
    def kind_name(self) -> str:
        return token_type_name(self.kind)

    def display(self):
        """Row used by token listings: (lexeme, kind-name, line, column)."""
        return (self.lexeme, self.kind_name, self.line, self.column)

    def __str__(self):
        return f"[Line {self.line}:{self.column}] '{self.lexeme}' ({self.kind_name})"
