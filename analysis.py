"""
Analysis pipeline: tokenize, fold constants, then parse.

Lexical errors suppress parsing entirely; syntax errors suppress tree display.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from analyzer.config import AnalyzerConfig
from analyzer.errors import LexicalError, ParseError
from analyzer.lexer import Lexer
from analyzer.parser import Parser
from analyzer.symbols import SymbolTable
from analyzer.tokens import Token, TokenType
from analyzer.trace import debug_log
from analyzer.tree import ParseNode

NO_ERRORS = "No errors detected."
LEXICAL_ERRORS_STATUS = "Parse tree not displayed due to lexical errors."
SYNTAX_ERRORS_STATUS = "Parse tree not displayed due to syntax errors."


class AnalysisResult(BaseModel):
    """Everything one analysis run produced."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    source: str
    tokens: List[Token] = Field(default_factory=list)
    lexical_errors: List[LexicalError] = Field(default_factory=list)
    syntax_errors: List[ParseError] = Field(default_factory=list)
    tree: Optional[ParseNode] = None
    symbol_table: SymbolTable = Field(default_factory=SymbolTable)

    @property
    def tree_displayable(self) -> bool:
        return self.tree is not None and not self.lexical_errors and not self.syntax_errors

    @property
    def has_errors(self) -> bool:
        return bool(self.lexical_errors or self.syntax_errors)

    def status_message(self) -> str:
        if self.lexical_errors:
            return LEXICAL_ERRORS_STATUS
        if self.syntax_errors:
            return SYNTAX_ERRORS_STATUS
        return NO_ERRORS


def normalize_source(text: str) -> str:
    """Ensure the source ends with a newline."""
    if not text.endswith("\n"):
        return text + "\n"
    return text


def strip_comments(tokens: List[Token]) -> List[Token]:
    return [token for token in tokens if token.kind != TokenType.COMMENT]


def analyze_source(source: str, config: Optional[AnalyzerConfig] = None) -> AnalysisResult:
    """Run the full pipeline over ``source``."""
    config = config or AnalyzerConfig()
    source = normalize_source(source)

    lexer = Lexer(source, config)
    tokens, lexical_errors = lexer.tokenize()
    result = AnalysisResult(
        source=source,
        tokens=tokens,
        lexical_errors=lexical_errors,
        symbol_table=lexer.symbol_table,
    )
    if lexical_errors:
        debug_log(f"Skipping parse: {len(lexical_errors)} lexical error(s)")
        return result

    tree, syntax_errors = Parser(strip_comments(tokens), config).parse()
    result.tree = tree
    result.syntax_errors = syntax_errors
    return result
