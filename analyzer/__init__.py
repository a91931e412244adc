# Python-subset analyzer - core components
"""
Core modules for the analyzer:
- tokens: Token kinds, display names and the Token model
- errors: Diagnostics, fatal errors and evaluation errors
- config: Analyzer settings loaded from JSON
- trace: Stderr logging
- lexer: Character-level scanner with the indentation machine
- symbols: Symbol table with first-seen IDs
- folding: Constant folding of assignment right-hand sides
- parser: Recursive-descent parser with local error recovery
- tree: Parse tree nodes and their renderings
- report: Tables and the JSON analysis report
"""

from .errors import AnalyzerError, LexicalError, ParseError
from .config import AnalyzerConfig, load_config
from .lexer import Lexer, tokenize
from .parser import Parser, parse
from .symbols import SymbolTable
from .tokens import Token, TokenType
from .tree import NodeKind, ParseNode

__all__ = [
    'AnalyzerError',
    'LexicalError',
    'ParseError',
    'AnalyzerConfig',
    'load_config',
    'Lexer',
    'tokenize',
    'Parser',
    'parse',
    'SymbolTable',
    'Token',
    'TokenType',
    'NodeKind',
    'ParseNode',
]
