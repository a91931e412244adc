"""
Recursive-descent parser for the Python subset.

Grammar, lowest precedence first::

    program     := {statement}
    statement   := if_chain | for | while | def | return | pass | break
                 | continue | builtin_call | assignment | expr_statement
    if_chain    := 'if' comparison ':' block {'elif' comparison ':' block}
                   ['else' ':' block]
    block       := INDENT statement DEDENT
    comparison  := expression {COMPARE_OP expression}
    expression  := term {('+' | '-') term}
    term        := unary {('*' | '/' | '%') unary}
    unary       := ('-' | '+') unary | power
    power       := primary ['**' unary]
    primary     := '(' comparison ')' | STRING | bool | None | numeral
                 | IDENTIFIER ['(' args ')']

The parser reads one token of lookahead over a comment-free token stream. A
production that fails records a ParseError and returns None; the caller
drops the statement and resynchronises at the next line.
"""
from typing import List, Optional, Tuple

from analyzer.config import AnalyzerConfig
from analyzer.errors import ParseError
from analyzer.tokens import Token, TokenType
from analyzer.trace import debug_log
from analyzer.tree import NodeKind, ParseNode, node

ASSIGNMENT_TYPES = (
    TokenType.EQUAL_OPERATOR,
    TokenType.ADD_ASSIGN,
    TokenType.SUB_ASSIGN,
    TokenType.MULTIPLY_ASSIGN,
)

END_OF_STATEMENT = (TokenType.NEWLINE, TokenType.DEDENT, TokenType.END_OF_FILE)

LINE_STARTS = (TokenType.NEWLINE, TokenType.INDENT, TokenType.DEDENT)

NUMERAL_NODES = {
    TokenType.NUMBER: NodeKind.NUMBER,
    TokenType.HEXADECIMAL_NUMBER: NodeKind.HEX,
    TokenType.BINARY_NUMBER: NodeKind.BINARY,
    TokenType.OCTAL_NUMBER: NodeKind.OCTAL,
}

ADDITIVE_TYPES = (TokenType.ADD_OPERATOR, TokenType.MINUS_OPERATOR)
MULTIPLICATIVE_TYPES = (
    TokenType.MULTIPLY_OPERATOR,
    TokenType.DIVIDE_OPERATOR,
    TokenType.PERCENTAGE_OPERATOR,
)


class Parser:
    """Builds a Program tree from tokens, collecting syntax errors."""

    def __init__(self, tokens: List[Token], config: Optional[AnalyzerConfig] = None):
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].kind != TokenType.END_OF_FILE:
            last = self.tokens[-1] if self.tokens else None
            self.tokens.append(Token(
                lexeme="",
                kind=TokenType.END_OF_FILE,
                line=last.line if last else 1,
                column=last.column + len(last.lexeme) if last else 1,
            ))
        self.config = config or AnalyzerConfig()
        self._builtins = {name.lower() for name in self.config.builtin_functions}
        self.pos = 0
        self.errors: List[ParseError] = []
        self._loop_depth = 0

        self._compound_statements = {
            "if": self._parse_if_chain,
            "for": self._parse_for,
            "while": self._parse_while,
            "def": self._parse_func_def,
        }
        self._simple_statements = {
            "return": self._parse_return,
            "pass": self._parse_pass,
            "break": self._parse_loop_control,
            "continue": self._parse_loop_control,
        }

    def parse(self) -> Tuple[ParseNode, List[ParseError]]:
        """Parse every statement and return ``(program, syntax_errors)``."""
        self.pos = 0
        self.errors = []
        self._loop_depth = 0

        statements = []
        while not self._at_end():
            kind = self._current().kind
            if kind == TokenType.NEWLINE:
                self._advance()
                continue
            if kind == TokenType.DEDENT:
                # closes a block whose further statements were read at this level
                self._advance()
                continue
            if kind == TokenType.INDENT:
                self._error("Unexpected indent")
                self._advance()
                self._skip_to_block_end()
                continue

            start = self.pos
            statement = self._parse_statement()
            if statement is not None:
                statements.append(statement)
            elif self.pos == start or not self._at_line_start():
                self._synchronize()
            if self.pos == start:
                self._advance()

        debug_log(f"Parsed {len(statements)} top-level statement(s), "
                  f"{len(self.errors)} syntax error(s)")
        return node(NodeKind.PROGRAM, *statements), self.errors

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        return self.tokens[min(self.pos, len(self.tokens) - 1)]

    def _peek(self, offset=1) -> Token:
        return self.tokens[min(self.pos + offset, len(self.tokens) - 1)]

    def _at_end(self):
        return self._current().kind == TokenType.END_OF_FILE

    def _advance(self):
        token = self._current()
        if not self._at_end():
            self.pos += 1
        return token

    def _check(self, lexeme):
        token = self._current()
        return token.kind not in (TokenType.STRING, TokenType.COMMENT) and token.lexeme == lexeme

    def _match(self, lexeme):
        if self._check(lexeme):
            self._advance()
            return True
        return False

    def _check_keyword(self, word):
        token = self._current()
        return token.kind == TokenType.KEYWORD and token.lexeme.lower() == word

    def _match_keyword(self, word):
        if self._check_keyword(word):
            self._advance()
            return True
        return False

    def _at_statement_end(self):
        return self._current().kind in END_OF_STATEMENT

    def _at_line_start(self):
        return self.pos == 0 or self.tokens[self.pos - 1].kind in LINE_STARTS

    def _skip_newlines(self):
        while self._current().kind == TokenType.NEWLINE:
            self._advance()

    def _error(self, message, token=None):
        token = token or self._current()
        error = ParseError(message=message, line=token.line, column=token.column)
        debug_log(f"Syntax error: {error}")
        self.errors.append(error)

    # ------------------------------------------------------------------
    # Recovery
    # ------------------------------------------------------------------

    def _synchronize(self):
        """Skip the rest of the current line."""
        while not self._at_end() and self._current().kind not in (TokenType.NEWLINE,
                                                                  TokenType.DEDENT):
            self._advance()

    def _skip_to_block_end(self):
        """Skip to and consume the DEDENT closing a block already entered."""
        depth = 1
        while not self._at_end():
            kind = self._advance().kind
            if kind == TokenType.INDENT:
                depth += 1
            elif kind == TokenType.DEDENT:
                depth -= 1
                if depth == 0:
                    return

    def _skip_clause(self):
        """Skip a header line and the indented block under it, if any."""
        while not self._at_end() and self._current().kind != TokenType.NEWLINE:
            self._advance()
        self._skip_newlines()
        if self._current().kind == TokenType.INDENT:
            self._advance()
            self._skip_to_block_end()

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_statement(self) -> Optional[ParseNode]:
        token = self._current()
        debug_log(f"statement at {token.line}:{token.column}: "
                  f"{token.kind_name} '{token.lexeme}'")

        if token.kind == TokenType.KEYWORD:
            word = token.lexeme.lower()
            if word in self._compound_statements:
                self._advance()
                return self._compound_statements[word](token)
            if word in self._simple_statements:
                self._advance()
                return self._end_statement(self._simple_statements[word](token))
            if word in ("elif", "else"):
                return self._skip_orphan_clause(token)

        if token.kind == TokenType.IDENTIFIER:
            if self._peek().kind in ASSIGNMENT_TYPES:
                return self._end_statement(self._parse_assignment())
            if token.lexeme.lower() in self._builtins:
                return self._end_statement(self._parse_builtin_call())

        return self._end_statement(self._parse_expr_statement())

    def _end_statement(self, statement: Optional[ParseNode]) -> Optional[ParseNode]:
        if statement is None or self._at_statement_end():
            return statement
        self._error(f"Unexpected '{self._current().lexeme}' after statement")
        return None

    def _skip_orphan_clause(self, keyword: Token):
        self._error(f"'{keyword.lexeme}' without matching 'if'", keyword)
        self._skip_clause()
        return None

    def _parse_block(self, construct: str) -> Optional[ParseNode]:
        """Parse the indented body of ``construct`` including its DEDENT."""
        self._skip_newlines()
        if self._current().kind != TokenType.INDENT:
            self._error(f"Expected indented block after '{construct}'")
            return None
        self._advance()

        if self.config.multi_statement_blocks:
            return self._parse_statement_list()

        body = self._parse_statement()
        if body is None:
            self._skip_to_block_end()
            return None
        self._skip_newlines()
        if self._current().kind == TokenType.DEDENT:
            self._advance()
        else:
            debug_log(f"Block after '{construct}' holds more than one statement; "
                      "the rest is read at the enclosing level")
        return body

    def _parse_statement_list(self) -> Optional[ParseNode]:
        statements = []
        failed = False
        while not self._at_end() and self._current().kind != TokenType.DEDENT:
            if self._current().kind == TokenType.NEWLINE:
                self._advance()
                continue
            if self._current().kind == TokenType.INDENT:
                self._error("Unexpected indent")
                self._advance()
                self._skip_to_block_end()
                failed = True
                continue

            start = self.pos
            statement = self._parse_statement()
            if statement is None:
                failed = True
                if self.pos == start or not self._at_line_start():
                    self._synchronize()
            else:
                statements.append(statement)
            if self.pos == start and self._current().kind != TokenType.DEDENT:
                self._advance()

        if self._current().kind == TokenType.DEDENT:
            self._advance()
        if failed or not statements:
            return None
        if len(statements) == 1:
            return statements[0]
        return node(NodeKind.BLOCK, *statements)

    def _expect_colon(self, construct: str) -> bool:
        if self._match(":"):
            return True
        if self._current().kind == TokenType.EQUAL_OPERATOR:
            self._error("Invalid '=' in condition; did you mean '=='?")
        else:
            self._error(f"Expected ':' after {construct}")
        return False

    def _parse_conditional_clause(self, keyword: str):
        """``comparison ':' block``; returns ``(condition, body)`` or None."""
        condition = self._parse_comparison()
        if condition is None or not self._expect_colon(f"{keyword} condition"):
            self._skip_clause()
            return None
        body = self._parse_block(keyword)
        if body is None:
            return None
        return condition, body

    def _parse_if_chain(self, keyword: Token):
        valid = True
        children = []

        clause = self._parse_conditional_clause("if")
        if clause is None:
            valid = False
        else:
            children.extend(clause)

        self._skip_newlines()
        while self._match_keyword("elif"):
            clause = self._parse_conditional_clause("elif")
            if clause is None:
                valid = False
            else:
                children.append(node(NodeKind.ELIF, *clause))
            self._skip_newlines()

        if self._match_keyword("else"):
            if not self._expect_colon("else"):
                self._skip_clause()
                valid = False
            else:
                body = self._parse_block("else")
                if body is None:
                    valid = False
                else:
                    children.append(node(NodeKind.ELSE, body))

        if not valid:
            return None
        return node(NodeKind.IF_STMT, *children)

    def _parse_for(self, keyword: Token):
        targets = []
        while True:
            token = self._current()
            if token.kind != TokenType.IDENTIFIER:
                self._error("Expected identifier in for loop")
                self._skip_clause()
                return None
            targets.append(node(NodeKind.IDENTIFIER, value=token.lexeme))
            self._advance()
            if not self._match(","):
                break

        if not self._match_keyword("in"):
            self._error("Expected 'in' in for loop")
            self._skip_clause()
            return None

        iterable = self._parse_comparison()
        if iterable is None or not self._expect_colon("for header"):
            self._skip_clause()
            return None

        body = self._parse_loop_body("for")
        if body is None:
            return None
        return node(NodeKind.FOR_STMT, node(NodeKind.TARGET_LIST, *targets), iterable, body)

    def _parse_while(self, keyword: Token):
        condition = self._parse_comparison()
        if condition is None or not self._expect_colon("while condition"):
            self._skip_clause()
            return None
        body = self._parse_loop_body("while")
        if body is None:
            return None
        return node(NodeKind.WHILE_STMT, condition, body)

    def _parse_loop_body(self, construct):
        self._loop_depth += 1
        try:
            return self._parse_block(construct)
        finally:
            self._loop_depth -= 1

    def _parse_func_def(self, keyword: Token):
        name = self._current()
        if name.kind != TokenType.IDENTIFIER:
            self._error("Expected function name after def")
            self._skip_clause()
            return None
        self._advance()

        if not self._match("("):
            self._error("Expected '(' after function name")
            self._skip_clause()
            return None

        params = self._parse_param_list()
        if params is None:
            self._skip_clause()
            return None
        if not self._expect_colon("def header"):
            self._skip_clause()
            return None

        enclosing_loops, self._loop_depth = self._loop_depth, 0
        try:
            body = self._parse_block("def")
        finally:
            self._loop_depth = enclosing_loops
        if body is None:
            return None
        return node(NodeKind.FUNC_DEF, node(NodeKind.IDENTIFIER, value=name.lexeme), params, body)

    def _parse_param_list(self) -> Optional[ParseNode]:
        """Parameters up to and including ``)``."""
        params = []
        while self._current().kind == TokenType.IDENTIFIER:
            params.append(node(NodeKind.PARAM, value=self._advance().lexeme))
            if not self._match(","):
                break

        if not self._match(")"):
            if self._current().kind == TokenType.IDENTIFIER:
                self._error("Expected ',' between parameters")
            else:
                self._error("Expected ')' after parameters")
            return None
        return node(NodeKind.PARAM_LIST, *params)

    def _parse_return(self, keyword: Token):
        if self._at_statement_end() or self._check(":"):
            return node(NodeKind.RETURN_STMT)
        value = self._parse_comparison()
        if value is None:
            return None
        return node(NodeKind.RETURN_STMT, value)

    def _parse_pass(self, keyword: Token):
        return node(NodeKind.PASS_STMT)

    def _parse_loop_control(self, keyword: Token):
        word = keyword.lexeme.lower()
        if self.config.strict_loop_control and self._loop_depth == 0:
            self._error(f"'{keyword.lexeme}' outside loop", keyword)
            return None
        return node(NodeKind.BREAK_STMT if word == "break" else NodeKind.CONTINUE_STMT)

    def _parse_builtin_call(self):
        name = self._advance()
        args: List[ParseNode] = []
        if self._match("("):
            parsed = self._parse_arguments()
            if parsed is None:
                return None
            if not self._match(")"):
                self._error("Expected ')' after arguments")
                return None
            args = parsed
        elif name.lexeme.lower() == "print":
            if self._at_statement_end():
                self._error("Expected an argument after print")
                return None
            argument = self._parse_comparison()
            if argument is None:
                return None
            args = [argument]
        else:
            self._error(f"Expected '(' after '{name.lexeme}'")
            return None
        return node(NodeKind.FUNC_CALL, *args, value=name.lexeme)

    def _parse_assignment(self):
        target = self._advance()
        operator = self._advance()
        if self._at_statement_end():
            self._error(f"Expected expression after '{operator.lexeme}'")
            return None
        value = self._parse_comparison()
        if value is None:
            return None
        return node(
            NodeKind.ASSIGNMENT,
            node(NodeKind.IDENTIFIER, value=target.lexeme),
            value,
            value=operator.lexeme,
        )

    def _parse_expr_statement(self):
        count = len(self.errors)
        expression = self._parse_comparison()
        if expression is None:
            if len(self.errors) == count:
                self._error("Invalid expression or unknown statement")
            return None
        return node(NodeKind.EXPR_STMT, expression)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _parse_comparison(self) -> Optional[ParseNode]:
        left = self._parse_expression()
        while left is not None and self._current().kind == TokenType.COMPARE_OPERATOR:
            operator = self._advance().lexeme
            right = self._parse_expression()
            if right is None:
                return None
            left = node(NodeKind.COMPARE_OP, left, right, value=operator)
        return left

    def _parse_expression(self) -> Optional[ParseNode]:
        left = self._parse_term()
        while left is not None and self._current().kind in ADDITIVE_TYPES:
            operator = self._advance().lexeme
            right = self._parse_term()
            if right is None:
                return None
            left = node(NodeKind.OPERATOR, left, right, value=operator)
        return left

    def _parse_term(self) -> Optional[ParseNode]:
        left = self._parse_unary()
        while left is not None and self._current().kind in MULTIPLICATIVE_TYPES:
            operator = self._advance().lexeme
            right = self._parse_unary()
            if right is None:
                return None
            left = node(NodeKind.OPERATOR, left, right, value=operator)
        return left

    def _parse_unary(self) -> Optional[ParseNode]:
        if self._current().kind in ADDITIVE_TYPES:
            operator = self._advance().lexeme
            operand = self._parse_unary()
            if operand is None:
                return None
            return node(NodeKind.UNARY_OP, operand, value=operator)
        return self._parse_power()

    def _parse_power(self) -> Optional[ParseNode]:
        base = self._parse_primary()
        if base is None or self._current().kind != TokenType.POWER_OPERATOR:
            return base
        operator = self._advance().lexeme
        exponent = self._parse_unary()
        if exponent is None:
            return None
        return node(NodeKind.OPERATOR, base, exponent, value=operator)

    def _parse_primary(self) -> Optional[ParseNode]:
        token = self._current()

        if self._match("("):
            inner = self._parse_comparison()
            if inner is None:
                return None
            if not self._match(")"):
                self._error("Expected ')' after expression")
                return None
            return inner

        if token.kind == TokenType.STRING:
            self._advance()
            return node(NodeKind.STRING, value=token.lexeme)

        if token.kind in NUMERAL_NODES:
            self._advance()
            return node(NUMERAL_NODES[token.kind], value=token.lexeme)

        if token.kind == TokenType.KEYWORD:
            word = token.lexeme.lower()
            if word in ("true", "false"):
                self._advance()
                return node(NodeKind.BOOL, value=token.lexeme)
            if word == "none":
                self._advance()
                return node(NodeKind.NONE)
            self._error(f"Unexpected keyword '{token.lexeme}' in expression")
            return None

        if token.kind == TokenType.IDENTIFIER:
            self._advance()
            if not self._match("("):
                return node(NodeKind.IDENTIFIER, value=token.lexeme)
            args = self._parse_arguments()
            if args is None:
                return None
            if not self._match(")"):
                self._error("Expected ')' after function call arguments")
                return None
            return node(NodeKind.FUNC_CALL, *args, value=token.lexeme)

        self._error("Expected an identifier, number, or expression")
        return None

    def _parse_arguments(self) -> Optional[List[ParseNode]]:
        """Comma-separated arguments, stopping before ``)``."""
        args: List[ParseNode] = []
        while not self._check(")"):
            argument = self._parse_comparison()
            if argument is None:
                return None
            args.append(argument)
            if not self._match(","):
                break
        return args


def parse(tokens: List[Token], config: Optional[AnalyzerConfig] = None):
    """Parse comment-free ``tokens`` and return ``(program, syntax_errors)``."""
    return Parser(tokens, config).parse()
