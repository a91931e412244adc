"""
Constant folding over the token stream.

After scanning, every ``IDENTIFIER '=' <tokens up to NEWLINE>`` run is
inspected and the target's type and value are inferred without executing
anything:

- a single literal or identifier on the right is classified directly;
- anything longer goes through Shunting-Yard into postfix and is evaluated on
  a numeric stack, resolving identifiers through the symbol table.

Evaluation problems are raised as EvaluationError subclasses and turned into
lexical diagnostics; the target then degrades to unknown / "N/A".
"""
import math
from typing import List, Tuple

from analyzer.errors import (
    DivisionByZeroError,
    EvaluationError,
    InvalidExpressionError,
    LexicalError,
    MismatchedParenthesesError,
    ModuloByZeroError,
    NonNumericOperandError,
    UndefinedIdentifierError,
    UninitializedVariableError,
)
from analyzer.symbols import UNKNOWN_TYPE, UNKNOWN_VALUE, SymbolTable
from analyzer.tokens import NUMERAL_TYPES, Token, TokenType
from analyzer.trace import debug_log

UNARY_MINUS = "u-"

ARITHMETIC_TYPES = (
    TokenType.ADD_OPERATOR,
    TokenType.MINUS_OPERATOR,
    TokenType.MULTIPLY_OPERATOR,
    TokenType.DIVIDE_OPERATOR,
    TokenType.PERCENTAGE_OPERATOR,
    TokenType.POWER_OPERATOR,
)

OPERAND_TYPES = NUMERAL_TYPES + (
    TokenType.IDENTIFIER,
    TokenType.KEYWORD,
    TokenType.STRING,
)

PRECEDENCE = {
    "+": 1,
    "-": 1,
    "*": 2,
    "/": 2,
    "%": 2,
    UNARY_MINUS: 3,
    "**": 4,
}

RIGHT_ASSOCIATIVE = ("**", UNARY_MINUS)

END_OF_STATEMENT = (TokenType.NEWLINE, TokenType.END_OF_FILE)


def _is_open_paren(token):
    return token.kind == TokenType.DELIMITER and token.lexeme == "("


def _is_close_paren(token):
    return token.kind == TokenType.DELIMITER and token.lexeme == ")"


def _is_unary_position(tokens, index):
    if index == 0:
        return True
    previous = tokens[index - 1]
    return previous.kind in ARITHMETIC_TYPES or _is_open_paren(previous)


def to_postfix(tokens: List[Token]) -> List[Token]:
    """Convert an infix right-hand side to postfix (Shunting-Yard).

    ``**`` is right-associative, everything else left-associative. A minus
    sign at the start, after another operator or after ``(`` becomes the
    unary operator ``u-``; a unary plus is dropped. Tokens that are neither
    operands, arithmetic operators nor parentheses are ignored.

    Raises:
        MismatchedParenthesesError: If parentheses do not pair up.
    """
    output = []
    operators = []

    for index, token in enumerate(tokens):
        if token.kind in OPERAND_TYPES:
            output.append(token)
        elif token.kind in ARITHMETIC_TYPES:
            if _is_unary_position(tokens, index):
                if token.kind == TokenType.ADD_OPERATOR:
                    continue
                if token.kind == TokenType.MINUS_OPERATOR:
                    operators.append(token.model_copy(update={"lexeme": UNARY_MINUS}))
                    continue
            precedence = PRECEDENCE[token.lexeme]
            while operators and not _is_open_paren(operators[-1]):
                top = PRECEDENCE[operators[-1].lexeme]
                if top > precedence or (top == precedence and token.lexeme not in RIGHT_ASSOCIATIVE):
                    output.append(operators.pop())
                else:
                    break
            operators.append(token)
        elif _is_open_paren(token):
            operators.append(token)
        elif _is_close_paren(token):
            while operators and not _is_open_paren(operators[-1]):
                output.append(operators.pop())
            if not operators:
                raise MismatchedParenthesesError("Mismatched parentheses")
            operators.pop()

    while operators:
        top = operators.pop()
        if _is_open_paren(top):
            raise MismatchedParenthesesError("Mismatched parentheses")
        output.append(top)
    return output


def _numeric_text(text):
    try:
        return float(text)
    except ValueError:
        # Radix literals such as 0x1A are stored verbatim.
        return float(int(text, 0))


class ConstantFolder:
    """Infers assignment targets' type/value into a symbol table."""

    def __init__(self, symbol_table: SymbolTable):
        self.symbol_table = symbol_table

    def fold(self, tokens: List[Token], errors: List[LexicalError]) -> None:
        """Scan ``tokens`` for assignments, appending problems to ``errors``."""
        i = 0
        while i < len(tokens):
            token = tokens[i]
            if (token.kind in (TokenType.MINUS_OPERATOR, TokenType.ADD_OPERATOR)
                    and i + 2 < len(tokens)
                    and tokens[i + 1].kind == TokenType.IDENTIFIER
                    and tokens[i + 2].kind == TokenType.EQUAL_OPERATOR):
                errors.append(LexicalError(
                    message=("Invalid assignment target: cannot assign to an expression like '"
                             f"{token.lexeme}{tokens[i + 1].lexeme}'"),
                    line=token.line,
                    column=token.column,
                ))
                i += 3
                continue

            if (token.kind == TokenType.IDENTIFIER
                    and i + 1 < len(tokens)
                    and tokens[i + 1].kind == TokenType.EQUAL_OPERATOR):
                j = i + 2
                while j < len(tokens) and tokens[j].kind not in END_OF_STATEMENT:
                    j += 1
                rhs = [t for t in tokens[i + 2:j] if t.kind != TokenType.COMMENT]
                end_line = tokens[j].line if j < len(tokens) else tokens[-1].line

                if any(token.line <= error.line <= end_line for error in errors):
                    debug_log(f"Skipping inference for '{token.lexeme}': lexical error in span")
                    self.symbol_table.set_identifier_info(token.lexeme, UNKNOWN_TYPE, UNKNOWN_VALUE)
                else:
                    self._infer(token, rhs, errors)
                i = j
            else:
                i += 1

    def _infer(self, target: Token, rhs: List[Token], errors: List[LexicalError]) -> None:
        name = target.lexeme
        try:
            data_type, value = self.classify(rhs)
        except EvaluationError as e:
            debug_log(f"Inference failed for '{name}': {e}")
            errors.append(LexicalError(message=str(e), line=target.line, column=target.column))
            data_type, value = UNKNOWN_TYPE, UNKNOWN_VALUE
        self.symbol_table.set_identifier_info(name, data_type, value)

    def classify(self, rhs: List[Token]) -> Tuple[str, str]:
        """Return ``(dataType, value)`` for an assignment's right-hand side."""
        if len(rhs) == 1:
            single = self._classify_single(rhs[0])
            if single is not None:
                return single
        result = self.evaluate_postfix(to_postfix(rhs))
        if result.is_integer():
            return "int", str(int(result))
        return "float", str(result)

    def _classify_single(self, token: Token):
        if token.kind == TokenType.STRING:
            return "string", token.lexeme
        if token.kind == TokenType.KEYWORD:
            word = token.lexeme.lower()
            if word in ("true", "false"):
                return "bool", word
            if word == "none":
                return "NoneType", "None"
            return None
        if token.kind in (TokenType.HEXADECIMAL_NUMBER, TokenType.BINARY_NUMBER,
                          TokenType.OCTAL_NUMBER):
            return "int", token.lexeme
        if token.kind == TokenType.NUMBER:
            is_float = any(marker in token.lexeme for marker in ".eE")
            return ("float" if is_float else "int"), token.lexeme
        if token.kind == TokenType.IDENTIFIER:
            if token.lexeme not in self.symbol_table:
                raise UndefinedIdentifierError(
                    f"Undefined identifier in assignment: {token.lexeme}")
            return (self.symbol_table.get_data_type(token.lexeme),
                    self.symbol_table.get_value(token.lexeme))
        return None

    def evaluate_postfix(self, postfix: List[Token]) -> float:
        """Evaluate a postfix sequence on a numeric stack."""
        stack = []
        for token in postfix:
            if token.kind in OPERAND_TYPES:
                stack.append(self._operand_value(token))
            elif token.lexeme == UNARY_MINUS:
                if not stack:
                    raise InvalidExpressionError("Invalid expression")
                stack.append(-stack.pop())
            else:
                if len(stack) < 2:
                    raise InvalidExpressionError("Invalid expression")
                right = stack.pop()
                left = stack.pop()
                stack.append(self._apply(token.lexeme, left, right))
        if len(stack) != 1:
            raise InvalidExpressionError("Invalid expression")
        return stack[0]

    def _operand_value(self, token: Token) -> float:
        if token.kind == TokenType.NUMBER:
            return float(token.lexeme)
        if token.kind in NUMERAL_TYPES:
            return float(int(token.lexeme, 0))
        if token.kind == TokenType.STRING:
            raise NonNumericOperandError(
                f"Cannot perform numeric operation with string literal: \"{token.lexeme}\"")
        if token.kind == TokenType.KEYWORD:
            word = token.lexeme.lower()
            if word == "true":
                return 1.0
            if word == "false":
                return 0.0
            raise InvalidExpressionError(f"Unexpected keyword in expression: {token.lexeme}")

        name = token.lexeme
        if name not in self.symbol_table:
            raise UndefinedIdentifierError(f"Undefined identifier: {name}")
        data_type = self.symbol_table.get_data_type(name)
        value = self.symbol_table.get_value(name)
        if data_type == UNKNOWN_TYPE or value == UNKNOWN_VALUE:
            raise UninitializedVariableError(
                f"Cannot perform operation with uninitialized variable: {name}")
        if data_type not in ("int", "float"):
            raise NonNumericOperandError(
                f"Cannot perform numeric operation with {data_type} variable: {name}")
        try:
            return _numeric_text(value)
        except ValueError as e:
            raise InvalidExpressionError(
                f"Invalid numeric value for variable {name}: {value}") from e

    @staticmethod
    def _apply(operator: str, left: float, right: float) -> float:
        if operator == "+":
            return left + right
        if operator == "-":
            return left - right
        if operator == "*":
            return left * right
        if operator == "/":
            if right == 0:
                raise DivisionByZeroError("Division by zero")
            return left / right
        if operator == "%":
            if right == 0:
                raise ModuloByZeroError("Modulo by zero")
            try:
                return math.fmod(left, right)
            except ValueError as e:
                raise InvalidExpressionError(f"Arithmetic error in '%': {e}") from e
        if operator == "**":
            try:
                return math.pow(left, right)
            except (OverflowError, ValueError) as e:
                raise InvalidExpressionError(f"Arithmetic error in '**': {e}") from e
        raise InvalidExpressionError(f"Unknown operator: {operator}")
