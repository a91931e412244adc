"""
Unit tests for analyzer/parser.py - Parser class.
"""

import pytest
from pydantic import ValidationError

from analysis import strip_comments
from analyzer.config import AnalyzerConfig
from analyzer.lexer import tokenize
from analyzer.parser import Parser, parse
from analyzer.tokens import Token, TokenType
from analyzer.tree import NodeKind, node


def parse_source(source, **settings):
    config = AnalyzerConfig(**settings)
    tokens, _ = tokenize(source, config)
    return parse(strip_comments(tokens), config)


def program(*statements):
    return node(NodeKind.PROGRAM, *statements)


def ident(name):
    return node(NodeKind.IDENTIFIER, value=name)


def num(text):
    return node(NodeKind.NUMBER, value=text)


def assign(name, value, operator="="):
    return node(NodeKind.ASSIGNMENT, ident(name), value, value=operator)


def binop(operator, left, right):
    return node(NodeKind.OPERATOR, left, right, value=operator)


def compare(operator, left, right):
    return node(NodeKind.COMPARE_OP, left, right, value=operator)


PASS = node(NodeKind.PASS_STMT)


class TestStatements:
    """Tests for statement productions."""

    def test_if_statement(self):
        tree, errors = parse_source("if x == 1:\n    pass\n")
        assert errors == []
        assert tree == program(
            node(NodeKind.IF_STMT, compare("==", ident("x"), num("1")), PASS),
        )

    def test_if_elif_else(self):
        source = (
            "if a < 1:\n    x = 1\n"
            "elif a > 2:\n    x = 2\n"
            "else:\n    x = 3\n"
        )
        tree, errors = parse_source(source)
        assert errors == []
        assert tree == program(node(
            NodeKind.IF_STMT,
            compare("<", ident("a"), num("1")),
            assign("x", num("1")),
            node(NodeKind.ELIF, compare(">", ident("a"), num("2")), assign("x", num("2"))),
            node(NodeKind.ELSE, assign("x", num("3"))),
        ))

    def test_else_attaches_to_outer_if(self):
        source = "if a:\n    if b:\n        pass\nelse:\n    pass\n"
        tree, errors = parse_source(source)
        assert errors == []
        assert tree == program(node(
            NodeKind.IF_STMT,
            ident("a"),
            node(NodeKind.IF_STMT, ident("b"), PASS),
            node(NodeKind.ELSE, PASS),
        ))

    def test_else_attaches_to_inner_if(self):
        source = "if a:\n    if b:\n        pass\n    else:\n        pass\n"
        tree, errors = parse_source(source)
        assert errors == []
        assert tree == program(node(
            NodeKind.IF_STMT,
            ident("a"),
            node(NodeKind.IF_STMT, ident("b"), PASS, node(NodeKind.ELSE, PASS)),
        ))

    def test_for_statement(self):
        tree, errors = parse_source("for i in range(10):\n    print(i)\n")
        assert errors == []
        assert tree == program(node(
            NodeKind.FOR_STMT,
            node(NodeKind.TARGET_LIST, ident("i")),
            node(NodeKind.FUNC_CALL, num("10"), value="range"),
            node(NodeKind.FUNC_CALL, ident("i"), value="print"),
        ))

    def test_for_multiple_targets(self):
        tree, errors = parse_source("for k, v in items:\n    pass\n")
        assert errors == []
        assert tree.children[0].children[0] == node(NodeKind.TARGET_LIST, ident("k"), ident("v"))

    def test_while_statement(self):
        tree, errors = parse_source("while (n > 0):\n    n -= 1\n")
        assert errors == []
        assert tree == program(node(
            NodeKind.WHILE_STMT,
            compare(">", ident("n"), num("0")),
            assign("n", num("1"), "-="),
        ))

    def test_function_definition(self):
        tree, errors = parse_source("def add(a, b):\n    return a + b\n")
        assert errors == []
        assert tree == program(node(
            NodeKind.FUNC_DEF,
            ident("add"),
            node(NodeKind.PARAM_LIST,
                 node(NodeKind.PARAM, value="a"),
                 node(NodeKind.PARAM, value="b")),
            node(NodeKind.RETURN_STMT, binop("+", ident("a"), ident("b"))),
        ))

    def test_function_without_parameters(self):
        tree, errors = parse_source("def f():\n    return\n")
        assert errors == []
        assert tree == program(node(
            NodeKind.FUNC_DEF, ident("f"), node(NodeKind.PARAM_LIST), node(NodeKind.RETURN_STMT),
        ))

    @pytest.mark.parametrize("operator", ["=", "+=", "-=", "*="])
    def test_assignment_operators(self, operator):
        tree, errors = parse_source(f"x {operator} 2\n")
        assert errors == []
        assert tree == program(assign("x", num("2"), operator))

    def test_print_without_parentheses(self):
        tree, errors = parse_source('print "hi"\n')
        assert errors == []
        assert tree == program(node(NodeKind.FUNC_CALL, node(NodeKind.STRING, value="hi"),
                                    value="print"))

    def test_print_with_arguments(self):
        tree, errors = parse_source("print(a, 1)\n")
        assert errors == []
        assert tree == program(node(NodeKind.FUNC_CALL, ident("a"), num("1"), value="print"))

    def test_expression_statement(self):
        tree, errors = parse_source("foo(1)\n")
        assert errors == []
        assert tree == program(node(NodeKind.EXPR_STMT,
                                    node(NodeKind.FUNC_CALL, num("1"), value="foo")))

    def test_loop_control(self):
        tree, errors = parse_source("while x:\n    break\nwhile y:\n    continue\n")
        assert errors == []
        assert tree == program(
            node(NodeKind.WHILE_STMT, ident("x"), node(NodeKind.BREAK_STMT)),
            node(NodeKind.WHILE_STMT, ident("y"), node(NodeKind.CONTINUE_STMT)),
        )

    def test_keywords_case_insensitive(self):
        tree, errors = parse_source("IF x:\n    PASS\nElse:\n    Pass\n")
        assert errors == []
        assert tree == program(node(NodeKind.IF_STMT, ident("x"), PASS,
                                    node(NodeKind.ELSE, PASS)))

    def test_comments_ignored(self):
        tree, errors = parse_source("# heading\nx = 1  # trailing\n")
        assert errors == []
        assert tree == program(assign("x", num("1")))


class TestExpressions:
    """Tests for precedence and literal nodes."""

    def value_of(self, expression):
        tree, errors = parse_source(f"x = {expression}\n")
        assert errors == []
        return tree.children[0].children[1]

    def test_multiplication_binds_tighter(self):
        assert self.value_of("1 + 2 * 3") == binop("+", num("1"), binop("*", num("2"), num("3")))

    def test_left_associative(self):
        assert self.value_of("8 - 3 - 1") == binop("-", binop("-", num("8"), num("3")), num("1"))

    def test_parentheses(self):
        assert self.value_of("(1 + 2) * 3") == binop("*", binop("+", num("1"), num("2")), num("3"))

    def test_power_right_associative(self):
        assert self.value_of("2 ** 3 ** 2") == binop("**", num("2"), binop("**", num("3"), num("2")))

    def test_unary_minus_looser_than_power(self):
        assert self.value_of("-2 ** 2") == node(NodeKind.UNARY_OP,
                                                binop("**", num("2"), num("2")), value="-")

    def test_negative_exponent(self):
        assert self.value_of("2 ** -1") == binop("**", num("2"),
                                                 node(NodeKind.UNARY_OP, num("1"), value="-"))

    def test_modulo(self):
        assert self.value_of("7 % 2") == binop("%", num("7"), num("2"))

    def test_chained_comparison(self):
        tree, errors = parse_source("a < b < c\n")
        assert errors == []
        assert tree == program(node(
            NodeKind.EXPR_STMT,
            compare("<", compare("<", ident("a"), ident("b")), ident("c")),
        ))

    @pytest.mark.parametrize("literal,expected", [
        ("True", node(NodeKind.BOOL, value="True")),
        ("false", node(NodeKind.BOOL, value="false")),
        ("None", node(NodeKind.NONE)),
        ('"text"', node(NodeKind.STRING, value="text")),
        ("0x1F", node(NodeKind.HEX, value="0x1F")),
        ("0b101", node(NodeKind.BINARY, value="0b101")),
        ("0o17", node(NodeKind.OCTAL, value="0o17")),
        ("3.5", node(NodeKind.NUMBER, value="3.5")),
    ])
    def test_literals(self, literal, expected):
        assert self.value_of(literal) == expected


class TestErrors:
    """Tests for syntax errors and recovery."""

    def messages(self, source, **settings):
        _, errors = parse_source(source, **settings)
        return [error.message for error in errors]

    def test_assignment_in_condition(self):
        tree, errors = parse_source("if x = 1:\n pass\n")
        assert len(errors) == 1
        assert "did you mean '=='" in errors[0].message
        assert tree == program()

    def test_orphan_elif(self):
        tree, errors = parse_source("elif x:\n pass\n")
        assert [error.message for error in errors] == ["'elif' without matching 'if'"]
        assert tree == program()

    def test_orphan_else_skips_its_block_only(self):
        tree, errors = parse_source("else:\n    pass\nx = 1\n")
        assert [error.message for error in errors] == ["'else' without matching 'if'"]
        assert tree == program(assign("x", num("1")))

    def test_recovery_continues_with_next_statement(self):
        tree, errors = parse_source("if x = 1:\n    pass\ny = 2\n")
        assert len(errors) == 1
        assert tree == program(assign("y", num("2")))

    def test_missing_indented_block(self):
        assert self.messages("if x:\npass\n") == ["Expected indented block after 'if'"]

    def test_missing_colon(self):
        assert self.messages("while x\n    pass\n") == ["Expected ':' after while condition"]

    def test_missing_rhs(self):
        tokens = [
            Token(lexeme="x", kind=TokenType.IDENTIFIER, line=1, column=1),
            Token(lexeme="=", kind=TokenType.EQUAL_OPERATOR, line=1, column=3),
            Token(lexeme="\n", kind=TokenType.NEWLINE, line=1, column=4),
        ]
        tree, errors = parse(tokens)
        assert [error.message for error in errors] == ["Expected expression after '='"]
        assert tree == program()

    def test_trailing_tokens(self):
        assert self.messages("x = 1 2\n") == ["Unexpected '2' after statement"]

    def test_print_needs_argument(self):
        assert self.messages("print\n") == ["Expected an argument after print"]

    def test_unclosed_call(self):
        assert self.messages("foo(1\n") == ["Expected ')' after function call arguments"]

    def test_unclosed_parenthesis(self):
        assert self.messages("x = (1 + 2\n") == ["Expected ')' after expression"]

    def test_stray_token(self):
        assert self.messages(")\n") == ["Expected an identifier, number, or expression"]

    def test_unsupported_keyword(self):
        assert self.messages("import os\n") == ["Unexpected keyword 'import' in expression"]

    def test_missing_parameter_comma(self):
        assert self.messages("def f(a b):\n    pass\n") == ["Expected ',' between parameters"]

    def test_missing_function_name(self):
        assert self.messages("def (a):\n    pass\n") == ["Expected function name after def"]

    def test_for_without_in(self):
        assert self.messages("for i range(3):\n    pass\n") == ["Expected 'in' in for loop"]

    def test_unexpected_indent(self):
        tree, errors = parse_source("x = 1\n    y = 2\n")
        assert [error.message for error in errors] == ["Unexpected indent"]
        assert tree == program(assign("x", num("1")))

    def test_errors_carry_positions(self):
        _, errors = parse_source("x = 1\nif y = 2:\n    pass\n")
        assert (errors[0].line, errors[0].column) == (2, 6)


class TestBlocks:
    """Tests for block handling and optional checks."""

    SOURCE = "def f():\n    x = 1\n    return x\n"

    def test_single_statement_blocks_by_default(self):
        tree, errors = parse_source(self.SOURCE)
        assert errors == []
        assert tree == program(
            node(NodeKind.FUNC_DEF, ident("f"), node(NodeKind.PARAM_LIST), assign("x", num("1"))),
            node(NodeKind.RETURN_STMT, ident("x")),
        )

    def test_multi_statement_blocks(self):
        tree, errors = parse_source(self.SOURCE, multi_statement_blocks=True)
        assert errors == []
        assert tree == program(node(
            NodeKind.FUNC_DEF,
            ident("f"),
            node(NodeKind.PARAM_LIST),
            node(NodeKind.BLOCK, assign("x", num("1")), node(NodeKind.RETURN_STMT, ident("x"))),
        ))

    def test_multi_statement_single_body_not_wrapped(self):
        tree, errors = parse_source("if x:\n    pass\n", multi_statement_blocks=True)
        assert errors == []
        assert tree == program(node(NodeKind.IF_STMT, ident("x"), PASS))

    def test_nested_multi_statement_blocks(self):
        source = "while a:\n    if b:\n        x = 1\n        y = 2\n    z = 3\n"
        tree, errors = parse_source(source, multi_statement_blocks=True)
        assert errors == []
        assert tree == program(node(
            NodeKind.WHILE_STMT,
            ident("a"),
            node(NodeKind.BLOCK,
                 node(NodeKind.IF_STMT, ident("b"),
                      node(NodeKind.BLOCK, assign("x", num("1")), assign("y", num("2")))),
                 assign("z", num("3"))),
        ))

    def test_break_outside_loop_allowed_by_default(self):
        tree, errors = parse_source("break\n")
        assert errors == []
        assert tree == program(node(NodeKind.BREAK_STMT))

    def test_strict_loop_control(self):
        _, errors = parse_source("break\n", strict_loop_control=True)
        assert [error.message for error in errors] == ["'break' outside loop"]

    def test_strict_loop_control_inside_loop(self):
        _, errors = parse_source("for i in x:\n    continue\n", strict_loop_control=True)
        assert errors == []

    def test_strict_loop_control_function_resets_loop(self):
        source = "while x:\n    def f():\n        break\n"
        _, errors = parse_source(source, strict_loop_control=True)
        assert [error.message for error in errors] == ["'break' outside loop"]


class TestParserInput:
    """Tests for the token stream contract."""

    def test_empty_stream(self):
        tree, errors = parse([])
        assert tree == program()
        assert errors == []

    def test_end_of_file_appended(self):
        parser = Parser([Token(lexeme="pass", kind=TokenType.KEYWORD, line=1, column=1)])
        tree, errors = parser.parse()
        assert errors == []
        assert tree == program(PASS)
        assert parser.tokens[-1].kind == TokenType.END_OF_FILE

    def test_parser_reuse(self):
        tokens, _ = tokenize("x = 1\n")
        parser = Parser(tokens)
        assert parser.parse() == parser.parse()

    def test_tree_is_immutable(self):
        tree, _ = parse_source("pass\n")
        assert isinstance(tree.children, tuple)
        with pytest.raises(ValidationError):
            tree.value = "changed"
