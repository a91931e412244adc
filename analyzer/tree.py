"""
Parse tree nodes and their display forms.

A tree is rooted at a single PROGRAM node. Nodes are frozen and own their
children exclusively (a tuple), so a returned tree cannot change; dropping the
root releases the whole tree.
"""
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from lark import Tree
from pydantic import BaseModel, ConfigDict


class NodeKind(str, Enum):
    """Closed set of node tags; the value is the display name."""
    PROGRAM = "Program"
    BLOCK = "Block"
    IF_STMT = "IfStmt"
    ELIF = "Elif"
    ELSE = "Else"
    FOR_STMT = "ForStmt"
    TARGET_LIST = "TargetList"
    WHILE_STMT = "WhileStmt"
    FUNC_DEF = "FuncDef"
    PARAM_LIST = "ParamList"
    PARAM = "Param"
    RETURN_STMT = "ReturnStmt"
    PASS_STMT = "PassStmt"
    BREAK_STMT = "BreakStmt"
    CONTINUE_STMT = "ContinueStmt"
    ASSIGNMENT = "Assignment"
    EXPR_STMT = "ExprStmt"
    FUNC_CALL = "FuncCall"
    COMPARE_OP = "CompareOp"
    OPERATOR = "Operator"
    UNARY_OP = "UnaryOp"
    IDENTIFIER = "Identifier"
    STRING = "String"
    BOOL = "Bool"
    NONE = "None"
    NUMBER = "Number"
    HEX = "Hex"
    BINARY = "Binary"
    OCTAL = "Octal"


class ParseNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: NodeKind
    value: Optional[str] = None
    children: Tuple["ParseNode", ...] = ()

    @property
    def tag(self) -> str:
        return self.kind.value

    def walk(self) -> Iterator["ParseNode"]:
        """Pre-order traversal starting at this node."""
        yield self
        for child in self.children:
            yield from child.walk()

    def __str__(self):
        return format_node(self)


ParseNode.model_rebuild()


def node(kind: NodeKind, *children: ParseNode, value: Optional[str] = None) -> ParseNode:
    """Shorthand constructor used by the parser and tests."""
    return ParseNode(kind=kind, value=value, children=tuple(children))


def format_node(parse_node: ParseNode) -> str:
    """Display label: ``Tag`` or ``Tag: value``."""
    if parse_node.value is not None:
        return f"{parse_node.tag}: {parse_node.value}"
    return parse_node.tag


def render_text(root: ParseNode, indent: str = "  ") -> str:
    """Indented textual tree, one node per line."""
    lines: List[str] = []

    def visit(current, depth):
        lines.append(f"{indent * depth}{format_node(current)}")
        for child in current.children:
            visit(child, depth + 1)

    visit(root, 0)
    return "\n".join(lines)


def to_lark_tree(root: ParseNode) -> Tree:
    """Convert to a ``lark.Tree`` whose ``data`` is each node's label."""
    return Tree(format_node(root), [to_lark_tree(child) for child in root.children])


def to_dict(root: ParseNode) -> dict:
    """Nested ``{tag, value, children}`` mapping for JSON output."""
    return {
        "tag": root.tag,
        "value": root.value,
        "children": [to_dict(child) for child in root.children],
    }
