"""
Lox syntax tree
Runtime values, operator tags and the expression/statement nodes shared by
the parser and the interpreter
"""

from typing import Any, Dict, List, Optional, Tuple, Union
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
import math

from utilities import num_format


# ============================================================================
# VALUES (Immutable Dictionaries)
# ============================================================================

VALUE_TYPES = ("String", "Boolean", "Number", "Nil")


def make_value(value: Any, type_name: str) -> Dict:
    """Create an immutable runtime value"""
    return {
        'value': value,
        'type': type_name
    }


def make_number(n: float) -> Dict:
    return make_value(float(n), "Number")


def make_string(s: str) -> Dict:
    return make_value(s, "String")


def make_boolean(b: bool) -> Dict:
    return make_value(bool(b), "Boolean")


def make_nil() -> Dict:
    return make_value(None, "Nil")


# ============================================================================
# OPERATORS
# ============================================================================

class Operator(Enum):
    """Binary, unary and logical operator tags"""
    EQUAL = "="
    MINUS = "-"
    PLUS = "+"
    STAR = "*"
    SLASH = "/"
    BANG = "!"
    BANG_EQUAL = "!="
    EQUAL_EQUAL = "=="
    GREATER = ">"
    GREATER_EQUAL = ">="
    LESS = "<"
    LESS_EQUAL = "<="
    AND = "and"
    OR = "or"

    def __str__(self) -> str:
        return self.value


# Token kind -> operator, per precedence level
EQUALITY_OPERATORS = {
    "BANG_EQUAL": Operator.BANG_EQUAL,
    "EQUAL_EQUAL": Operator.EQUAL_EQUAL,
}
COMPARISON_OPERATORS = {
    "GREATER": Operator.GREATER,
    "GREATER_EQUAL": Operator.GREATER_EQUAL,
    "LESS": Operator.LESS,
    "LESS_EQUAL": Operator.LESS_EQUAL,
}
TERM_OPERATORS = {
    "MINUS": Operator.MINUS,
    "PLUS": Operator.PLUS,
}
FACTOR_OPERATORS = {
    "SLASH": Operator.SLASH,
    "STAR": Operator.STAR,
}
UNARY_OPERATORS = {
    "BANG": Operator.BANG,
    "MINUS": Operator.MINUS,
}


# ============================================================================
# EXPRESSIONS
# ============================================================================

def format_number_source(n: float) -> str:
    """Positional notation that scans back to the same float"""
    text = repr(n)
    if 'e' in text:
        text = format(Decimal(text), 'f')
    if '.' not in text:
        text += ".0"
    return text


def format_literal_source(value: Dict) -> str:
    if value['type'] == "String":
        return f'"{value["value"]}"'
    if value['type'] == "Number":
        n = value['value']
        if math.isnan(n) or math.isinf(n):
            return num_format(n)
        return format_number_source(n)
    if value['type'] == "Boolean":
        return "true" if value['value'] else "false"
    return "nil"


@dataclass(frozen=True)
class Literal:
    value: Dict

    def __str__(self) -> str:
        return format_literal_source(self.value)


@dataclass(frozen=True)
class Variable:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Assign:
    name: str
    value: 'Expr'

    def __str__(self) -> str:
        return f"{self.name} = {self.value}"


@dataclass(frozen=True)
class Unary:
    operator: Operator
    right: 'Expr'

    def __str__(self) -> str:
        return f"{self.operator}{self.right}"


@dataclass(frozen=True)
class Binary:
    left: 'Expr'
    operator: Operator
    right: 'Expr'

    def __str__(self) -> str:
        return f"{self.left} {self.operator} {self.right}"


@dataclass(frozen=True)
class Logical:
    left: 'Expr'
    operator: Operator
    right: 'Expr'

    def __str__(self) -> str:
        return f"{self.left} {self.operator} {self.right}"


@dataclass(frozen=True)
class Grouping:
    expression: 'Expr'

    def __str__(self) -> str:
        return f"({self.expression})"


@dataclass(frozen=True)
class Call:
    callee: 'Expr'
    arguments: Tuple['Expr', ...] = ()

    def __str__(self) -> str:
        args = ", ".join(str(arg) for arg in self.arguments)
        return f"{self.callee}({args})"


Expr = Union[Literal, Variable, Assign, Unary, Binary, Logical, Grouping, Call]


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class Expression:
    expression: Expr

    def __str__(self) -> str:
        return f"{self.expression};"


@dataclass(frozen=True)
class Print:
    expression: Expr

    def __str__(self) -> str:
        return f"print {self.expression};"


@dataclass(frozen=True)
class Var:
    name: str
    initializer: Optional[Expr] = None

    def __str__(self) -> str:
        if self.initializer is None:
            return f"var {self.name};"
        return f"var {self.name} = {self.initializer};"


@dataclass(frozen=True)
class Block:
    statements: Tuple['Stmt', ...] = ()

    def __str__(self) -> str:
        body = " ".join(str(stmt) for stmt in self.statements)
        return f"{{ {body} }}" if body else "{ }"


@dataclass(frozen=True)
class If:
    condition: Expr
    then_branch: 'Stmt'
    else_branch: Optional['Stmt'] = None

    def __str__(self) -> str:
        result = f"if ({self.condition}) {self.then_branch}"
        if self.else_branch is not None:
            result += f" else {self.else_branch}"
        return result


@dataclass(frozen=True)
class While:
    condition: Expr
    body: Tuple['Stmt', ...] = ()

    def __str__(self) -> str:
        body = " ".join(str(stmt) for stmt in self.body)
        return f"while ({self.condition}) {{ {body} }}"


Stmt = Union[Expression, Print, Var, Block, If, While]


# ============================================================================
# DEBUG RENDERING
# ============================================================================

def to_sexpr(node: Union[Expr, Stmt]) -> str:
    """Parenthesized prefix form, e.g. (+ 100.0 200.0)"""
    if isinstance(node, Literal):
        if node.value['type'] == "String":
            return node.value['value']
        if node.value['type'] == "Number":
            return num_format(node.value['value'])
        return format_literal_source(node.value)
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, Assign):
        return f"(set {node.name} {to_sexpr(node.value)})"
    if isinstance(node, Unary):
        return f"({node.operator} {to_sexpr(node.right)})"
    if isinstance(node, (Binary, Logical)):
        return f"({node.operator} {to_sexpr(node.left)} {to_sexpr(node.right)})"
    if isinstance(node, Grouping):
        return f"(grouping {to_sexpr(node.expression)})"
    if isinstance(node, Call):
        parts = [to_sexpr(node.callee)] + [to_sexpr(arg) for arg in node.arguments]
        return f"(call {' '.join(parts)})"
    if isinstance(node, Expression):
        return f"{to_sexpr(node.expression)};"
    if isinstance(node, Print):
        return f"(print {to_sexpr(node.expression)});"
    if isinstance(node, Var):
        if node.initializer is None:
            return f"(var {node.name});"
        return f"(var {node.name} {to_sexpr(node.initializer)});"
    if isinstance(node, Block):
        return "{" + "".join(to_sexpr(stmt) for stmt in node.statements) + "}"
    if isinstance(node, If):
        result = f"(if {to_sexpr(node.condition)} {to_sexpr(node.then_branch)}"
        if node.else_branch is not None:
            result += f" {to_sexpr(node.else_branch)}"
        return result + ")"
    if isinstance(node, While):
        body = "".join(to_sexpr(stmt) for stmt in node.body)
        return f"(while {to_sexpr(node.condition)} {{{body}}})"
    raise TypeError(f"Unknown node type: {type(node).__name__}")


def node_children(node: Union[Expr, Stmt]) -> List[Union[Expr, Stmt]]:
    """Direct child nodes, in source order"""
    if isinstance(node, Assign):
        return [node.value]
    if isinstance(node, Unary):
        return [node.right]
    if isinstance(node, (Binary, Logical)):
        return [node.left, node.right]
    if isinstance(node, (Grouping, Expression, Print)):
        return [node.expression]
    if isinstance(node, Call):
        return [node.callee, *node.arguments]
    if isinstance(node, Var):
        return [node.initializer] if node.initializer is not None else []
    if isinstance(node, Block):
        return list(node.statements)
    if isinstance(node, If):
        children = [node.condition, node.then_branch]
        if node.else_branch is not None:
            children.append(node.else_branch)
        return children
    if isinstance(node, While):
        return [node.condition, *node.body]
    return []


def pretty_print_ast(node: Union[Expr, Stmt], indent: int = 0) -> str:
    """Pretty print an AST node for debugging"""
    result = "  " * indent + type(node).__name__
    if isinstance(node, Literal):
        result += f"({format_literal_source(node.value)})"
    elif isinstance(node, (Variable, Assign, Var)):
        result += f"({node.name})"
    elif isinstance(node, (Unary, Binary, Logical)):
        result += f"({node.operator})"
    result += "\n"

    for child in node_children(node):
        result += pretty_print_ast(child, indent + 1)

    return result
