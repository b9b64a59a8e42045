"""
Abstract Syntax Tree node definitions for Kaleido.

The grammar is fixed, so the node set is closed: four expression kinds plus
Prototype and FunctionDef. Consumers dispatch on node_type through
ExprVisitor, which fails loudly on a kind it does not handle.

Every child is owned by exactly one parent; the parser never shares a node
between two trees.

Author: xwest
"""

from abc import ABC
from typing import Any, ClassVar, List
from dataclasses import dataclass, field
from enum import Enum


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""
    
    # Expressions
    NUMBER_LITERAL = "NumberLiteral"
    VARIABLE_REF = "VariableRef"
    BINARY_OP = "BinaryOp"
    CALL = "Call"
    
    # Functions
    PROTOTYPE = "Prototype"
    FUNCTION_DEF = "FunctionDef"


class ASTNode(ABC):
    """Base class for all AST nodes."""
    
    node_type: ClassVar[ASTNodeType]
    
    def children(self) -> List['ASTNode']:
        """Get all child nodes."""
        return []
    
    def accept(self, visitor: 'ExprVisitor') -> Any:
        """Accept a visitor (visitor pattern)."""
        return visitor.visit(self)


class Expression(ASTNode):
    """Base class for the four expression kinds."""
    pass


@dataclass
class NumberLiteral(Expression):
    """Numeric literal like `1.0`."""
    value: float
    
    node_type: ClassVar[ASTNodeType] = ASTNodeType.NUMBER_LITERAL
    
    def __str__(self) -> str:
        return repr(self.value)


@dataclass
class VariableRef(Expression):
    """
    Reference to a parameter, like `a`.
    
    Resolved against the enclosing function's parameters when the function is
    lowered, never by the parser.
    """
    name: str
    
    node_type: ClassVar[ASTNodeType] = ASTNodeType.VARIABLE_REF
    
    def __str__(self) -> str:
        return self.name


@dataclass
class BinaryOp(Expression):
    """Binary operator application."""
    operator: str
    left: Expression
    right: Expression
    
    node_type: ClassVar[ASTNodeType] = ASTNodeType.BINARY_OP
    
    def children(self) -> List[ASTNode]:
        return [self.left, self.right]
    
    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass
class Call(Expression):
    """Function call like `foo(1, x)`."""
    callee: str
    args: List[Expression] = field(default_factory=list)
    
    node_type: ClassVar[ASTNodeType] = ASTNodeType.CALL
    
    def children(self) -> List[ASTNode]:
        return list(self.args)
    
    def __str__(self) -> str:
        return f"{self.callee}({', '.join(str(arg) for arg in self.args)})"


@dataclass
class Prototype(ASTNode):
    """
    A function's name and ordered parameter names.
    
    Parameter names should be distinct; the parser does not check that, the
    backend does when the prototype is registered.
    """
    name: str
    params: List[str] = field(default_factory=list)
    
    node_type: ClassVar[ASTNodeType] = ASTNodeType.PROTOTYPE
    
    @property
    def arity(self) -> int:
        return len(self.params)
    
    def __str__(self) -> str:
        return f"{self.name}({' '.join(self.params)})"


@dataclass
class FunctionDef(ASTNode):
    """A prototype plus a body expression."""
    prototype: Prototype
    body: Expression
    
    node_type: ClassVar[ASTNodeType] = ASTNodeType.FUNCTION_DEF
    
    @property
    def name(self) -> str:
        return self.prototype.name
    
    def children(self) -> List[ASTNode]:
        return [self.prototype, self.body]
    
    def __str__(self) -> str:
        return f"def {self.prototype} {self.body}"


class ExprVisitor:
    """
    Dispatches on node_type to visit_<kind> methods.
    
    Subclasses implement the methods for the kinds they handle; reaching a
    kind without a method is a programming error, not a user error.
    """
    
    _METHODS = {
        ASTNodeType.NUMBER_LITERAL: "visit_number_literal",
        ASTNodeType.VARIABLE_REF: "visit_variable_ref",
        ASTNodeType.BINARY_OP: "visit_binary_op",
        ASTNodeType.CALL: "visit_call",
        ASTNodeType.PROTOTYPE: "visit_prototype",
        ASTNodeType.FUNCTION_DEF: "visit_function_def",
    }
    
    def visit(self, node: ASTNode) -> Any:
        method = getattr(self, self._METHODS[node.node_type], None)
        if method is None:
            raise NotImplementedError(
                f"{type(self).__name__} does not handle {node.node_type.value}"
            )
        return method(node)


def walk(node: ASTNode):
    """Yield node and all of its descendants, parents first."""
    yield node
    for child in node.children():
        yield from walk(child)


def called_functions(node: ASTNode) -> List[str]:
    """Names of every function called anywhere under node, in first-seen order."""
    names: List[str] = []
    for child in walk(node):
        if isinstance(child, Call) and child.callee not in names:
            names.append(child.callee)
    return names
