"""
Kaleido Parser Package

Recursive descent parser with precedence climbing for binary operators.
Produces a small, closed set of AST nodes.

Author: xwest
"""

from .ast_nodes import *
from .parser import (
    Parser, DEFAULT_BINOP_PRECEDENCE, NOT_AN_OPERATOR, anonymous_name,
    is_anonymous_name, parse_string, parse_file
)
from .errors import ParseError

__all__ = [
    # Core parser
    "Parser",
    "DEFAULT_BINOP_PRECEDENCE",
    "NOT_AN_OPERATOR",
    "anonymous_name",
    "is_anonymous_name",
    "parse_string",
    "parse_file",
    
    # AST nodes
    "ASTNode", "ASTNodeType", "Expression", "ExprVisitor",
    "NumberLiteral", "VariableRef", "BinaryOp", "Call",
    "Prototype", "FunctionDef",
    "walk", "called_functions",
    
    # Error handling
    "ParseError",
]
