"""
Kaleido Semantic Analyzer

Checks a function body before any backend lowers it: every variable must
be one of the function's parameters and every call must name a registered
function (or the function itself) with the right number of arguments.

Doing this up front means a backend never starts emitting code for a body
it would have to throw away.

Author: xwest
"""

from typing import Optional, Set

from ..parser.ast_nodes import (
    ExprVisitor, NumberLiteral, VariableRef, BinaryOp, Call, FunctionDef
)
from .symbol_table import FunctionTable
from .errors import (
    create_unknown_variable_error, create_arity_mismatch_error,
    create_invalid_operator_error
)


# Operators every backend knows how to lower
SUPPORTED_OPERATORS = frozenset("+-*/<>")


class SemanticAnalyzer(ExprVisitor):
    """
    Resolves names in one function body against a FunctionTable.
    
    The scope (parameter names) is rebuilt from scratch for each function and
    never shared between two functions.
    """
    
    def __init__(self, functions: FunctionTable):
        self.functions = functions
        self.scope: Set[str] = set()
        self.current: Optional[FunctionDef] = None
    
    def check_function(self, function: FunctionDef):
        """
        Validate a definition against the registry.
        
        Raises:
            SemanticError: The first problem found, depth first left to right
        """
        self.functions.check_definition(function)
        self.scope = set(function.prototype.params)
        self.current = function
        try:
            self.visit(function.body)
        finally:
            self.current = None
            self.scope = set()
    
    def visit_number_literal(self, node: NumberLiteral):
        pass
    
    def visit_variable_ref(self, node: VariableRef):
        if node.name not in self.scope:
            raise create_unknown_variable_error(node.name)
    
    def visit_binary_op(self, node: BinaryOp):
        self.visit(node.left)
        self.visit(node.right)
        if node.operator not in SUPPORTED_OPERATORS:
            raise create_invalid_operator_error(node.operator)
    
    def visit_call(self, node: Call):
        prototype = self.current.prototype
        if node.callee == prototype.name:
            # Recursion resolves against the prototype being defined
            if prototype.arity != len(node.args):
                raise create_arity_mismatch_error(
                    node.callee, prototype.arity, len(node.args)
                )
        else:
            self.functions.resolve_call(node.callee, len(node.args))
        for arg in node.args:
            self.visit(arg)

