"""
Kaleido Semantic Analyzer Package

Function registry plus the name-resolution checks every backend runs
before lowering a body:
- Unknown variables (only parameters are in scope)
- Unknown functions and wrong argument counts
- Redefinition of a function that already has a body
- Duplicate parameter names

Author: xwest
"""

from .semantic_analyzer import SemanticAnalyzer, SUPPORTED_OPERATORS
from .symbol_table import FunctionTable, FunctionSymbol
from .errors import (
    SemanticError, UnknownVariableError, UnknownFunctionError,
    RedefinitionError, ArityMismatchError, DuplicateParameterError,
    InvalidOperatorError, NestingDepthError, EvaluationError, CodegenError
)

__all__ = [
    # Main analyzer
    "SemanticAnalyzer",
    "SUPPORTED_OPERATORS",
    
    # Symbol management
    "FunctionTable", "FunctionSymbol",
    
    # Error handling
    "SemanticError", "UnknownVariableError", "UnknownFunctionError",
    "RedefinitionError", "ArityMismatchError", "DuplicateParameterError",
    "InvalidOperatorError", "NestingDepthError", "EvaluationError", "CodegenError",
]
