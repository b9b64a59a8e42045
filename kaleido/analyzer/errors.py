"""
Semantic error handling for Kaleido.

Covers everything that can go wrong after a unit has parsed: names that do
not resolve, calls with the wrong number of arguments, and attempts to
redefine a function that already has a body.

Author: xwest
"""

from typing import Optional

from ..lexer.errors import CompilerError


class SemanticError(CompilerError):
    """
    Exception raised when a parsed unit cannot be lowered.
    
    Never fatal to the session: the driver reports it and moves on.
    """
    
    default_code: Optional[str] = None
    
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message, code=code or self.default_code)


class UnknownVariableError(SemanticError):
    default_code = "S010"


class UnknownFunctionError(SemanticError):
    default_code = "S012"


class RedefinitionError(SemanticError):
    default_code = "S011"


class ArityMismatchError(SemanticError):
    default_code = "S050"


class DuplicateParameterError(SemanticError):
    default_code = "S052"


class InvalidOperatorError(SemanticError):
    default_code = "S055"


class NestingDepthError(SemanticError):
    """A body nests deeper than the compiler can walk."""
    default_code = "S060"


class EvaluationError(SemanticError):
    """A lowered unit failed while running."""
    default_code = "S080"


class CodegenError(SemanticError):
    """A backend produced code its own toolchain rejected."""
    default_code = "S090"


# Semantic error codes for categorization
SEMANTIC_ERROR_CODES = {
    # Symbol resolution errors
    "S010": "Unknown variable name",
    "S011": "Function cannot be redefined",
    "S012": "Unknown function referenced",
    
    # Function errors
    "S050": "Incorrect number of arguments",
    "S052": "Duplicate parameter name",
    "S055": "Invalid binary operator",
    "S060": "Expression nested too deeply",
    
    # Execution errors
    "S080": "Evaluation failed",
    "S090": "Code generation failed",
}


# Helper functions for creating common semantic errors

def create_unknown_variable_error(name: str) -> UnknownVariableError:
    return UnknownVariableError(f"Unknown variable name '{name}'")


def create_unknown_function_error(name: str) -> UnknownFunctionError:
    return UnknownFunctionError(f"Unknown function referenced '{name}'")


def create_unresolved_extern_error(name: str) -> UnknownFunctionError:
    return UnknownFunctionError(
        f"Unresolved external function '{name}': declared with extern but never defined"
    )


def create_arity_mismatch_error(name: str, expected: int, found: int) -> ArityMismatchError:
    return ArityMismatchError(
        f"Incorrect # of arguments for '{name}': expected {expected}, got {found}"
    )


def create_conflicting_declaration_error(name: str, expected: int, found: int) -> ArityMismatchError:
    return ArityMismatchError(
        f"Conflicting declaration of '{name}': previously declared with "
        f"{expected} parameter(s), now {found}"
    )


def create_redefinition_error(name: str) -> RedefinitionError:
    return RedefinitionError(f"Function cannot be redefined: '{name}'")


def create_duplicate_parameter_error(function: str, param: str) -> DuplicateParameterError:
    return DuplicateParameterError(
        f"Duplicate parameter name '{param}' in prototype of '{function}'"
    )


def create_invalid_operator_error(operator: str) -> InvalidOperatorError:
    return InvalidOperatorError(f"invalid binary operator '{operator}'")

def create_nesting_depth_error(name: str) -> NestingDepthError:
    return NestingDepthError(f"Expression in '{name}' is nested too deeply to compile")


def create_host_arity_error(name: str, arity: int, declared: int) -> EvaluationError:
    return EvaluationError(
        f"External function '{name}' takes {arity} argument(s), declared with {declared}"
    )
