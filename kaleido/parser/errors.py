"""
Error handling for the Kaleido parser.

Parse functions raise ParseError at the point of failure; the exception
unwinds every enclosing parse so no partial node is ever returned. The
driver catches it, reports the diagnostic and skips one token.

Author: xwest
"""

from typing import Optional, Sequence, Union

from ..lexer.tokens import Token
from ..lexer.errors import CompilerError


class ParseError(CompilerError):
    """
    Exception raised when the parser encounters a syntax error.
    
    Keeps the offending token for callers that want it.
    """
    
    def __init__(
        self,
        message: str,
        token: Optional[Token] = None,
        code: Optional[str] = None
    ):
        super().__init__(message, code=code)
        self.token = token


# Common parser error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P002": "Expected token not found",
    "P005": "Invalid expression",
    "P008": "Malformed function prototype",
    "P013": "Malformed argument list",
    "P020": "Expression nested too deeply",
}


# Helper functions for creating common parser errors

def create_unexpected_token_error(message: str, found: Token) -> ParseError:
    """Create an error for a token that cannot start the expected construct."""
    return ParseError(message=message, token=found, code="P001")


def create_missing_token_error(expected: Union[str, Sequence[str]], found: Token,
                               context: Optional[str] = None) -> ParseError:
    """
    Create an error for a missing punctuation token.
    
    Args:
        expected: The character (or characters) that would have been valid
        found: The token actually seen
        context: Construct being parsed, e.g. "prototype"
    """
    if isinstance(expected, str):
        expected = [expected]
    expected_str = " or ".join(f"'{char}'" for char in expected)
    message = f"Expected {expected_str}"
    if context:
        message += f" in {context}"
    
    code = "P008" if context == "prototype" else "P002"
    if context == "argument list":
        code = "P013"
    return ParseError(message=message, token=found, code=code)


def create_invalid_expression_error(found: Token) -> ParseError:
    """Create an error for a token that cannot start an expression."""
    return ParseError(
        message=f"Unknown token when expecting an expression, found {found.describe()}",
        token=found,
        code="P005"
    )


def create_nesting_depth_error(found: Token) -> ParseError:
    """Create an error for an expression too deeply nested to parse."""
    return ParseError(
        message=f"Expression nested too deeply, stopped at {found.describe()}",
        token=found,
        code="P020"
    )
