"""
Error handling for the Kaleido lexer.

Holds the diagnostic record shared by every compiler phase and the common
exception base the driver catches when it recovers from a failed unit.

Author: xwest
"""

from typing import Optional
from dataclasses import dataclass


@dataclass
class Diagnostic:
    """A one-line report about a failed unit (no source positions)."""
    message: str
    severity: str  # "error", "warning"
    code: Optional[str] = None
    
    def __str__(self) -> str:
        prefix = self.severity.upper()
        if self.code:
            prefix += f"[{self.code}]"
        return f"{prefix}: {self.message}"


class CompilerError(Exception):
    """
    Base class for every error the front end or a backend reports.
    
    Carries a Diagnostic so callers can render it uniformly.
    """
    
    severity = "error"
    
    def __init__(self, message: str, code: Optional[str] = None):
        # Diagnostics are single lines, whatever a toolchain reported
        message = " ".join(message.split())
        super().__init__(message)
        self.diagnostic = Diagnostic(
            message=message,
            severity=self.severity,
            code=code
        )
    
    @property
    def message(self) -> str:
        return self.diagnostic.message
    
    def __str__(self) -> str:
        return str(self.diagnostic)


class LexerError(CompilerError):
    """
    Exception for fatal lexing problems.
    
    The lexer currently accepts every input (malformed numbers are converted
    leniently), so nothing raises this yet.
    """
    pass


# Error codes for categorization
LEXER_ERROR_CODES = {
    "L001": "Invalid character",
    "L003": "Invalid numeric literal",
}
