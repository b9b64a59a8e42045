"""
Kaleido Lexer Package

Pull-based tokenizer for the Kaleido toy language. Produces one token per
call from a string or text stream.

Author: xwest
"""

from .tokens import Token, TokenType, KEYWORDS
from .lexer import Lexer, tokenize_string, tokenize_file, parse_lenient_float
from .errors import Diagnostic, CompilerError, LexerError

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "KEYWORDS",
    "tokenize_string",
    "tokenize_file",
    "parse_lenient_float",
    "Diagnostic",
    "CompilerError",
    "LexerError",
]
