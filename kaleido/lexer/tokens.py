"""
Token definitions for the Kaleido lexer.

The language only has six token kinds: end of input, the two keywords,
identifiers, numbers, and "any other single character". Operators and
punctuation all travel as CHAR tokens whose lexeme is the character itself.

Author: xwest
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional, Union


class TokenType(Enum):
    """Enumeration of all token types in Kaleido."""
    
    EOF = auto()            # End of input
    
    # Commands
    DEF = auto()            # def
    EXTERN = auto()         # extern
    
    # Primary
    IDENTIFIER = auto()     # foo, x1
    NUMBER = auto()         # 42, 3.14, .5
    
    # Anything else: ( ) , ; + - * / < > ...
    CHAR = auto()


@dataclass(frozen=True)
class Token:
    """A single lexical token. Never mutated after creation."""
    type: TokenType
    lexeme: str
    value: Optional[Union[str, float]] = None
    
    def is_char(self, char: str) -> bool:
        """True if this is the single-character token `char`."""
        return self.type == TokenType.CHAR and self.lexeme == char
    
    @property
    def ordinal(self) -> int:
        """Character code of a CHAR token."""
        if self.type != TokenType.CHAR:
            raise ValueError(f"{self.type.name} token has no ordinal")
        return ord(self.lexeme)
    
    def describe(self) -> str:
        """Human-readable name used in diagnostics."""
        if self.type == TokenType.EOF:
            return "end of input"
        if self.type == TokenType.CHAR:
            return f"'{self.lexeme}'"
        if self.type in (TokenType.DEF, TokenType.EXTERN):
            return f"keyword '{self.lexeme}'"
        return f"{self.type.name.lower()} '{self.lexeme}'"
    
    def __str__(self) -> str:
        return f"{self.type.name}({self.lexeme!r})"


# Keywords (matched case-sensitively)
KEYWORDS = {
    "def": TokenType.DEF,
    "extern": TokenType.EXTERN,
}

# Character classes. ASCII only, like C's isalpha/isalnum/isdigit.
IDENTIFIER_START_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
)
DIGIT_CHARS = frozenset("0123456789")
IDENTIFIER_CHARS = IDENTIFIER_START_CHARS | DIGIT_CHARS
NUMBER_CHARS = DIGIT_CHARS | {"."}
WHITESPACE_CHARS = frozenset(" \t\n\r\v\f")
COMMENT_START = "#"
COMMENT_END_CHARS = frozenset("\n\r")

EOF_TOKEN = Token(TokenType.EOF, "")
