"""
Kaleido Lexer - turns a character stream into tokens, one at a time

Pull based: the parser calls next_token() whenever it wants the next
token. The only state carried between calls is the one character that
the identifier/number loops read past.

xwest
"""

import io
import re
from typing import List, Optional, TextIO, Union

from .tokens import (
    Token, TokenType, KEYWORDS, EOF_TOKEN, IDENTIFIER_START_CHARS,
    IDENTIFIER_CHARS, DIGIT_CHARS, NUMBER_CHARS, WHITESPACE_CHARS,
    COMMENT_START, COMMENT_END_CHARS
)


# Longest prefix strtod() would accept from a run of digits and dots
_DECIMAL_PREFIX = re.compile(r'\d*(?:\.\d*)?')


def parse_lenient_float(text: str) -> float:
    """
    Convert a run of digits and dots the way strtod does.
    
    '1.2.3' -> 1.2, '.' -> 0.0, '007' -> 7.0. Never fails.
    """
    prefix = _DECIMAL_PREFIX.match(text).group(0)
    if not any(c in DIGIT_CHARS for c in prefix):
        return 0.0
    return float(prefix)


class Lexer:
    """
    Kaleido lexical analyzer.
    
    Reads characters lazily from a string or text stream and produces one
    token per next_token() call. No backtracking.
    """
    
    def __init__(self, source: Union[str, TextIO]):
        """
        Initialize the lexer with a character source.
        
        Args:
            source: Source text, or any object with a read(n) method
                    (a file, sys.stdin, io.StringIO)
        """
        if isinstance(source, str):
            source = io.StringIO(source)
        self.stream = source
        # Carry-over: the next character not yet turned into a token.
        # Starts as a space so the first call reads real input.
        self.last_char: Optional[str] = " "
    
    def _getchar(self) -> Optional[str]:
        """Read one character; None at end of input."""
        char = self.stream.read(1)
        return char if char else None
    
    def next_token(self) -> Token:
        """Produce the next token from the stream."""
        while True:
            # Skip whitespace
            while self.last_char is not None and self.last_char in WHITESPACE_CHARS:
                self.last_char = self._getchar()
            
            if self.last_char is None:
                return EOF_TOKEN
            
            # Identifiers and keywords: [a-zA-Z][a-zA-Z0-9]*
            if self.last_char in IDENTIFIER_START_CHARS:
                return self._tokenize_identifier_or_keyword()
            
            # Numbers: [0-9.]+
            if self.last_char in NUMBER_CHARS:
                return self._tokenize_number()
            
            # Comments run until end of line; then lex the next real token
            if self.last_char == COMMENT_START:
                self._skip_comment()
                continue
            
            # Everything else is returned as itself
            this_char = self.last_char
            self.last_char = self._getchar()
            return Token(TokenType.CHAR, this_char)
    
    def _tokenize_identifier_or_keyword(self) -> Token:
        """Tokenize an identifier or keyword."""
        chars = [self.last_char]
        self.last_char = self._getchar()
        while self.last_char is not None and self.last_char in IDENTIFIER_CHARS:
            chars.append(self.last_char)
            self.last_char = self._getchar()
        
        lexeme = "".join(chars)
        token_type = KEYWORDS.get(lexeme, TokenType.IDENTIFIER)
        value = lexeme if token_type == TokenType.IDENTIFIER else None
        return Token(token_type, lexeme, value)
    
    def _tokenize_number(self) -> Token:
        """Tokenize a numeric literal. Multiple dots are not rejected."""
        chars = []
        while self.last_char is not None and self.last_char in NUMBER_CHARS:
            chars.append(self.last_char)
            self.last_char = self._getchar()
        
        lexeme = "".join(chars)
        return Token(TokenType.NUMBER, lexeme, parse_lenient_float(lexeme))
    
    def _skip_comment(self):
        """Discard characters through end of line or end of input."""
        while self.last_char is not None and self.last_char not in COMMENT_END_CHARS:
            self.last_char = self._getchar()
    
    def tokenize(self) -> List[Token]:
        """
        Drain the stream.
        
        Returns:
            List of tokens ending with the EOF token
        """
        tokens = []
        while True:
            token = self.next_token()
            tokens.append(token)
            if token.type == TokenType.EOF:
                return tokens
    

def tokenize_string(source: str) -> List[Token]:
    """
    Convenience function to tokenize a source string.
    
    Args:
        source: Source code string
        
    Returns:
        List of tokens including the EOF token
    """
    return Lexer(source).tokenize()


def tokenize_file(filepath: str) -> List[Token]:
    """
    Convenience function to tokenize a source file.
    
    Raises:
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        return Lexer(f).tokenize()
