"""
Kaleido Recursive Descent Parser

Single-token lookahead over a Lexer. Binary expressions are resolved by
precedence climbing, so the grammar needs no rule per precedence level.

    primary     := identifierOrCall | number | '(' expression ')'
    expression  := primary binOpRHS(0)
    prototype   := IDENT '(' IDENT* ')'
    definition  := 'def' prototype expression
    extern      := 'extern' prototype
    toplevel    := definition | extern | expression | ';'

Author: xwest
"""

import itertools
from typing import Dict, List, Mapping, Optional, TextIO, Union

from ..lexer.lexer import Lexer
from ..lexer.tokens import Token, TokenType
from .ast_nodes import (
    Expression, NumberLiteral, VariableRef, BinaryOp, Call, Prototype, FunctionDef
)
from .errors import (
    create_unexpected_token_error, create_missing_token_error, create_invalid_expression_error,
    create_nesting_depth_error
)


# Higher binds tighter
DEFAULT_BINOP_PRECEDENCE: Dict[str, int] = {
    '<': 10,
    '>': 10,
    '+': 20,
    '-': 20,
    '*': 40,
    '/': 40,
}

# Below every valid precedence; ends climbing
NOT_AN_OPERATOR = -1

ANONYMOUS_PREFIX = "__anon_expr"


class Parser:
    """
    Kaleido parser.
    
    Holds one lookahead token (`current`). advance() replaces it with the next
    token from the lexer. Call advance() once before the first parse_* call
    to prime the lookahead.
    """
    
    def __init__(self, lexer: Lexer, binop_precedence: Optional[Mapping[str, int]] = None):
        """
        Args:
            lexer: Token source
            binop_precedence: Operator character -> precedence. Defaults to
                              DEFAULT_BINOP_PRECEDENCE.
        """
        self.lexer = lexer
        self.binop_precedence = dict(
            DEFAULT_BINOP_PRECEDENCE if binop_precedence is None else binop_precedence
        )
        for operator, precedence in self.binop_precedence.items():
            if len(operator) != 1 or precedence <= NOT_AN_OPERATOR:
                raise ValueError(f"Invalid operator precedence entry {operator!r}: {precedence}")
        self.current: Optional[Token] = None
    
    def advance(self) -> Token:
        """Fetch the next token into the lookahead slot."""
        self.current = self.lexer.next_token()
        return self.current
    
    # Expressions
    
    def parse_expression(self) -> Expression:
        """expression := primary binOpRHS(0)"""
        left = self.parse_primary()
        return self._parse_binop_rhs(0, left)
    
    def parse_primary(self) -> Expression:
        """Dispatch on the lookahead to the right primary parser."""
        token = self.current
        if token.type == TokenType.IDENTIFIER:
            return self._parse_identifier_or_call()
        if token.type == TokenType.NUMBER:
            return self._parse_number()
        if token.is_char('('):
            return self._parse_paren()
        raise create_invalid_expression_error(token)
    
    def _parse_number(self) -> NumberLiteral:
        result = NumberLiteral(self.current.value)
        self.advance()
        return result
    
    def _parse_paren(self) -> Expression:
        """'(' expression ')'"""
        self.advance()  # eat (
        expr = self.parse_expression()
        if not self.current.is_char(')'):
            raise create_missing_token_error(')', self.current)
        self.advance()  # eat )
        return expr
    
    def _parse_identifier_or_call(self) -> Expression:
        """IDENT | IDENT '(' (expression (',' expression)*)? ')'"""
        name = self.current.value
        self.advance()  # eat identifier
        
        if not self.current.is_char('('):
            return VariableRef(name)
        
        self.advance()  # eat (
        args: List[Expression] = []
        if not self.current.is_char(')'):
            while True:
                args.append(self.parse_expression())
                
                if self.current.is_char(')'):
                    break
                if not self.current.is_char(','):
                    raise create_missing_token_error([')', ','], self.current, "argument list")
                self.advance()  # eat ,
        
        self.advance()  # eat )
        return Call(name, args)
    
    def _token_precedence(self) -> int:
        """Precedence of the lookahead, or NOT_AN_OPERATOR."""
        if self.current.type != TokenType.CHAR:
            return NOT_AN_OPERATOR
        return self.binop_precedence.get(self.current.lexeme, NOT_AN_OPERATOR)
    
    def _parse_binop_rhs(self, min_precedence: int, left: Expression) -> Expression:
        """
        Fold (operator primary)* pairs onto left.
        
        Only operators binding at least as tightly as min_precedence are
        consumed. When the operator after the right operand binds tighter than
        the current one, that operand is extended first, which groups
        1+2*3 as 1+(2*3) and keeps 1-2-3 as (1-2)-3.
        """
        while True:
            precedence = self._token_precedence()
            if precedence < min_precedence:
                return left
            
            operator = self.current.lexeme
            self.advance()  # eat operator
            
            right = self.parse_primary()
            
            if precedence < self._token_precedence():
                right = self._parse_binop_rhs(precedence + 1, right)
            
            left = BinaryOp(operator, left, right)
    
    # Functions
    
    def parse_prototype(self) -> Prototype:
        """prototype := IDENT '(' IDENT* ')'"""
        if self.current.type != TokenType.IDENTIFIER:
            raise create_unexpected_token_error(
                f"Expected function name in prototype, found {self.current.describe()}",
                self.current
            )
        name = self.current.value
        self.advance()
        
        if not self.current.is_char('('):
            raise create_missing_token_error('(', self.current, "prototype")
        
        params: List[str] = []
        while self.advance().type == TokenType.IDENTIFIER:
            params.append(self.current.value)
        
        if not self.current.is_char(')'):
            raise create_missing_token_error(')', self.current, "prototype")
        self.advance()  # eat )
        
        return Prototype(name, params)
    
    def parse_definition(self) -> FunctionDef:
        """definition := 'def' prototype expression"""
        self.advance()  # eat def
        prototype = self.parse_prototype()
        body = self._parse_body()
        return FunctionDef(prototype, body)
    
    def parse_extern(self) -> Prototype:
        """extern := 'extern' prototype"""
        self.advance()  # eat extern
        return self.parse_prototype()
    
    def parse_top_level_expr(self, name: str) -> FunctionDef:
        """Wrap a bare expression in a parameterless function called `name`."""
        body = self._parse_body()
        return FunctionDef(Prototype(name, []), body)
    
    def _parse_body(self) -> Expression:
        """parse_expression, with runaway nesting reported as a ParseError."""
        try:
            return self.parse_expression()
        except RecursionError:
            raise create_nesting_depth_error(self.current) from None


def anonymous_name(index: int) -> str:
    """Internal name of the index-th anonymous top-level expression."""
    return f"{ANONYMOUS_PREFIX}_{index}"


def is_anonymous_name(name: str) -> bool:
    return name.startswith(ANONYMOUS_PREFIX + "_")


def parse_string(source: Union[str, TextIO]) -> List[Union[FunctionDef, Prototype]]:
    """
    Convenience function to parse a whole source text without a backend.
    
    Args:
        source: Source code string or text stream
        
    Returns:
        The top-level units in order: FunctionDef for definitions and bare
        expressions, Prototype for externs
        
    Raises:
        ParseError: On the first syntax error
    """
    parser = Parser(Lexer(source))
    parser.advance()
    counter = itertools.count()
    units: List[Union[FunctionDef, Prototype]] = []
    
    while parser.current.type != TokenType.EOF:
        if parser.current.is_char(';'):
            parser.advance()
        elif parser.current.type == TokenType.DEF:
            units.append(parser.parse_definition())
        elif parser.current.type == TokenType.EXTERN:
            units.append(parser.parse_extern())
        else:
            units.append(parser.parse_top_level_expr(anonymous_name(next(counter))))
    
    return units


def parse_file(filepath: str) -> List[Union[FunctionDef, Prototype]]:
    """
    Convenience function to parse a source file.
    
    Raises:
        ParseError: If parsing fails
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        return parse_string(f)
