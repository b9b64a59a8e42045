"""
Function registry for Kaleido.

There is one global namespace: function names. Each name maps to a
FunctionSymbol holding its prototype and, once defined, its body. A symbol
without a body is a declaration (from `extern`) and can later be upgraded
by exactly one definition.

Author: xwest
"""

from typing import Dict, Iterator, List, Optional
from dataclasses import dataclass

from ..parser.ast_nodes import Expression, FunctionDef, Prototype
from .errors import (
    create_unknown_function_error, create_arity_mismatch_error,
    create_conflicting_declaration_error, create_redefinition_error,
    create_duplicate_parameter_error
)


@dataclass
class FunctionSymbol:
    """A registered function. `body` is None for declarations."""
    prototype: Prototype
    body: Optional[Expression] = None
    
    @property
    def name(self) -> str:
        return self.prototype.name
    
    @property
    def arity(self) -> int:
        return self.prototype.arity
    
    @property
    def is_defined(self) -> bool:
        return self.body is not None
    
    def as_function_def(self) -> FunctionDef:
        if self.body is None:
            raise ValueError(f"'{self.name}' is only declared")
        return FunctionDef(self.prototype, self.body)


class FunctionTable:
    """
    Name -> FunctionSymbol registry shared by the backends.
    
    check_* methods validate without changing anything; declare/define/remove
    mutate. Backends check first, lower, and only then commit, so a failed
    lowering never leaves a half-registered function behind.
    """
    
    def __init__(self):
        self._symbols: Dict[str, FunctionSymbol] = {}
    
    def __contains__(self, name: str) -> bool:
        return name in self._symbols
    
    def __iter__(self) -> Iterator[FunctionSymbol]:
        return iter(list(self._symbols.values()))
    
    def __len__(self) -> int:
        return len(self._symbols)
    
    def lookup(self, name: str) -> Optional[FunctionSymbol]:
        return self._symbols.get(name)
    
    def names(self) -> List[str]:
        return list(self._symbols)
    
    # Validation
    
    @staticmethod
    def check_parameters(prototype: Prototype):
        """Parameter names must be distinct."""
        seen = set()
        for param in prototype.params:
            if param in seen:
                raise create_duplicate_parameter_error(prototype.name, param)
            seen.add(param)
    
    def check_declaration(self, prototype: Prototype):
        """A declaration may repeat an existing one but must keep its arity."""
        self.check_parameters(prototype)
        existing = self._symbols.get(prototype.name)
        if existing is not None and existing.arity != prototype.arity:
            raise create_conflicting_declaration_error(
                prototype.name, existing.arity, prototype.arity
            )
    
    def check_definition(self, function: FunctionDef):
        """A definition may upgrade a declaration but never replace a body."""
        existing = self._symbols.get(function.name)
        if existing is not None and existing.is_defined:
            raise create_redefinition_error(function.name)
        self.check_declaration(function.prototype)
    
    # Mutation
    
    def declare(self, prototype: Prototype) -> FunctionSymbol:
        """Register a prototype. Idempotent for a matching existing entry."""
        self.check_declaration(prototype)
        existing = self._symbols.get(prototype.name)
        if existing is not None:
            return existing
        symbol = FunctionSymbol(prototype)
        self._symbols[prototype.name] = symbol
        return symbol
    
    def define(self, function: FunctionDef) -> FunctionSymbol:
        """Register a definition, upgrading a declaration in place."""
        self.check_definition(function)
        existing = self._symbols.get(function.name)
        if existing is not None:
            existing.prototype = function.prototype
            existing.body = function.body
            return existing
        symbol = FunctionSymbol(function.prototype, function.body)
        self._symbols[function.name] = symbol
        return symbol
    
    def remove(self, name: str) -> Optional[FunctionSymbol]:
        """Forget a function. Missing names are ignored."""
        return self._symbols.pop(name, None)
    
    # Resolution
    
    def resolve_call(self, name: str, arg_count: int) -> FunctionSymbol:
        """
        Find the function a call refers to.
        
        Raises:
            UnknownFunctionError: If nothing is registered under name
            ArityMismatchError: If the argument count is wrong
        """
        symbol = self._symbols.get(name)
        if symbol is None:
            raise create_unknown_function_error(name)
        if symbol.arity != arg_count:
            raise create_arity_mismatch_error(name, symbol.arity, arg_count)
        return symbol
