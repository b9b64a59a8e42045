"""
Backend capability contract for Kaleido.

The driver only ever talks to a backend through CodegenBackend, so an
interpreter, an LLVM JIT or anything else can sit behind it without the
lexer, parser or driver changing.

Author: xwest
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from ..analyzer.symbol_table import FunctionSymbol, FunctionTable
from ..parser.ast_nodes import FunctionDef, Prototype


@dataclass(frozen=True)
class LoweredFunction:
    """Handle for a registered function."""
    name: str
    arity: int
    text: str  # lowered form: LLVM IR, or source for the interpreter
    
    def __str__(self) -> str:
        return self.text


class CodegenBackend(ABC):
    """
    What the driver needs from a code generator.
    
    All failures are raised as SemanticError subclasses. Implementations keep
    their registered functions in `functions`.
    """
    
    def __init__(self):
        self.functions = FunctionTable()
    
    @abstractmethod
    def declare_or_define(self, function: FunctionDef) -> LoweredFunction:
        """
        Lower and register a definition.
        
        Upgrades an existing declaration of the same name. Raises
        RedefinitionError if the name already has a body. On any failure the
        registry is left as it was.
        """
    
    @abstractmethod
    def declare(self, prototype: Prototype) -> LoweredFunction:
        """
        Register a prototype without a body.
        
        Idempotent for an identical declaration; a different arity raises
        ArityMismatchError.
        """
    
    def resolve_call(self, name: str, arg_count: int) -> FunctionSymbol:
        """
        Find the callee of a call.
        
        Raises:
            UnknownFunctionError, ArityMismatchError
        """
        return self.functions.resolve_call(name, arg_count)
    
    @abstractmethod
    def call(self, name: str, *args: float) -> float:
        """Run a registered function by name with float arguments."""
    
    def execute_anonymous(
        self,
        function: FunctionDef,
        on_lowered: Optional[Callable[[LoweredFunction], None]] = None
    ) -> float:
        """
        Lower and run a parameterless unit once, returning its value.
        
        on_lowered, if given, receives the unit's handle after lowering and
        before it runs. The unit is evicted before this returns (even on
        failure), so it can never be called by name afterwards.
        """
        try:
            handle = self.declare_or_define(function)
            if on_lowered is not None:
                on_lowered(handle)
            return self.call(function.name)
        finally:
            self.evict(function.name)
    
    def evict(self, name: str):
        """Forget a function. Unknown names are ignored."""
        self.functions.remove(name)
    
    def dump(self) -> str:
        """Listing of every registered function."""
        return ""
