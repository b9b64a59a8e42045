"""
Tree-walking interpreter backend for Kaleido.

"Lowering" here means checking the body with the semantic analyzer and
keeping the AST; execution walks the tree with Python floats. Results match
what the LLVM backend computes: IEEE division, and comparisons that are
true when either side is NaN (LLVM's fcmp ult/ugt).

Author: xwest
"""

import math
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from ..parser.ast_nodes import (
    ExprVisitor, NumberLiteral, VariableRef, BinaryOp, Call, FunctionDef, Prototype
)
from ..analyzer.semantic_analyzer import SemanticAnalyzer
from ..analyzer.symbol_table import FunctionSymbol
from ..analyzer.errors import (
    EvaluationError, create_unknown_variable_error, create_unresolved_extern_error,
    create_invalid_operator_error, create_nesting_depth_error, create_host_arity_error
)
from .capability import CodegenBackend, LoweredFunction


HostFunction = Tuple[Callable[..., float], int]

# extern-able host functions: name -> (callable, arity)
DEFAULT_EXTERNALS: Dict[str, HostFunction] = {
    name: (getattr(math, name), 1)
    for name in (
        "sin", "cos", "tan", "asin", "acos", "atan",
        "sinh", "cosh", "tanh", "exp", "log", "log10",
        "sqrt", "fabs", "floor", "ceil",
    )
}
DEFAULT_EXTERNALS.update({
    "pow": (math.pow, 2),
    "atan2": (math.atan2, 2),
    "fmod": (math.fmod, 2),
})


def ieee_divide(left: float, right: float) -> float:
    """Float division that yields inf/nan instead of raising."""
    try:
        return left / right
    except ZeroDivisionError:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)


def _unordered(left: float, right: float) -> bool:
    return math.isnan(left) or math.isnan(right)


class _Evaluator(ExprVisitor):
    """Evaluates one call frame."""
    
    def __init__(self, backend: 'InterpreterBackend', named_values: Dict[str, float]):
        self.backend = backend
        self.named_values = named_values
    
    def visit_number_literal(self, node: NumberLiteral) -> float:
        return node.value
    
    def visit_variable_ref(self, node: VariableRef) -> float:
        try:
            return self.named_values[node.name]
        except KeyError:
            raise create_unknown_variable_error(node.name) from None
    
    def visit_binary_op(self, node: BinaryOp) -> float:
        left = self.visit(node.left)
        right = self.visit(node.right)
        
        if node.operator == '+':
            return left + right
        if node.operator == '-':
            return left - right
        if node.operator == '*':
            return left * right
        if node.operator == '/':
            return ieee_divide(left, right)
        if node.operator == '<':
            return 1.0 if left < right or _unordered(left, right) else 0.0
        if node.operator == '>':
            return 1.0 if left > right or _unordered(left, right) else 0.0
        raise create_invalid_operator_error(node.operator)
    
    def visit_call(self, node: Call) -> float:
        symbol = self.backend.resolve_call(node.callee, len(node.args))
        args = [self.visit(arg) for arg in node.args]
        return self.backend.invoke(symbol, args)


class InterpreterBackend(CodegenBackend):
    """
    Evaluates Kaleido directly from the AST.
    
    Extern declarations bind to host functions from `externals`; calling an
    extern with no host implementation fails at call time.
    """
    
    def __init__(self, externals: Optional[Mapping[str, HostFunction]] = None):
        """
        Args:
            externals: name -> (callable, arity) for extern declarations.
                       Defaults to DEFAULT_EXTERNALS (libm-style math).
        """
        super().__init__()
        self.externals: Dict[str, HostFunction] = dict(
            DEFAULT_EXTERNALS if externals is None else externals
        )
        self.analyzer = SemanticAnalyzer(self.functions)
    
    def declare(self, prototype: Prototype) -> LoweredFunction:
        symbol = self.functions.declare(prototype)
        return self._handle(symbol)
    
    def declare_or_define(self, function: FunctionDef) -> LoweredFunction:
        try:
            self.analyzer.check_function(function)
            text = str(function)
        except RecursionError:
            raise create_nesting_depth_error(function.name) from None
        symbol = self.functions.define(function)
        return LoweredFunction(symbol.name, symbol.arity, text)
    
    def call(self, name: str, *args: float) -> float:
        """Call a registered function by name with float arguments."""
        symbol = self.resolve_call(name, len(args))
        try:
            return self.invoke(symbol, [float(arg) for arg in args])
        except RecursionError:
            raise EvaluationError(
                f"Maximum recursion depth exceeded while evaluating '{name}'"
            ) from None
    
    def invoke(self, symbol: FunctionSymbol, args: List[float]) -> float:
        """Run one frame of symbol with already evaluated arguments."""
        if symbol.is_defined:
            frame = _Evaluator(self, dict(zip(symbol.prototype.params, args)))
            return frame.visit(symbol.body)
        return self._call_host(symbol, args)
    
    def _call_host(self, symbol: FunctionSymbol, args: List[float]) -> float:
        host = self.externals.get(symbol.name)
        if host is None:
            raise create_unresolved_extern_error(symbol.name)
        
        function, arity = host
        if arity != len(args):
            raise create_host_arity_error(symbol.name, arity, len(args))
        try:
            return float(function(*args))
        except ValueError:
            # Domain error, e.g. sqrt(-1); libm answers nan
            return math.nan
        except OverflowError:
            return math.inf
    
    def _handle(self, symbol: FunctionSymbol) -> LoweredFunction:
        if symbol.is_defined:
            text = str(symbol.as_function_def())
        else:
            text = f"extern {symbol.prototype}"
        return LoweredFunction(symbol.name, symbol.arity, text)
    
    def dump(self) -> str:
        return "\n".join(self._handle(symbol).text for symbol in self.functions)
