"""
LLVM Backend for Kaleido.

Lowers function ASTs to LLVM IR with llvmlite (every value is a double)
and runs anonymous units through an MCJIT execution engine.

Each run builds a fresh module holding only what the unit can reach, so an
evicted unit's code disappears with its engine.

Author: xwest
"""

import ctypes
from typing import Dict, List, Optional

import llvmlite.binding as llvm
from llvmlite import ir

from ..parser.ast_nodes import (
    ExprVisitor, NumberLiteral, VariableRef, BinaryOp, Call, FunctionDef, Prototype,
    called_functions
)
from ..analyzer.semantic_analyzer import SemanticAnalyzer
from ..analyzer.symbol_table import FunctionSymbol
from ..analyzer.errors import (
    CodegenError, create_unknown_variable_error, create_unresolved_extern_error,
    create_invalid_operator_error, create_nesting_depth_error, create_host_arity_error
)
from .capability import CodegenBackend, LoweredFunction
from .interpreter import DEFAULT_EXTERNALS


# Arity of every libm function the interpreter also provides
HOST_ARITIES = {name: arity for name, (_, arity) in DEFAULT_EXTERNALS.items()}


_llvm_initialized = False


def initialize_llvm():
    """Initialize the native target once per process."""
    global _llvm_initialized
    if not _llvm_initialized:
        llvm.initialize_native_target()
        llvm.initialize_native_asmprinter()
        _llvm_initialized = True


class _FunctionLowering(ExprVisitor):
    """Emits the IR for one function body."""
    
    def __init__(self, backend: 'LLVMBackend', module: ir.Module, function: ir.Function,
                 prototype: Prototype, builder: ir.IRBuilder):
        self.backend = backend
        self.module = module
        self.function = function
        self.builder = builder
        # Rebuilt per function: parameter name -> argument value
        self.named_values: Dict[str, ir.Value] = dict(zip(prototype.params, function.args))
    
    def visit_number_literal(self, node: NumberLiteral) -> ir.Value:
        return ir.Constant(ir.DoubleType(), node.value)
    
    def visit_variable_ref(self, node: VariableRef) -> ir.Value:
        value = self.named_values.get(node.name)
        if value is None:
            raise create_unknown_variable_error(node.name)
        return value
    
    def visit_binary_op(self, node: BinaryOp) -> ir.Value:
        left = self.visit(node.left)
        right = self.visit(node.right)
        
        if node.operator == '+':
            return self.builder.fadd(left, right, name="addtmp")
        if node.operator == '-':
            return self.builder.fsub(left, right, name="subtmp")
        if node.operator == '*':
            return self.builder.fmul(left, right, name="multmp")
        if node.operator == '/':
            return self.builder.fdiv(left, right, name="divtmp")
        if node.operator in ('<', '>'):
            cmp_val = self.builder.fcmp_unordered(node.operator, left, right, name="cmptmp")
            # Convert i1 to double 0.0/1.0
            return self.builder.uitofp(cmp_val, ir.DoubleType(), name="booltmp")
        raise create_invalid_operator_error(node.operator)
    
    def visit_call(self, node: Call) -> ir.Value:
        if node.callee != self.function.name:
            self.backend.resolve_call(node.callee, len(node.args))
        callee = self.backend.declare_in(self.module, node.callee)
        args = [self.visit(arg) for arg in node.args]
        return self.builder.call(callee, args, name="calltmp")


class LLVMBackend(CodegenBackend):
    """
    LLVM backend for Kaleido.
    
    Handles:
    - Lowering definitions to LLVM IR (verified on registration)
    - JIT execution of anonymous units via MCJIT
    - Resolving externs against symbols of the host process (libm etc.)
    """
    
    def __init__(self, module_name: str = "kaleido", target_triple: Optional[str] = None):
        """
        Initialize the LLVM backend.
        
        Args:
            module_name: Name given to every generated module
            target_triple: Target triple (e.g., "x86_64-pc-linux-gnu");
                           defaults to the host
        """
        super().__init__()
        initialize_llvm()
        
        self.module_name = module_name
        self.target_triple = target_triple or llvm.get_default_triple()
        self.target = llvm.Target.from_triple(self.target_triple)
        self.analyzer = SemanticAnalyzer(self.functions)
    
    # Capability
    
    def declare(self, prototype: Prototype) -> LoweredFunction:
        self.functions.check_declaration(prototype)
        module = self._new_module()
        function = self._declare_function(module, prototype)
        symbol = self.functions.declare(prototype)
        return LoweredFunction(symbol.name, symbol.arity, str(function))
    
    def declare_or_define(self, function: FunctionDef) -> LoweredFunction:
        try:
            self.analyzer.check_function(function)
            module = self._new_module()
            ir_function = self._emit_body(module, function)
        except RecursionError:
            raise create_nesting_depth_error(function.name) from None
        self._verify(module)
        
        symbol = self.functions.define(function)
        return LoweredFunction(symbol.name, symbol.arity, str(ir_function))
    
    def dump(self) -> str:
        """LLVM IR for every registered function."""
        return str(self._build_module(list(self.functions)))
    
    # Execution
    
    def call(self, name: str, *args: float) -> float:
        """
        JIT-compile name (and everything it calls) and run it.
        
        Raises:
            UnknownFunctionError: If a reachable extern has no symbol in this
                                  process, checked before any native code runs
            EvaluationError: If a reachable extern names a known libm function
                             but was declared with a different arity
        """
        symbol = self.resolve_call(name, len(args))
        try:
            reachable = self._reachable_from(symbol)
            llvm_module = self._verify(self._build_module(reachable))
        except RecursionError:
            raise create_nesting_depth_error(name) from None
        
        for dependency in reachable:
            known = HOST_ARITIES.get(dependency.name)
            if not dependency.is_defined and known is not None and known != dependency.arity:
                raise create_host_arity_error(dependency.name, known, dependency.arity)
        
        # The engine takes ownership of its target machine, so each run gets one
        target_machine = self.target.create_target_machine()
        engine = llvm.create_mcjit_compiler(llvm_module, target_machine)
        
        # Host symbols are only searchable once an engine exists; an unresolved
        # one would abort the process inside finalize_object
        for dependency in reachable:
            if not dependency.is_defined and llvm.address_of_symbol(dependency.name) is None:
                raise create_unresolved_extern_error(dependency.name)
        engine.finalize_object()
        
        address = engine.get_function_address(name)
        entry = ctypes.CFUNCTYPE(ctypes.c_double, *([ctypes.c_double] * len(args)))(address)
        return float(entry(*args))
    
    def _reachable_from(self, root: FunctionSymbol) -> List[FunctionSymbol]:
        """root plus every registered function it can call, root first."""
        order = [root]
        seen = {root.name}
        index = 0
        while index < len(order):
            symbol = order[index]
            index += 1
            if not symbol.is_defined:
                continue
            for name in called_functions(symbol.body):
                if name not in seen:
                    seen.add(name)
                    order.append(self.functions.lookup(name))
        return order
    
    # Lowering
    
    def _new_module(self) -> ir.Module:
        module = ir.Module(name=self.module_name)
        module.triple = self.target_triple
        return module
    
    def _build_module(self, symbols: List[FunctionSymbol]) -> ir.Module:
        module = self._new_module()
        for symbol in symbols:
            self._declare_function(module, symbol.prototype)
        for symbol in symbols:
            if symbol.is_defined:
                self._emit_body(module, symbol.as_function_def())
        return module
    
    def _declare_function(self, module: ir.Module, prototype: Prototype) -> ir.Function:
        """double name(double, ...) with arguments named after the parameters."""
        double = ir.DoubleType()
        fn_type = ir.FunctionType(double, [double] * prototype.arity)
        function = ir.Function(module, fn_type, name=prototype.name)
        for arg, param_name in zip(function.args, prototype.params):
            arg.name = param_name
        return function
    
    def declare_in(self, module: ir.Module, name: str) -> ir.Function:
        """The module's declaration of name, adding one if needed."""
        existing = module.globals.get(name)
        if existing is not None:
            return existing
        return self._declare_function(module, self.functions.lookup(name).prototype)
    
    def _emit_body(self, module: ir.Module, function: FunctionDef) -> ir.Function:
        ir_function = module.globals.get(function.name)
        if ir_function is None:
            ir_function = self._declare_function(module, function.prototype)
        
        block = ir_function.append_basic_block(name="entry")
        builder = ir.IRBuilder(block)
        lowering = _FunctionLowering(self, module, ir_function, function.prototype, builder)
        builder.ret(lowering.visit(function.body))
        return ir_function
    
    def _verify(self, module: ir.Module) -> 'llvm.ModuleRef':
        try:
            llvm_module = llvm.parse_assembly(str(module))
            llvm_module.verify()
        except RuntimeError as e:
            raise CodegenError(f"LLVM module verification failed: {e}") from None
        return llvm_module
