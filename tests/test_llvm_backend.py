"""
Test suite for the Kaleido LLVM backend.

Tests cover:
- IR generation for definitions and externs
- JIT execution of anonymous units
- Externs resolved against the host process
- Registry behaviour shared with the interpreter

Author: xwest
"""

import math
import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleido.lexer import Lexer
from llvmlite import ir

from kaleido.parser import Parser, FunctionDef, Prototype, anonymous_name
from kaleido.analyzer import (
    UnknownVariableError, UnknownFunctionError, RedefinitionError, ArityMismatchError,
    NestingDepthError, EvaluationError, CodegenError
)
from kaleido.backend import LLVMBackend


def _parser(code: str) -> Parser:
    parser = Parser(Lexer(code))
    parser.advance()
    return parser


def _definition(code: str) -> FunctionDef:
    return _parser(code).parse_definition()


def _extern(code: str) -> Prototype:
    return _parser(code).parse_extern()


class TestLLVMBackend(unittest.TestCase):
    """Test cases for the LLVM backend."""
    
    def setUp(self):
        """Set up test fixtures."""
        self.backend = LLVMBackend()
        self._counter = 0
    
    def _evaluate(self, code: str) -> float:
        name = anonymous_name(self._counter)
        self._counter += 1
        return self.backend.execute_anonymous(_parser(code).parse_top_level_expr(name))
    
    def test_constant_expression(self):
        self.assertEqual(self._evaluate("1 + 2 * 3"), 7.0)
        self.assertEqual(self._evaluate("9 / 2"), 4.5)
    
    def test_definition_ir(self):
        handle = self.backend.declare_or_define(_definition("def add(a b) a + b"))
        self.assertEqual(handle.name, "add")
        self.assertEqual(handle.arity, 2)
        self.assertIn("define double @\"add\"", handle.text)
        self.assertIn("fadd", handle.text)
        self.assertIn("addtmp", handle.text)
    
    def test_comparison_ir(self):
        handle = self.backend.declare_or_define(_definition("def lt(a b) a < b"))
        self.assertIn("fcmp ult", handle.text)
        self.assertIn("uitofp", handle.text)
    
    def test_extern_ir(self):
        handle = self.backend.declare(_extern("extern cos(x)"))
        self.assertIn("declare double @\"cos\"(double", handle.text)
    
    def test_definition_and_call(self):
        self.backend.declare_or_define(_definition("def add(a b) a + b"))
        self.assertEqual(self._evaluate("add(1, 2)"), 3.0)
        self.assertEqual(self._evaluate("add(add(1, 2), 4)"), 7.0)
    
    def test_calls_through_several_functions(self):
        self.backend.declare_or_define(_definition("def f(x) x * 2"))
        self.backend.declare_or_define(_definition("def g(x) f(f(x)) + 1"))
        self.assertEqual(self._evaluate("g(3)"), 13.0)
    
    def test_comparisons(self):
        self.assertEqual(self._evaluate("1 < 2"), 1.0)
        self.assertEqual(self._evaluate("2 < 1"), 0.0)
        self.assertEqual(self._evaluate("3 > 2"), 1.0)
    
    def test_ieee_division(self):
        self.assertEqual(self._evaluate("1 / 0"), math.inf)
        self.assertTrue(math.isnan(self._evaluate("0 / 0")))
        self.assertEqual(self._evaluate("(0 / 0) < 1"), 1.0)
    
    def test_host_extern(self):
        self.backend.declare(_extern("extern sin(x)"))
        self.assertEqual(self._evaluate("sin(0)"), 0.0)
        self.backend.declare(_extern("extern cos(x)"))
        self.assertEqual(self._evaluate("cos(0)"), 1.0)
    
    def test_unresolved_extern(self):
        self.backend.declare(_extern("extern kaleidoNoSuchSymbol(x)"))
        with self.assertRaises(UnknownFunctionError):
            self._evaluate("kaleidoNoSuchSymbol(1)")
    
    def test_host_extern_with_wrong_arity(self):
        self.backend.declare(_extern("extern sin(a b)"))
        with self.assertRaises(EvaluationError):
            self._evaluate("sin(1, 2)")
        self.assertNotIn("__anon_expr_0", self.backend.functions)
    
    def test_deeply_nested_body_is_rejected(self):
        function = _parser("+".join(["1"] * 1500)).parse_top_level_expr("__anon_expr_0")
        with self.assertRaises(NestingDepthError):
            self.backend.execute_anonymous(function)
        self.assertEqual(self._evaluate("2"), 2.0)
    
    def test_verifier_errors_are_one_line(self):
        module = self.backend._new_module()
        broken = ir.Function(module, ir.FunctionType(ir.DoubleType(), []), name="broken")
        broken.append_basic_block(name="entry")
        with self.assertRaises(CodegenError) as ctx:
            self.backend._verify(module)
        self.assertNotIn("\n", str(ctx.exception.diagnostic))
        self.assertTrue(ctx.exception.message.startswith("LLVM module verification failed:"))
    
    def test_extern_upgraded_by_definition(self):
        self.backend.declare(_extern("extern twice(x)"))
        self.backend.declare_or_define(_definition("def twice(y) y * 2"))
        self.assertEqual(self._evaluate("twice(21)"), 42.0)
    
    def test_redefinition_rejected(self):
        self.backend.declare_or_define(_definition("def f(x) x"))
        with self.assertRaises(RedefinitionError):
            self.backend.declare_or_define(_definition("def f(x) x + 1"))
        self.assertEqual(self._evaluate("f(5)"), 5.0)
    
    def test_unknown_variable_leaves_registry_unchanged(self):
        with self.assertRaises(UnknownVariableError):
            self.backend.declare_or_define(_definition("def f(x) y"))
        self.assertNotIn("f", self.backend.functions)
    
    def test_arity_mismatch(self):
        self.backend.declare_or_define(_definition("def add(a b) a + b"))
        with self.assertRaises(ArityMismatchError):
            self._evaluate("add(1)")
    
    def test_anonymous_unit_is_evicted(self):
        function = _parser("4 * 2").parse_top_level_expr("__anon_expr_0")
        self.assertEqual(self.backend.execute_anonymous(function), 8.0)
        self.assertNotIn("__anon_expr_0", self.backend.functions)
        self.assertNotIn("__anon_expr_0", self.backend.dump())
    
    def test_call_by_name(self):
        self.backend.declare_or_define(_definition("def mul(a b) a * b"))
        self.assertEqual(self.backend.call("mul", 6.0, 7.0), 42.0)
    
    def test_dump_module(self):
        self.backend.declare(_extern("extern sin(x)"))
        self.backend.declare_or_define(_definition("def id(x) x"))
        dump = self.backend.dump()
        self.assertIn("declare double @\"sin\"", dump)
        self.assertIn("define double @\"id\"", dump)


if __name__ == "__main__":
    unittest.main()
