"""
Test suite for the Kaleido semantic analyzer and function registry.

Tests cover:
- Name resolution against parameters and registered functions
- Argument count checks, including self-recursion
- Redefinition, extern upgrade and duplicate parameters

Author: xwest
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleido.lexer import Lexer
from kaleido.parser import Parser, Prototype, FunctionDef, BinaryOp, VariableRef
from kaleido.analyzer import (
    SemanticAnalyzer, FunctionTable, SemanticError, UnknownVariableError,
    UnknownFunctionError, RedefinitionError, ArityMismatchError,
    DuplicateParameterError, InvalidOperatorError, CodegenError
)


def _definition(code: str) -> FunctionDef:
    parser = Parser(Lexer(code))
    parser.advance()
    return parser.parse_definition()


class TestSemanticAnalyzer(unittest.TestCase):
    """Test cases for the semantic analyzer."""
    
    def setUp(self):
        """Set up test fixtures."""
        self.functions = FunctionTable()
        self.analyzer = SemanticAnalyzer(self.functions)
    
    def _check(self, code: str):
        self.analyzer.check_function(_definition(code))
    
    def test_parameters_resolve(self):
        self._check("def add(a b) a + b")
    
    def test_unknown_variable(self):
        with self.assertRaises(UnknownVariableError) as ctx:
            self._check("def f(x) y")
        self.assertEqual(ctx.exception.message, "Unknown variable name 'y'")
        self.assertEqual(ctx.exception.diagnostic.code, "S010")
    
    def test_unknown_function(self):
        with self.assertRaises(UnknownFunctionError) as ctx:
            self._check("def f(x) g(x)")
        self.assertEqual(ctx.exception.message, "Unknown function referenced 'g'")
    
    def test_call_to_registered_function(self):
        self.functions.declare(Prototype("sin", ["x"]))
        self._check("def f(x) sin(x) * 2")
    
    def test_wrong_argument_count(self):
        self.functions.declare(Prototype("sin", ["x"]))
        with self.assertRaises(ArityMismatchError) as ctx:
            self._check("def f(x) sin(x, x)")
        self.assertEqual(
            ctx.exception.message,
            "Incorrect # of arguments for 'sin': expected 1, got 2"
        )
    
    def test_self_recursion(self):
        self._check("def fib(n) fib(n - 1) + fib(n - 2)")
        self.assertNotIn("fib", self.functions)
    
    def test_self_recursion_arity(self):
        with self.assertRaises(ArityMismatchError):
            self._check("def f(n) f(n, n)")
    
    def test_redefinition(self):
        self.functions.define(_definition("def f(x) x"))
        with self.assertRaises(RedefinitionError):
            self._check("def f(y) y")
    
    def test_duplicate_parameters(self):
        with self.assertRaises(DuplicateParameterError):
            self._check("def f(a a) a")
    
    def test_unsupported_operator(self):
        body = BinaryOp('%', VariableRef("a"), VariableRef("b"))
        with self.assertRaises(InvalidOperatorError):
            self.analyzer.check_function(FunctionDef(Prototype("f", ["a", "b"]), body))
    
    def test_scope_does_not_leak(self):
        self._check("def f(x) x")
        with self.assertRaises(UnknownVariableError):
            self._check("def g(y) x")
    
    def test_messages_are_single_line(self):
        error = CodegenError("verification failed:\n  first\n  second\n")
        self.assertEqual(error.message, "verification failed: first second")
        self.assertEqual(str(error), "ERROR[S090]: verification failed: first second")
    
    def test_errors_share_a_base(self):
        with self.assertRaises(SemanticError):
            self._check("def f() nothing")


class TestFunctionTable(unittest.TestCase):
    """Test cases for the function registry."""
    
    def setUp(self):
        self.functions = FunctionTable()
    
    def test_declare_is_idempotent(self):
        first = self.functions.declare(Prototype("sin", ["x"]))
        second = self.functions.declare(Prototype("sin", ["angle"]))
        self.assertIs(first, second)
        self.assertEqual(len(self.functions), 1)
    
    def test_conflicting_declaration(self):
        self.functions.declare(Prototype("f", ["x"]))
        with self.assertRaises(ArityMismatchError) as ctx:
            self.functions.declare(Prototype("f", ["x", "y"]))
        self.assertIn("Conflicting declaration", ctx.exception.message)
    
    def test_define_upgrades_declaration(self):
        declared = self.functions.declare(Prototype("f", ["x"]))
        self.assertFalse(declared.is_defined)
        
        defined = self.functions.define(_definition("def f(y) y * 2"))
        self.assertIs(declared, defined)
        self.assertTrue(defined.is_defined)
        self.assertEqual(defined.prototype.params, ["y"])
    
    def test_define_with_other_arity_than_declaration(self):
        self.functions.declare(Prototype("f", ["x"]))
        with self.assertRaises(ArityMismatchError):
            self.functions.define(_definition("def f(a b) a"))
        self.assertFalse(self.functions.lookup("f").is_defined)
    
    def test_redefinition_keeps_first_body(self):
        self.functions.define(_definition("def f(x) x"))
        with self.assertRaises(RedefinitionError):
            self.functions.define(_definition("def f(x) x + 1"))
        self.assertEqual(str(self.functions.lookup("f").body), "x")
    
    def test_resolve_call(self):
        self.functions.declare(Prototype("pow", ["x", "y"]))
        self.assertEqual(self.functions.resolve_call("pow", 2).name, "pow")
        with self.assertRaises(ArityMismatchError):
            self.functions.resolve_call("pow", 1)
        with self.assertRaises(UnknownFunctionError):
            self.functions.resolve_call("nope", 0)
    
    def test_remove(self):
        self.functions.declare(Prototype("f", []))
        self.assertIsNotNone(self.functions.remove("f"))
        self.assertNotIn("f", self.functions)
        self.assertIsNone(self.functions.remove("f"))
    
    def test_declaration_only_body_access(self):
        symbol = self.functions.declare(Prototype("f", []))
        with self.assertRaises(ValueError):
            symbol.as_function_def()
    
    def test_iteration_order(self):
        for name in ("c", "a", "b"):
            self.functions.declare(Prototype(name, []))
        self.assertEqual([symbol.name for symbol in self.functions], ["c", "a", "b"])
        self.assertEqual(self.functions.names(), ["c", "a", "b"])


if __name__ == "__main__":
    unittest.main()
