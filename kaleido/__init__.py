"""
Kaleido Compiler Package

Front end for a tiny expression language: a pull-based lexer, a recursive
descent parser with precedence climbing, a small AST, and a driver that
compiles and runs one top-level unit at a time against a pluggable backend.

Architecture:
    kaleido/
    ├── lexer/           # Tokenization
    ├── parser/          # Syntax analysis and AST generation
    ├── analyzer/        # Function registry and name resolution
    ├── backend/         # Capability contract, interpreter, LLVM JIT
    ├── driver.py        # Top-level loop and error recovery
    └── cli.py           # Command line front end

Author: xwest
License: MIT
"""

__version__ = "0.1.0"
__author__ = "xwest"
__email__ = "dev@kaleido-lang.org"
__license__ = "MIT"

from .lexer import Lexer
from .parser import Parser, parse_string
from .analyzer import SemanticAnalyzer, FunctionTable
from .backend import CodegenBackend, InterpreterBackend, LLVMBackend
from .driver import Driver, DriverConfig

__all__ = [
    # Core classes
    "Lexer",
    "Parser",
    "parse_string",
    "SemanticAnalyzer",
    "FunctionTable",
    "CodegenBackend",
    "InterpreterBackend",
    "LLVMBackend",
    "Driver",
    "DriverConfig",
    
    # Version info
    "__version__",
    "__author__",
    "__email__",
    "__license__",
]
