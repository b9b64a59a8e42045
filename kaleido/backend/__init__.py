"""
Kaleido Backend Package

The capability contract the driver codes against, and two implementations:
- InterpreterBackend: walks the AST in Python
- LLVMBackend: lowers to LLVM IR with llvmlite and runs it with MCJIT

Author: xwest
"""

from .capability import CodegenBackend, LoweredFunction
from .interpreter import InterpreterBackend, DEFAULT_EXTERNALS
from .llvm_backend import LLVMBackend

BACKENDS = {
    "llvm": LLVMBackend,
    "interp": InterpreterBackend,
}


def create_backend(name: str) -> CodegenBackend:
    """Instantiate a backend by its CLI name."""
    try:
        backend_class = BACKENDS[name]
    except KeyError:
        raise ValueError(
            f"Unknown backend {name!r}; choose one of {', '.join(sorted(BACKENDS))}"
        ) from None
    return backend_class()


__all__ = [
    "CodegenBackend",
    "LoweredFunction",
    "InterpreterBackend",
    "LLVMBackend",
    "DEFAULT_EXTERNALS",
    "BACKENDS",
    "create_backend",
]
