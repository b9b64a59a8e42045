"""
Kaleido top-level driver.

Reads one top-level unit at a time and hands it to the backend:

    top ::= definition | extern | expression | ';'

A unit that fails to parse costs exactly one token of input; a unit the
backend rejects costs nothing more. Either way the session carries on until
end of input.

Author: xwest
"""

import itertools
import sys
from typing import List, Optional, TextIO, Union
from dataclasses import dataclass, field

from .lexer.errors import CompilerError
from .lexer.lexer import Lexer
from .lexer.tokens import TokenType
from .parser.errors import ParseError
from .parser.parser import Parser, anonymous_name
from .backend.capability import CodegenBackend, LoweredFunction


@dataclass
class DriverConfig:
    """Session options."""
    prompt: Optional[str] = None     # e.g. "ready> "; written before each unit
    echo_ir: bool = False            # print each registered function's lowered form
    dump_module: bool = False        # print backend.dump() at end of input
    binop_precedence: Optional[dict] = None


@dataclass
class UnitResult:
    """Outcome of one attempted top-level unit."""
    kind: str                        # "definition", "extern" or "expression"
    name: Optional[str] = None
    value: Optional[float] = None
    handle: Optional[LoweredFunction] = None
    error: Optional[CompilerError] = None
    
    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SessionSummary:
    """Counts for a finished session."""
    results: List[UnitResult] = field(default_factory=list)
    
    @property
    def errors(self) -> List[CompilerError]:
        return [result.error for result in self.results if result.error is not None]
    
    @property
    def values(self) -> List[float]:
        return [result.value for result in self.results
                if result.kind == "expression" and result.ok]


class Driver:
    """
    REPL-style compilation loop over one character stream.
    
    Values of anonymous expressions go to `output`; diagnostics, prompts and
    echoed IR go to `diagnostics`.
    """
    
    def __init__(
        self,
        backend: CodegenBackend,
        source: Union[str, TextIO],
        config: Optional[DriverConfig] = None,
        output: Optional[TextIO] = None,
        diagnostics: Optional[TextIO] = None
    ):
        self.backend = backend
        self.config = config or DriverConfig()
        self.output = output if output is not None else sys.stdout
        self.diagnostics = diagnostics if diagnostics is not None else sys.stderr
        self.parser = Parser(Lexer(source), self.config.binop_precedence)
        self._anonymous_counter = itertools.count()
    
    def run(self) -> SessionSummary:
        """Process units until end of input."""
        summary = SessionSummary()
        
        self._prompt()
        self.parser.advance()  # prime the lookahead
        
        while True:
            token = self.parser.current
            if token.type == TokenType.EOF:
                break
            
            if token.is_char(';'):
                # ignore top-level semicolons
                self.parser.advance()
                continue
            
            if token.type == TokenType.DEF:
                result = self.handle_definition()
            elif token.type == TokenType.EXTERN:
                result = self.handle_extern()
            else:
                result = self.handle_top_level_expression()
            summary.results.append(result)
            self._prompt()
        
        if self.config.dump_module:
            print(self.backend.dump(), file=self.diagnostics)
        return summary
    
    def handle_definition(self) -> UnitResult:
        result = UnitResult("definition")
        try:
            function = self.parser.parse_definition()
        except ParseError as e:
            return self._recover(result, e)
        
        result.name = function.name
        try:
            result.handle = self.backend.declare_or_define(function)
        except CompilerError as e:
            return self._report(result, e)
        
        self._echo("Read function definition:", result.handle)
        return result
    
    def handle_extern(self) -> UnitResult:
        result = UnitResult("extern")
        try:
            prototype = self.parser.parse_extern()
        except ParseError as e:
            return self._recover(result, e)
        
        result.name = prototype.name
        try:
            result.handle = self.backend.declare(prototype)
        except CompilerError as e:
            return self._report(result, e)
        
        self._echo("Read extern:", result.handle)
        return result
    
    def handle_top_level_expression(self) -> UnitResult:
        result = UnitResult("expression")
        name = anonymous_name(next(self._anonymous_counter))
        try:
            function = self.parser.parse_top_level_expr(name)
        except ParseError as e:
            return self._recover(result, e)
        
        result.name = name
        try:
            result.value = self.backend.execute_anonymous(
                function, on_lowered=lambda handle: self._lowered_expression(result, handle)
            )
        except CompilerError as e:
            return self._report(result, e)
        finally:
            self.backend.evict(name)
        
        print(f"Evaluated to {result.value}", file=self.output)
        return result
    
    def _lowered_expression(self, result: UnitResult, handle: LoweredFunction):
        result.handle = handle
        self._echo("Read top-level expression:", handle)
    
    def _recover(self, result: UnitResult, error: ParseError) -> UnitResult:
        """Report a parse error and skip one token."""
        self._report(result, error)
        self.parser.advance()
        return result
    
    def _report(self, result: UnitResult, error: CompilerError) -> UnitResult:
        print(str(error.diagnostic), file=self.diagnostics)
        result.error = error
        return result
    
    def _echo(self, header: str, handle: LoweredFunction):
        if self.config.echo_ir:
            print(header, file=self.diagnostics)
            print(handle.text, file=self.diagnostics)
    
    def _prompt(self):
        if self.config.prompt:
            self.diagnostics.write(self.config.prompt)
            self.diagnostics.flush()


def run_source(backend: CodegenBackend, source: Union[str, TextIO], **kwargs) -> SessionSummary:
    """Convenience function: run a whole source through a fresh Driver."""
    return Driver(backend, source, **kwargs).run()
