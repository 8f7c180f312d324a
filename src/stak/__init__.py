"""
Stak - A Small Stack-Based Concatenative Language
=================================================

Stak programs are sequences of words that operate on one shared operand
stack. Literals push values, operations pop their operands and push
their results, and the operation that runs for a name is chosen by the
types of the values currently on top of the stack.

Main Components
---------------
- **language**: lexer, parser, and AST
- **runtime**: values, overload dispatch, built-ins, and the evaluator
- **session**: the lex/parse/run driver used by the CLI and REPL
- **cli**: the ``stak`` command

Quick Start
-----------
    >>> from stak import Session
    >>> session = Session()
    >>> result = session.run_source('"ab" 3 *')
    >>> print(result.stack)
    ["ababab"]

Working with the stages directly:
    >>> from stak import lex, parse, Program
    >>> program = Program.std_program()
    >>> program.run(parse(lex("2 3 +")))
    >>> print(program.stack)
    5

Or use the command-line tool:
    $ stak script.stk
    $ stak -e '1 2 + 3 *'
    $ stak                  # interactive REPL
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from stak.errors import (
    Position,
    StakError,
    InternalError,
    LexError,
    ParseError,
    UnexpectedTokenError,
    UnterminatedBlockError,
    ExecutionError,
    StackUnderflowError,
    UnknownIdentifierError,
    OperationCopyError,
    NoMatchingOverloadError,
    OperandTypeError,
    OperandError,
)
from stak.language import lex, parse, Token, TokenType
from stak.runtime import Type, Value
from stak.runtime.program import Program, Stack
from stak.session import Session, SessionOptions, RunResult

__all__ = [
    # Version
    "__version__",
    # Front end
    "lex",
    "parse",
    "Token",
    "TokenType",
    # Runtime
    "Type",
    "Value",
    "Program",
    "Stack",
    # Session
    "Session",
    "SessionOptions",
    "RunResult",
    # Errors
    "Position",
    "StakError",
    "InternalError",
    "LexError",
    "ParseError",
    "UnexpectedTokenError",
    "UnterminatedBlockError",
    "ExecutionError",
    "StackUnderflowError",
    "UnknownIdentifierError",
    "OperationCopyError",
    "NoMatchingOverloadError",
    "OperandTypeError",
    "OperandError",
]
