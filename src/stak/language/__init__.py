"""
Stak Language Front End
=======================

Source text goes through two stages before it can be evaluated:

    Source → Lexer → Tokens → Parser → AST

>>> from stak.language import lex, parse
>>> ast = parse(lex("1 2 +"))
"""

from stak.language.lexer import Lexer, Token, TokenType, lex
from stak.language.parser import Parser, parse
from stak.language.ast import ASTPrinter, ASTVisitor, ChunkNode, Node

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "lex",
    "Parser",
    "parse",
    "ASTPrinter",
    "ASTVisitor",
    "ChunkNode",
    "Node",
]
