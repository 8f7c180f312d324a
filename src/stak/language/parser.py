"""
Stak Recursive Descent Parser
=============================

This module turns the token list produced by the lexer into an AST.
Stak has almost no syntax: most tokens map one-to-one onto leaf nodes,
and only the control keywords open nested blocks.

Grammar (Simplified EBNF)
-------------------------
program     ::= node*
node        ::= literal | IDENTIFIER | TAKE | COPY_TO | COPY
              | if_block | repeat_block | macro_block
if_block    ::= 'if' node* ('else' node*)? 'end'
repeat_block::= 'repeat' node* 'end'
macro_block ::= 'macro' IDENTIFIER TAKE? node* 'end'

A block body holding exactly one node is stored unwrapped; any other
body becomes a ChunkNode. The optional TAKE group after a macro name is
its signature, written with type names (``any str char int float bool``)
in stack order, deepest first:

    macro greet (str) "hello " swap + end

Example Usage
-------------
>>> from stak.language.lexer import lex
>>> from stak.language.parser import parse
>>> ast = parse(lex("true if 1 else 2 end"))
>>> ast.nodes[0]
IfNode(...)
"""

from typing import Optional
import logging

from stak.errors import ParseError, Position, UnexpectedTokenError, UnterminatedBlockError
from stak.language.lexer import Token, TokenType
from stak.language.ast import (
    Node,
    ChunkNode,
    StringLiteral,
    CharLiteral,
    IntLiteral,
    FloatLiteral,
    BooleanLiteral,
    IdentifierNode,
    TakeNode,
    CopyToNode,
    CopyNode,
    IfNode,
    RepeatNode,
    MacroNode,
)
from stak.runtime.values import TYPE_NAMES, TYPES_BY_NAME, Type


logger = logging.getLogger(__name__)


# Token types that map straight onto a leaf node class
LEAF_NODES: dict[TokenType, type] = {
    TokenType.STRING: StringLiteral,
    TokenType.CHAR: CharLiteral,
    TokenType.INT: IntLiteral,
    TokenType.FLOAT: FloatLiteral,
    TokenType.BOOLEAN: BooleanLiteral,
}


class Parser:
    """
    Recursive descent parser for Stak.

    Uses a single token of lookahead and never backtracks. The first
    syntax error aborts parsing.

    Attributes:
        tokens: List of tokens to parse
    """

    def __init__(self, tokens: list[Token]):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer
        """
        self.tokens = tokens

        # Current position in token stream
        self._pos = 0

    def parse(self) -> ChunkNode:
        """
        Parse the token stream into an AST.

        Returns:
            Root ChunkNode holding every top-level node

        Raises:
            ParseError: If the tokens do not form a valid program
        """
        if not self.tokens:
            return ChunkNode(position=Position.zero(), nodes=[])

        nodes = []
        position = self.tokens[0].position
        while not self._at_end():
            node = self._parse_node()
            position = position.extend(node.position)
            nodes.append(node)

        logger.debug(f"Parsed {len(nodes)} top-level nodes")
        return ChunkNode(position=position, nodes=nodes)

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've consumed every token."""
        return self._pos >= len(self.tokens)

    def _peek(self) -> Optional[Token]:
        """Look at the current token without consuming it."""
        if self._at_end():
            return None
        return self.tokens[self._pos]

    def _advance(self) -> Token:
        """Consume and return the current token."""
        token = self.tokens[self._pos]
        self._pos += 1
        return token

    # =========================================================================
    # Node Parsing
    # =========================================================================

    def _parse_node(self) -> Node:
        """Parse one node starting at the current token."""
        token = self._advance()

        if token.type in LEAF_NODES:
            return LEAF_NODES[token.type](position=token.position, value=token.value)

        if token.type == TokenType.IDENTIFIER:
            return IdentifierNode(position=token.position, name=token.value)

        if token.type == TokenType.TAKE:
            return TakeNode(position=token.position, names=token.value)

        if token.type == TokenType.COPY_TO:
            return CopyToNode(position=token.position, names=token.value)

        if token.type == TokenType.COPY:
            return CopyNode(position=token.position, token=token.value)

        if token.type == TokenType.IF:
            return self._parse_if(token)

        if token.type == TokenType.REPEAT:
            return self._parse_repeat(token)

        if token.type == TokenType.MACRO:
            return self._parse_macro(token)

        # 'end' or 'else' with no open block
        raise UnexpectedTokenError(str(token), token.position)

    def _parse_block(
        self,
        opener: Token,
        terminators: tuple[TokenType, ...],
    ) -> tuple[list[Node], Token]:
        """
        Collect nodes until one of the terminator keywords.

        Args:
            opener: The keyword token that opened the block
            terminators: Keyword types that close this body

        Returns:
            The body nodes and the consumed terminator token

        Raises:
            UnterminatedBlockError: If the input ends first
        """
        nodes = []
        while True:
            token = self._peek()
            if token is None:
                position = opener.position
                for node in nodes:
                    position = position.extend(node.position)
                raise UnterminatedBlockError(opener.type.name.lower(), position)

            if token.type in terminators:
                return nodes, self._advance()

            nodes.append(self._parse_node())

    def _wrap_body(self, nodes: list[Node], terminator: Token) -> Node:
        """Use a single node as-is, otherwise wrap the nodes in a ChunkNode."""
        if len(nodes) == 1:
            return nodes[0]

        if not nodes:
            return ChunkNode(position=terminator.position, nodes=[])

        position = nodes[0].position
        for node in nodes[1:]:
            position = position.extend(node.position)
        return ChunkNode(position=position, nodes=nodes)

    def _parse_if(self, opener: Token) -> IfNode:
        """Parse 'if <body> [else <body>] end'."""
        nodes, terminator = self._parse_block(opener, (TokenType.END, TokenType.ELSE))
        body = self._wrap_body(nodes, terminator)

        else_body = None
        if terminator.type == TokenType.ELSE:
            else_nodes, terminator = self._parse_block(opener, (TokenType.END,))
            else_body = self._wrap_body(else_nodes, terminator)

        position = opener.position.extend(terminator.position)
        return IfNode(position=position, body=body, else_body=else_body)

    def _parse_repeat(self, opener: Token) -> RepeatNode:
        """Parse 'repeat <body> end'."""
        nodes, terminator = self._parse_block(opener, (TokenType.END,))
        body = self._wrap_body(nodes, terminator)

        position = opener.position.extend(terminator.position)
        return RepeatNode(position=position, body=body)

    def _parse_macro(self, opener: Token) -> MacroNode:
        """
        Parse 'macro <name> [(<type> ...)] <body> end'.

        A body that itself starts with a take group needs an explicit empty
        signature in front of it: ``macro f () (a b) ... end``.
        """
        name_token = self._peek()
        if name_token is None:
            raise UnterminatedBlockError("macro", opener.position)
        if name_token.type != TokenType.IDENTIFIER:
            raise UnexpectedTokenError(str(name_token), name_token.position, expected="macro name")
        self._advance()

        parameter_types: tuple[Type, ...] = ()
        signature = self._peek()
        if signature is not None and signature.type == TokenType.TAKE:
            self._advance()
            parameter_types = self._parse_signature(signature)

        nodes, terminator = self._parse_block(opener, (TokenType.END,))
        body = self._wrap_body(nodes, terminator)

        position = opener.position.extend(terminator.position)
        return MacroNode(
            position=position,
            name=name_token.value,
            parameter_types=parameter_types,
            body=body,
        )

    def _parse_signature(self, token: Token) -> tuple[Type, ...]:
        """Convert a take group of type names into a deepest-first type tuple."""
        types = []
        for name in reversed(token.value):
            if name not in TYPES_BY_NAME:
                raise ParseError(
                    f"unknown type '{name}' in macro signature",
                    token.position,
                    hint=f"valid types are: {', '.join(TYPE_NAMES.values())}",
                )
            types.append(TYPES_BY_NAME[name])
        return tuple(types)


def parse(tokens: list[Token]) -> ChunkNode:
    """
    Parse a token list into an AST.

    Args:
        tokens: Tokens produced by stak.language.lexer.lex

    Returns:
        The root ChunkNode

    Raises:
        ParseError: On the first syntax error
    """
    return Parser(tokens).parse()
