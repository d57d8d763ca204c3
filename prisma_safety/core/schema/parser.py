"""
Prisma schema parser.

Turns schema source text into the frozen node tree in ``nodes.py``. Only the
structure the safety check needs is modelled precisely (models, fields,
attributes and their arguments); datasource/generator blocks are kept as
plain key/value assignments.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from prisma_safety.core.errors import SchemaParseError
from prisma_safety.core.schema.nodes import (
    Argument,
    ArrayValue,
    Assignment,
    AttributeNode,
    Block,
    CommentNode,
    ConfigBlock,
    EnumBlock,
    EnumValueNode,
    FieldNode,
    FunctionCall,
    Identifier,
    KeyValue,
    ModelBlock,
    Schema,
    Value,
)


MODEL_KINDS = ("model", "view", "type")
CONFIG_KINDS = ("datasource", "generator")

_TOKEN_SPEC = [
    ("DOC_COMMENT", r"///[^\n]*"),
    ("COMMENT", r"//[^\n]*"),
    ("NEWLINE", r"\n"),
    ("WS", r"[ \t\r\f\v]+"),
    ("STRING", r'"(?:[^"\\\n]|\\.)*"'),
    ("NUMBER", r"-?\d+(?:\.\d+)?"),
    ("IDENT", r"[A-Za-z_][A-Za-z0-9_]*"),
    ("AT_AT", r"@@"),
    ("AT", r"@"),
    ("PUNCT", r"[{}()\[\],:=?.]"),
    ("MISMATCH", r"."),
]
_TOKEN_RE = re.compile("|".join(f"(?P<{name}>{pattern})" for name, pattern in _TOKEN_SPEC))

_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t", "r": "\r"}


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    line: int
    column: int


def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    line = 1
    line_start = 0
    for m in _TOKEN_RE.finditer(text or ""):
        kind = m.lastgroup or "MISMATCH"
        value = m.group()
        column = m.start() - line_start + 1
        if kind == "NEWLINE":
            tokens.append(Token(kind, value, line, column))
            line += 1
            line_start = m.end()
            continue
        if kind == "WS":
            continue
        if kind == "MISMATCH":
            raise SchemaParseError(f"Unexpected character {value!r}", line=line, column=column)
        tokens.append(Token(kind, value, line, column))
    tokens.append(Token("EOF", "", line, (len(text or "") - line_start) + 1))
    return tokens


def _unquote(raw: str) -> str:
    body = raw[1:-1]
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), "\\" + m.group(1)), body)


class _Parser:
    def __init__(self, tokens: List[Token]):
        self._tokens = tokens
        self._pos = 0

    # ---------------------------------------------------------------------
    # Token helpers
    # ---------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> Token:
        idx = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[idx]

    def _next(self) -> Token:
        tok = self._peek()
        if tok.kind != "EOF":
            self._pos += 1
        return tok

    def _at(self, kind: str, value: Optional[str] = None) -> bool:
        tok = self._peek()
        return tok.kind == kind and (value is None or tok.value == value)

    def _expect(self, kind: str, value: Optional[str] = None, what: Optional[str] = None) -> Token:
        tok = self._peek()
        if not self._at(kind, value):
            expected = what or (repr(value) if value else kind.lower())
            found = "end of file" if tok.kind == "EOF" else repr(tok.value)
            raise SchemaParseError(f"Expected {expected}, found {found}", line=tok.line, column=tok.column)
        return self._next()

    def _error(self, message: str, tok: Optional[Token] = None) -> SchemaParseError:
        tok = tok or self._peek()
        return SchemaParseError(message, line=tok.line, column=tok.column)

    def _skip_newlines(self) -> None:
        while self._at("NEWLINE"):
            self._next()

    def _end_of_statement(self) -> None:
        if self._at("NEWLINE"):
            self._next()
            return
        if self._at("PUNCT", "}") or self._at("EOF"):
            return
        raise self._error(f"Unexpected {self._peek().value!r} at end of line")

    # ---------------------------------------------------------------------
    # Top level
    # ---------------------------------------------------------------------

    def parse(self) -> Schema:
        blocks: List[Block] = []
        comments: List[CommentNode] = []
        seen: set[Tuple[str, str]] = set()

        while True:
            self._skip_newlines()
            tok = self._peek()
            if tok.kind == "EOF":
                break
            if tok.kind in ("COMMENT", "DOC_COMMENT"):
                comments.append(self._comment())
                continue
            if tok.kind != "IDENT" or tok.value not in MODEL_KINDS + CONFIG_KINDS + ("enum",):
                raise self._error(f"Unexpected {tok.value!r}; expected a block declaration")

            block = self._block()
            namespace = "config:" + block.kind if isinstance(block, ConfigBlock) else "type"
            key = (namespace, block.name)
            if key in seen:
                raise self._error(f"Duplicate {block.kind} name {block.name!r}", tok)
            seen.add(key)
            blocks.append(block)

        return Schema(blocks=tuple(blocks), comments=tuple(comments))

    def _comment(self) -> CommentNode:
        tok = self._next()
        if tok.kind == "DOC_COMMENT":
            return CommentNode(text=tok.value[3:].strip(), doc=True, line=tok.line)
        return CommentNode(text=tok.value[2:].strip(), doc=False, line=tok.line)

    def _block(self) -> Block:
        keyword = self._next()
        name = self._expect("IDENT", what=f"{keyword.value} name")
        self._expect("PUNCT", "{")
        if keyword.value in MODEL_KINDS:
            block: Block = self._model_body(keyword.value, name)
        elif keyword.value == "enum":
            block = self._enum_body(name)
        else:
            block = self._config_body(keyword.value, name)
        self._expect("PUNCT", "}")
        return block

    # ---------------------------------------------------------------------
    # Blocks
    # ---------------------------------------------------------------------

    def _model_body(self, kind: str, name_tok: Token) -> ModelBlock:
        fields: List[FieldNode] = []
        attributes: List[AttributeNode] = []
        comments: List[CommentNode] = []
        names: set[str] = set()

        while True:
            self._skip_newlines()
            tok = self._peek()
            if self._at("PUNCT", "}") or tok.kind == "EOF":
                break
            if tok.kind in ("COMMENT", "DOC_COMMENT"):
                comments.append(self._comment())
                continue
            if tok.kind == "AT_AT":
                attributes.append(self._attribute())
                self._skip_trailing_comment(comments)
                self._end_of_statement()
                continue
            if tok.kind == "IDENT":
                fld = self._field()
                if fld.name in names:
                    raise self._error(f"Duplicate field {fld.name!r} in {kind} {name_tok.value!r}", tok)
                names.add(fld.name)
                fields.append(fld)
                continue
            raise self._error(f"Unexpected {tok.value!r} in {kind} {name_tok.value!r}")

        return ModelBlock(
            kind=kind,
            name=name_tok.value,
            fields=tuple(fields),
            attributes=tuple(attributes),
            comments=tuple(comments),
            line=name_tok.line,
        )

    def _field(self) -> FieldNode:
        name = self._next()
        type_tok = self._expect("IDENT", what=f"type for field {name.value!r}")
        type_name = type_tok.value
        if type_name == "Unsupported" and self._at("PUNCT", "("):
            self._next()
            raw = self._expect("STRING", what="Unsupported type description")
            self._expect("PUNCT", ")")
            type_name = f'Unsupported("{_unquote(raw.value)}")'

        optional = False
        array = False
        if self._at("PUNCT", "["):
            self._next()
            self._expect("PUNCT", "]")
            array = True
        if self._at("PUNCT", "?"):
            self._next()
            optional = True

        attributes: List[AttributeNode] = []
        while self._at("AT"):
            attributes.append(self._attribute())

        comment = None
        if self._at("COMMENT") or self._at("DOC_COMMENT"):
            comment = self._comment().text
        self._end_of_statement()

        return FieldNode(
            name=name.value,
            type_name=type_name,
            optional=optional,
            array=array,
            attributes=tuple(attributes),
            comment=comment,
            line=name.line,
        )

    def _enum_body(self, name_tok: Token) -> EnumBlock:
        values: List[EnumValueNode] = []
        attributes: List[AttributeNode] = []
        comments: List[CommentNode] = []
        names: set[str] = set()

        while True:
            self._skip_newlines()
            tok = self._peek()
            if self._at("PUNCT", "}") or tok.kind == "EOF":
                break
            if tok.kind in ("COMMENT", "DOC_COMMENT"):
                comments.append(self._comment())
                continue
            if tok.kind == "AT_AT":
                attributes.append(self._attribute())
            elif tok.kind == "IDENT":
                self._next()
                if tok.value in names:
                    raise self._error(f"Duplicate value {tok.value!r} in enum {name_tok.value!r}", tok)
                names.add(tok.value)
                value_attrs: List[AttributeNode] = []
                while self._at("AT"):
                    value_attrs.append(self._attribute())
                values.append(EnumValueNode(name=tok.value, attributes=tuple(value_attrs), line=tok.line))
            else:
                raise self._error(f"Unexpected {tok.value!r} in enum {name_tok.value!r}")
            self._skip_trailing_comment(comments)
            self._end_of_statement()

        return EnumBlock(
            name=name_tok.value,
            values=tuple(values),
            attributes=tuple(attributes),
            comments=tuple(comments),
            line=name_tok.line,
        )

    def _config_body(self, kind: str, name_tok: Token) -> ConfigBlock:
        assignments: List[Assignment] = []
        while True:
            self._skip_newlines()
            tok = self._peek()
            if self._at("PUNCT", "}") or tok.kind == "EOF":
                break
            if tok.kind in ("COMMENT", "DOC_COMMENT"):
                self._next()
                continue
            key = self._expect("IDENT", what=f"{kind} setting name")
            self._expect("PUNCT", "=")
            assignments.append(Assignment(key=key.value, value=self._value()))
            self._skip_trailing_comment(None)
            self._end_of_statement()
        return ConfigBlock(kind=kind, name=name_tok.value, assignments=tuple(assignments), line=name_tok.line)

    def _skip_trailing_comment(self, sink: Optional[List[CommentNode]]) -> None:
        if self._at("COMMENT") or self._at("DOC_COMMENT"):
            c = self._comment()
            if sink is not None:
                sink.append(c)

    # ---------------------------------------------------------------------
    # Attributes and values
    # ---------------------------------------------------------------------

    def _attribute(self) -> AttributeNode:
        marker = self._next()
        kind = "block" if marker.kind == "AT_AT" else "field"
        parts = [self._expect("IDENT", what="attribute name").value]
        while self._at("PUNCT", "."):
            self._next()
            parts.append(self._expect("IDENT", what="attribute name").value)

        arguments: Tuple[Argument, ...] = ()
        if self._at("PUNCT", "("):
            arguments = self._argument_list()
        return AttributeNode(name=".".join(parts), kind=kind, arguments=arguments, line=marker.line)

    def _argument_list(self) -> Tuple[Argument, ...]:
        self._expect("PUNCT", "(")
        args: List[Argument] = []
        self._skip_newlines()
        while not self._at("PUNCT", ")"):
            if self._at("IDENT") and self._peek(1).kind == "PUNCT" and self._peek(1).value == ":":
                key = self._next().value
                self._next()
                args.append(KeyValue(key=key, value=self._value()))
            else:
                args.append(self._value())
            self._skip_newlines()
            if self._at("PUNCT", ","):
                self._next()
                self._skip_newlines()
            elif not self._at("PUNCT", ")"):
                raise self._error(f"Expected ',' or ')', found {self._peek().value!r}")
        self._expect("PUNCT", ")")
        return tuple(args)

    def _value(self) -> Value:
        tok = self._peek()
        if tok.kind == "STRING":
            self._next()
            return _unquote(tok.value)
        if tok.kind == "NUMBER":
            self._next()
            return float(tok.value) if "." in tok.value else int(tok.value)
        if self._at("PUNCT", "["):
            return self._array()
        if tok.kind == "IDENT":
            self._next()
            if tok.value in ("true", "false"):
                return tok.value == "true"
            name = tok.value
            while self._at("PUNCT", ".") and self._peek(1).kind == "IDENT":
                self._next()
                name += "." + self._next().value
            if self._at("PUNCT", "("):
                return FunctionCall(name=name, arguments=self._argument_list())
            return Identifier(name=name)
        found = "end of file" if tok.kind == "EOF" else repr(tok.value)
        raise self._error(f"Expected a value, found {found}")

    def _array(self) -> ArrayValue:
        self._expect("PUNCT", "[")
        items: List[Value] = []
        self._skip_newlines()
        while not self._at("PUNCT", "]"):
            items.append(self._value())
            self._skip_newlines()
            if self._at("PUNCT", ","):
                self._next()
                self._skip_newlines()
            elif not self._at("PUNCT", "]"):
                raise self._error(f"Expected ',' or ']', found {self._peek().value!r}")
        self._expect("PUNCT", "]")
        return ArrayValue(items=tuple(items))


def parse_schema(text: str) -> Schema:
    """
    Parse Prisma schema text.

    Raises SchemaParseError (with line/column) on syntax errors and on
    duplicate block, field or enum value names.
    """
    return _Parser(tokenize(text)).parse()
