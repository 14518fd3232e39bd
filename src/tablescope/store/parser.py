"""Parser for the schema definition DSL.

Example::

    table Person {
        id: int
        name: string?
        best_friend: Person
        pets: Pet[]
        nicknames: string[]?
    }

Scalar types are ``int``, ``bool``, ``string``, ``binary``, ``date``,
``float``, ``double`` and ``uuid``. Any other type name links to the table of
that name. ``?`` makes a scalar or scalar-list column nullable; object links
are always nullable and object lists never are.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import ply.yacc as yacc

from tablescope.errors import SchemaError
from tablescope.store.lexer import SchemaLexer
from tablescope.store.schema import (
    LIST_TYPES,
    SCALAR_TYPE_NAMES,
    ColumnDefinition,
    SchemaRegistry,
    TableDefinition,
)
from tablescope.types import StorageType


@dataclass
class TypeRef:
    """Reference to a column type, possibly as a list."""

    name: str
    is_list: bool = False
    nullable: bool = False


@dataclass
class ColumnSpec:
    """Specification for a column before resolution."""

    name: str
    type_ref: TypeRef


@dataclass
class TableSpec:
    """Specification for a table before resolution."""

    name: str
    columns: list[ColumnSpec]


class SchemaParser:
    """Parser for the schema definition DSL."""

    tokens = SchemaLexer.tokens

    def __init__(self) -> None:
        self.lexer = SchemaLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_schema(self, p: yacc.YaccProduction) -> None:
        """schema : table_list"""
        p[0] = p[1]

    def p_schema_empty(self, p: yacc.YaccProduction) -> None:
        """schema : empty"""
        p[0] = []

    def p_empty(self, p: yacc.YaccProduction) -> None:
        """empty :"""
        p[0] = None

    def p_table_list_single(self, p: yacc.YaccProduction) -> None:
        """table_list : table_def"""
        p[0] = [p[1]]

    def p_table_list_multiple(self, p: yacc.YaccProduction) -> None:
        """table_list : table_list table_def"""
        p[0] = p[1] + [p[2]]

    def p_table_def(self, p: yacc.YaccProduction) -> None:
        """table_def : TABLE IDENTIFIER LBRACE column_list RBRACE
                     | TABLE IDENTIFIER LBRACE column_list COMMA RBRACE"""
        p[0] = TableSpec(name=p[2], columns=p[4])

    def p_table_def_empty(self, p: yacc.YaccProduction) -> None:
        """table_def : TABLE IDENTIFIER LBRACE RBRACE"""
        p[0] = TableSpec(name=p[2], columns=[])

    def p_column_list_single(self, p: yacc.YaccProduction) -> None:
        """column_list : column"""
        p[0] = [p[1]]

    def p_column_list_multiple(self, p: yacc.YaccProduction) -> None:
        """column_list : column_list column
                       | column_list COMMA column"""
        p[0] = p[1] + [p[len(p) - 1]]

    def p_column(self, p: yacc.YaccProduction) -> None:
        """column : IDENTIFIER COLON type_ref"""
        p[0] = ColumnSpec(name=p[1], type_ref=p[3])

    def p_type_ref_simple(self, p: yacc.YaccProduction) -> None:
        """type_ref : IDENTIFIER nullable"""
        p[0] = TypeRef(name=p[1], is_list=False, nullable=p[2])

    def p_type_ref_list(self, p: yacc.YaccProduction) -> None:
        """type_ref : IDENTIFIER LBRACKET RBRACKET nullable"""
        p[0] = TypeRef(name=p[1], is_list=True, nullable=p[4])

    def p_nullable(self, p: yacc.YaccProduction) -> None:
        """nullable : QUESTION
                    | empty"""
        p[0] = p[1] == "?"

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (line {p.lineno})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> SchemaRegistry:
        """Parse table definitions and return a validated SchemaRegistry.

        Raises:
            SyntaxError: If the text is not valid DSL.
            SchemaError: If the definitions are inconsistent.
        """
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        self.lexer.lexer.lineno = 1
        specs: list[TableSpec] = self.parser.parse(data, lexer=self.lexer.lexer) or []

        registry = SchemaRegistry()
        for spec in specs:
            registry.register(
                TableDefinition(
                    name=spec.name,
                    columns=[self._resolve_column(spec.name, c) for c in spec.columns],
                )
            )
        registry.validate()
        return registry

    def _resolve_column(self, table_name: str, spec: ColumnSpec) -> ColumnDefinition:
        """Resolve a column spec to a column definition."""
        type_ref = spec.type_ref
        scalar = SCALAR_TYPE_NAMES.get(type_ref.name)

        if scalar is None:
            # Link to another table; the target is checked once all tables are known
            if type_ref.nullable:
                raise SchemaError(
                    f"Column '{table_name}.{spec.name}': links cannot be marked nullable"
                )
            if type_ref.is_list:
                return ColumnDefinition(
                    spec.name, StorageType.LIST, nullable=False, target=type_ref.name
                )
            return ColumnDefinition(
                spec.name, StorageType.OBJECT, nullable=True, target=type_ref.name
            )

        if type_ref.is_list:
            list_type = LIST_TYPES.get(scalar)
            if list_type is None:
                raise SchemaError(
                    f"Column '{table_name}.{spec.name}': lists of '{type_ref.name}' "
                    "are not supported"
                )
            return ColumnDefinition(spec.name, list_type, nullable=type_ref.nullable)

        return ColumnDefinition(spec.name, scalar, nullable=type_ref.nullable)


def parse_schema(data: str) -> SchemaRegistry:
    """Parse schema DSL text into a SchemaRegistry."""
    return SchemaParser().parse(data)
