"""Parser de filterByFormula: construye un arbol de expresiones."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Union

import ply.yacc as yacc

from airtable_pg.infrastructure.formula.lexer import FormulaLexer, FormulaParseError


@dataclass(frozen=True)
class FieldRef:
    """{field}"""

    name: str


@dataclass(frozen=True)
class StringLiteral:
    value: str


@dataclass(frozen=True)
class NumberLiteral:
    value: Any


@dataclass(frozen=True)
class Name:
    """Identificador suelto (sin parentesis)."""

    name: str


@dataclass(frozen=True)
class Call:
    """Llamada a funcion: NAME(args). El nombre se guarda en mayusculas."""

    name: str
    args: tuple = field(default_factory=tuple)


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Expr"
    right: "Expr"


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: "Expr"


Expr = Union[FieldRef, StringLiteral, NumberLiteral, Name, Call, BinaryOp, UnaryOp]


class FormulaParser:
    """
    Gramatica generica de formulas: acepta cualquier llamada a funcion y
    cualquier operador binario. Decidir que formas se traducen a SQL es
    trabajo del traductor, no del parser.
    """

    tokens = FormulaLexer.tokens

    precedence = (
        ("left", "EQ", "NEQ", "LT", "GT", "LTE", "GTE"),
        ("left", "AMP"),
        ("left", "PLUS", "MINUS"),
        ("left", "STAR", "SLASH"),
        ("right", "UMINUS"),
    )

    def __init__(self) -> None:
        self.lexer = FormulaLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self._lock = threading.Lock()

    def p_formula(self, p: yacc.YaccProduction) -> None:
        """formula : expr"""
        p[0] = p[1]

    def p_expr_binary(self, p: yacc.YaccProduction) -> None:
        """expr : expr EQ expr
                | expr NEQ expr
                | expr LT expr
                | expr GT expr
                | expr LTE expr
                | expr GTE expr
                | expr AMP expr
                | expr PLUS expr
                | expr MINUS expr
                | expr STAR expr
                | expr SLASH expr"""
        p[0] = BinaryOp(op=p[2], left=p[1], right=p[3])

    def p_expr_uminus(self, p: yacc.YaccProduction) -> None:
        """expr : MINUS expr %prec UMINUS"""
        p[0] = UnaryOp(op="-", operand=p[2])

    def p_expr_group(self, p: yacc.YaccProduction) -> None:
        """expr : LPAREN expr RPAREN"""
        p[0] = p[2]

    def p_expr_field(self, p: yacc.YaccProduction) -> None:
        """expr : FIELD"""
        p[0] = FieldRef(name=p[1])

    def p_expr_string(self, p: yacc.YaccProduction) -> None:
        """expr : STRING"""
        p[0] = StringLiteral(value=p[1])

    def p_expr_number(self, p: yacc.YaccProduction) -> None:
        """expr : NUMBER"""
        p[0] = NumberLiteral(value=p[1])

    def p_expr_name(self, p: yacc.YaccProduction) -> None:
        """expr : NAME"""
        p[0] = Name(name=p[1])

    def p_expr_call(self, p: yacc.YaccProduction) -> None:
        """expr : NAME LPAREN args RPAREN"""
        p[0] = Call(name=p[1].upper(), args=tuple(p[3]))

    def p_expr_call_empty(self, p: yacc.YaccProduction) -> None:
        """expr : NAME LPAREN RPAREN"""
        p[0] = Call(name=p[1].upper(), args=())

    def p_args_single(self, p: yacc.YaccProduction) -> None:
        """args : expr"""
        p[0] = [p[1]]

    def p_args_multiple(self, p: yacc.YaccProduction) -> None:
        """args : args COMMA expr"""
        p[0] = p[1] + [p[3]]

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise FormulaParseError(f"Error de sintaxis en '{p.value}' (posicion {p.lexpos})")
        raise FormulaParseError("Error de sintaxis: fin inesperado de la formula")

    def build(self, **kwargs: Any) -> None:
        """Construye el parser."""
        self.parser = yacc.yacc(module=self, start="formula", **kwargs)

    def parse(self, data: str) -> Expr:
        """Parsea una formula. Levanta FormulaParseError si no es valida."""
        with self._lock:
            if self.parser is None:
                self.build(debug=False, write_tables=False, errorlog=yacc.NullLogger())
            return self.parser.parse(data, lexer=self.lexer.lexer.clone())
