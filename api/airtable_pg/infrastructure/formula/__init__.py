"""
Traductor de filterByFormula (Airtable) a SQL.

Pipeline: lexer (PLY) -> parser LALR (arbol de expresiones) -> traductor.
"""
from airtable_pg.infrastructure.formula.lexer import FormulaLexer, FormulaParseError
from airtable_pg.infrastructure.formula.parser import FormulaParser
from airtable_pg.infrastructure.formula.translator import FormulaTranslator, escape_like

__all__ = [
    "FormulaLexer",
    "FormulaParseError",
    "FormulaParser",
    "FormulaTranslator",
    "escape_like",
]
