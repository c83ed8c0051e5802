"""
Traduccion de filterByFormula a predicados SQL parametrizados.

Formas soportadas (todo lo demas no aporta predicado):
  - AND(a, b, ...)                          conjuncion de sus argumentos
  - SEARCH("texto", {field})                contiene, case-insensitive
  - SEARCH("texto", ARRAYJOIN({field}))     idem sobre el texto JSON
  - {field} = "valor" / {field} = 'valor'   igualdad o pertenencia a array
  - {field} = TRUE()                        booleano heterogeneo

Politica por defecto: lo no reconocido se ignora (fail open). Si la formula
no parsea pero es un AND(...), cada argumento se parsea por separado y solo
se descartan los invalidos. En modo estricto se levanta
FormulaSyntaxException.
"""
from __future__ import annotations

import re
import threading
from typing import Dict, Iterator, List, Optional

import psycopg
from loguru import logger

from airtable_pg.core.config import settings
from airtable_pg.domain.entities.filter_clause import FilterClause
from airtable_pg.infrastructure.formula.lexer import FormulaParseError
from airtable_pg.infrastructure.formula.parser import (
    BinaryOp,
    Call,
    Expr,
    FieldRef,
    FormulaParser,
    StringLiteral,
)
from airtable_pg.infrastructure.records.linked_records import LinkedRecordResolver
from airtable_pg.infrastructure.schema.introspector import find_column
from airtable_pg.shared.exceptions.domain import FormulaSyntaxException
from airtable_pg.shared.utils.identifiers import quote_ident

_LIKE_SPECIAL = re.compile(r"([\\%_])")
_AND_PREFIX = re.compile(r"^\s*AND\s*\(", re.IGNORECASE)


def escape_like(value: str) -> str:
    """Escapa comodines de LIKE (el escape por defecto es '\\')."""
    return _LIKE_SPECIAL.sub(r"\\\1", value)


def split_and_arguments(formula: str) -> Optional[List[str]]:
    """
    Separa los argumentos de un AND(...) de primer nivel sin tokenizar:
    sirve aunque algun argumento tenga caracteres ilegales.

    Respeta strings (con escapes), {fields} y parentesis anidados. Retorna
    None si la formula no es un AND(...) balanceado.
    """
    match = _AND_PREFIX.match(formula)
    if not match:
        return None

    arguments: List[str] = []
    current: List[str] = []
    depth = 0
    quote: Optional[str] = None
    in_field = False
    escaped = False
    rest = formula[match.end():]

    for index, char in enumerate(rest):
        if quote:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            continue
        if in_field:
            current.append(char)
            in_field = char != "}"
            continue

        if char in ("'", '"'):
            quote = char
        elif char == "{":
            in_field = True
        elif char == "(":
            depth += 1
        elif char == ")":
            if depth == 0:
                if rest[index + 1:].strip():
                    return None
                arguments.append("".join(current).strip())
                return [a for a in arguments if a]
            depth -= 1
        elif char == "," and depth == 0:
            arguments.append("".join(current).strip())
            current = []
            continue
        current.append(char)

    return None


class FormulaTranslator:
    def __init__(
        self,
        resolver: LinkedRecordResolver,
        *,
        strict: Optional[bool] = None,
        parser: Optional[FormulaParser] = None,
    ) -> None:
        self._resolver = resolver
        self._strict = settings.FORMULA_STRICT if strict is None else strict
        self._parser = parser or _shared_parser()

    def translate(
        self,
        conn: psycopg.Connection,
        formula: Optional[str],
        table: str,
        mapping: Dict[str, str],
    ) -> Optional[FilterClause]:
        """
        Retorna la conjuncion de predicados o None si la formula no aporta
        ninguno (vacia, no reconocida o invalida en modo permisivo).
        """
        if not formula or not formula.strip():
            return None

        try:
            terms = list(self._conjuncts(self._parser.parse(formula)))
        except FormulaParseError as e:
            if self._strict:
                raise FormulaSyntaxException(formula, str(e)) from e
            arguments = split_and_arguments(formula)
            if arguments is None:
                logger.warning(f"filterByFormula invalida, se ignora: {formula!r} ({e})")
                return None
            logger.warning(f"filterByFormula parcialmente invalida: {formula!r} ({e})")
            terms = list(self._recover_terms(arguments))

        clauses: List[FilterClause] = []
        for term in terms:
            clause = self._translate_term(conn, term, table, mapping)
            if clause is None:
                if self._strict:
                    raise FormulaSyntaxException(formula, f"fragmento no soportado: {term!r}")
                logger.debug(f"Fragmento de formula sin predicado: {term!r}")
                continue
            clauses.append(clause)

        return FilterClause.conjunction(clauses)

    def _recover_terms(self, arguments: List[str]) -> Iterator[Expr]:
        """Parsea cada argumento del AND por separado; los invalidos se descartan."""
        for argument in arguments:
            try:
                yield from self._conjuncts(self._parser.parse(argument))
            except FormulaParseError as e:
                nested = split_and_arguments(argument)
                if nested is None:
                    logger.debug(f"Argumento de AND invalido, se descarta: {argument!r} ({e})")
                    continue
                yield from self._recover_terms(nested)

    def _conjuncts(self, node: Expr) -> Iterator[Expr]:
        if isinstance(node, Call) and node.name == "AND":
            for arg in node.args:
                yield from self._conjuncts(arg)
        else:
            yield node

    def _translate_term(
        self,
        conn: psycopg.Connection,
        node: Expr,
        table: str,
        mapping: Dict[str, str],
    ) -> Optional[FilterClause]:
        if isinstance(node, Call) and node.name == "SEARCH":
            return self._search(node, mapping)

        if isinstance(node, BinaryOp) and node.op == "=" and isinstance(node.left, FieldRef):
            if isinstance(node.right, StringLiteral):
                return self._equals(conn, node.left.name, node.right.value, table, mapping)
            if isinstance(node.right, Call) and node.right.name == "TRUE" and not node.right.args:
                return self._is_true(node.left.name, mapping)

        return None

    def _search(self, node: Call, mapping: Dict[str, str]) -> Optional[FilterClause]:
        if len(node.args) != 2 or not isinstance(node.args[0], StringLiteral):
            return None
        needle = node.args[0].value
        if not needle:
            return None

        target = node.args[1]
        if isinstance(target, Call) and target.name == "ARRAYJOIN" and len(target.args) == 1:
            target = target.args[0]
        if not isinstance(target, FieldRef):
            return None

        column = quote_ident(find_column(target.name, mapping))
        return FilterClause(
            sql=f"{column}::text ILIKE %s",
            params=[f"%{escape_like(needle)}%"],
        )

    def _equals(
        self,
        conn: psycopg.Connection,
        field_name: str,
        value: str,
        table: str,
        mapping: Dict[str, str],
    ) -> FilterClause:
        column = quote_ident(find_column(field_name, mapping))

        resolution = self._resolver.resolve(conn, field_name, value, table)
        if resolution.resolved:
            # Las columnas de link guardan ["recXXX", ...]
            return FilterClause(
                sql=f"{column}::text LIKE %s",
                params=[f"%{escape_like(resolution.record_id)}%"],
            )

        # Escalar o array JSON de un elemento: ["valor"]
        return FilterClause(
            sql=f"({column}::text = %s OR {column}::text LIKE %s)",
            params=[value, f'%"{escape_like(value)}"%'],
        )

    @staticmethod
    def _is_true(field_name: str, mapping: Dict[str, str]) -> FilterClause:
        # boolean true se castea a 'true'; texto "true" y "1" tambien cuentan
        column = quote_ident(find_column(field_name, mapping))
        return FilterClause(sql=f"{column}::text IN ('true', '1')", params=[])


_parser_instance: Optional[FormulaParser] = None
_parser_lock = threading.Lock()


def _shared_parser() -> FormulaParser:
    """Las tablas LALR se construyen una sola vez por proceso."""
    global _parser_instance
    with _parser_lock:
        if _parser_instance is None:
            _parser_instance = FormulaParser()
        return _parser_instance
