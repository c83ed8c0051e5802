"""
Utilidades para nombres de tablas y columnas.
"""
import re

_INVALID_IDENTIFIER_CHARS = re.compile(r"[^a-z0-9_]")


def normalize_identifier(name: str) -> str:
    """
    Normaliza un nombre de tabla o field a identificador PostgreSQL:
    minusculas y cualquier caracter fuera de [a-z0-9_] reemplazado por '_'.

    Es la clave de ruteo entre nombres externos y columnas: se usa igual en
    lecturas y escrituras.
    """
    return _INVALID_IDENTIFIER_CHARS.sub("_", name.lower())


def quote_ident(name: str) -> str:
    """Cita un identificador SQL ("col"), escapando comillas dobles."""
    return '"' + name.replace('"', '""') + '"'
