"""Lexer para filterByFormula (subconjunto de formulas Airtable)."""

import re

import ply.lex as lex

_ESCAPE = re.compile(r"\\(.)", re.DOTALL)


class FormulaParseError(ValueError):
    """La formula no se pudo tokenizar o parsear."""


class FormulaLexer:
    """Tokeniza referencias {field}, literales, nombres de funcion y operadores."""

    tokens = [
        "FIELD",
        "STRING",
        "NUMBER",
        "NAME",
        "LPAREN",
        "RPAREN",
        "COMMA",
        "EQ",
        "NEQ",
        "LTE",
        "GTE",
        "LT",
        "GT",
        "AMP",
        "PLUS",
        "MINUS",
        "STAR",
        "SLASH",
    ]

    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_COMMA = r","
    t_EQ = r"="
    t_NEQ = r"!="
    t_LTE = r"<="
    t_GTE = r">="
    t_LT = r"<"
    t_GT = r">"
    t_AMP = r"&"
    t_PLUS = r"\+"
    t_MINUS = r"-"
    t_STAR = r"\*"
    t_SLASH = r"/"

    t_ignore = " \t\r\n"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    def t_FIELD(self, t: lex.LexToken) -> lex.LexToken:
        r"\{[^}]*\}"
        t.value = t.value[1:-1]
        return t

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r'"([^"\\]|\\.)*"|\'([^\'\\]|\\.)*\''
        t.value = _ESCAPE.sub(r"\1", t.value[1:-1])
        return t

    def t_NUMBER(self, t: lex.LexToken) -> lex.LexToken:
        r"\d+(\.\d+)?"
        t.value = float(t.value) if "." in t.value else int(t.value)
        return t

    def t_NAME(self, t: lex.LexToken) -> lex.LexToken:
        r"[A-Za-z_][A-Za-z0-9_]*"
        return t

    def t_error(self, t: lex.LexToken) -> None:
        raise FormulaParseError(f"Caracter ilegal '{t.value[0]}' en la posicion {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Construye el lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokeniza la formula completa."""
        lexer = self.lexer.clone()
        lexer.input(data)
        tokens = []
        while True:
            tok = lexer.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
