"""Tokens of the schema DSL: ``table Name { column: type[]? ... }``."""

import ply.lex as lex


class SchemaLexer:
    """Splits schema text into table, column and type-modifier tokens."""

    # "table" opens a table block; every other word is a name
    reserved = {
        "table": "TABLE",
    }

    tokens = [
        "IDENTIFIER",
        "LBRACE",
        "RBRACE",
        "LBRACKET",
        "RBRACKET",
        "COLON",
        "COMMA",
        "QUESTION",
    ] + list(reserved.values())

    # Table body, list suffix, column separator and nullable marker
    t_LBRACE = r"\{"
    t_RBRACE = r"\}"
    t_LBRACKET = r"\["
    t_RBRACKET = r"\]"
    t_COLON = r":"
    t_COMMA = r","
    t_QUESTION = r"\?"

    # Newlines are counted in t_NEWLINE, so they are not listed here
    t_ignore = " \t\r"

    # "# ..." runs to the end of the line
    t_ignore_COMMENT = r"\#[^\n]*"

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_]*"
        t.type = self.reserved.get(t.value, "IDENTIFIER")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Unexpected '{t.value[0]}' in schema at line {t.lineno}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Compile the token rules; must run before input() or tokenize()."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Start lexing ``data`` from line 1."""
        self.lexer.lineno = 1
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Next token, or None once the schema text is exhausted."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Lex a whole schema and return its tokens in order."""
        self.input(data)
        return list(iter(self.token, None))
