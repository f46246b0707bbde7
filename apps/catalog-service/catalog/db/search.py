"""Full-text match predicate compiled per dialect.

On PostgreSQL ``text_match(column, term)`` renders as a document-vector match
against a parsed query using the ``simple`` configuration. Other dialects
(SQLite in unit tests) get a case-insensitive substring match so the same
statements run there; no attempt is made to emulate stemming or ranking.
"""
from __future__ import annotations

from sqlalchemy import Boolean, literal, or_
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement

TS_CONFIG = "simple"


class text_match(FunctionElement):
    type = Boolean()
    name = "text_match"
    inherit_cache = True


@compiles(text_match, "postgresql")
def _compile_text_match_postgresql(element, compiler, **kw):
    column, term = list(element.clauses)
    return "to_tsvector('%s', %s) @@ plainto_tsquery('%s', %s)" % (
        TS_CONFIG,
        compiler.process(column, **kw),
        TS_CONFIG,
        compiler.process(term, **kw),
    )


@compiles(text_match)
def _compile_text_match_default(element, compiler, **kw):
    column, term = list(element.clauses)
    return "instr(lower(%s), lower(%s)) > 0" % (
        compiler.process(column, **kw),
        compiler.process(term, **kw),
    )


def optional_text_match(column, term: str):
    """Match when ``term`` is empty or the column matches it.

    The term is bound twice; an empty term turns the predicate into a no-op
    instead of matching nothing.
    """
    term = term or ""
    return or_(literal(term) == "", text_match(column, literal(term)))
