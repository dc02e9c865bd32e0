def quote_identifier(name: str) -> str:
    """Double-quote an identifier so PostgreSQL keeps its case.

    Embedded double quotes are doubled. Quoting also lets column names that
    are reserved words (``LEVEL``, ``DATE``) be used as-is.
    """
    return '"' + str(name).replace('"', '""') + '"'


def text_identifier(name: str) -> str:
    """Quote an identifier for use inside ``sqlalchemy.text()``.

    ``text()`` reads ``:word`` as a bind parameter, so colons are escaped.
    """
    return quote_identifier(name).replace(":", r"\:")
