"""
Small, dependency-free helpers for normalising incoming values.

They are shared by the settings (env var normalisation), the pydantic request schemas,
the ORM model and the repositories, so every layer trims and case-folds input the same way.
"""

LIKE_ESCAPE_CHAR = "\\"


def to_uppercase(value: str | None) -> str | None:
    """
    Converts a string to uppercase if it's not None.
    """
    if value is None:
        return None
    return value.upper()

def to_lowercase(value: str | None) -> str | None:
    """
    Converts a string to lowercase if it's not None.
    """
    if value is None:
        return None
    return value.lower()


def strip_or_none(value: str | None) -> str | None:
    """
    Trim surrounding whitespace; blank or missing input becomes None.

    This is the single place where "empty means absent" is decided, e.g.:
        strip_or_none("  Intro  ") -> "Intro"
        strip_or_none("   ")       -> None
        strip_or_none(None)        -> None
    """
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def fold_case(value: str) -> str:
    """
    Case-fold a value for case-insensitive comparison.

    This is the only folding used anywhere: ClassSection stores its name_key / course_key
    columns with it, and the repositories fold query arguments with it.
    """
    return value.strip().lower()


def escape_like(value: str, escape: str = LIKE_ESCAPE_CHAR) -> str:
    """
    Escape LIKE wildcards so user input is matched literally.
    """
    return (
        value.replace(escape, escape + escape)
        .replace("%", escape + "%")
        .replace("_", escape + "_")
    )
