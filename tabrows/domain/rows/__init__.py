from .accessors import Rows
from .coercion import UnquoteError, coerce_field, normalize_column_name, unquote
from .cursor import RowCursor
from .nullable import Nullable

__all__ = [
    "Rows",
    "RowCursor",
    "Nullable",
    "UnquoteError",
    "coerce_field",
    "normalize_column_name",
    "unquote",
]
