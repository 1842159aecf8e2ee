from __future__ import annotations

from functools import wraps
from itertools import chain
from typing import (
    Callable,
    Iterable,
    ParamSpec,
    TypeVar,
)

import pandas as pd

P = ParamSpec("P")
R = TypeVar("R")


def _find_dataframe(args: tuple, kwargs: dict) -> pd.DataFrame | None:
    for value in chain(args, kwargs.values()):
        if isinstance(value, pd.DataFrame):
            return value
    return None


def verify_required_column(
    column_names: Iterable[str],
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator that validates the presence of required columns in a pandas DataFrame.

    The first ``pd.DataFrame`` found among the positional arguments (``self``
    included, so methods work too) or the keyword arguments is checked. A
    :class:`ValueError` naming every missing column is raised before the wrapped
    function runs. Calls without any DataFrame go through untouched.

    Args:
        column_names: Names of the columns that must exist in the DataFrame.

    Returns:
        The decorator.

    """
    required = tuple(column_names)

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            df = _find_dataframe(args, kwargs)
            if df is not None:
                missing = sorted(col for col in required if col not in df.columns)
                if missing:
                    raise ValueError(
                        f"The following required columns are missing: {', '.join(missing)}"
                    )
            return func(*args, **kwargs)

        return wrapper

    return decorator
