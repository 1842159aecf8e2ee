"""Error taxonomy shared by every Prognostix component.

``InvalidInputError`` is raised for values that cannot be represented (both power
scores null, malformed probabilities...) and is never retried.
``DataUnavailableError`` signals that no history exists for a team or a match;
callers exclude the team or the match instead of zero-filling it.
``NotConvergedWarning`` is a soft failure: the optimizer ran out of budget but
the best point found is still returned.
"""


class PrognostixError(Exception):
    """Base class of the package errors."""


class InvalidInputError(PrognostixError, ValueError):
    pass


class DataUnavailableError(PrognostixError, LookupError):
    pass


class NotConvergedWarning(UserWarning):
    pass
