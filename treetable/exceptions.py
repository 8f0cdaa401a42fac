"Treetable exceptions"


class TreeTableError(Exception):
    """Base class for errors raised while answering a tree query."""


class ValidationError(TreeTableError):
    """
    Raised when the caller supplied query violates a precondition, e.g. a
    ``loadchild`` request without a parent id or an unknown order field.
    """


class NotFoundError(TreeTableError):
    """Raised when a referenced node does not exist in the data source."""
