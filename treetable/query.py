"""Tree query parameters, operation resolution and normalization"""

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from treetable import conf
from treetable.exceptions import ValidationError
from treetable.types import LoadOperation

LOAD_CHILD_HINT = "loadchild"


def _is_empty(value):
    return value is None or value == "" or (isinstance(value, (list, tuple, set)) and not value)


@dataclass(frozen=True)
class TreeQuery:
    """
    Parameters of one tree-table request.

    ``parent_id``, ``path`` and ``level`` are structural: they navigate the
    tree and never turn a request into a search. ``keyword`` and
    ``filters`` are search criteria.
    """

    parent_id: Any = None
    path: str | None = None
    level: int | None = None
    order: str = ""
    operation: str | None = None
    keyword: str | None = None
    filters: Mapping[str, Any] = field(default_factory=dict)
    page: int = 1
    page_size: int = 20

    def is_search(self) -> bool:
        if not _is_empty(self.keyword):
            return True
        return any(not _is_empty(value) for value in self.filters.values())

    def replace(self, **changes) -> "TreeQuery":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_params(cls, params, filter_fields=(), operation_param=None):
        """
        Builds a query from request parameters (a ``QueryDict`` or any
        mapping of strings).

        :param filter_fields: names of the extra parameters that are copied
            into :attr:`filters`. Anything else is ignored.
        :param operation_param: name of the parameter carrying the operation
            hint. Defaults to the ``OPERATION_PARAM`` setting.

        :raise ValidationError: when ``level``, ``page`` or ``page_size`` are
            not valid positive integers
        """
        if operation_param is None:
            operation_param = conf.get_setting("OPERATION_PARAM")
        default_page_size, max_page_size = conf.get_page_size_limits()

        page_size = _get_int(params, "page_size", default_page_size)
        if page_size > max_page_size:
            raise ValidationError(f"page_size can't be greater than {max_page_size}")

        return cls(
            parent_id=params.get("parent_id") or None,
            path=params.get("path") or None,
            level=_get_int(params, "level", None),
            order=params.get("order", "") or "",
            operation=params.get(operation_param) or None,
            keyword=(params.get("keyword") or "").strip() or None,
            filters={name: params.get(name) for name in filter_fields if not _is_empty(params.get(name))},
            page=_get_int(params, "page", 1),
            page_size=page_size,
        )


def _get_int(params, name, default):
    value = params.get(name)
    if _is_empty(value):
        return default
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer, got {value!r}") from None
    if value < 1:
        raise ValidationError(f"{name} must be greater than zero")
    return value


def resolve_operation(query: TreeQuery) -> LoadOperation:
    """
    :returns: the operation requested by ``query``.

        - :attr:`LoadOperation.LOAD_CHILD` when the operation hint is
          ``loadchild`` (in any case), whatever else the query holds,
        - :attr:`LoadOperation.SEARCH` when the query has search criteria,
        - :attr:`LoadOperation.FIRST_LOAD` otherwise.
    """
    if (query.operation or "").strip().lower() == LOAD_CHILD_HINT:
        return LoadOperation.LOAD_CHILD
    if query.is_search():
        return LoadOperation.SEARCH
    return LoadOperation.FIRST_LOAD


def normalize_query(query: TreeQuery, operation: LoadOperation, default_order: str | None = None) -> TreeQuery:
    """
    :returns: a copy of ``query`` with the effective parameters for
        ``operation``. The given query is left untouched.

    The path sent by the client is always dropped, since the loader derives
    it itself. Only ``loadchild`` keeps the client's parent id: first loads
    and searches are never scoped to a parent.
    """
    changes = {"path": None}
    if not query.order:
        changes["order"] = default_order or conf.get_setting("DEFAULT_ORDER")
    if operation is not LoadOperation.LOAD_CHILD:
        changes["parent_id"] = None
    return query.replace(**changes)
