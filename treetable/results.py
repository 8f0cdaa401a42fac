"""Conversion of loaded nodes into the rows sent to a tree-table client"""

from typing import Any, TypedDict

from django.db import models
from django.forms.models import model_to_dict

TREE_FIELDS = ("id", "parent", "path", "level", "sort_id")


class TreeResult(TypedDict):
    """
    One tree-table row.

    ``leaf`` is ``None`` when the number of children of the node is unknown.
    ``lazy`` tells the client to fetch the children of the node with a
    ``loadchild`` request when it gets expanded.
    """

    id: str
    parentId: str | None
    path: str
    level: int | None
    sortId: Any
    text: str
    leaf: bool | None
    lazy: bool
    data: dict[str, Any]


def _leaf(node):
    numchild = getattr(node, "numchild", None)
    if numchild is None:
        return None
    return numchild == 0


def to_tree_result(node, lazy=False) -> TreeResult:
    if isinstance(node, models.Model):
        data = model_to_dict(node, exclude=[node._meta.pk.name, *TREE_FIELDS])
    else:
        data = {}
    parent_id = node.parent_id
    return {
        "id": str(node.id),
        "parentId": None if parent_id is None else str(parent_id),
        "path": node.path or "",
        "level": getattr(node, "level", None),
        "sortId": getattr(node, "sort_id", None),
        "text": str(node),
        "leaf": _leaf(node),
        "lazy": lazy,
        "data": data,
    }


def to_tree_results(nodes, lazy=False) -> list[TreeResult]:
    return [to_tree_result(node, lazy) for node in nodes]
