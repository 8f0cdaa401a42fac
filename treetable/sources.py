"""Data sources the tree loader reads nodes from"""

import functools
import operator
from collections.abc import Iterable
from typing import Any, Protocol

from django.core.exceptions import FieldDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Count, Q

from treetable.exceptions import NotFoundError, ValidationError
from treetable.query import TreeQuery
from treetable.types import Page


class TreeDataSource(Protocol):
    """
    Storage capability used by :class:`~treetable.loader.TreeLoader`. Nodes
    are objects with ``id``, ``parent_id`` and ``path`` attributes.
    """

    async def query_flat(self, query: TreeQuery) -> list[Any]: ...

    async def query_paged(self, query: TreeQuery) -> Page[Any]: ...

    async def get_by_id(self, node_id: Any) -> Any:
        """:raise NotFoundError: when there is no node with that id"""
        ...

    async def get_by_ids(self, node_ids: Iterable[Any]) -> list[Any]: ...


class ModelTreeDataSource:
    """
    :class:`TreeDataSource` reading a :class:`~treetable.models.TreeNode`
    model through the Django async ORM.

    :param model: the concrete tree model
    :param search_fields: fields matched (case-insensitively, as substrings)
        against the query keyword. Keyword queries are rejected when empty.
    :param codec: the model's path codec, defaults to
        ``model.get_path_codec()``
    """

    def __init__(self, model, search_fields=(), codec=None):
        self.model = model
        self.search_fields = tuple(search_fields)
        self.codec = codec or model.get_path_codec()

    def get_queryset(self):
        return self.model._default_manager.annotate(numchild=Count("children"))

    def get_ordering(self, order):
        """
        :returns: the ``order_by()`` arguments for a comma separated list of
            field names, each optionally prefixed with ``-``.

        :raise ValidationError: for names that aren't fields of the model
        """
        ordering = []
        for name in (order or "").split(","):
            name = name.strip()
            if not name:
                continue
            try:
                self.model._meta.get_field(name.lstrip("-"))
            except FieldDoesNotExist:
                raise ValidationError(f"Can't order by unknown field {name!r}") from None
            ordering.append(name)
        # primary key last so that pages are deterministic
        ordering.append("pk")
        return ordering

    def filter_queryset(self, queryset, query):
        if query.parent_id is not None:
            try:
                queryset = queryset.filter(parent_id=query.parent_id)
            except (ValueError, DjangoValidationError):
                raise ValidationError(f"Invalid parent id {query.parent_id!r}") from None
        if query.path:
            queryset = queryset.filter(
                Q(path=query.path) | Q(path__startswith=query.path + self.codec.delimiter)
            )
        if query.level is not None:
            queryset = queryset.filter(level=query.level)
        if query.keyword:
            if not self.search_fields:
                raise ValidationError(
                    f"Can't search {self.model._meta.object_name} by keyword, no search fields are set"
                )
            queryset = queryset.filter(
                functools.reduce(
                    operator.or_,
                    [Q(**{f"{field}__icontains": query.keyword}) for field in self.search_fields],
                )
            )
        if query.filters:
            queryset = queryset.filter(**query.filters)
        return queryset.order_by(*self.get_ordering(query.order))

    async def query_flat(self, query):
        queryset = self.filter_queryset(self.get_queryset(), query)
        return [node async for node in queryset]

    async def query_paged(self, query):
        queryset = self.filter_queryset(self.get_queryset(), query)
        total = await queryset.acount()
        offset = (query.page - 1) * query.page_size
        data = [node async for node in queryset[offset:offset + query.page_size]]
        return Page(data=data, total=total, page=query.page, page_size=query.page_size)

    async def get_by_id(self, node_id):
        try:
            return await self.get_queryset().aget(pk=node_id)
        except (self.model.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundError(f"{self.model._meta.object_name} {node_id} does not exist") from None

    async def get_by_ids(self, node_ids):
        node_ids = list(node_ids)
        if not node_ids:
            return []
        return [node async for node in self.get_queryset().filter(pk__in=node_ids).order_by("level", "pk")]
