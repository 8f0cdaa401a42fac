"""Tree loading: dispatches a tree query to first load, load child or search"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from treetable import conf
from treetable.exceptions import ValidationError
from treetable.paths import PathCodec
from treetable.query import TreeQuery, normalize_query, resolve_operation
from treetable.reconcile import missing_ancestors
from treetable.types import LoadMode, LoadOperation, Page

logger = logging.getLogger(__name__)


def _keep_query(query):
    return query


def _keep_nodes(nodes, query):
    return nodes


def _keep_results(nodes, lazy):
    return nodes


async def default_async_children_query(query):
    """Immediate children only: filter by parent id, not by level or path."""
    return query.replace(level=None, path=None)


@dataclass
class TreeLoaderHooks:
    """
    Customization points of :class:`TreeLoader`.

    :param query_before: called with the raw query, returns the query to use.
    :param process_data: called with the loaded nodes and the query, returns
        the nodes to convert.
    :param async_children_query: coroutine function returning the query used
        to load the immediate children of a node in async mode.
    :param to_result: converts the nodes into the objects placed in the
        result page. ``lazy`` is true when the client must fetch the children
        of the returned nodes with later ``loadchild`` requests.
    """

    query_before: Callable[[TreeQuery], TreeQuery] = _keep_query
    process_data: Callable[[list, TreeQuery], list] = _keep_nodes
    async_children_query: Callable[[TreeQuery], Awaitable[TreeQuery]] = default_async_children_query
    to_result: Callable[[list, bool], list] = _keep_results


class TreeLoader:
    """
    Answers tree-table queries against a
    :class:`~treetable.sources.TreeDataSource`.

    :param source: the data source
    :param load_mode: default :class:`~treetable.types.LoadMode`, used when
        :meth:`handle_query` gets none. Defaults to the ``LOAD_MODE`` setting.
    :param codec: :class:`~treetable.paths.PathCodec` matching the paths
        stored by the source
    :param hooks: :class:`TreeLoaderHooks`
    :param default_order: order used when the query has none. Defaults to the
        ``DEFAULT_ORDER`` setting.
    """

    def __init__(self, source, load_mode=None, codec=None, hooks=None, default_order=None):
        self.source = source
        self.load_mode = LoadMode.coerce(load_mode) if load_mode is not None else conf.get_load_mode()
        self.codec = codec or PathCodec()
        self.hooks = hooks or TreeLoaderHooks()
        self.default_order = default_order or conf.get_setting("DEFAULT_ORDER")

    async def handle_query(self, query: TreeQuery, load_mode=None) -> Page:
        """
        Loads the page of results for ``query``.

        :raise ValidationError: when a ``loadchild`` request has no parent id
        :raise NotFoundError: when the parent of a synchronous ``loadchild``
            request doesn't exist
        """
        if query is None:
            raise ValueError("query can't be None")
        mode = LoadMode.coerce(load_mode) if load_mode is not None else self.load_mode
        query = self.hooks.query_before(query)
        operation = resolve_operation(query)
        query = normalize_query(query, operation, self.default_order)
        logger.debug("Tree query resolved to %s (%s mode): %r", operation.name, mode.name, query)

        if operation is LoadOperation.FIRST_LOAD:
            return await self.first_load(query, mode)
        if operation is LoadOperation.LOAD_CHILD:
            return await self.load_children(query, mode)
        return await self.search(query, mode)

    async def first_load(self, query, mode):
        if mode is LoadMode.SYNC:
            return await self.sync_first_load(query)
        return await self.async_first_load(query)

    async def sync_first_load(self, query):
        nodes = await self._query(query)
        return self._to_page(nodes, lazy=False)

    async def async_first_load(self, query):
        query = query.replace(level=1)
        page = await self.source.query_paged(query)
        nodes = self.hooks.process_data(list(page.data), query)
        return Page(
            data=self.hooks.to_result(nodes, True),
            total=page.total,
            page=page.page,
            page_size=page.page_size,
        )

    async def load_children(self, query, mode):
        if query.parent_id is None or query.parent_id == "":
            raise ValidationError("parent id required to load child nodes")
        if mode is LoadMode.ASYNC:
            return await self.async_load_children(query)
        return await self.sync_load_children(query)

    async def async_load_children(self, query):
        query = await self.hooks.async_children_query(query)
        nodes = await self._query(query)
        return self._to_page(nodes, lazy=True)

    async def sync_load_children(self, query):
        parent_id = str(query.parent_id)
        subtree_query = await self.get_sync_children_query(query)
        nodes = await self.source.query_flat(subtree_query)
        subtree = [node for node in nodes if str(node.id) != parent_id]
        if len(subtree) != len(nodes):
            logger.warning("Subtree query for parent %s returned the parent node itself, removed it", parent_id)
        subtree = self.hooks.process_data(subtree, query)
        return self._to_page(subtree, lazy=False)

    async def get_sync_children_query(self, query):
        """
        :returns: the query matching the whole subtree under
            ``query.parent_id`` by path prefix.

        :raise NotFoundError: when the parent node doesn't exist
        """
        parent = await self.source.get_by_id(query.parent_id)
        return query.replace(
            path=self.codec.child_prefix(parent.path, parent.id),
            level=None,
            parent_id=None,
        )

    async def search(self, query, mode):
        nodes = list(await self.source.query_flat(query))
        missing = missing_ancestors(nodes, self.codec)
        if missing:
            logger.debug("Search matched %d nodes, fetching %d missing ancestors", len(nodes), len(missing))
            nodes.extend(await self.source.get_by_ids(sorted(missing)))
        nodes = self._sort(nodes, query.order)
        nodes = self.hooks.process_data(nodes, query)
        return self._to_page(nodes, lazy=mode is LoadMode.ASYNC)

    async def _query(self, query):
        nodes = await self.source.query_flat(query)
        return self.hooks.process_data(list(nodes), query)

    def _to_page(self, nodes, lazy):
        return Page.from_list(self.hooks.to_result(nodes, lazy))

    @staticmethod
    def _sort(nodes, order):
        """
        Stable sort by the first field of ``order`` (``"-"`` prefix for
        descending). Nodes are left as they are when any of them lacks the
        field or holds ``None`` in it.
        """
        name = (order or "").split(",")[0].strip()
        reverse = name.startswith("-")
        name = name.lstrip("-")
        if not name:
            return nodes
        keys = [getattr(node, name, None) for node in nodes]
        if any(key is None for key in keys):
            return nodes
        try:
            return sorted(nodes, key=lambda node: getattr(node, name), reverse=reverse)
        except TypeError:
            return nodes
