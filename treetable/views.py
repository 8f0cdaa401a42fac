"""Django views answering tree-table requests"""

import dataclasses
import logging

from django.core.exceptions import ImproperlyConfigured
from django.core.serializers.json import DjangoJSONEncoder
from django.http import JsonResponse
from django.views import View

from treetable.exceptions import NotFoundError, ValidationError
from treetable.loader import TreeLoader, TreeLoaderHooks
from treetable.query import TreeQuery
from treetable.results import to_tree_results
from treetable.sources import ModelTreeDataSource

logger = logging.getLogger(__name__)


class TreeTableView(View):
    """
    JSON endpoint for a tree-table widget.

    ``GET`` parameters: ``parent_id``, ``level``, ``order``, ``keyword``,
    ``page``, ``page_size``, the operation hint (``operation`` unless the
    ``OPERATION_PARAM`` setting says otherwise) and the names listed in
    :attr:`filter_fields`.

    Example::

        path(
            "departments/",
            TreeTableView.as_view(model=Department, search_fields=["name"]),
        )
    """

    http_method_names = ["get", "options"]

    model = None
    search_fields = ()
    filter_fields = ()
    # None to use the LOAD_MODE setting
    load_mode = None
    hooks = None

    def get_source(self):
        if self.model is None:
            raise ImproperlyConfigured(f"{self.__class__.__name__} is missing a model")
        return ModelTreeDataSource(self.model, self.search_fields)

    def get_hooks(self):
        """
        :returns: :attr:`hooks`, with node objects converted to
            :class:`~treetable.results.TreeResult` rows unless they set their
            own ``to_result``.
        """
        if self.hooks is None:
            return TreeLoaderHooks(to_result=to_tree_results)
        if self.hooks.to_result is TreeLoaderHooks.to_result:
            return dataclasses.replace(self.hooks, to_result=to_tree_results)
        return self.hooks

    def get_loader(self):
        source = self.get_source()
        return TreeLoader(source, load_mode=self.load_mode, codec=source.codec, hooks=self.get_hooks())

    def error_response(self, exc, status):
        return JsonResponse({"error": str(exc)}, status=status)

    async def get(self, request, *args, **kwargs):
        try:
            query = TreeQuery.from_params(request.GET, self.filter_fields)
            page = await self.get_loader().handle_query(query)
        except ValidationError as exc:
            logger.warning("Rejected tree query %s: %s", request.get_full_path(), exc)
            return self.error_response(exc, 400)
        except NotFoundError as exc:
            logger.warning("Tree query %s references a missing node: %s", request.get_full_path(), exc)
            return self.error_response(exc, 404)
        return JsonResponse(page.as_dict(), encoder=DjangoJSONEncoder)
