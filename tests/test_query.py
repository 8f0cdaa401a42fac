import pytest
from django.http import QueryDict

from treetable.exceptions import ValidationError
from treetable.query import TreeQuery, normalize_query, resolve_operation
from treetable.types import LoadOperation


class TestResolveOperation:
    @pytest.mark.parametrize(
        "query",
        [
            TreeQuery(),
            TreeQuery(parent_id="7", path="1/7", level=3, order="name"),
            TreeQuery(keyword="", filters={"code": None}),
            TreeQuery(operation="firstload"),
        ],
    )
    def test_first_load(self, query):
        assert resolve_operation(query) is LoadOperation.FIRST_LOAD

    @pytest.mark.parametrize("hint", ["loadchild", "LoadChild", "LOADCHILD", " loadchild "])
    def test_load_child(self, hint):
        assert resolve_operation(TreeQuery(operation=hint)) is LoadOperation.LOAD_CHILD

    def test_load_child_wins_over_search(self):
        query = TreeQuery(operation="loadchild", keyword="finance", filters={"code": "FIN"})
        assert resolve_operation(query) is LoadOperation.LOAD_CHILD

    @pytest.mark.parametrize(
        "query",
        [
            TreeQuery(keyword="finance"),
            TreeQuery(filters={"code": "FIN"}),
            TreeQuery(keyword="finance", operation="search"),
            TreeQuery(keyword="x", parent_id="3"),
        ],
    )
    def test_search(self, query):
        assert resolve_operation(query) is LoadOperation.SEARCH


class TestNormalizeQuery:
    def test_default_order(self):
        query = normalize_query(TreeQuery(), LoadOperation.FIRST_LOAD, "sort_id")
        assert query.order == "sort_id"

    def test_default_order_from_settings(self, settings):
        settings.TREETABLE = {"DEFAULT_ORDER": "name"}
        assert normalize_query(TreeQuery(), LoadOperation.FIRST_LOAD).order == "name"

    def test_keeps_order(self):
        query = normalize_query(TreeQuery(order="-name"), LoadOperation.SEARCH, "sort_id")
        assert query.order == "-name"

    @pytest.mark.parametrize("operation", list(LoadOperation))
    def test_path_is_always_cleared(self, operation):
        query = normalize_query(TreeQuery(parent_id="2", path="1/2"), operation, "sort_id")
        assert query.path is None

    def test_load_child_keeps_parent(self):
        query = normalize_query(TreeQuery(parent_id="2", operation="loadchild"), LoadOperation.LOAD_CHILD, "sort_id")
        assert query.parent_id == "2"

    @pytest.mark.parametrize("operation", [LoadOperation.FIRST_LOAD, LoadOperation.SEARCH])
    def test_other_operations_drop_parent(self, operation):
        query = normalize_query(TreeQuery(parent_id="2", keyword="x"), operation, "sort_id")
        assert query.parent_id is None

    def test_does_not_mutate(self):
        original = TreeQuery(parent_id="2", path="1/2", level=2)
        normalized = normalize_query(original, LoadOperation.FIRST_LOAD, "sort_id")
        assert original == TreeQuery(parent_id="2", path="1/2", level=2)
        assert normalized is not original
        assert normalized.level == 2


class TestFromParams:
    def test_parse(self):
        params = QueryDict("parent_id=4&level=2&order=-name&operation=loadchild&keyword=+fin+&page=3&page_size=50")
        query = TreeQuery.from_params(params)
        assert query == TreeQuery(
            parent_id="4",
            level=2,
            order="-name",
            operation="loadchild",
            keyword="fin",
            page=3,
            page_size=50,
        )

    def test_defaults(self):
        query = TreeQuery.from_params(QueryDict(""))
        assert query == TreeQuery(page=1, page_size=20)
        assert not query.is_search()

    def test_empty_values(self):
        query = TreeQuery.from_params(QueryDict("parent_id=&level=&keyword=+++&page="))
        assert query.parent_id is None
        assert query.level is None
        assert query.keyword is None
        assert query.page == 1

    def test_filter_fields(self):
        params = QueryDict("code=FIN&name=x&other=")
        query = TreeQuery.from_params(params, filter_fields=["code", "other"])
        assert query.filters == {"code": "FIN"}
        assert query.is_search()

    def test_operation_param(self, settings):
        settings.TREETABLE = {"OPERATION_PARAM": "op"}
        query = TreeQuery.from_params(QueryDict("op=loadchild&parent_id=1"))
        assert resolve_operation(query) is LoadOperation.LOAD_CHILD
        assert TreeQuery.from_params(QueryDict("operation=loadchild")).operation is None

    @pytest.mark.parametrize("params", ["level=abc", "page=0", "page_size=-1", "page=1.5"])
    def test_invalid_integers(self, params):
        with pytest.raises(ValidationError):
            TreeQuery.from_params(QueryDict(params))

    def test_page_size_limit(self, settings):
        settings.TREETABLE = {"MAX_PAGE_SIZE": 100}
        assert TreeQuery.from_params(QueryDict("page_size=100")).page_size == 100
        with pytest.raises(ValidationError):
            TreeQuery.from_params(QueryDict("page_size=101"))
