import enum
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class LoadOperation(enum.Enum):
    """What a single tree query asks for. Derived per request, never stored."""

    FIRST_LOAD = "firstload"
    LOAD_CHILD = "loadchild"
    SEARCH = "search"


class LoadMode(enum.Enum):
    """
    How much of the tree one response carries.

    ``SYNC`` returns whole subtrees at once, using path prefix matching.
    ``ASYNC`` returns one level at a time and leaves the deeper levels to
    later ``loadchild`` requests.
    """

    SYNC = "sync"
    ASYNC = "async"

    @classmethod
    def coerce(cls, value):
        """
        :returns: the member for ``value``, which can be a member or its
            case-insensitive name/value.

        :raise ValueError: when ``value`` is not a known load mode
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"Invalid load mode: {value!r}")


@dataclass
class Page(Generic[T]):
    """One page of tree results."""

    data: list[T]
    total: int
    page: int = 1
    page_size: int = 0

    @classmethod
    def from_list(cls, data: list[T]) -> "Page[T]":
        """
        Wraps a complete, non-paged result list as a single page holding all
        of it: ``total`` is its length.
        """
        data = list(data)
        return cls(data=data, total=len(data), page=1, page_size=len(data))

    def as_dict(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "total": self.total,
            "page": self.page,
            "pageSize": self.page_size,
        }
