"""Materialized path encoding"""

from collections.abc import Iterable
from typing import Any

from treetable import conf


class PathCodec:
    """
    Encodes the ordered ancestor ids of a node into a single string and back.

    Paths run from the root to the node's parent and never include the node
    itself, so root nodes have an empty path. With the default ``/``
    delimiter, a node whose parent is ``B`` and whose root is ``A`` has the
    path ``"A/B"``, and the children of that node all have the path
    ``"A/B/<node id>"``.

    :param delimiter: character(s) separating the ids. Defaults to the
        ``PATH_DELIMITER`` setting.
    """

    def __init__(self, delimiter: str | None = None):
        if delimiter is None:
            delimiter = conf.get_path_delimiter()
        if not delimiter:
            raise ValueError("The path delimiter can't be empty")
        self.delimiter = delimiter

    def __repr__(self):
        return f"PathCodec({self.delimiter!r})"

    def encode(self, ids: Iterable[Any]) -> str:
        """
        :returns: the path string for an ordered sequence of ancestor ids.

        :raise ValueError: when an id contains the delimiter, since the
            resulting path could not be decoded back
        """
        labels = []
        for node_id in ids:
            label = str(node_id)
            if self.delimiter in label:
                raise ValueError(f"Node id {label!r} contains the path delimiter {self.delimiter!r}")
            labels.append(label)
        return self.delimiter.join(labels)

    def decode(self, path: str | None) -> list[str]:
        """:returns: the ordered ancestor ids stored in ``path``."""
        if not path:
            return []
        return path.split(self.delimiter)

    def child_prefix(self, path: str | None, node_id: Any) -> str:
        """
        :returns: the path shared by the children of the node with the given
            ``path`` and ``node_id``. All descendants of that node have this
            path or a path starting with it followed by the delimiter.
        """
        return self.encode(self.decode(path) + [node_id])
