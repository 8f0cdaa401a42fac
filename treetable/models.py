"""
    treetable.models
    ----------------

    Abstract Django model for trees browsed through a tree table.
"""

from django.db import models, transaction

from treetable.paths import PathCodec


class TreeNode(models.Model):
    """
    Abstract model to create your own tree-table nodes.

    Every node stores its parent, its materialized ``path`` (the ids of its
    ancestors, root first, the node itself excluded) and its ``level`` (root
    nodes are on level 1). Use :meth:`add_root`, :meth:`add_child` or
    :meth:`load_bulk` to create nodes, they keep those fields consistent.

    ``path`` holds up to 255 characters: with UUID primary keys that is 7
    levels of nodes. Deeper trees redeclare the field with a larger
    ``max_length``.

    Example::

        class Department(TreeNode):
            name = models.CharField(max_length=255)

        head = Department.add_root(name="Head office")
        finance = head.add_child(name="Finance")
    """

    parent = models.ForeignKey(
        "self",
        related_name="children",
        null=True,
        blank=True,
        db_index=True,
        on_delete=models.CASCADE,
    )
    path = models.CharField(max_length=255, blank=True, default="", db_index=True)
    level = models.PositiveIntegerField(default=1)
    sort_id = models.IntegerField(default=0)

    # Delimiter of the ids in ``path``, None to use the PATH_DELIMITER setting
    path_delimiter = None

    class Meta:
        abstract = True

    @classmethod
    def get_path_codec(cls):
        return PathCodec(cls.path_delimiter)

    @classmethod
    def add_root(cls, **kwargs):
        """
        Adds a root node to the tree.

        :returns: the created node object. It will be save()d by this method.
        """
        newobj = cls(**kwargs)
        newobj.parent = None
        newobj.path = ""
        newobj.level = 1
        newobj.save()
        return newobj

    def add_child(self, **kwargs):
        """
        Adds a child to the node. The node must be saved already, since its
        primary key becomes part of the child's path.

        :returns: the created node object. It will be save()d by this method.

        :raise ValueError: when the node isn't saved, or when the child's path
            wouldn't fit in the ``path`` field
        """
        if self.pk is None:
            raise ValueError("Can't add a child to a node that isn't saved")
        path = self.get_path_codec().child_prefix(self.path, self.pk)
        max_length = self._meta.get_field("path").max_length
        if max_length is not None and len(path) > max_length:
            raise ValueError(
                f"{self._meta.object_name} path of {len(path)} characters is over "
                f"the max_length of {max_length}, the tree is too deep"
            )
        newobj = self.__class__(**kwargs)
        newobj.parent = self
        newobj.path = path
        newobj.level = self.level + 1
        newobj.save()
        return newobj

    @classmethod
    def load_bulk(cls, bulk_data, parent=None):
        """
        Creates a whole tree (or forest) of nodes in one transaction.

        :param bulk_data: list of node specs. A spec is a dict whose ``data``
            entry holds the keyword arguments of the node's model, and whose
            optional ``children`` entry is a list of specs for its children.
        :param parent: existing node the specs are added under. Without one,
            the top level specs become root nodes.

        :returns: the primary keys of the created nodes, parents before their
            children.
        """
        with transaction.atomic():
            added = []
            # iterative preorder over (parent node, spec) pairs
            stack = [(parent, spec) for spec in reversed(bulk_data)]
            while stack:
                parent, spec = stack.pop()
                fields = dict(spec["data"])
                if parent:
                    node = parent.add_child(**fields)
                else:
                    node = cls.add_root(**fields)
                added.append(node.pk)
                stack.extend((node, child) for child in reversed(spec.get("children", ())))
            return added

    def is_root(self):
        return self.parent_id is None

    def get_ancestor_ids(self):
        """:returns: the ids (as strings) of the node's ancestors, root first."""
        return self.get_path_codec().decode(self.path)
