"Ancestor reconciliation for flat search results"

from treetable.paths import PathCodec


def missing_ancestors(nodes, codec=None):
    """
    Search results are scattered across all the levels of the tree. To
    render them as a tree the client also needs every ancestor of every
    match.

    :param nodes: the matched nodes
    :param codec: the :class:`~treetable.paths.PathCodec` used to decode the
        node paths. Defaults to one using the configured delimiter.

    :returns: the set of ancestor ids (as strings) referenced by the paths of
        ``nodes`` that are not already in ``nodes``.
    """
    if codec is None:
        codec = PathCodec()
    ancestors = set()
    present = set()
    for node in nodes:
        present.add(str(node.id))
        ancestors.update(codec.decode(node.path))
    return ancestors - present
