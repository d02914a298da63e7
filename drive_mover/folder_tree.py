"""
Folder tree view over the metadata index.

Used to offer move destinations: only folders are returned, rooted at a
single node representing the drive itself.
"""

import logging
from collections import defaultdict
from collections.abc import Iterator
from dataclasses import dataclass, field

from .metadata_index import FileRecord, MetadataIndex, ResourceType

logger = logging.getLogger(__name__)


@dataclass
class FolderNode:
    id: str
    pretty_name: str
    path: str
    children: list["FolderNode"] = field(default_factory=list)


def _build_node(
    record: FileRecord, adjacency: dict[str, list[FileRecord]], seen: set[str]
) -> FolderNode:
    seen.add(record.id)
    # The listing is not pre-filtered, so drop everything that isn't a folder here.
    folders = [
        child
        for child in adjacency.get(record.id, [])
        if child.resource_type is ResourceType.FOLDER and child.id not in seen
    ]
    folders.sort(key=lambda r: r.name.lower())
    return FolderNode(
        id=record.id,
        pretty_name=record.name,
        path=record.path,
        children=[_build_node(child, adjacency, seen) for child in folders],
    )


def get_folders(index: MetadataIndex) -> list[FolderNode]:
    """
    Build the folder-only tree for the indexed drive.

    Returns:
        A list holding exactly one FolderNode: the drive root, whose id is
        the configured drive ID.
    """
    adjacency: dict[str, list[FileRecord]] = defaultdict(list)
    for record in index.all_records():
        if record.parent_id:
            adjacency[record.parent_id].append(record)

    root = index.get_meta(index.drive_id)
    tree = _build_node(root, adjacency, set())
    tree.pretty_name = index.pretty_name or "Home"

    logger.debug("Built folder tree with %d top-level folders", len(tree.children))
    return [tree]


def only_folders(node: FolderNode, index: MetadataIndex) -> bool:
    """True when every descendant of node is a folder record in the index."""
    for child in node.children:
        record = index.get_meta(child.id)
        if record is None or record.resource_type is not ResourceType.FOLDER:
            return False
        if not only_folders(child, index):
            return False
    return True


def iter_folders(node: FolderNode, depth: int = 0) -> Iterator[tuple[int, FolderNode]]:
    """Depth-first walk yielding (depth, node) pairs."""
    yield depth, node
    for child in node.children:
        yield from iter_folders(child, depth + 1)
