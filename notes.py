"""Study-notes catalogue: classes / streams / subjects / chapters / topics."""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from models import NotesNode

logger = logging.getLogger(__name__)

LEVELS = ("classes", "streams", "subjects", "chapters", "topics")


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.strip().lower()).strip("-")


def class_sort_key(name: str) -> tuple[int, int, str]:
    """Numbered classes first in numeric order, then everything else by name."""
    match = re.match(r"class\s+(\d+)", name.strip(), re.IGNORECASE)
    if match:
        return (0, int(match.group(1)), name)
    return (1, 0, name.lower())


def child_path(parent_path: str | None, level: str, slug: str) -> str:
    if level not in LEVELS:
        raise ValueError(f"Unknown catalogue level: {level}")
    prefix = f"{parent_path}/" if parent_path else ""
    return f"{prefix}{level}/{slug}"


def children(db: Session, parent_path: str | None, level: str) -> list[NotesNode]:
    query = select(NotesNode).where(NotesNode.level == level)
    if parent_path:
        query = query.where(NotesNode.parent_path == parent_path)
    else:
        query = query.where(NotesNode.parent_path.is_(None))
    nodes = list(db.scalars(query).all())
    if level == "classes":
        return sorted(nodes, key=lambda n: class_sort_key(n.name))
    return sorted(nodes, key=lambda n: n.name.lower())


def get_node(db: Session, path: str) -> Optional[NotesNode]:
    return db.scalar(select(NotesNode).where(NotesNode.path == path))


def notes_for(db: Session, path: str) -> list[dict[str, str]]:
    node = get_node(db, path)
    if node is None:
        return []
    return [{"url": url, "title": f"{node.name} - Note {i}"} for i, url in enumerate(node.notes_urls or [], start=1)]


def add_node(
    db: Session,
    parent_path: str | None,
    level: str,
    name: str,
    notes_urls: list[str] | None = None,
) -> NotesNode:
    slug = slugify(name)
    path = child_path(parent_path, level, slug)
    node = get_node(db, path)
    if node is None:
        node = NotesNode(path=path, parent_path=parent_path, level=level, slug=slug, name=name, notes_urls=list(notes_urls or []))
        db.add(node)
    else:
        node.name = name
        if notes_urls is not None:
            node.notes_urls = list(notes_urls)
    db.flush()
    return node


def load_tree(db: Session, tree: dict[str, Any], parent_path: str | None = None, depth: int = 0) -> int:
    """Insert a nested ``{name: subtree}`` mapping.

    Each key at depth N is a node of ``LEVELS[N]``. A leaf value that is a
    list is taken as the topic's note URLs. A mapping with a ``"streams"``
    key under a class skips to the stream level.
    """
    count = 0
    for name, subtree in tree.items():
        level = LEVELS[depth]
        urls = subtree if isinstance(subtree, list) else None
        node = add_node(db, parent_path, level, name, urls)
        count += 1
        if isinstance(subtree, dict):
            if "streams" in subtree and level == "classes":
                count += load_tree(db, subtree["streams"], node.path, LEVELS.index("streams"))
            else:
                count += load_tree(db, subtree, node.path, LEVELS.index("subjects") if level in ("classes", "streams") else depth + 1)
    return count
