# marketflow/category_tree.py
from collections import defaultdict
from typing import Dict, Iterator, List, Sequence, Tuple

from pydantic import Field

from .models import Category, Record


class CategoryNode(Record):
    category: Category
    children: List["CategoryNode"] = Field(default_factory=list)


def children_index(categories: Sequence[Category]) -> Dict[int, List[Category]]:
    known = {c.id for c in categories}
    index: Dict[int, List[Category]] = defaultdict(list)
    for category in categories:
        if category.parent_id in known:
            index[category.parent_id].append(category)
    return index


def walk(categories: Sequence[Category]) -> Iterator[Tuple[Category, int]]:
    """Depth-first, parent before children, yielding (category, depth).

    Roots are categories without a parent or whose parent is missing. A
    visited set guards against parent_id cycles; categories only reachable
    through a cycle are emitted afterwards as extra roots.
    """
    index = children_index(categories)
    known = {c.id for c in categories}
    roots = [c for c in categories if c.parent_id is None or c.parent_id not in known]
    visited = set()

    def _descend(root: Category) -> Iterator[Tuple[Category, int]]:
        stack = [(root, 0)]
        while stack:
            node, depth = stack.pop()
            if node.id in visited:
                continue
            visited.add(node.id)
            yield node, depth
            stack.extend((child, depth + 1) for child in reversed(index.get(node.id, [])))

    for root in roots:
        yield from _descend(root)
    for category in categories:
        if category.id not in visited:
            yield from _descend(category)


def build_tree(categories: Sequence[Category]) -> List[CategoryNode]:
    roots: List[CategoryNode] = []
    path: List[CategoryNode] = []
    for category, depth in walk(categories):
        node = CategoryNode(category=category)
        del path[depth:]
        if depth == 0:
            roots.append(node)
        else:
            path[-1].children.append(node)
        path.append(node)
    return roots
