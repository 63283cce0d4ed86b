# tests/test_category_tree.py
from marketflow.category_tree import build_tree, children_index, walk
from marketflow.models import Category


def cats(*rows):
    return [Category(id=i, name=name, parent_id=parent) for i, name, parent in rows]


def test_walk_is_preorder_depth_first():
    categories = cats(
        (1, "Electronics", None),
        (2, "Audio", 1),
        (3, "Clothing", None),
        (4, "Headphones", 2),
        (5, "Computers", 1),
    )
    assert [(c.name, depth) for c, depth in walk(categories)] == [
        ("Electronics", 0),
        ("Audio", 1),
        ("Headphones", 2),
        ("Computers", 1),
        ("Clothing", 0),
    ]


def test_children_index():
    index = children_index(cats((1, "A", None), (2, "B", 1), (3, "C", 1), (4, "D", 9)))
    assert [c.id for c in index[1]] == [2, 3]
    # dangling parent references are not indexed
    assert 9 not in index


def test_orphans_become_roots():
    categories = cats((1, "A", None), (2, "Orphan", 42))
    assert [(c.name, d) for c, d in walk(categories)] == [("A", 0), ("Orphan", 0)]


def test_cycles_terminate_and_keep_every_node():
    categories = cats((1, "Root", None), (2, "Loop A", 3), (3, "Loop B", 2), (4, "Self", 4))
    visited = [c.id for c, _ in walk(categories)]
    assert sorted(visited) == [1, 2, 3, 4]
    assert len(visited) == len(set(visited))


def test_build_tree():
    tree = build_tree(cats(
        (1, "Home", None),
        (2, "Kitchen", 1),
        (3, "Cookware", 2),
        (4, "Garden", 1),
        (5, "Toys", None),
    ))
    assert [n.category.name for n in tree] == ["Home", "Toys"]
    home = tree[0]
    assert [n.category.name for n in home.children] == ["Kitchen", "Garden"]
    assert [n.category.name for n in home.children[0].children] == ["Cookware"]
    assert tree[1].children == []


def test_empty():
    assert list(walk([])) == []
    assert build_tree([]) == []
