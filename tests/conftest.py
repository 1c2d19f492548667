"""
pytest fixtures for the RelGraph test suite.

Provides the seven-person sample network shipped in output_relgraph/ and small
hand-built graphs for geometry and edge-case tests.
"""

import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

# Ensure the flat relgraph modules are importable
ROOT = Path(__file__).parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from relgraph_model import Edge, GraphModel, Group, Node, load_dataset  # noqa: E402

SAMPLE_PATH = ROOT / "output_relgraph" / "sample_network.json"


def make_node(node_id, x, y, radius=10, balance=0, category="friend", group=None, **kwargs):
    return Node(id=node_id, display_name=node_id.title(), x=x, y=y, radius=radius,
                relationship_balance=balance, category=category, group_key=group, **kwargs)


@pytest.fixture
def sample_path():
    return SAMPLE_PATH


@pytest.fixture
def sample_model():
    return load_dataset(SAMPLE_PATH)


@pytest.fixture
def line_model():
    """Self and one contact 100 units apart joined by a weak connection."""
    nodes = [
        make_node("me", 0, 0, category="self"),
        make_node("pat", 100, 0),
    ]
    edges = [Edge("me", "pat", strength=0.1)]
    return GraphModel(nodes, edges)


@pytest.fixture
def friends_model():
    """Self plus three friends with balances 10, -5 and 20, and an empty family group."""
    nodes = [
        make_node("me", 0, 0, radius=22, category="self"),
        make_node("ann", 100, 0, balance=10, group="friends"),
        make_node("bob", 0, 100, balance=-5, group="friends"),
        make_node("cat", 100, 100, balance=20, group="friends"),
    ]
    edges = [
        Edge("me", "ann", 0.5, "positive"),
        Edge("me", "bob", 0.5, "negative"),
        Edge("ann", "cat", 0.2),
    ]
    groups = [Group("friends", "Friends", "#10B981"), Group("family", "Family", "#14B8A6")]
    return GraphModel(nodes, edges, groups)
