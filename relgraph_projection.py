# relgraph_projection.py
# Part of the RelGraph Project
# Decides which nodes and connections are on screen for the current drill-down level.

import enum
import logging
from dataclasses import dataclass, field
from typing import Optional

from relgraph_model import AggregateNode, aggregate_id

logger = logging.getLogger(__name__)

# --- Configuration ---
AGGREGATE_BASE_RADIUS = 20
AGGREGATE_MAX_RADIUS = 40
DIMMED_OPACITY = 0.35


class Level(enum.Enum):
    OVERVIEW = "overview"
    GROUP = "group"
    CONTACT = "contact"


@dataclass(frozen=True)
class NavigationState:
    level: Level = Level.OVERVIEW
    focus_group_id: Optional[str] = None
    focus_contact_id: Optional[str] = None

    @classmethod
    def overview(cls):
        return cls()

    @classmethod
    def group(cls, group_key):
        return cls(Level.GROUP, focus_group_id=group_key)

    @classmethod
    def contact(cls, node_id):
        return cls(Level.CONTACT, focus_contact_id=node_id)


@dataclass(frozen=True)
class VisibleGraph:
    """Nodes in draw order (last drawn is on top) plus the connections between them."""
    nodes: tuple
    edges: tuple
    opacity: dict = field(default_factory=dict)

    def opacity_of(self, node_id):
        return self.opacity.get(node_id, 1.0)

    def node_ids(self):
        return {n.id for n in self.nodes}


def build_aggregates(model, base_radius=AGGREGATE_BASE_RADIUS, max_radius=AGGREGATE_MAX_RADIUS):
    """One summary node per non-empty group, in group declaration order."""
    aggregates = []
    for group in model.groups.values():
        members = model.members(group.key)
        if not members:
            continue
        count = len(members)
        aggregates.append(AggregateNode(
            id=aggregate_id(group.key),
            group_key=group.key,
            display_name=group.display_name,
            color=group.color,
            x=sum(m.x for m in members) / count,
            y=sum(m.y for m in members) / count,
            radius=min(max_radius, base_radius + 2 * count),
            relationship_balance=sum(m.relationship_balance for m in members),
            member_count=count,
        ))
    return aggregates


def neighborhood(model, node_id, dimmed_opacity=None):
    """The node, every connection touching it, and every node at the other end."""
    edges = model.get_edges_touching(node_id)
    ids = {node_id}
    for edge in edges:
        ids.update((edge.source, edge.target))
    nodes = tuple(n for n in model.nodes if n.id in ids)
    opacity = {}
    if dimmed_opacity is not None:
        opacity = {n.id: (1.0 if n.id == node_id else dimmed_opacity) for n in nodes}
    return VisibleGraph(nodes, tuple(edges), opacity)


def group_view(model, group_key):
    ids = {model.self_node.id} | {m.id for m in model.members(group_key)}
    nodes = tuple(n for n in model.nodes if n.id in ids)
    edges = tuple(e for e in model.edges if e.source in ids and e.target in ids)
    return VisibleGraph(nodes, edges)


def overview(model, base_radius=AGGREGATE_BASE_RADIUS, max_radius=AGGREGATE_MAX_RADIUS):
    nodes = (model.self_node,) + tuple(build_aggregates(model, base_radius, max_radius))
    return VisibleGraph(nodes, ())


def project(model, navigation, focus_id=None, base_radius=AGGREGATE_BASE_RADIUS,
            max_radius=AGGREGATE_MAX_RADIUS, dimmed_opacity=DIMMED_OPACITY):
    """Visible nodes and connections for a navigation state.

    focus_id is the lightweight spotlight set before committing to a level change;
    it narrows the view to that node's one-hop neighborhood at any level but Contact.
    """
    if navigation.level is Level.CONTACT and model.has_node(navigation.focus_contact_id):
        return neighborhood(model, navigation.focus_contact_id, dimmed_opacity)
    if focus_id is not None and model.has_node(focus_id):
        return neighborhood(model, focus_id)
    if navigation.level is Level.GROUP and navigation.focus_group_id in model.groups:
        return group_view(model, navigation.focus_group_id)
    if navigation.level is not Level.OVERVIEW:
        logger.warning("Navigation state %s does not match the dataset, showing overview", navigation)
    return overview(model, base_radius, max_radius)
