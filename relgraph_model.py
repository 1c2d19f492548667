# relgraph_model.py
# Part of the RelGraph Project
# Holds the people, groups and connections of a relationship network and loads them from disk.

import json
import logging
import os
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional

import networkx as nx
import pandas as pd
import pygame

logger = logging.getLogger(__name__)

# --- Configuration ---
OUTPUT_DIR_NAME = "output_relgraph"
OUTPUT_NODES_FILENAME = "gephi_node_list.csv"
OUTPUT_EDGES_FILENAME = "gephi_edge_list.csv"

# --- Constants ---
CATEGORIES = ("self", "friend", "family", "colleague", "acquaintance")
EDGE_BALANCES = ("positive", "negative", "neutral")
TRENDS = ("increasing", "decreasing", "stable")
SELF_NODE_RADIUS = 22
NODE_RADIUS = 16
LAYOUT_SCALE = 250
LAYOUT_CENTER = (400, 300)
GROUP_PALETTE = ("#10B981", "#8B5CF6", "#6366F1", "#EC4899", "#F59E0B", "#14B8A6")


class DataIntegrityError(ValueError):
    """The dataset cannot be turned into a consistent graph."""


# --- Records ---

@dataclass(frozen=True)
class Group:
    key: str
    display_name: str
    color: str


@dataclass(frozen=True)
class Node:
    """A real person in the network, positioned in world space."""
    id: str
    display_name: str
    x: float
    y: float
    radius: float
    relationship_balance: int
    category: str
    group_key: Optional[str] = None
    interaction_frequency: Optional[float] = None
    last_interaction_date: Optional[date] = None

    @property
    def position(self):
        return pygame.Vector2(self.x, self.y)

    @property
    def is_self(self):
        return self.category == "self"


@dataclass(frozen=True)
class AggregateNode:
    """Stand-in for every member of a group when the network is viewed from above."""
    id: str
    group_key: str
    display_name: str
    color: str
    x: float
    y: float
    radius: float
    relationship_balance: int
    member_count: int

    @property
    def position(self):
        return pygame.Vector2(self.x, self.y)


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    strength: float
    balance: str = "neutral"
    interaction_count: Optional[int] = None
    last_interaction_date: Optional[date] = None
    trend: Optional[str] = None

    def touches(self, node_id):
        return node_id in (self.source, self.target)

    def other_end(self, node_id):
        return self.target if node_id == self.source else self.source


@dataclass(frozen=True)
class EdgeHit:
    """An edge together with its resolved endpoint nodes."""
    edge: Edge
    source: Node
    target: Node


def aggregate_id(group_key):
    return f"group:{group_key}"


# --- Graph Model ---

class GraphModel:
    """Immutable people/connection graph with O(1) id lookup.

    Validates the whole dataset up front and raises DataIntegrityError on the
    first inconsistency, so every later query can trust the ids it is given.
    """

    def __init__(self, nodes, edges, groups=None):
        self.nodes = tuple(nodes)
        self.edges = tuple(edges)
        self._by_id = {}
        for node in self.nodes:
            if node.id in self._by_id:
                raise DataIntegrityError(f"Duplicate node id '{node.id}'")
            if node.category not in CATEGORIES:
                raise DataIntegrityError(f"Node '{node.id}' has unknown category '{node.category}'")
            self._by_id[node.id] = node

        self_nodes = [n for n in self.nodes if n.is_self]
        if len(self_nodes) != 1:
            raise DataIntegrityError(f"Expected exactly one 'self' node, found {len(self_nodes)}")
        self.self_node = self_nodes[0]

        if groups is None:
            groups = _groups_from_nodes(self.nodes)
        self.groups = {}
        for group in groups:
            if group.key in self.groups:
                raise DataIntegrityError(f"Duplicate group key '{group.key}'")
            self.groups[group.key] = group
        for node in self.nodes:
            if node.group_key is None:
                continue
            if node.is_self:
                raise DataIntegrityError("The 'self' node cannot belong to a group")
            if node.group_key not in self.groups:
                raise DataIntegrityError(f"Node '{node.id}' references unknown group '{node.group_key}'")

        self.graph = nx.Graph()
        self.graph.add_nodes_from(self._by_id)
        self._touching = {node_id: [] for node_id in self._by_id}
        for edge in self.edges:
            _check_edge(edge, self._by_id)
            if self.graph.has_edge(edge.source, edge.target):
                raise DataIntegrityError(f"Duplicate connection between '{edge.source}' and '{edge.target}'")
            self.graph.add_edge(edge.source, edge.target, strength=edge.strength)
            self._touching[edge.source].append(edge)
            self._touching[edge.target].append(edge)

        logger.debug("Graph model loaded: %d nodes, %d edges, %d groups",
                     len(self.nodes), len(self.edges), len(self.groups))

    def get_node(self, node_id):
        """Return the node with this id, or None when there is no such node."""
        return self._by_id.get(node_id)

    def has_node(self, node_id):
        return node_id in self._by_id

    def get_edges_touching(self, node_id):
        """Edges with node_id at either end, in dataset order."""
        return list(self._touching.get(node_id, ()))

    def neighbors(self, node_id):
        if node_id not in self._by_id:
            return set()
        return set(self.graph.neighbors(node_id))

    def members(self, group_key):
        return [n for n in self.nodes if n.group_key == group_key]


def _check_edge(edge, by_id):
    for end in (edge.source, edge.target):
        if end not in by_id:
            raise DataIntegrityError(f"Connection references unknown node '{end}'")
    if edge.source == edge.target:
        raise DataIntegrityError(f"Connection from '{edge.source}' to itself")
    if not 0.0 <= edge.strength <= 1.0:
        raise DataIntegrityError(f"Connection '{edge.source}'-'{edge.target}' has strength {edge.strength} outside [0, 1]")
    if edge.balance not in EDGE_BALANCES:
        raise DataIntegrityError(f"Connection '{edge.source}'-'{edge.target}' has unknown balance '{edge.balance}'")
    if edge.trend is not None and edge.trend not in TRENDS:
        raise DataIntegrityError(f"Connection '{edge.source}'-'{edge.target}' has unknown trend '{edge.trend}'")


def _groups_from_nodes(nodes):
    keys = []
    for node in nodes:
        if node.group_key is not None and node.group_key not in keys:
            keys.append(node.group_key)
    return [Group(key, key.title(), GROUP_PALETTE[i % len(GROUP_PALETTE)]) for i, key in enumerate(keys)]


# --- Record parsing ---

def _parse_date(value):
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise DataIntegrityError(f"Invalid date '{value}'") from None


def _optional(record, key, convert):
    value = record.get(key)
    return None if value is None or value == "" else convert(value)


def node_from_dict(record):
    try:
        node_id = str(record["id"])
        category = record.get("category") or "acquaintance"
        default_radius = SELF_NODE_RADIUS if category == "self" else NODE_RADIUS
        return Node(
            id=node_id,
            display_name=record.get("label") or node_id,
            x=_optional(record, "x", float),
            y=_optional(record, "y", float),
            radius=_optional(record, "radius", float) or default_radius,
            relationship_balance=int(record.get("balance") or 0),
            category=category,
            group_key=_optional(record, "group", str),
            interaction_frequency=_optional(record, "interaction_frequency", float),
            last_interaction_date=_parse_date(record.get("last_interaction")),
        )
    except KeyError as e:
        raise DataIntegrityError(f"Node record is missing field {e}") from None
    except DataIntegrityError:
        raise
    except (TypeError, ValueError) as e:
        raise DataIntegrityError(f"Malformed node record {record!r}: {e}") from None


def edge_from_dict(record):
    try:
        return Edge(
            source=str(record["source"]),
            target=str(record["target"]),
            strength=float(record["strength"]),
            balance=record.get("balance") or "neutral",
            interaction_count=_optional(record, "interaction_count", int),
            last_interaction_date=_parse_date(record.get("last_interaction")),
            trend=_optional(record, "trend", str),
        )
    except KeyError as e:
        raise DataIntegrityError(f"Connection record is missing field {e}") from None
    except DataIntegrityError:
        raise
    except (TypeError, ValueError) as e:
        raise DataIntegrityError(f"Malformed connection record {record!r}: {e}") from None


def group_from_dict(record, index=0):
    try:
        key = str(record["key"])
    except KeyError:
        raise DataIntegrityError("Group record is missing field 'key'") from None
    except TypeError:
        raise DataIntegrityError(f"Malformed group record {record!r}") from None
    return Group(key, record.get("label") or key.title(), record.get("color") or GROUP_PALETTE[index % len(GROUP_PALETTE)])


# --- Layout ---

def apply_layout(nodes, edges, seed=42):
    """Place nodes that have no coordinates using a spring layout anchored on 'self'."""
    nodes = list(nodes)
    if all(n.x is not None and n.y is not None for n in nodes):
        return nodes
    G = nx.Graph()
    G.add_nodes_from(n.id for n in nodes)
    G.add_edges_from((e.source, e.target) for e in edges if G.has_node(e.source) and G.has_node(e.target))
    layout_pos = nx.spring_layout(G, scale=LAYOUT_SCALE, center=LAYOUT_CENTER, iterations=150, seed=seed)
    anchor = next((n.id for n in nodes if n.category == "self"), None)
    shift_x, shift_y = 0.0, 0.0
    if anchor is not None:
        shift_x = LAYOUT_CENTER[0] - layout_pos[anchor][0]
        shift_y = LAYOUT_CENTER[1] - layout_pos[anchor][1]
    placed = []
    for n in nodes:
        if n.x is None or n.y is None:
            x, y = layout_pos[n.id]
            n = replace(n, x=float(x + shift_x), y=float(y + shift_y))
        placed.append(n)
    return placed


# --- Loading ---

def _record_list(data, key, required=False):
    if key not in data and not required:
        return []
    value = data.get(key)
    if not isinstance(value, list):
        raise DataIntegrityError(f"Dataset field '{key}' must be a list")
    return value


def build_model(data):
    """Build a GraphModel from the decoded JSON document."""
    if not isinstance(data, dict):
        raise DataIntegrityError("Dataset must be an object with a 'nodes' list")
    groups = None
    if "groups" in data:
        groups = [group_from_dict(g, i) for i, g in enumerate(_record_list(data, "groups"))]
    nodes = [node_from_dict(n) for n in _record_list(data, "nodes", required=True)]
    edges = [edge_from_dict(e) for e in _record_list(data, "edges")]
    return GraphModel(apply_layout(nodes, edges), edges, groups)


def load_dataset(json_filepath):
    with open(json_filepath, 'r') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise DataIntegrityError(f"'{json_filepath}' is not valid JSON: {e}") from None
    model = build_model(data)
    logger.info("Loaded '%s': %d nodes and %d edges", json_filepath, len(model.nodes), len(model.edges))
    return model


def _records(df):
    return df.astype(object).where(pd.notna(df), None).to_dict('records')


def load_dataset_csv(nodes_csv, edges_csv):
    """Load Gephi-style node and edge lists (Id/Label and Source/Target columns)."""
    try:
        nodes_df = pd.read_csv(nodes_csv, dtype={'Id': str, 'group': str, 'category': str})
        edges_df = pd.read_csv(edges_csv, dtype={'Source': str, 'Target': str})
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataIntegrityError(f"Cannot read Gephi lists: {e}") from None
    nodes_df = nodes_df.rename(columns={'Id': 'id', 'Label': 'label'})
    edges_df = edges_df.rename(columns={'Source': 'source', 'Target': 'target'})
    nodes = [node_from_dict(r) for r in _records(nodes_df)]
    edges = [edge_from_dict(r) for r in _records(edges_df)]
    return GraphModel(apply_layout(nodes, edges), edges)


def load_network(path, edges_path=None):
    """Load a JSON export, or a Gephi node list with its edge list beside it."""
    if str(path).lower().endswith('.csv'):
        if edges_path is None:
            edges_path = os.path.join(os.path.dirname(str(path)), OUTPUT_EDGES_FILENAME)
        return load_dataset_csv(path, edges_path)
    return load_dataset(path)


# --- Export ---

def nodes_dataframe(model):
    return pd.DataFrame([{
        'Id': n.id,
        'Label': n.display_name,
        'x': n.x,
        'y': n.y,
        'radius': n.radius,
        'balance': n.relationship_balance,
        'category': n.category,
        'group': n.group_key,
        'interaction_frequency': n.interaction_frequency,
        'last_interaction': n.last_interaction_date.isoformat() if n.last_interaction_date else None,
    } for n in model.nodes])


def edges_dataframe(model):
    return pd.DataFrame([{
        'Source': e.source,
        'Target': e.target,
        'strength': e.strength,
        'balance': e.balance,
        'interaction_count': e.interaction_count,
        'last_interaction': e.last_interaction_date.isoformat() if e.last_interaction_date else None,
        'trend': e.trend,
    } for e in model.edges], columns=['Source', 'Target', 'strength', 'balance', 'interaction_count', 'last_interaction', 'trend'])


def export_gephi_csv(model, output_dir):
    """Write the node and edge lists for Gephi, returning both paths."""
    os.makedirs(output_dir, exist_ok=True)
    node_path = os.path.join(output_dir, OUTPUT_NODES_FILENAME)
    edge_path = os.path.join(output_dir, OUTPUT_EDGES_FILENAME)
    nodes_dataframe(model).to_csv(node_path, index=False)
    edges_dataframe(model).to_csv(edge_path, index=False)
    return node_path, edge_path
