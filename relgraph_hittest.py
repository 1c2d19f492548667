# relgraph_hittest.py
# Part of the RelGraph Project
# Resolves a pointer position to the node or connection underneath it.

import pygame

from relgraph_camera import screen_to_world
from relgraph_model import EdgeHit

# --- Configuration ---
EDGE_MIN_THRESHOLD = 5.0  # keeps weak connections clickable
EDGE_WIDTH_FACTOR = 10.0


def closest_point_on_segment(point, start, end):
    point, start, end = pygame.Vector2(point), pygame.Vector2(start), pygame.Vector2(end)
    segment = end - start
    length_sq = segment.length_squared()
    if length_sq == 0:
        return start
    t = (point - start).dot(segment) / length_sq
    t = max(0.0, min(1.0, t))
    return start + segment * t


def edge_hit_threshold(edge, min_threshold=EDGE_MIN_THRESHOLD, width_factor=EDGE_WIDTH_FACTOR):
    return max(min_threshold, edge.strength * width_factor)


def hit_test_node(nodes, world_point):
    """Topmost node containing world_point, or None.

    Radius is compared in world units; the point already has the zoom divided out.
    """
    world_point = pygame.Vector2(world_point)
    for node in reversed(nodes):
        if world_point.distance_to(node.position) <= node.radius:
            return node
    return None


def hit_test_edge(model, edges, world_point, min_threshold=EDGE_MIN_THRESHOLD, width_factor=EDGE_WIDTH_FACTOR):
    """First connection (dataset order) within its hit threshold of world_point, or None."""
    world_point = pygame.Vector2(world_point)
    for edge in edges:
        source = model.get_node(edge.source)
        target = model.get_node(edge.target)
        closest = closest_point_on_segment(world_point, source.position, target.position)
        if world_point.distance_to(closest) <= edge_hit_threshold(edge, min_threshold, width_factor):
            return EdgeHit(edge, source, target)
    return None


def hit_test(model, visible, camera, screen_point, **thresholds):
    """Node first, then connection; None means the background was hit."""
    world_point = screen_to_world(camera, screen_point)
    node = hit_test_node(visible.nodes, world_point)
    if node is not None:
        return node
    return hit_test_edge(model, visible.edges, world_point, **thresholds)
