# relgraph_session.py
# Part of the RelGraph Project
# One viewing session of the relationship graph: pointer input in, selection callbacks out.

import logging

import pygame

from relgraph_camera import CameraState, advance_camera, pan, reset_view, screen_to_world, zoom_at
from relgraph_hittest import hit_test
from relgraph_model import AggregateNode, EdgeHit
from relgraph_navigation import NavigationStack
from relgraph_projection import Level, NavigationState, project

logger = logging.getLogger(__name__)


class GraphViewSession:
    """Owns navigation, camera, focus and drag state for a single graph view.

    Click rules:
      - background clears focus and selection
      - a group node drills into that group
      - inside a group the first click on a member focuses it, a second click
        on the focused member opens it at contact level
      - anywhere else a member click opens it directly
      - 'self' opens the whole personal network from the overview, and
        clears focus everywhere else
      - a connection click reports the relationship
    """

    def __init__(self, model, on_contact_selected=None, on_relation_selected=None,
                 on_exit_requested=None, hit_thresholds=None):
        self.model = model
        self.on_contact_selected = on_contact_selected
        self.on_relation_selected = on_relation_selected
        self.on_exit_requested = on_exit_requested
        self.hit_thresholds = hit_thresholds or {}
        self.navigation = NavigationStack()
        self.camera = CameraState()
        self.focused_id = None
        self.selected_node_id = None
        self.selected_relation = None
        self.hovered = None
        self.drag_start = None

    # --- Queries ---

    @property
    def state(self):
        return self.navigation.current

    @property
    def dragging(self):
        return self.drag_start is not None

    def visible(self):
        return project(self.model, self.state, self.focused_id)

    def world_point_at(self, screen_point):
        return screen_to_world(self.camera, screen_point)

    def hit_test(self, screen_point):
        return hit_test(self.model, self.visible(), self.camera, screen_point, **self.hit_thresholds)

    def breadcrumbs(self):
        return self.navigation.breadcrumbs()

    # --- Pointer input ---

    def pointer_down(self, screen_point):
        self.drag_start = pygame.Vector2(screen_point)

    def pointer_move(self, screen_point):
        if self.drag_start is not None:
            point = pygame.Vector2(screen_point)
            delta = point - self.drag_start
            self.camera = pan(self.camera, delta.x, delta.y)
            self.drag_start = point
            return None
        self.hovered = self.hit_test(screen_point)
        return self.hovered

    def pointer_up(self, screen_point=None):
        self.drag_start = None

    def pointer_cancel(self):
        self.drag_start = None

    def wheel(self, screen_point, delta):
        self.camera = zoom_at(self.camera, screen_point, delta)

    def tick(self, dt=1.0):
        self.camera = advance_camera(self.camera, dt)
        return self.camera

    def click(self, screen_point):
        hit = self.hit_test(screen_point)
        if hit is None:
            self.focused_id = None
            self.selected_node_id = None
            self.selected_relation = None
        elif isinstance(hit, EdgeHit):
            self._select_relation(hit)
        elif isinstance(hit, AggregateNode):
            if self.navigation.select_group(hit.group_key):
                self._after_transition()
        elif hit.is_self:
            if self.state.level is Level.OVERVIEW and self.focused_id is None:
                if self.navigation.select_contact(hit.id):
                    self._after_transition()
            else:
                self.focused_id = None
        elif self.state.level is Level.GROUP and self.focused_id != hit.id:
            self.focused_id = hit.id
        else:
            self._select_contact(hit)
        return hit

    def focus(self, node_id):
        if node_id is not None and not self.model.has_node(node_id):
            logger.warning("Cannot focus unknown node '%s'", node_id)
            return False
        self.focused_id = node_id
        return True

    # --- Navigation ---

    def back(self):
        if self.navigation.back():
            self._after_transition()
            return True
        logger.debug("Navigation history empty, requesting exit")
        if self.on_exit_requested is not None:
            self.on_exit_requested()
        return False

    def navigate_to(self, level, target_id=None):
        """Breadcrumb-style jump. Unknown targets are ignored and leave the state untouched."""
        try:
            level = Level(level)
        except ValueError:
            logger.warning("Ignoring navigation to unknown level '%s'", level)
            return False
        if level is Level.OVERVIEW:
            target = NavigationState.overview()
        elif level is Level.GROUP:
            if target_id not in self.model.groups:
                logger.warning("Ignoring navigation to unknown group '%s'", target_id)
                return False
            target = NavigationState.group(target_id)
        else:
            if not self.model.has_node(target_id):
                logger.warning("Ignoring navigation to unknown contact '%s'", target_id)
                return False
            target = NavigationState.contact(target_id)
        self.navigation.navigate_to(target)
        self._after_transition()
        return True

    def reset_view(self):
        self.focused_id = None
        self.camera = reset_view(self.camera)

    def reset(self):
        self.navigation.reset()
        self.selected_node_id = None
        self.selected_relation = None
        self.hovered = None
        self.reset_view()

    # --- Internals ---

    def _after_transition(self):
        self.focused_id = None
        self.hovered = None
        self.camera = reset_view(self.camera)

    def _select_contact(self, node):
        if self.navigation.select_contact(node.id):
            self._after_transition()
        self.selected_node_id = node.id
        self.selected_relation = None
        logger.debug("Contact selected: %s", node.id)
        if self.on_contact_selected is not None:
            self.on_contact_selected(node)

    def _select_relation(self, edge_hit):
        self.selected_relation = edge_hit
        self.selected_node_id = None
        logger.debug("Relationship selected: %s - %s", edge_hit.source.id, edge_hit.target.id)
        if self.on_relation_selected is not None:
            self.on_relation_selected(edge_hit)
