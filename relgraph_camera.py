# relgraph_camera.py
# Part of the RelGraph Project
# Pan and zoom transform between screen space and world space, with eased transitions.
#
# screen = world * zoom + pan
# world  = (screen - pan) / zoom

import logging
from dataclasses import dataclass, field, replace

import pygame

logger = logging.getLogger(__name__)

# --- Configuration ---
ZOOM_MIN = 0.5
ZOOM_MAX = 2.0
EASING = 0.1  # fraction of the remaining distance covered per redraw tick
SNAP_EPSILON = 1e-3


def clamp_zoom(zoom):
    return max(ZOOM_MIN, min(zoom, ZOOM_MAX))


@dataclass(frozen=True)
class CameraState:
    zoom: float = 1.0
    pan: pygame.Vector2 = field(default_factory=pygame.Vector2)
    target_zoom: float = 1.0
    target_pan: pygame.Vector2 = field(default_factory=pygame.Vector2)

    def __post_init__(self):
        # Vector2 is mutable; every state owns its own copies.
        object.__setattr__(self, 'pan', pygame.Vector2(self.pan))
        object.__setattr__(self, 'target_pan', pygame.Vector2(self.target_pan))
        object.__setattr__(self, 'zoom', clamp_zoom(self.zoom))
        object.__setattr__(self, 'target_zoom', clamp_zoom(self.target_zoom))


def screen_to_world(camera, screen_point):
    return (pygame.Vector2(screen_point) - camera.pan) / camera.zoom


def world_to_screen(camera, world_point):
    return pygame.Vector2(world_point) * camera.zoom + camera.pan


def is_settled(camera):
    return camera.zoom == camera.target_zoom and camera.pan == camera.target_pan


def _ease(current, target, fraction):
    delta = target - current
    if abs(delta) < SNAP_EPSILON:
        return target
    return current + delta * fraction


def advance_camera(camera, dt=1.0):
    """Move zoom and pan toward their targets by one redraw tick.

    dt is measured in ticks; a settled camera comes back unchanged.
    """
    if is_settled(camera):
        return camera
    fraction = EASING if dt == 1.0 else 1.0 - (1.0 - EASING) ** dt
    pan = pygame.Vector2(
        _ease(camera.pan.x, camera.target_pan.x, fraction),
        _ease(camera.pan.y, camera.target_pan.y, fraction),
    )
    return replace(camera, zoom=_ease(camera.zoom, camera.target_zoom, fraction), pan=pan)


def zoom_at(camera, screen_point, delta):
    """Zoom by delta while keeping the world point under screen_point fixed.

    Applied immediately (no easing) so the anchor holds on the very next frame.
    """
    anchor = pygame.Vector2(screen_point)
    world_before = screen_to_world(camera, anchor)
    zoom = clamp_zoom(camera.zoom + delta)
    pan = anchor - world_before * zoom
    return CameraState(zoom=zoom, pan=pan, target_zoom=zoom, target_pan=pan)


def pan(camera, dx, dy):
    """Translate directly, used while dragging; the target follows so easing does not pull back."""
    moved = camera.pan + pygame.Vector2(dx, dy)
    return CameraState(zoom=camera.zoom, pan=moved, target_zoom=camera.zoom, target_pan=moved)


def reset_view(camera):
    logger.debug("Camera reset requested from zoom %.3f", camera.zoom)
    return replace(camera, target_zoom=1.0, target_pan=pygame.Vector2(0, 0))
