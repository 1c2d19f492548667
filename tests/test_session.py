"""Tests for a graph viewing session driven by pointer input."""

import logging

import pygame
import pytest

from relgraph_model import EdgeHit
from relgraph_projection import Level, NavigationState
from relgraph_session import GraphViewSession

FRIENDS_AGGREGATE = (275, 275)
SARAH = (300, 200)
LIU = (250, 350)
YOU = (400, 300)
BACKGROUND = (20, 20)


@pytest.fixture
def events():
    return {"contacts": [], "relations": [], "exits": 0}


@pytest.fixture
def session(sample_model, events):
    def on_exit():
        events["exits"] += 1

    return GraphViewSession(
        sample_model,
        on_contact_selected=events["contacts"].append,
        on_relation_selected=events["relations"].append,
        on_exit_requested=on_exit,
    )


class TestClicks:
    def test_group_node_drills_in(self, session):
        session.click(FRIENDS_AGGREGATE)
        assert session.state == NavigationState.group("friends")

    def test_focus_then_confirm_inside_group(self, session, events):
        session.click(FRIENDS_AGGREGATE)

        session.click(SARAH)
        assert session.focused_id == "sarah"
        assert session.state.level is Level.GROUP
        assert events["contacts"] == []

        session.click(SARAH)
        assert session.state == NavigationState.contact("sarah")
        assert session.focused_id is None
        assert [n.id for n in events["contacts"]] == ["sarah"]
        assert session.selected_node_id == "sarah"

    def test_self_clears_focus_inside_group(self, session):
        session.click(FRIENDS_AGGREGATE)
        session.click(SARAH)
        session.click(YOU)
        assert session.focused_id is None
        assert session.state.level is Level.GROUP

    def test_self_from_overview_opens_personal_network(self, session, events):
        session.click(YOU)
        assert session.state == NavigationState.contact("you")
        assert len(session.visible().nodes) == 7
        assert events["contacts"] == []

    def test_direct_select_at_contact_level(self, session, events):
        session.click(YOU)
        session.click(LIU)
        assert session.state == NavigationState.contact("liu")
        assert [n.id for n in events["contacts"]] == ["liu"]

    def test_connection_click_reports_relationship(self, session, sample_model, events):
        session.navigate_to(Level.CONTACT, "sarah")
        hit = session.click((350, 250))
        assert isinstance(hit, EdgeHit)
        assert events["relations"] == [hit]
        assert hit.source is sample_model.get_node("you")
        assert hit.target is sample_model.get_node("sarah")
        assert session.selected_relation is hit

    def test_background_clears_focus_and_selection(self, session):
        session.click(FRIENDS_AGGREGATE)
        session.click(SARAH)
        session.click(SARAH)
        session.click(BACKGROUND)
        assert session.focused_id is None
        assert session.selected_node_id is None
        assert session.selected_relation is None
        assert session.state == NavigationState.contact("sarah")


class TestNavigation:
    def test_back_unwinds_then_requests_exit(self, session, events):
        session.click(FRIENDS_AGGREGATE)
        session.click(SARAH)
        session.click(SARAH)

        assert session.back()
        assert session.state == NavigationState.group("friends")
        assert session.back()
        assert session.state == NavigationState.overview()
        assert events["exits"] == 0

        assert session.back() is False
        assert events["exits"] == 1
        assert session.state == NavigationState.overview()

    def test_round_trip(self, session):
        start = session.state
        session.click(FRIENDS_AGGREGATE)
        session.click(LIU)
        session.click(LIU)
        session.navigate_to("overview")
        session.navigate_to(Level.CONTACT, "anna")
        for _ in range(4):
            assert session.back()
        assert session.state == start
        assert session.navigation.history == []

    def test_jump_to_current_state_still_pushes(self, session):
        session.navigate_to(Level.GROUP, "friends")
        start, depth = session.state, session.navigation.depth
        assert session.navigate_to(Level.GROUP, "friends")
        assert session.navigation.depth == depth + 1
        assert session.back()
        assert session.state == start
        assert session.navigation.depth == depth

    def test_unknown_level_is_ignored(self, session, caplog):
        session.click(FRIENDS_AGGREGATE)
        before, depth = session.state, session.navigation.depth
        with caplog.at_level(logging.WARNING, logger="relgraph_session"):
            assert session.navigate_to("Overview") is False
        assert session.state == before
        assert session.navigation.depth == depth
        assert "unknown level 'Overview'" in caplog.text

    def test_unknown_target_is_ignored(self, session, caplog):
        session.click(FRIENDS_AGGREGATE)
        before, depth = session.state, session.navigation.depth
        with caplog.at_level(logging.WARNING, logger="relgraph_session"):
            assert session.navigate_to(Level.CONTACT, "ghost") is False
            assert session.navigate_to(Level.GROUP, "pirates") is False
        assert session.state == before
        assert session.navigation.depth == depth
        assert "unknown contact 'ghost'" in caplog.text

    def test_transition_eases_camera_home(self, session):
        session.wheel(FRIENDS_AGGREGATE, 0.5)
        assert session.camera.zoom == 1.5
        session.click(FRIENDS_AGGREGATE)
        assert session.state == NavigationState.group("friends")
        assert session.camera.target_zoom == 1.0
        assert session.camera.target_pan == pygame.Vector2(0, 0)
        assert session.camera.zoom == 1.5

    def test_reset_returns_to_overview(self, session):
        session.click(FRIENDS_AGGREGATE)
        session.click(SARAH)
        session.reset()
        assert session.state == NavigationState.overview()
        assert session.navigation.depth == 0
        assert session.focused_id is None


class TestPointer:
    def test_drag_pans_directly(self, session):
        session.pointer_down((100, 100))
        session.pointer_move((130, 110))
        session.pointer_move((140, 120))
        assert session.camera.pan == pygame.Vector2(40, 20)
        session.pointer_up((140, 120))
        assert not session.dragging

        session.pointer_move((200, 200))
        assert session.camera.pan == pygame.Vector2(40, 20)

    def test_cancel_ends_drag(self, session):
        session.pointer_down((10, 10))
        session.pointer_cancel()
        assert not session.dragging
        session.pointer_move((60, 60))
        assert session.camera.pan == pygame.Vector2(0, 0)

    def test_hover_reports_hit(self, session, sample_model):
        assert session.pointer_move(YOU) is sample_model.self_node
        assert session.pointer_move(BACKGROUND) is None
        assert session.hovered is None

    def test_wheel_keeps_anchor(self, session):
        before = session.world_point_at((123, 456))
        session.wheel((123, 456), 0.3)
        after = session.world_point_at((123, 456))
        assert after.x == pytest.approx(before.x)
        assert after.y == pytest.approx(before.y)

    def test_tick_is_idempotent_when_settled(self, session):
        camera = session.camera
        assert session.tick() is camera

    def test_reset_view_clears_focus_and_converges(self, session):
        session.wheel((0, 0), 0.8)
        session.focus("liu")
        session.reset_view()
        assert session.focused_id is None
        for _ in range(1000):
            session.tick()
        assert session.camera.zoom == 1.0

    def test_focus_unknown_node(self, session):
        assert session.focus("ghost") is False
        assert session.focused_id is None
