# relgraph_viewer.py
# Interactive viewer for a relationship network export.
# - Left Click: Focus / open a contact, drill into a group, inspect a connection
# - Right or Middle Click + Drag: Pan the view
# - Mouse Scroll: Zoom towards the cursor
# - Backspace / Esc: Go back one level (closes the viewer from the overview)
# - R Key: Reset the view, H Key: Return to the overview

import os
import sys

import pygame

from relgraph_camera import world_to_screen
from relgraph_model import OUTPUT_DIR_NAME, OUTPUT_EDGES_FILENAME, AggregateNode, DataIntegrityError, load_network
from relgraph_projection import Level
from relgraph_session import GraphViewSession

# --- Constants ---
SCREEN_WIDTH, SCREEN_HEIGHT = 800, 720
INFO_PANEL_HEIGHT = 120
GRAPH_AREA_HEIGHT = SCREEN_HEIGHT - INFO_PANEL_HEIGHT
FPS = 60
ZOOM_STEP = 0.1
BG_COLOR = (250, 250, 250)
INFO_PANEL_COLOR = (40, 50, 60)
TEXT_COLOR = (230, 230, 230)
NODE_LABEL_COLOR = (55, 65, 81)
SELF_COLOR = (59, 130, 246)
POSITIVE_COLOR = (16, 185, 129)
NEGATIVE_COLOR = (239, 68, 68)
NEUTRAL_EDGE_COLOR = (156, 163, 175)
FOCUS_BORDER_COLOR = (245, 158, 11)
SELECTED_BORDER_COLOR = SELF_COLOR
BORDER_COLOR = (255, 255, 255)
EDGE_WIDTH_SCALE = 3


def hex_to_rgb(value):
    value = value.lstrip('#')
    return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))


def node_color(node, model=None):
    """Self is blue, members are green/red by balance, otherwise the group color."""
    if isinstance(node, AggregateNode):
        return hex_to_rgb(node.color)
    if node.is_self:
        return SELF_COLOR
    if node.relationship_balance > 0:
        return POSITIVE_COLOR
    if node.relationship_balance < 0:
        return NEGATIVE_COLOR
    if model is not None and node.group_key in model.groups:
        return hex_to_rgb(model.groups[node.group_key].color)
    return NEUTRAL_EDGE_COLOR


def edge_color(edge):
    return {'positive': POSITIVE_COLOR, 'negative': NEGATIVE_COLOR}.get(edge.balance, NEUTRAL_EDGE_COLOR)


def edge_width(edge, zoom=1.0):
    return max(1, int(round(edge.strength * EDGE_WIDTH_SCALE * zoom)))


def dim(color, opacity):
    """Blend a color toward the background; pygame.draw has no per-shape alpha."""
    return tuple(int(bg + (c - bg) * opacity) for c, bg in zip(color, BG_COLOR))


def balance_label(balance):
    return f"{'+' if balance > 0 else ''}{balance}"


def describe_state(state, model):
    if state.level is Level.GROUP:
        return model.groups[state.focus_group_id].display_name
    if state.level is Level.CONTACT:
        return model.get_node(state.focus_contact_id).display_name
    return "Overview"


def draw_graph(screen, session, fonts):
    model, camera, visible = session.model, session.camera, session.visible()
    selected_id = session.selected_node_id

    # 1. Connections
    for edge in visible.edges:
        start = world_to_screen(camera, model.get_node(edge.source).position)
        end = world_to_screen(camera, model.get_node(edge.target).position)
        pygame.draw.line(screen, edge_color(edge), start, end, edge_width(edge, camera.zoom))

    # 2. Nodes, last drawn on top
    for node in visible.nodes:
        pos = world_to_screen(camera, node.position)
        radius = max(2, int(node.radius * camera.zoom))
        opacity = visible.opacity_of(node.id)
        pygame.draw.circle(screen, dim(node_color(node, model), opacity), pos, radius)
        if node.id == selected_id:
            pygame.draw.circle(screen, SELECTED_BORDER_COLOR, pos, radius, 3)
        elif node.id == session.focused_id:
            pygame.draw.circle(screen, FOCUS_BORDER_COLOR, pos, radius, 3)
        else:
            pygame.draw.circle(screen, BORDER_COLOR, pos, radius, 2)

        if isinstance(node, AggregateNode):
            badge = fonts['small'].render(str(node.member_count), True, BORDER_COLOR)
            screen.blit(badge, badge.get_rect(center=(int(pos.x), int(pos.y))))

        if radius > 5:
            label = fonts['small'].render(node.display_name, True, dim(NODE_LABEL_COLOR, opacity))
            screen.blit(label, label.get_rect(center=(int(pos.x), int(pos.y) + radius + 12)))
            if isinstance(node, AggregateNode) or not node.is_self:
                color = POSITIVE_COLOR if node.relationship_balance > 0 else NEGATIVE_COLOR
                coins = fonts['small'].render(balance_label(node.relationship_balance), True, dim(color, opacity))
                screen.blit(coins, coins.get_rect(center=(int(pos.x), int(pos.y) + radius + 26)))


def draw_info_panel(screen, session, fonts):
    model = session.model
    pygame.draw.rect(screen, INFO_PANEL_COLOR, (0, GRAPH_AREA_HEIGHT, SCREEN_WIDTH, INFO_PANEL_HEIGHT))
    trail = " > ".join(describe_state(s, model) for s in session.breadcrumbs())
    screen.blit(fonts['small'].render(trail, True, TEXT_COLOR), (20, GRAPH_AREA_HEIGHT + 10))

    relation = session.selected_relation
    node = model.get_node(session.selected_node_id) if session.selected_node_id else None
    if relation is not None:
        edge = relation.edge
        title = f"{relation.source.display_name} - {relation.target.display_name}"
        details = f"Strength {edge.strength:.0%} | {edge.balance}"
        if edge.interaction_count is not None:
            details += f" | {edge.interaction_count} interactions"
        if edge.trend:
            details += f" | {edge.trend}"
        if edge.last_interaction_date:
            details += f" | last {edge.last_interaction_date.isoformat()}"
    elif node is not None:
        title = node.display_name
        details = f"{node.category.title()} | balance {balance_label(node.relationship_balance)}"
        if node.last_interaction_date:
            details += f" | last interaction {node.last_interaction_date.isoformat()}"
    else:
        title = "Click a group or contact | Drag to Pan | Scroll to Zoom"
        details = "'R' to Reset | 'H' for Overview | Backspace to go Back"
    screen.blit(fonts['large'].render(title, True, TEXT_COLOR), (20, GRAPH_AREA_HEIGHT + 35))
    screen.blit(fonts['medium'].render(details, True, TEXT_COLOR), (20, GRAPH_AREA_HEIGHT + 75))


def run_visualization(dataset_path, edges_path=None):
    try:
        model = load_network(dataset_path, edges_path)
    except FileNotFoundError:
        print(f"Error: Cannot find the file '{dataset_path}'"); return
    except DataIntegrityError as e:
        print(f"Error: '{dataset_path}' is not a valid relationship network: {e}"); return

    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
    pygame.display.set_caption(f"RelGraph Viewer - {os.path.basename(dataset_path)}")
    fonts = {'large': pygame.font.Font(None, 36), 'medium': pygame.font.Font(None, 26), 'small': pygame.font.Font(None, 18)}
    clock = pygame.time.Clock()

    running = True

    def request_exit():
        nonlocal running
        running = False

    session = GraphViewSession(
        model,
        on_contact_selected=lambda node: print(f"Opening profile: {node.display_name}"),
        on_relation_selected=lambda hit: print(f"Relationship: {hit.source.display_name} - {hit.target.display_name}"),
        on_exit_requested=request_exit,
    )

    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT: running = False

            if event.type == pygame.MOUSEWHEEL:
                session.wheel(pygame.mouse.get_pos(), ZOOM_STEP * event.y)

            if event.type == pygame.MOUSEBUTTONDOWN and event.pos[1] < GRAPH_AREA_HEIGHT:
                if event.button in (2, 3):
                    session.pointer_down(event.pos)
                if event.button == 1:
                    session.click(event.pos)

            if event.type == pygame.MOUSEBUTTONUP and event.button in (2, 3):
                session.pointer_up(event.pos)

            if event.type == pygame.WINDOWLEAVE:
                session.pointer_cancel()

            if event.type == pygame.MOUSEMOTION:
                session.pointer_move(event.pos)

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_r:
                    session.reset_view()
                elif event.key == pygame.K_h:
                    session.navigate_to(Level.OVERVIEW)
                elif event.key in (pygame.K_BACKSPACE, pygame.K_ESCAPE):
                    session.back()

        session.tick()

        screen.fill(BG_COLOR)
        draw_graph(screen, session, fonts)
        draw_info_panel(screen, session, fonts)
        pygame.display.flip()
        clock.tick(FPS)

    pygame.quit()


def choose_export(output_dir=OUTPUT_DIR_NAME):
    if not os.path.isdir(output_dir): print(f"Error: Output directory '{output_dir}' not found."); return None
    network_files = sorted(f for f in os.listdir(output_dir) if f.lower().endswith(('.json', '.csv')) and f != OUTPUT_EDGES_FILENAME)
    if not network_files: print(f"No network files (.json or Gephi .csv) found in the '{output_dir}' directory."); return None
    print("\n--- Select a Relationship Network to View ---")
    for i, filename in enumerate(network_files, 1): print(f"  {i}: {filename}")
    while True:
        try:
            choice_index = int(input(f"\nEnter the number of the file to load (1-{len(network_files)}): "))
            if 1 <= choice_index <= len(network_files): return os.path.join(output_dir, network_files[choice_index - 1])
            print("Invalid number.")
        except ValueError: print("Invalid input.")
        except KeyboardInterrupt: print("\nExiting."); return None


if __name__ == '__main__':
    selected_path = sys.argv[1] if len(sys.argv) > 1 else choose_export()
    if selected_path:
        print(f"Loading '{selected_path}'...")
        run_visualization(selected_path)
