# relgraph.py
# The main program for the RelGraph Project.
# Summarises a relationship network file, flags contacts that are drifting away,
# exports Gephi lists and opens the interactive viewer.

import os
import sys
from datetime import date

import pandas as pd

from relgraph_model import OUTPUT_DIR_NAME, DataIntegrityError, export_gephi_csv, load_network, nodes_dataframe

# --- Configuration ---
DATASET_FILENAME = "sample_network.json"
ALERT_MIN_DAYS = 7

# --- Constants ---
SUGGESTION_DEFAULT = "Consider reaching out with a casual message"
SUGGESTION_OWE_FAVOR = "You owe them a favor, consider returning it"
SUGGESTION_FADING = "Interactions are dropping off, plan a catch-up"


# --- Analysis Functions ---
def network_summary(model):
    """Members and favor balance per group, ungrouped contacts last."""
    df = nodes_dataframe(model)
    df = df[df['category'] != 'self'].copy()
    df['group'] = df['group'].fillna('(ungrouped)')
    if df.empty:
        return pd.DataFrame(columns=['group', 'members', 'balance', 'positive', 'negative'])
    summary = df.groupby('group', sort=False).agg(
        members=('Id', 'count'),
        balance=('balance', 'sum'),
        positive=('balance', lambda s: int((s > 0).sum())),
        negative=('balance', lambda s: int((s < 0).sum())),
    ).reset_index()
    order = {key: i for i, key in enumerate(model.groups)}
    summary['_order'] = summary['group'].map(lambda g: order.get(g, len(order)))
    return summary.sort_values('_order', kind='stable').drop(columns='_order').reset_index(drop=True)


def suggestion_for(model, node):
    if node.relationship_balance < 0:
        return SUGGESTION_OWE_FAVOR
    for edge in model.get_edges_touching(node.id):
        if edge.other_end(node.id) == model.self_node.id and edge.trend == 'decreasing':
            return SUGGESTION_FADING
    return SUGGESTION_DEFAULT


def low_interaction_alerts(model, today=None, min_days=ALERT_MIN_DAYS):
    """Contacts not seen for at least min_days, longest silence first."""
    today = today or date.today()
    alerts = []
    for node in model.nodes:
        if node.is_self or node.last_interaction_date is None:
            continue
        days = (today - node.last_interaction_date).days
        if days >= min_days:
            alerts.append({'id': node.id, 'name': node.display_name, 'days': days,
                           'suggestion': suggestion_for(model, node)})
    alerts.sort(key=lambda a: (-a['days'], a['name']))
    return alerts


def print_summary(model):
    print(f"\nNetwork: {len(model.nodes)} people, {len(model.edges)} connections, {len(model.groups)} groups.")
    print(network_summary(model).to_string(index=False))


def print_alerts(model, min_days=ALERT_MIN_DAYS):
    alerts = low_interaction_alerts(model, min_days=min_days)
    if not alerts:
        print(f"\nEveryone has been in touch within the last {min_days} days.")
        return
    print(f"\n--- Low Interaction Alerts ({len(alerts)}) ---")
    for alert in alerts:
        print(f"  {alert['name']}: {alert['days']} days - {alert['suggestion']}")


# --- Main Execution Block ---
def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    output_dir = os.path.join(os.path.abspath('.'), OUTPUT_DIR_NAME)
    dataset_path = argv[0] if argv else os.path.join(output_dir, DATASET_FILENAME)
    edges_path = argv[1] if len(argv) > 1 else None

    try:
        model = load_network(dataset_path, edges_path)
    except FileNotFoundError:
        print(f"Error: Network file not found at '{dataset_path}'")
        return 1
    except DataIntegrityError as e:
        print(f"Error: '{dataset_path}' is not a valid relationship network: {e}")
        return 1

    while True:
        print("\n--- RelGraph Main Menu ---")
        print("1: Show network summary")
        print("2: Show low interaction alerts")
        print("3: Export graph files for Gephi")
        print("4: Open interactive viewer")
        print("5: Exit")
        choice = input("Enter your choice (1/2/3/4/5): ")

        if choice == '1':
            print_summary(model)
        elif choice == '2':
            print_alerts(model)
        elif choice == '3':
            node_path, edge_path = export_gephi_csv(model, output_dir)
            print(f"Success! Generated '{node_path}' and '{edge_path}'.")
        elif choice == '4':
            from relgraph_viewer import run_visualization
            run_visualization(dataset_path, edges_path)
        elif choice == '5':
            print("Exiting RelGraph.")
            return 0
        else:
            print("Invalid choice. Please try again.")


if __name__ == "__main__":
    sys.exit(main())
