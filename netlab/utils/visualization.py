"""Visualization utilities for the virtual network lab.

This module draws the lab topology: endpoints and links from the link graph,
plus shared networks and their members.
"""

import os
from typing import Tuple

import matplotlib.pyplot as plt
import networkx as nx

from netlab.core.simulator import NetworkLab


def save_topology_visualization(
    lab: NetworkLab,
    filename: str | None = None,
    figsize: Tuple[int, int] = (10, 8),
    block: bool = True,
    seed: int = 42,
) -> None:
    """Save the topology visualization to a file.

    Args:
        lab: NetworkLab instance.
        filename: Output filename, or None to show it immediately.
        figsize: Figure size as (width, height) in inches.
        block: Whether to block until the window is closed when showing.
        seed: Layout seed.
    """
    store = lab.store
    graph = nx.Graph(store.graph)
    for network in store.networks.values():
        label = f"[{network.name}]"
        graph.add_node(label, kind="network")
        for member in network.members:
            graph.add_edge(label, member, membership=True)

    pos = nx.spring_layout(graph, seed=seed)
    fig = plt.figure(figsize=figsize)

    def nodes_of(kind: str):
        return [n for n, data in graph.nodes(data=True) if data.get("kind") == kind]

    nx.draw_networkx_nodes(graph, pos, nodelist=nodes_of("host"), node_size=500, node_color="lightblue")
    nx.draw_networkx_nodes(graph, pos, nodelist=nodes_of("router"), node_size=700, node_color="orange")
    nx.draw_networkx_nodes(
        graph, pos, nodelist=nodes_of("network"), node_size=900, node_color="lightgreen", node_shape="s"
    )

    link_edges = [(u, v) for u, v, data in graph.edges(data=True) if not data.get("membership")]
    membership_edges = [(u, v) for u, v, data in graph.edges(data=True) if data.get("membership")]
    nx.draw_networkx_edges(graph, pos, edgelist=link_edges, edge_color="gray", width=2)
    nx.draw_networkx_edges(graph, pos, edgelist=membership_edges, edge_color="green", style="dashed")

    nx.draw_networkx_labels(graph, pos, font_size=12)

    edge_labels = {(u, v): f"{store.graph[u][v]['delay'] * 1000:.0f}ms" for u, v in store.graph.edges()}
    nx.draw_networkx_edge_labels(
        graph,
        pos,
        edge_labels=edge_labels,
        font_size=10,
        rotate=False,
        bbox=dict(facecolor="white", edgecolor="none", alpha=0.7),
    )

    plt.axis("off")
    plt.tight_layout()

    if filename:
        directory = os.path.dirname(filename)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.savefig(filename)
        plt.close(fig)
    else:
        plt.show(block=block)
        if not block:
            plt.pause(0.001)
