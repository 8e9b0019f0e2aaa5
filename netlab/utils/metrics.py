"""Metrics utilities for the virtual network lab.

This module provides helpers for saving and summarizing delivery metrics.
"""

import os
import json
from collections import Counter
from typing import Any, Dict

from netlab.core.simulator import NetworkLab


def save_metrics_to_json(
    metrics: Dict[str, Any], filename: str = "results/metrics.json"
) -> None:
    """Save metrics to a JSON file.

    Args:
        metrics: Dictionary of metrics to save.
        filename: Output filename.
    """
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(filename, "w") as f:
        json.dump(metrics, f, indent=2, default=str)


def summarize_drops(lab: NetworkLab) -> Counter:
    """Count dropped packets per ``"endpoint: reason"``."""
    return Counter(
        f"{packet.current_endpoint}: {reason}" for packet, reason in lab.dropped_packets
    )
