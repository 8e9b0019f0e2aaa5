"""Utilities for the virtual network lab: metrics and visualization."""
