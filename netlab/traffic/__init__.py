"""Traffic generation for the virtual network lab.

This module provides interval and payload factories used by
NetworkLab.packet_generator.
"""
