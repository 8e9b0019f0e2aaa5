"""Core components for the virtual network lab.

This module contains the topology model (endpoints, networks, links and
packets), the forwarding logic, the reachability resolver and the
NetworkLab simulator that ties them together.
"""
