"""Virtual network lab.

Build hosts, routers, shared networks and links, then observe packet delivery
in a discrete-event simulation or probe real container networks.
"""
