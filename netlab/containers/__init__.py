"""Container network support.

This module maps the lab onto real container networks: a runtime client,
the bridge and route synthesizer, and the ping orchestrator.
"""
