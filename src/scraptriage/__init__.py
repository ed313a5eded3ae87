"""
scraptriage - inventory screenshot triage

Finds item slots in an inventory screenshot, resolves recognized text
against a known-item catalog, and suggests whether to keep, maybe sell,
or recycle each stack.
"""

__version__ = "0.1.0"
