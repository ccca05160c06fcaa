"""Utilities module.

Exception taxonomy, clock and identifier collaborators.
"""
