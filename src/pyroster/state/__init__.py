"""State/store layer.

This package is the single source of truth for the roster: the store holds
the user collection and UI cursor state, and the ranking module derives the
ranked, filtered and paged projections from it.
"""
