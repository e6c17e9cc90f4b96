"""Cohora: campus skill discovery over a static student roster.

An LLM picks students that match a free-text question; each match is
annotated with how far the student sits from the current user in the
acquaintance graph (1st, 2nd or 3rd degree).
"""

__version__ = "0.1.0"
