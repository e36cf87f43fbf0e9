"""uiforge: compile whitelisted layout trees into component source.

A planner turns natural language into a layout tree; uiforge validates the
tree against a closed component registry, generates deterministic source,
re-checks that source with a static linter and keeps a linear version
history with rollback.
"""

__version__ = "0.1.0"
