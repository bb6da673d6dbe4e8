"""Ordering and move engine: order model, move planner, reconciliation."""
