"""Snapshot layer: registry working trees pinned to one historical commit."""
