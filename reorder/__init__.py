"""Reorder list service: user accounts and per-user product reorder lists."""
