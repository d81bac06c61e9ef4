"""Core business logic layer.

Subpackages:
- schedule: week schedule metadata (rotation slot, deadline, delivery) and day grouping
- menus: template, weekly menu generation and menu item workflows
"""
__all__ = ["schedule", "menus"]
