"""Errors raised by the menu domain and logic layers."""


class InvalidInput(ValueError):
    """Malformed input, e.g. a week start that is not a real YYYY-MM-DD date."""


class MenuNotFound(LookupError):
    """A template, weekly menu, dish or menu item does not exist."""


class MenuConflict(RuntimeError):
    """A write could not be completed against the current store state."""
