"""Exception types raised by the menu layer."""


class MenuError(Exception):
    """Base class for all bmenus errors."""


class QueryError(MenuError):
    """A remote player query failed (timeout, malformed reply, bad token)."""


class TemplateError(MenuError):
    """A command template could not be parsed or filled in."""
