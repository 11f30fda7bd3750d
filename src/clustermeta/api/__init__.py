"""API routers."""

from . import clusters, cred_resolvers, health

__all__ = ["clusters", "cred_resolvers", "health"]
