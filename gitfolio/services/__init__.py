"""Admin console and public viewer services."""

from gitfolio.services.admin import AdminConsole, DashboardStats, MediaUpload
from gitfolio.services.public import PublicFeed, PublicSite

__all__ = [
    "AdminConsole",
    "DashboardStats",
    "MediaUpload",
    "PublicFeed",
    "PublicSite",
]
