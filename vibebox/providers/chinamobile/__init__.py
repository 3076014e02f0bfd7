"""China Mobile Cloud ECS provider."""

from vibebox.providers.chinamobile.client import ChinaMobileAPIError, ChinaMobileClient
from vibebox.providers.chinamobile.config import ChinaMobileOptions
from vibebox.providers.chinamobile.provider import ChinaMobileProvider

__all__ = [
    "ChinaMobileAPIError",
    "ChinaMobileClient",
    "ChinaMobileOptions",
    "ChinaMobileProvider",
]
