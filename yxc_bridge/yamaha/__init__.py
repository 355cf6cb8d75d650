"""
Yamaha Extended Control (YXC) HTTP API access.
"""

from .client import YamahaClient
from .endpoints import api_path, build_query, zone_path

__all__ = [
    "YamahaClient",
    "api_path",
    "build_query",
    "zone_path",
]
