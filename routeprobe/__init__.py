"""
routeprobe - Sequential HTTP route runner.

Runs a list of routes, or a Postman collection converted to routes, one
request at a time, then prints a console report and saves a timestamped
JSON report.
"""

from .exceptions import CollectionError, ConfigError, RouteProbeError

__all__ = [
    "__version__",
    "CollectionError",
    "ConfigError",
    "RouteProbeError",
]

__version__ = "1.0.0"
