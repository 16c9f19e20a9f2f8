"""Configuration package for the interview practice engine."""
from .availability import ServiceAvailability
from .routes import AppConfig, LlmRoute, RouteName, load_config, resolve_routes, route_from_settings
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "RouteName",
    "load_config",
    "resolve_routes",
    "route_from_settings",
    "ServiceAvailability",
    "Settings",
    "settings",
]
