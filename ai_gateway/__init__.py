"""AI Gateway - authenticated, rate-limited relay in front of model providers.

Import `app` directly from `ai_gateway.main` to avoid circular imports.
"""

__version__ = "1.0.0"

__all__ = ["main", "api", "auth", "core", "models", "providers", "services"]
