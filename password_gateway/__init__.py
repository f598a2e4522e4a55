"""Silver password gateway: readiness-gated proxy in front of the Thunder identity API."""

__version__ = "0.1.0"
