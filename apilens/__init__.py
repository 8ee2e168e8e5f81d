"""Schema inference, semantic field detection and component selection for JSON APIs."""

__all__ = [
    "analysis",
    "cache",
    "cli",
    "detector",
    "embeddings",
    "grouping",
    "importance",
    "infer",
    "io",
    "models",
    "openapi",
    "patterns",
    "plugin_registry",
    "report",
    "schemas",
    "scorer",
    "selection",
    "strategies",
    "utils",
    "validators",
]
