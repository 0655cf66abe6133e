"""Metadata for secureguard."""

__all__ = [
    "__title__",
    "__version__",
    "__description__",
    "__credits__",
    "__requires_python__",
]

__title__ = "secureguard"
__version__ = "0.1.0"
__description__ = (
    "Rule-based URL risk scoring with optional AI-assisted assessment."
)
__credits__ = [
    {"name": "SecureGuard contributors", "email": "secureguard@users.noreply.github.com"}
]
__requires_python__ = ">=3.10"
