"""Role-based access control core for a feature-flag management platform."""

__version__ = "0.1.0"
