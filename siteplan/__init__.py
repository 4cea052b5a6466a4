"""siteplan — facility block layout legality, scoring and optimization."""

__version__ = "0.1.0"
