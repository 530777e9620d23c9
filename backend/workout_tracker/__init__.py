"""Self-hosted workout tracker: manual entry, FIT uploads and unit-aware dashboards."""

__version__ = "0.1.0"
