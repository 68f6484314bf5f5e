"""NetSight Analyzer: an educational 4G/5G radio-link calculator."""

__version__ = "1.0.0"
