"""compliance-scan: privacy compliance auditing for websites."""

__version__ = "0.1.0"
