"""Multi-dealership vehicle inventory with rentals, transfers, and feed import."""

__version__ = "0.3.0"
