"""Smart Traffic Route Optimizer: shortest routes over a road network under live traffic."""

__version__ = "0.1.0"
