"""mcfg — machine configurator."""

__version__ = "0.1.0"
