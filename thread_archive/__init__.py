"""Thread Archive: normalizes live and archived discussion threads into one model."""

__version__ = "0.1.0"
