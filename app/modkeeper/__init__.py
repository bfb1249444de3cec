"""modkeeper - bookkeeping and drift detection for manually installed mods."""

__version__ = "0.1.0"
