"""Host preflight — verify, repair and undo host network configuration."""

__version__ = "0.1.0"
