"""mnemo: hierarchical tag index over a folder of markdown memory files."""

__version__ = "0.1.0"
