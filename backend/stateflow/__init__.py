"""State flow visualizer: behavioral model → positioned sequence diagram."""

__version__ = "0.1.0"
