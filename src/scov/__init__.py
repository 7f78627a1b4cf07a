"""scov: SimpleCov result-set merging and line/branch classification."""

__version__ = "0.3.0"
