"""High-level contact planners."""
