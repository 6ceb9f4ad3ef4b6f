"""Quillty unit/shape engine: registry, geometry, bridge, border frames."""
