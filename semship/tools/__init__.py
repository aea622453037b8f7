"""External tools driven during a release (npm, bun, uv)."""
