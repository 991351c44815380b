"""In-memory historic rate cache, load gate and resolver."""
