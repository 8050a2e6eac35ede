"""Load, normalize and compare per-block storage dumps."""
