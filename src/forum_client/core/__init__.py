"""Core data-access logic: normalization, error translation and local state."""
