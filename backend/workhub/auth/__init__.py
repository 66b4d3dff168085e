"""Session resolution, permission checks and token handling."""
