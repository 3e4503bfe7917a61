"""Stage services for script generation."""
