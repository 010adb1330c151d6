"""Core infrastructure for Kiln: errors and logging."""
