"""Shared helpers: errors, output sinks, work-area cleanup and logging."""
