"""HTTP compositing service."""
