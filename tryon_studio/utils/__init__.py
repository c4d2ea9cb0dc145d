"""Image, logging and text helpers."""
