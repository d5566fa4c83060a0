"""Demo application."""
