"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Units, rounding precision, file extensions
- exceptions: Custom exception hierarchy
- ingress: Upload size/extension checks
"""
