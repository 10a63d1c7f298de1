"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Default URLs, tunables and environment variable names
- exceptions: Custom exception hierarchy
"""
