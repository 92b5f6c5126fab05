"""
Core modules for stabimg.

This package contains the generation pipeline:
- Configuration management
- Model to engine resolution
- Request building and validation
- The Stability AI client
- Artifact persistence
- The handler that drives them
"""
