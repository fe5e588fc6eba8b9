"""
Core Package.

Contains the pipeline driver and its supporting pieces:
- Analysis Engine
- Result container
- Diagnostics sink
"""
