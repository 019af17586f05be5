"""
Docsite Builder — versioned documentation site build pipeline.
"""

__version__ = "0.1.0"
