"""
repomirror — Discover local git repositories and replicate them to local
bare mirrors or to a remote git hosting service.
"""

__version__ = "0.1.0"
