"""
Mirror — Discover local repositories and replicate them.

The locator finds repositories, the resolver names their mirrors, the
executor creates or updates each mirror, and the runner ties them together.
"""
