"""Click commands for the local and remote mirror entry points."""
