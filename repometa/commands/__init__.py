"""Click commands for the repometa CLI."""
