"""Command-line tools for exercising the Edgeline engine and AI."""
