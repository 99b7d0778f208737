"""EPP command-line interface."""
