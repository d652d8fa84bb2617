"""pkgtrust command-line interface."""
