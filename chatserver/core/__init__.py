"""Session and command-dispatch engine."""
