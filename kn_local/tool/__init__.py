"""Command line tool for managing serving resources in a local directory."""
