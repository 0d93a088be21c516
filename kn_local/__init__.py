"""
kn-local manages Knative Serving resources stored as YAML files in a local
directory, using the same operations a cluster client offers.
"""

__all__ = [
    "resource",
    "codec",
    "layout",
    "scanner",
    "client",
    "exceptions",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
