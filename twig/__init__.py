"""
twig - a small local version-control system.

Tracks snapshots of a file tree in a content-addressed object store, links
them into a commit graph, and supports branches and three-way merges.
"""

__version__ = "0.1.0"

# Configuration is available at top level for convenience
from twig.config import config

__all__ = ["config", "__version__"]
