"""Version control surface: protocol and git command line implementation."""

from ghbackup.vcs.git import GitWorkTree
from ghbackup.vcs.protocols import WorkTree

__all__ = ["GitWorkTree", "WorkTree"]
