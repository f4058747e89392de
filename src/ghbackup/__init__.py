"""ghbackup: incremental, resumable backup of GitHub state into a local git branch."""

__version__ = "0.1.0"
