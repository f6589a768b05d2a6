"""retrigger: re-run or dispatch CI for the mergeable pull requests of a branch."""

__version__ = "0.1.0"
