from __future__ import annotations


class ConfigurationError(ValueError):
    """Invalid tunable or malformed input; never recovered locally."""


class NonConvergenceWarning(RuntimeWarning):
    """PageRank hit its iteration cap before the scores settled."""
