"""Access accounting for remote calls.

- AccessBudget: the hard per-run budget of remote accesses
- RequestPacer: optional request throttling (pyrate-limiter)
"""

from ghbackup.core.rate_limit.budget import AccessBudget
from ghbackup.core.rate_limit.pacer import NoOpPacer, RequestPacer, build_pacer

__all__ = ["AccessBudget", "NoOpPacer", "RequestPacer", "build_pacer"]
