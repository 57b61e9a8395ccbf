"""Civicledger: tamper-evident, hash-chained ledger for civic incident reports.

Each accepted report is sealed into a proof-of-work block that links to
its predecessor by hash. Raw descriptions and evidence never enter the
chain; only their SHA-256 digests do. Any later edit, deletion or
reordering of a block is detected by re-verifying the chain.
"""

__version__ = "0.1.0"
__description__ = "Tamper-evident, hash-chained ledger for civic incident reports"

from civicledger.core.chain import ReportChain
from civicledger.core.hasher import digest
from civicledger.core.intake import ReportIntake

__all__ = ["ReportChain", "ReportIntake", "digest", "__version__"]
