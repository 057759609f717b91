from __future__ import annotations


class CryptoChartsError(RuntimeError):
    """Base class for every failure a fetch cycle can report."""


class ConfigLoadError(CryptoChartsError):
    """Holdings file missing, unreadable or malformed."""


class TransportError(CryptoChartsError):
    """Price or ledger API could not be reached, or answered with an HTTP error."""


class ProtocolError(CryptoChartsError):
    """Response does not match the expected shape."""


class SchedulerStopped(CryptoChartsError):
    """The cycle was abandoned because the scheduler shut down."""
