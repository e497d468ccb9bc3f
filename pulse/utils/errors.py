"""
Error taxonomy for the ingestion pipeline.

None of these abort a refresh cycle. Adapter errors become a source status,
geocode misses leave the neighborhood empty, and persistence errors are
logged. SourceConfigError is the only one raised at boot.
"""

from typing import Optional

class PulseError(Exception):
    """Base exception for pipeline errors"""
    pass

class AdapterFailure(PulseError):
    """Raised when a source adapter hits a network or parse error"""

    def __init__(self, source: str, message: str, http_status: Optional[int] = None):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.http_status = http_status

class AdapterTimeout(AdapterFailure):
    """Raised when a source adapter exceeds its deadline"""
    pass

class GeocodeMiss(PulseError):
    """No geocoder result, or a result outside the sanity radius"""
    pass

class PersistenceFailure(PulseError):
    """Raised when the learned-venue store cannot be read or written"""
    pass

class SourceConfigError(PulseError):
    """Raised when the source registry is misconfigured"""
    pass
