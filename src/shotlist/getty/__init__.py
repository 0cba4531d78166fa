"""Getty Images access: token exchange, gateway, normalisation, aggregation.

Public API
----------
.. autoclass:: GettyGateway
.. autoclass:: SearchAggregator
.. autoclass:: FixedDelayRateLimiter
.. autofunction:: fetch_access_token
"""

from shotlist.getty.aggregator import SearchAggregator
from shotlist.getty.auth import AccessToken, fetch_access_token
from shotlist.getty.gateway import GettyGateway
from shotlist.getty.normalize import normalize_record, normalize_records, pick_rendition
from shotlist.getty.rate_limiter import FixedDelayRateLimiter

__all__ = [
    "AccessToken",
    "FixedDelayRateLimiter",
    "GettyGateway",
    "SearchAggregator",
    "fetch_access_token",
    "normalize_record",
    "normalize_records",
    "pick_rendition",
]
