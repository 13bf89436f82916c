"""HTTP request pipeline: transport executor, retry controller, response cache."""

from .response_cache import ResponseCache
from .retry import RetryController
from .roundtrip import HttpxRoundTrip

__all__ = ["HttpxRoundTrip", "ResponseCache", "RetryController"]
