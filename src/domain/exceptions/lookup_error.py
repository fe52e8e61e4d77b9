"""
External lookup exceptions.
"""


class ExternalLookupFailed(Exception):
    """Raised when a geocoding or distance provider fails or times out."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"Lookup via {provider} failed: {reason}")
