"""Errors raised while building a cost summary.

Every error aborts the whole summary. The message of each error is shown
to the Slack user verbatim, so keep them readable.
"""


class CostComputationError(Exception):
    """Base error for a failed cost summary."""

    pass


class MissingCredentialError(CostComputationError):
    """The DigitalOcean API key is not available."""

    def __init__(self, key_name: str, message: str | None = None):
        self.key_name = key_name
        super().__init__(message or f"Missing secret '{key_name}'")


class SecretLookupError(CostComputationError):
    """The secret store could not be read."""

    pass


class FetchError(CostComputationError):
    """Transport failure or non-2xx response from the provider API."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ParseError(CostComputationError):
    """The provider API returned a body we could not understand."""

    pass


class UnknownRateError(CostComputationError):
    """No hourly rate is known for a database size and node count."""

    def __init__(self, size: str, num_nodes: int):
        self.size = size
        self.num_nodes = num_nodes
        super().__init__(
            f"No hourly rate known for database size '{size}' with {num_nodes} node(s)"
        )
