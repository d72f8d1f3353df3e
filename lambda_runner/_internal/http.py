"""Shared HTTP client configuration."""

import httpx

from lambda_runner._version import __version__

DEFAULT_TIMEOUT = 30.0
API_VERSION = "2018-06-01"
NEXT_INVOCATION_PATH = f"/{API_VERSION}/runtime/invocation/next"


def invocation_path(request_id: str, action: str) -> str:
    """Build the path of a per-invocation endpoint ("response" or "error")."""
    return f"/{API_VERSION}/runtime/invocation/{request_id}/{action}"


def create_http_client(
    *,
    timeout: float | None = DEFAULT_TIMEOUT,
    base_url: str | None = None,
    follow_redirects: bool = False,
) -> httpx.Client:
    """Create configured HTTP client.

    Args:
        timeout: Request timeout in seconds. None disables timeouts, which is
            what the long-poll endpoint needs.
        base_url: Optional base URL for all requests.
        follow_redirects: Whether redirects are followed.

    Returns:
        Configured httpx.Client instance.
    """
    return httpx.Client(
        timeout=timeout,
        base_url=base_url or "",
        follow_redirects=follow_redirects,
        headers={"User-Agent": f"lambda-runner/{__version__}"},
        # The runtime API is local; host proxy settings must not apply.
        trust_env=False,
    )
