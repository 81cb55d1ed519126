from __future__ import annotations

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

# Connection problems worth another attempt; HTTP error statuses are not.
TransientHttpError = (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)


def async_client(
    base_url: str,
    *,
    read_timeout: float = 60.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """One client per service; generation reads can take minutes, so `read_timeout` is separate."""
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        timeout=httpx.Timeout(connect=10.0, read=read_timeout, write=20.0, pool=10.0),
        limits=httpx.Limits(max_connections=20, max_keepalive_connections=5),
        transport=transport,
    )


def transient_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(5),
        wait=wait_exponential_jitter(initial=0.5, max=10.0),
        retry=retry_if_exception_type(TransientHttpError),
    )
