"""
Async Elasticsearch ``_bulk`` client on top of ``httpx.AsyncClient``.

One client instance is shared by every task submitting batches; httpx pools
connections internally. Requests rotate over the configured (or sniffed)
hosts in order.
"""

from __future__ import annotations

import gzip
import itertools
import logging
from typing import Any, Iterator

import httpx
import orjson

from ....core.errors import ConfigurationError, TransportError
from .bulk import BulkRequest, BulkResponse
from .config import ElasticsearchSinkConfig

_logger = logging.getLogger("bulksink.sinks.elasticsearch")

NDJSON_CONTENT_TYPE = "application/x-ndjson"
_SNIFF_PATH = "/_nodes/http"


def normalize_hosts(hosts: list[str], scheme: str | None = None) -> list[str]:
    """Prefix bare addresses with ``http://`` and apply a scheme override.

    Raises:
        ConfigurationError: if an address is not a usable URL.
    """
    normalized: list[str] = []
    for host in hosts:
        if not host.startswith("http"):
            host = f"http://{host}"
        try:
            url = httpx.URL(host)
            if scheme:
                url = url.copy_with(scheme=scheme)
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"invalid Elasticsearch host {host!r}", cause=exc
            ) from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ConfigurationError(f"invalid Elasticsearch host {host!r}")
        normalized.append(str(url).rstrip("/"))
    if not normalized:
        raise ConfigurationError("no Elasticsearch hosts configured")
    return normalized


def _publish_address_to_url(address: str, scheme: str) -> str | None:
    # "hostname/10.0.0.1:9200" or "10.0.0.1:9200"
    if not address:
        return None
    if "/" in address:
        address = address.split("/", 1)[1]
    return f"{scheme}://{address}"


class ElasticsearchClient:
    """Connection handle for one Elasticsearch cluster.

    Args:
        config: Sink configuration; only the connection fields are used.
        transport: Optional httpx transport, mainly for tests.
    """

    def __init__(
        self,
        config: ElasticsearchSinkConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client: httpx.AsyncClient | None = None
        self._config = config
        self._hosts = normalize_hosts(list(config.hosts), config.scheme)
        self._host_cycle: Iterator[str] = itertools.cycle(self._hosts)
        self._sniff = bool(config.sniff)
        self._gzip = bool(config.gzip)

        auth: httpx.BasicAuth | None = None
        if config.username and config.password:
            auth = httpx.BasicAuth(config.username, config.password)

        try:
            self._client = httpx.AsyncClient(
                auth=auth,
                timeout=config.timeout_seconds,
                transport=transport,
            )
        except Exception as exc:
            raise ConfigurationError(
                "failed to create Elasticsearch client", cause=exc
            ) from exc

    @property
    def hosts(self) -> list[str]:
        return list(self._hosts)

    @property
    def closed(self) -> bool:
        return self._client is None

    @property
    def sniff_enabled(self) -> bool:
        return self._sniff

    @property
    def gzip_enabled(self) -> bool:
        return self._gzip

    @property
    def auth_enabled(self) -> bool:
        return self._client is not None and self._client.auth is not None

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise TransportError("Elasticsearch client is stopped")
        return self._client

    def _set_hosts(self, hosts: list[str]) -> None:
        self._hosts = hosts
        self._host_cycle = itertools.cycle(hosts)

    async def start(self) -> None:
        if self._sniff:
            await self.sniff()

    async def sniff(self) -> list[str]:
        """Replace the host list with the HTTP addresses of the cluster's nodes.

        Raises:
            ConfigurationError: if no configured host answers with a node list.
        """
        client = self._require_client()
        last_error: Exception | None = None
        for seed in list(self._hosts):
            try:
                resp = await client.get(seed + _SNIFF_PATH)
                resp.raise_for_status()
                data = orjson.loads(resp.content)
            except (httpx.HTTPError, orjson.JSONDecodeError) as exc:
                last_error = exc
                continue
            if not isinstance(data, dict):
                continue
            scheme = httpx.URL(seed).scheme
            discovered: list[str] = []
            for node in (data.get("nodes") or {}).values():
                address = ((node or {}).get("http") or {}).get("publish_address", "")
                url = _publish_address_to_url(address, scheme)
                if url is not None and url not in discovered:
                    discovered.append(url)
            if discovered:
                _logger.debug("sniffed %d Elasticsearch nodes", len(discovered))
                self._set_hosts(discovered)
                return list(discovered)
        raise ConfigurationError(
            "no Elasticsearch node available", cause=last_error, hosts=self._hosts
        )

    async def bulk(self, request: BulkRequest) -> BulkResponse:
        """Send ``request`` to the next host and parse the response.

        Raises:
            TransportError: on network failures, non-2xx status or an
                unparsable response body.
        """
        client = self._require_client()
        body = request.body()
        headers = {"Content-Type": NDJSON_CONTENT_TYPE}
        if self._gzip:
            body = gzip.compress(body)
            headers["Content-Encoding"] = "gzip"
        host = next(self._host_cycle)
        try:
            resp = await client.post(host + "/_bulk", content=body, headers=headers)
        except httpx.HTTPError as exc:
            raise TransportError(
                f"bulk request to {host} failed", cause=exc, host=host
            ) from exc

        if resp.status_code >= 400:
            raise TransportError(
                f"bulk request to {host} returned status {resp.status_code}",
                host=host,
                status_code=resp.status_code,
                body=resp.text[:512],
            )
        try:
            return BulkResponse.from_payload(resp.status_code, resp.content)
        except ValueError as exc:
            raise TransportError(
                f"invalid bulk response from {host}", cause=exc, host=host
            ) from exc

    async def stop(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    async def __aenter__(self) -> ElasticsearchClient:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()


__all__ = ["ElasticsearchClient", "NDJSON_CONTENT_TYPE", "normalize_hosts"]
