"""
SPARQL Helper - single-shot SPARQL query execution against one endpoint.

This module is a SPARQL client that handles:
- Form-encoded POST requests as per the SPARQL protocol
- Status checking with errors that carry the endpoint's response
- JSON result parsing with a dedicated parse error
- Bounded-wait fetches of arbitrary URLs (used by distribution previews)

No retry is attempted anywhere: a failed request is surfaced immediately and
the caller decides what to do with it.

Usage:
    from schemagov.sparql_helper import SparqlHelper

    helper = SparqlHelper("https://schema.gov.it/sparql")
    results = helper.select("SELECT ?s WHERE { ?s ?p ?o } LIMIT 10")
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import requests

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://schema.gov.it/sparql"


class SparqlHelperError(Exception):
    """Base exception for SPARQL helper errors."""

    pass


class RemoteQueryError(SparqlHelperError):
    """Raised when a request is answered with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        reason: str,
        body: str | None = None,
        *,
        prefix: str = "SPARQL request failed",
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"{prefix}: {status_code} {reason}")


class ResponseParseError(SparqlHelperError):
    """Raised when the endpoint body is not valid JSON."""

    pass


class TransportError(SparqlHelperError):
    """Raised on network-level failures (DNS, connection reset, timeout)."""

    pass


class RequestTimeoutError(TransportError):
    """Raised when a bounded fetch gets no complete response before its deadline."""

    pass


# MIME types for SPARQL responses
class MimeTypes:
    """Standard MIME types for SPARQL protocol."""

    JSON = "application/sparql-results+json"
    FORM = "application/x-www-form-urlencoded"


@dataclass
class FetchedDocument:
    """Body and content type of an arbitrary fetched URL."""

    url: str
    content_type: str
    text: str


class SparqlHelper:
    """
    SPARQL query executor bound to a single endpoint.

    Every request is attempted exactly once. Errors are translated into the
    :class:`SparqlHelperError` hierarchy so that callers only deal with one
    family of exceptions.

    Attributes:
        endpoint_url: The SPARQL endpoint URL
        timeout: Request timeout in seconds for SPARQL queries (None = wait)
        fetch_timeout: Deadline in seconds for :meth:`fetch`

    Example:
        >>> helper = SparqlHelper("https://schema.gov.it/sparql")
        >>> results = helper.select("SELECT ?g { GRAPH ?g { ?s ?p ?o } }")
        >>> for binding in results["results"]["bindings"]:
        ...     print(binding["g"]["value"])
    """

    def __init__(
        self,
        endpoint_url: str = DEFAULT_ENDPOINT,
        *,
        timeout: float | None = None,
        fetch_timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        """
        Initialize the SPARQL helper.

        Args:
            endpoint_url: SPARQL endpoint URL
            timeout: Request timeout for SPARQL queries (default: no timeout)
            fetch_timeout: Deadline for arbitrary URL fetches (default: 10)
            session: Optional pre-built requests session
        """
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self.fetch_timeout = fetch_timeout

        # Session for connection pooling
        self._session = session or requests.Session()

        logger.debug(f"SparqlHelper initialized for {self.endpoint_url}")

    def select(self, query: str) -> dict[str, Any]:
        """
        Execute a query and return the parsed JSON result.

        Args:
            query: Complete SPARQL query string (prefixes included)

        Returns:
            Dictionary with SPARQL JSON results format:
            {
                "head": {"vars": ["s", "p", "o"]},
                "results": {"bindings": [...]}
            }

        Raises:
            RemoteQueryError: If the endpoint returns a non-2xx status
            ResponseParseError: If the body is not valid JSON
            TransportError: On network failures
        """
        text = self._post_query(query)
        try:
            result: dict[str, Any] = json.loads(text)
        except json.JSONDecodeError as e:
            raise ResponseParseError(f"Invalid JSON from SPARQL endpoint: {e}") from e
        return result

    def _post_query(self, query: str) -> str:
        """
        Execute SPARQL query using HTTP POST.

        Uses application/x-www-form-urlencoded encoding as per SPARQL protocol.

        Args:
            query: SPARQL query string

        Returns:
            Response body as string
        """
        headers = {
            "Accept": MimeTypes.JSON,
            "Content-Type": MimeTypes.FORM,
        }

        logger.debug(f"POST {self.endpoint_url} ({len(query)} chars)")
        try:
            response = self._session.post(
                self.endpoint_url,
                data={"query": query},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"SPARQL request failed: {e}") from e

        if not response.ok:
            logger.warning(
                f"SPARQL endpoint answered {response.status_code} {response.reason}"
            )
            raise RemoteQueryError(response.status_code, response.reason, response.text)

        return response.text

    def fetch(self, url: str) -> FetchedDocument:
        """
        Fetch an arbitrary URL with a bounded wait.

        Args:
            url: Any HTTP(S) URL (not necessarily the SPARQL endpoint)

        Returns:
            The fetched body together with its ``Content-Type`` header

        Raises:
            RequestTimeoutError: If no complete response arrives in time
            RemoteQueryError: On a non-2xx status
            TransportError: On other network failures
        """
        logger.debug(f"GET {url} (deadline {self.fetch_timeout}s)")
        try:
            response = self._session.get(url, timeout=self.fetch_timeout)
        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(
                f"Fetching {url} timed out after {self.fetch_timeout}s"
            ) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Failed to fetch {url}: {e}") from e

        if not response.ok:
            raise RemoteQueryError(
                response.status_code, response.reason, prefix="Failed to fetch distribution"
            )

        return FetchedDocument(
            url=url,
            content_type=response.headers.get("content-type", ""),
            text=response.text,
        )

    def close(self) -> None:
        """Close the underlying requests session."""
        self._session.close()

    def __enter__(self) -> SparqlHelper:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit - close session."""
        self.close()

    def __repr__(self) -> str:
        return f"SparqlHelper({self.endpoint_url!r})"

