"""WebDAV client for the remote file store."""

from __future__ import annotations

import logging
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Any
from urllib.parse import quote
from xml.etree import ElementTree

import httpx

from .exceptions import (
    SmallSyncAuthenticationError,
    SmallSyncConnectError,
    SmallSyncNotFoundError,
    SmallSyncTransportError,
)
from .models import RemoteCredentials, RemoteMetadata

logger = logging.getLogger(__name__)

DAV_NS = "{DAV:}"

PROPFIND_BODY = (
    '<?xml version="1.0" encoding="utf-8"?>'
    '<d:propfind xmlns:d="DAV:"><d:prop>'
    "<d:displayname/><d:resourcetype/><d:getcontentlength/>"
    "<d:getlastmodified/><d:getetag/>"
    "</d:prop></d:propfind>"
)


class WebDAVClient:
    """Client for one WebDAV server.

    A client is a remote session: it is created by :class:`WebDAVStore`,
    used for one or more operations and then closed.
    """

    def __init__(
        self,
        server_url: str,
        username: str = "",
        password: str = "",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the WebDAV client.

        Args:
            server_url: Base URL of the WebDAV share
            username: Username for HTTP basic auth (empty for anonymous)
            password: Password for HTTP basic auth
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport, used by tests
        """
        self.server_url = server_url.rstrip("/")
        self.username = username
        self.password = password
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            kwargs: dict[str, Any] = {
                "timeout": httpx.Timeout(self.timeout),
                "follow_redirects": True,
            }
            if self.username:
                kwargs["auth"] = httpx.BasicAuth(self.username, self.password)
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._client = httpx.Client(**kwargs)
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def _url(self, path: str) -> str:
        path = path.strip("/")
        if not path:
            return f"{self.server_url}/"
        return f"{self.server_url}/{quote(path)}"

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request, translating network failures to connect errors."""
        url = self._url(path)
        logger.debug("%s %s", method, url)
        try:
            return self._get_client().request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise SmallSyncConnectError(f"Network error: {e}") from e

    @staticmethod
    def _check_auth(response: httpx.Response) -> None:
        if response.status_code == 401:
            raise SmallSyncAuthenticationError(
                "Invalid username or password for WebDAV server"
            )
        if response.status_code == 403:
            raise SmallSyncAuthenticationError(
                "Access forbidden - check your permissions"
            )

    # =========================
    # Session operations
    # =========================

    def connect(self) -> None:
        """Check that the server is reachable and accepts the credentials.

        Raises:
            SmallSyncAuthenticationError: If the credentials are rejected
            SmallSyncConnectError: If the server cannot be reached
        """
        if not self.server_url:
            raise SmallSyncConnectError(
                "Server path not configured. Run 'smallsync server' first."
            )
        response = self._send("OPTIONS", "/")
        self._check_auth(response)
        if response.status_code >= 400:
            raise SmallSyncConnectError(
                f"Server responded with status {response.status_code}"
            )

    def stat(self, path: str) -> RemoteMetadata:
        """Return metadata for a remote path.

        Raises:
            SmallSyncNotFoundError: If the path does not exist
            SmallSyncConnectError: If the request fails
        """
        response = self._send(
            "PROPFIND",
            path,
            headers={"Depth": "0", "Content-Type": "application/xml"},
            content=PROPFIND_BODY,
        )
        self._check_auth(response)
        if response.status_code == 404:
            raise SmallSyncNotFoundError(f"Remote path not found: {path}")
        if response.status_code != 207:
            raise SmallSyncConnectError(
                f"PROPFIND {path} failed with status {response.status_code}"
            )
        return parse_propfind(path, response.content)

    def read(self, path: str) -> bytes:
        """Download the contents of a remote file.

        Raises:
            SmallSyncNotFoundError: If the path does not exist
            SmallSyncTransportError: If the download fails
        """
        try:
            response = self._send("GET", path)
        except SmallSyncConnectError as e:
            raise SmallSyncTransportError(f"Download failed: {e}") from e
        self._check_auth(response)
        if response.status_code == 404:
            raise SmallSyncNotFoundError(f"Remote path not found: {path}")
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SmallSyncTransportError(f"Download failed: {e}") from e
        return response.content

    def write(self, path: str, data: bytes) -> None:
        """Upload ``data`` to a remote path, replacing any existing file.

        Missing parent collections are created when the server answers
        409 Conflict, then the upload is retried once.

        Raises:
            SmallSyncTransportError: If the upload fails
        """
        try:
            response = self._send("PUT", path, content=data)
            if response.status_code == 409:
                logger.debug("Creating parent collections for %s", path)
                self._make_parents(path)
                response = self._send("PUT", path, content=data)
        except SmallSyncConnectError as e:
            raise SmallSyncTransportError(f"Upload failed: {e}") from e
        self._check_auth(response)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SmallSyncTransportError(f"Upload failed: {e}") from e

    def _make_parents(self, path: str) -> None:
        parts = [part for part in path.strip("/").split("/") if part][:-1]
        current = ""
        for part in parts:
            current = f"{current}/{part}"
            response = self._send("MKCOL", current)
            # 405: collection already exists
            if response.status_code not in (201, 405):
                self._check_auth(response)
                raise SmallSyncTransportError(
                    f"Cannot create remote folder {current}: "
                    f"status {response.status_code}"
                )


class WebDAVStore:
    """Remote store that opens a :class:`WebDAVClient` per connection."""

    def __init__(
        self, timeout: float = 30.0, transport: httpx.BaseTransport | None = None
    ):
        self.timeout = timeout
        self._transport = transport

    def connect(self, credentials: RemoteCredentials) -> WebDAVClient:
        client = WebDAVClient(
            server_url=credentials.endpoint,
            username=credentials.username,
            password=credentials.password,
            timeout=self.timeout,
            transport=self._transport,
        )
        try:
            client.connect()
        except SmallSyncConnectError:
            client.close()
            raise
        return client


def parse_propfind(path: str, content: bytes) -> RemoteMetadata:
    """Parse a depth-0 PROPFIND multistatus body.

    Raises:
        SmallSyncConnectError: If the body is not a valid multistatus
    """
    try:
        root = ElementTree.fromstring(content)
    except ElementTree.ParseError as e:
        raise SmallSyncConnectError(f"Invalid PROPFIND response: {e}") from e

    response = root.find(f"{DAV_NS}response")
    if response is None:
        raise SmallSyncConnectError("Invalid PROPFIND response: no response element")

    props: dict[str, ElementTree.Element] = {}
    for propstat in response.findall(f"{DAV_NS}propstat"):
        status = propstat.findtext(f"{DAV_NS}status", default="")
        if status and " 200 " not in f"{status} ":
            continue
        prop = propstat.find(f"{DAV_NS}prop")
        if prop is None:
            continue
        for child in prop:
            props[child.tag.replace(DAV_NS, "")] = child

    size = None
    if "getcontentlength" in props and props["getcontentlength"].text:
        try:
            size = int(props["getcontentlength"].text)
        except ValueError:
            size = None

    modified: datetime | None = None
    if "getlastmodified" in props and props["getlastmodified"].text:
        try:
            modified = parsedate_to_datetime(props["getlastmodified"].text)
        except (TypeError, ValueError):
            modified = None

    etag = None
    if "getetag" in props and props["getetag"].text:
        etag = props["getetag"].text.strip('"')

    resourcetype = props.get("resourcetype")
    is_dir = (
        resourcetype is not None
        and resourcetype.find(f"{DAV_NS}collection") is not None
    )

    return RemoteMetadata(
        path=path, size=size, modified=modified, etag=etag, is_dir=is_dir
    )
