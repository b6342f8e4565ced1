"""Tests for the WebDAV client."""

import httpx
import pytest

from smallsync.exceptions import (
    SmallSyncAuthenticationError,
    SmallSyncConnectError,
    SmallSyncNotFoundError,
    SmallSyncTransportError,
)
from smallsync.models import RemoteCredentials
from smallsync.webdav import WebDAVClient, WebDAVStore, parse_propfind

BASE_URL = "https://dav.example.com/webdav"

MULTISTATUS = b"""<?xml version="1.0" encoding="utf-8"?>
<d:multistatus xmlns:d="DAV:">
  <d:response>
    <d:href>/webdav/notes.md</d:href>
    <d:propstat>
      <d:prop>
        <d:resourcetype/>
        <d:getcontentlength>42</d:getcontentlength>
        <d:getlastmodified>Wed, 01 Jan 2025 10:00:00 GMT</d:getlastmodified>
        <d:getetag>"abc123"</d:getetag>
      </d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
</d:multistatus>
"""

COLLECTION = b"""<?xml version="1.0" encoding="utf-8"?>
<d:multistatus xmlns:d="DAV:">
  <d:response>
    <d:href>/webdav/</d:href>
    <d:propstat>
      <d:prop><d:resourcetype><d:collection/></d:resourcetype></d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
    <d:propstat>
      <d:prop><d:getcontentlength/></d:prop>
      <d:status>HTTP/1.1 404 Not Found</d:status>
    </d:propstat>
  </d:response>
</d:multistatus>
"""


def make_client(handler, **kwargs):
    """Create a client whose requests are answered by ``handler``."""
    return WebDAVClient(
        BASE_URL,
        username="alice",
        password="secret",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestConnect:
    """Tests for WebDAVClient.connect."""

    def test_connect_success_sends_basic_auth(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200)

        make_client(handler).connect()

        assert requests[0].method == "OPTIONS"
        assert str(requests[0].url) == f"{BASE_URL}/"
        assert requests[0].headers["Authorization"].startswith("Basic ")

    def test_connect_unauthorized(self):
        client = make_client(lambda request: httpx.Response(401))

        with pytest.raises(SmallSyncAuthenticationError):
            client.connect()

    def test_connect_server_error(self):
        client = make_client(lambda request: httpx.Response(500))

        with pytest.raises(SmallSyncConnectError, match="status 500"):
            client.connect()

    def test_connect_network_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(SmallSyncConnectError, match="Network error"):
            make_client(handler).connect()

    def test_connect_without_server_path(self):
        client = WebDAVClient("")

        with pytest.raises(SmallSyncConnectError, match="not configured"):
            client.connect()


class TestStat:
    """Tests for WebDAVClient.stat."""

    def test_stat_file(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["depth"] = request.headers["Depth"]
            seen["url"] = str(request.url)
            return httpx.Response(207, content=MULTISTATUS)

        meta = make_client(handler).stat("/notes.md")

        assert seen == {
            "method": "PROPFIND",
            "depth": "0",
            "url": f"{BASE_URL}/notes.md",
        }
        assert meta.size == 42
        assert meta.etag == "abc123"
        assert meta.is_dir is False
        assert meta.modified.year == 2025

    def test_stat_missing(self):
        client = make_client(lambda request: httpx.Response(404))

        with pytest.raises(SmallSyncNotFoundError):
            client.stat("/missing.md")

    def test_stat_unexpected_status(self):
        client = make_client(lambda request: httpx.Response(500))

        with pytest.raises(SmallSyncConnectError):
            client.stat("/notes.md")

    def test_path_is_url_quoted(self):
        urls = []

        def handler(request):
            urls.append(request.url.raw_path)
            return httpx.Response(207, content=MULTISTATUS)

        make_client(handler).stat("/my notes/ä.md")

        assert urls == [b"/webdav/my%20notes/%C3%A4.md"]


class TestReadWrite:
    """Tests for WebDAVClient.read and write."""

    def test_read(self):
        client = make_client(lambda request: httpx.Response(200, content=b"data"))

        assert client.read("/notes.md") == b"data"

    def test_read_missing(self):
        client = make_client(lambda request: httpx.Response(404))

        with pytest.raises(SmallSyncNotFoundError):
            client.read("/notes.md")

    def test_read_server_error(self):
        client = make_client(lambda request: httpx.Response(502))

        with pytest.raises(SmallSyncTransportError, match="Download failed"):
            client.read("/notes.md")

    def test_read_network_error_is_transport_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(SmallSyncTransportError):
            make_client(handler).read("/notes.md")

    def test_write(self):
        bodies = []

        def handler(request):
            bodies.append((request.method, request.content))
            return httpx.Response(201)

        make_client(handler).write("/notes.md", b"hello")

        assert bodies == [("PUT", b"hello")]

    def test_write_creates_parent_collections_on_conflict(self):
        calls = []

        def handler(request):
            calls.append((request.method, request.url.path))
            if request.method == "PUT" and len(calls) == 1:
                return httpx.Response(409)
            if request.method == "MKCOL" and request.url.path == "/webdav/a":
                return httpx.Response(405)
            return httpx.Response(201)

        make_client(handler).write("/a/b/file.txt", b"x")

        assert calls == [
            ("PUT", "/webdav/a/b/file.txt"),
            ("MKCOL", "/webdav/a"),
            ("MKCOL", "/webdav/a/b"),
            ("PUT", "/webdav/a/b/file.txt"),
        ]

    def test_write_failure(self):
        client = make_client(lambda request: httpx.Response(507))

        with pytest.raises(SmallSyncTransportError, match="Upload failed"):
            client.write("/notes.md", b"x")


class TestWebDAVStore:
    """Tests for WebDAVStore."""

    def test_connect_returns_connected_client(self):
        transport = httpx.MockTransport(lambda r: httpx.Response(200))
        store = WebDAVStore(transport=transport)

        session = store.connect(RemoteCredentials(BASE_URL, "alice", "secret"))

        assert isinstance(session, WebDAVClient)
        assert session.server_url == BASE_URL
        session.close()

    def test_connect_failure_raises(self):
        transport = httpx.MockTransport(lambda r: httpx.Response(401))
        store = WebDAVStore(transport=transport)

        with pytest.raises(SmallSyncAuthenticationError):
            store.connect(RemoteCredentials(BASE_URL, "alice", "wrong"))


class TestParsePropfind:
    """Tests for multistatus parsing."""

    def test_collection_ignores_failed_propstat(self):
        meta = parse_propfind("/", COLLECTION)

        assert meta.is_dir is True
        assert meta.size is None

    def test_invalid_xml(self):
        with pytest.raises(SmallSyncConnectError, match="Invalid PROPFIND"):
            parse_propfind("/", b"<not-xml")
