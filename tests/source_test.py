import io

import pytest
import requests

from virtimage.libvirt import source
from virtimage.libvirt.errors import SourceError, UnsupportedSchemeError


class FakeResponse:

    def __init__(self, status_code=200, body=b"", headers=None):
        self.status_code = status_code
        self.headers = headers if headers is not None else {
            "content-length": str(len(body)),
        }
        self.raw = io.BytesIO(body)
        self.closed = False

    def close(self):
        self.closed = True


@pytest.fixture
def http_get(monkeypatch):
    calls = []

    def install(response=None, error=None):
        def fake_get(url, **kwargs):
            calls.append((url, kwargs))
            if error is not None:
                raise error
            return response
        monkeypatch.setattr(source.requests, "get", fake_get)
        return calls

    return install


def test_resolve_file(image_file):
    with source.resolve(image_file.as_uri()) as src:
        assert src.scheme == "file"
        assert src.size == 500
        assert src.stream.read() == image_file.read_bytes()
    assert src.stream.closed


@pytest.mark.parametrize("filename", ["my base.qcow2", "bäse%image.qcow2"])
def test_resolve_file_with_encoded_path(tmp_path, filename):
    path = tmp_path / filename
    path.write_bytes(b"b" * 500)

    with source.resolve(path.as_uri()) as src:
        assert src.size == 500
        assert src.stream.read() == b"b" * 500


def test_resolve_empty_file(tmp_path):
    path = tmp_path / "empty"
    path.write_bytes(b"")
    with source.resolve(path.as_uri()) as src:
        assert src.size == 0


def test_resolve_missing_file(tmp_path):
    with pytest.raises(SourceError):
        source.resolve((tmp_path / "missing.qcow2").as_uri())


def test_resolve_directory(tmp_path):
    with pytest.raises(SourceError):
        source.resolve(tmp_path.as_uri())


@pytest.mark.parametrize("scheme", ["http", "https"])
def test_resolve_http(http_get, scheme):
    body = b"q" * 1234
    response = FakeResponse(body=body)
    calls = http_get(response)

    src = source.resolve(f"{scheme}://images.example.com/base.qcow2")

    assert src.scheme == scheme
    assert src.size == 1234
    assert src.stream.read() == body
    assert calls[0][1]["stream"] is True
    src.close()
    assert response.closed


def test_resolve_http_bad_status(http_get):
    response = FakeResponse(status_code=404)
    http_get(response)

    with pytest.raises(SourceError) as e:
        source.resolve("http://images.example.com/missing.qcow2")
    assert "404" in str(e.value)
    assert response.closed


@pytest.mark.parametrize("headers", [{}, {"content-length": "-1"}, {"content-length": "many"}])
def test_resolve_http_unknown_length(http_get, headers):
    response = FakeResponse(body=b"data", headers=headers)
    http_get(response)

    with pytest.raises(SourceError):
        source.resolve("https://images.example.com/base.qcow2")
    assert response.closed


def test_resolve_http_connection_error(http_get):
    http_get(error=requests.ConnectionError("refused"))
    with pytest.raises(SourceError):
        source.resolve("http://127.0.0.1:1/base.qcow2")


@pytest.mark.parametrize("uri", [
    "ftp://images.example.com/base.qcow2",
    "s3://bucket/base.qcow2",
    "/var/tmp/base.qcow2",
])
def test_resolve_unsupported_scheme(http_get, uri):
    calls = http_get(FakeResponse())

    with pytest.raises(UnsupportedSchemeError) as e:
        source.resolve(uri)
    assert e.value.uri == uri
    assert calls == []
