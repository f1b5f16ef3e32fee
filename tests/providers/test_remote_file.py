import hashlib

import httpx

from forja.core.resources import ApplyStatus, CommonProps
from forja.providers import RemoteFileResource

PAYLOAD = b"#!/bin/sh\necho instalado\n"
DIGEST = hashlib.sha256(PAYLOAD).hexdigest()
URL = "https://downloads.example.com/install.sh"


def transport(requests, status=200, body=PAYLOAD):
    def handler(request):
        requests.append(request)
        return httpx.Response(status, content=body)

    return httpx.MockTransport(handler)


def test_download_and_verify(tmp_path):
    requests = []
    dest = tmp_path / "install.sh"
    res = RemoteFileResource(dest, URL, checksum=DIGEST, mode=0o755, headers={"X-Token": "abc"}, transport=transport(requests))
    result = res.apply()
    assert result.is_updated
    assert dest.read_bytes() == PAYLOAD
    assert requests[0].headers["X-Token"] == "abc"
    res.release()


def test_matching_checksum_skips_download(tmp_path):
    requests = []
    dest = tmp_path / "install.sh"
    dest.write_bytes(PAYLOAD)
    res = RemoteFileResource(dest, URL, checksum=DIGEST.upper(), transport=transport(requests))
    assert res.apply().status == ApplyStatus.UNCHANGED
    assert requests == []
    assert res.downloads == 0


def test_without_checksum_compares_content(tmp_path):
    requests = []
    dest = tmp_path / "install.sh"
    dest.write_bytes(PAYLOAD)
    res = RemoteFileResource(dest, URL, transport=transport(requests))
    assert res.apply().status == ApplyStatus.UNCHANGED
    assert res.downloads == 1


def test_checksum_mismatch_fails_and_keeps_file(tmp_path):
    dest = tmp_path / "install.sh"
    dest.write_bytes(b"old")
    res = RemoteFileResource(dest, URL, checksum="0" * 64, transport=transport([]))
    result = res.apply()
    assert result.is_failed
    assert "Checksum" in result.reason
    assert dest.read_bytes() == b"old"


def test_http_error_fails(tmp_path):
    res = RemoteFileResource(tmp_path / "x", URL, transport=transport([], status=404))
    result = res.apply()
    assert result.is_failed
    assert "HTTP 404" in result.reason


def test_create_if_missing_does_not_download(tmp_path):
    requests = []
    dest = tmp_path / "install.sh"
    dest.write_bytes(b"local")
    res = RemoteFileResource(dest, URL, transport=transport(requests), common=CommonProps(action="create_if_missing"))
    assert res.apply().status == ApplyStatus.UNCHANGED
    assert requests == []


def test_release_closes_client(tmp_path):
    res = RemoteFileResource(tmp_path / "x", URL, transport=transport([]))
    res.apply()
    client = res._client
    res.release()
    assert client.is_closed
    assert res._client is None
