from __future__ import annotations

import json

import httpx
import pytest

from src.employee_portal.employee_portal.identity.mirror import (
    DisabledMetadataMirror,
    HttpIdentityMetadataMirror,
    IdentityMirrorError,
)


def make_mirror(handler, retries=2):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpIdentityMetadataMirror(
        base_url="https://idp.example.com/",
        api_key="sk_test",
        http_client=client,
        retries=retries,
    )


def test_patches_user_metadata_with_bearer_secret():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    make_mirror(handler).set_metadata("user_1", {"role": "manager", "roleSetupComplete": True})

    [request] = seen
    assert request.method == "PATCH"
    assert str(request.url) == "https://idp.example.com/v1/users/user_1/metadata"
    assert request.headers["Authorization"] == "Bearer sk_test"
    body = json.loads(request.content)
    assert body["unsafe_metadata"] == {"role": "manager", "roleSetupComplete": True}
    assert body["public_metadata"] == {"role": "manager"}


def test_retries_server_errors_then_succeeds():
    responses = iter([503, 502, 200])

    def handler(request):
        return httpx.Response(next(responses))

    make_mirror(handler, retries=2).set_metadata("user_1", {"role": "intern"})


def test_gives_up_after_retries():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(500)

    with pytest.raises(IdentityMirrorError):
        make_mirror(handler, retries=1).set_metadata("user_1", {"role": "intern"})
    assert len(calls) == 2


def test_client_errors_are_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(404)

    with pytest.raises(IdentityMirrorError):
        make_mirror(handler, retries=3).set_metadata("user_1", {"role": "intern"})
    assert len(calls) == 1


def test_network_errors_are_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(IdentityMirrorError) as exc:
        make_mirror(handler, retries=0).set_metadata("user_1", {"role": "intern"})
    assert isinstance(exc.value.__cause__, httpx.ConnectError)


def test_disabled_mirror_is_a_no_op():
    DisabledMetadataMirror().set_metadata("user_1", {"role": "intern"})
