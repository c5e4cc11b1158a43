# tests for google id token verification
# tests for diary/services/federated.py — network is replaced by httpx.MockTransport

import httpx
import pytest

from diary.services.federated import FederatedSignInError, GoogleTokenVerifier

CERTS_URL = "https://certs.test/keys"


def _transport(status_code=200, payload=None, calls=None):
    def handler(request):
        if calls is not None:
            calls.append(str(request.url))
        return httpx.Response(status_code, json=payload if payload is not None else {"keys": []})
    return httpx.MockTransport(handler)


class TestGoogleTokenVerifier:

    async def test_not_configured(self):
        verifier = GoogleTokenVerifier(client_id="", certs_url=CERTS_URL, transport=_transport())
        with pytest.raises(FederatedSignInError):
            await verifier.verify("token")

    async def test_key_fetch_failure(self):
        verifier = GoogleTokenVerifier(client_id="client", certs_url=CERTS_URL, transport=_transport(503))
        with pytest.raises(FederatedSignInError):
            await verifier.verify("token")

    async def test_malformed_token_rejected(self):
        calls = []
        verifier = GoogleTokenVerifier(client_id="client", certs_url=CERTS_URL, transport=_transport(calls=calls))
        with pytest.raises(FederatedSignInError):
            await verifier.verify("not.a.jwt")
        assert calls == [CERTS_URL]

    async def test_keys_refetched_after_rejection(self):
        calls = []
        verifier = GoogleTokenVerifier(client_id="client", certs_url=CERTS_URL, transport=_transport(calls=calls))
        for _ in range(2):
            with pytest.raises(FederatedSignInError):
                await verifier.verify("not.a.jwt")
        assert len(calls) == 2
