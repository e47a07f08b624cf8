from datetime import timedelta

import pytest

from gamehub.auth.token import ACCESS, REFRESH, CredentialIssuer
from gamehub.core.errors import AuthError
from gamehub.services.identity import IdentityHints


def test_refresh_round_trip_keeps_user(resolver, issuer):
    user, _ = resolver.resolve(IdentityHints(email="a@x.com", name="Alice"))
    credentials = resolver.issue_credentials(user)

    refreshed = resolver.refresh(credentials.refresh_token)

    assert issuer.user_id_from(refreshed.access_token, ACCESS) == user.id
    assert issuer.user_id_from(refreshed.refresh_token, REFRESH) == user.id
    assert refreshed.access_token != credentials.access_token
    assert refreshed.refresh_token != credentials.refresh_token


def test_access_token_cannot_be_used_to_refresh(issuer):
    pair = issuer.issue(7)
    with pytest.raises(AuthError):
        issuer.refresh(pair.access_token)


def test_refresh_token_is_not_an_access_token(issuer):
    pair = issuer.issue(7)
    with pytest.raises(AuthError):
        issuer.user_id_from(pair.refresh_token, ACCESS)


def test_expired_refresh_token_is_rejected(issuer):
    stale = issuer.create_refresh_token(7, expires_delta=timedelta(seconds=-5))
    with pytest.raises(AuthError):
        issuer.refresh(stale)


def test_foreign_signature_is_rejected(issuer):
    other = CredentialIssuer(secret="someone-else")
    with pytest.raises(AuthError):
        issuer.refresh(other.issue(7).refresh_token)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_garbage_is_rejected(issuer, token):
    with pytest.raises(AuthError):
        issuer.user_id_from(token)
