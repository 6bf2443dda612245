import jwt
import pytest


@pytest.mark.parametrize(
    "headers,detail",
    [
        ({}, "Missing or invalid authorization header"),
        ({"Authorization": "Token abc"}, "Missing or invalid authorization header"),
        ({"Authorization": "Bearer not-a-jwt"}, "Could not extract user_id from token"),
        ({"Authorization": f"Bearer {jwt.encode({'email': 'x@y.z'}, 'k', algorithm='HS256')}"},
         "Could not extract user_id from token"),
    ],
)
def test_protected_route_rejects_bad_tokens(client, headers, detail):
    response = client.get("/payments/sessions/some-id", headers=headers)
    assert response.status_code == 401
    assert response.json()["error"] == detail


def test_token_subject_is_the_user(client, bearer, payment_session_factory):
    session = payment_session_factory(user_id="user-42")

    own = client.get(f"/payments/sessions/{session.id}", headers=bearer("user-42"))
    other = client.get(f"/payments/sessions/{session.id}", headers=bearer("user-7"))

    assert own.status_code == 200
    assert own.json()["user_id"] == "user-42"
    assert other.status_code == 404


def test_auto_book_for_another_user_is_forbidden(client, auth_headers):
    response = client.post(
        "/bookings/auto-book", json={"payment_session_id": "ps-1", "user_id": "user-2"}, headers=auth_headers
    )
    assert response.status_code == 403
