from mockhire.models.tables import InterviewerTimeBlockModel


def test_hold_then_conflict(client, auth_headers, bearer, interviewer_factory, upcoming_slot):
    interviewer = interviewer_factory()
    _, slot = upcoming_slot("Wednesday", "17:30", "18:00")
    body = {"interviewer_id": interviewer.id, "time_slot": slot}

    first = client.post("/reservations", json=body, headers=auth_headers)
    second = client.post("/reservations", json=body, headers=bearer("user-2"))

    assert first.status_code == 201
    assert first.json()["interviewer_id"] == interviewer.id
    assert second.status_code == 409
    assert second.json()["error"] == "Time slot is no longer available"


def test_bad_slot_text(client, auth_headers, interviewer_factory):
    interviewer = interviewer_factory()
    response = client.post(
        "/reservations", json={"interviewer_id": interviewer.id, "time_slot": "tomorrow-ish"}, headers=auth_headers
    )
    assert response.status_code == 400


def test_release_is_idempotent(client, auth_headers, interviewer_factory, upcoming_slot):
    interviewer = interviewer_factory()
    _, slot = upcoming_slot()
    hold = client.post("/reservations", json={"interviewer_id": interviewer.id, "time_slot": slot},
                       headers=auth_headers).json()

    first = client.delete(f"/reservations/{hold['reservation_id']}", headers=auth_headers)
    second = client.delete(f"/reservations/{hold['reservation_id']}", headers=auth_headers)

    assert first.json()["released"] is True
    assert second.json()["released"] is False


def test_release_needs_the_holder(client, auth_headers, bearer, interviewer_factory, upcoming_slot):
    interviewer = interviewer_factory()
    _, slot = upcoming_slot()
    body = {"interviewer_id": interviewer.id, "time_slot": slot}
    hold = client.post("/reservations", json=body, headers=auth_headers).json()

    anonymous = client.delete(f"/reservations/{hold['reservation_id']}")
    stranger = client.delete(f"/reservations/{hold['reservation_id']}", headers=bearer("user-2"))
    takeover = client.post("/reservations", json=body, headers=bearer("user-2"))

    assert anonymous.status_code == 401
    assert stranger.json()["released"] is False
    assert takeover.status_code == 409


def test_promote_missing_hold_conflicts(client):
    response = client.post("/reservations/nope/promote", json={"interview_id": "iv-1"})
    assert response.status_code == 409


def test_manual_block_round_trip(client, db, interviewer_factory, upcoming_slot):
    interviewer = interviewer_factory()
    day, _ = upcoming_slot()
    body = {"interviewer_id": interviewer.id, "blocked_date": day.isoformat(), "start_time": "13:00",
            "end_time": "14:00"}

    created = client.post("/reservations/manual", json=body)
    overlapping = client.post("/reservations/manual", json=body)

    assert created.status_code == 201
    assert created.json()["block_reason"] == "manual"
    assert overlapping.status_code == 409

    assert client.delete(f"/reservations/manual/{created.json()['id']}").status_code == 200
    assert db.query(InterviewerTimeBlockModel).count() == 0


def test_user_holds_listing(client, auth_headers, interviewer_factory, upcoming_slot):
    interviewer = interviewer_factory()
    _, slot = upcoming_slot()
    client.post("/reservations", json={"interviewer_id": interviewer.id, "time_slot": slot}, headers=auth_headers)

    holds = client.get("/reservations/user/user-1", headers=auth_headers).json()

    assert len(holds) == 1
    assert holds[0]["is_temporary"] is True


def test_user_holds_are_private(client, bearer):
    assert client.get("/reservations/user/user-1").status_code == 401
    assert client.get("/reservations/user/user-1", headers=bearer("user-2")).status_code == 403


def test_cleanup(client):
    response = client.post("/reservations/cleanup")
    assert response.status_code == 200
    assert response.json() == {"removed": 0}
