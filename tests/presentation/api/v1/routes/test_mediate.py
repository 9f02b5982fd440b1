"""Test the mediation endpoints"""

import pytest

from align.application.modes.prompts import MEDIATION_FALLBACK, MEDIATOR_NAME
from align.domain.exceptions import UpstreamModelError

ANA_BEN = {"user": "Ana", "other": "Ben"}


async def _mediate(client, headers, **body):
    return await client.post("/api/mediate", json=body, headers=headers)


class TestMediationTurn:
    async def test_model_failure_scenario(self, client, model, auth_headers):
        """
        GIVEN Ana and Ben starting a mediation and a failing model
        WHEN Ana says "He never listens"
        THEN the mediation fallback is returned with fallback=true and the
        session is titled "Ana & Ben".
        """
        model.fail_always()

        response = await _mediate(
            client, auth_headers, message="He never listens", participants=ANA_BEN
        )

        assert response.status_code == 200
        data = response.json()
        assert data["response"] == MEDIATION_FALLBACK
        assert data["fallback"] is True
        assert data["success"] is True

        listing = (await client.get("/api/mediate", headers=auth_headers)).json()
        [session] = listing["sessions"]
        assert session["id"] == data["sessionId"]
        assert session["title"] == "Ana & Ben"
        assert session["participantUser"] == "Ana"
        assert session["participantOther"] == "Ben"
        assert [m["role"] for m in session["messages"]] == ["mediator", "user", "mediator"]
        assert session["messages"][1] == {
            "role": "user",
            "content": "He never listens",
            "sender": "Ana",
        }
        assert session["messages"][2]["sender"] == MEDIATOR_NAME

    async def test_model_reply_and_single_instruction(self, client, model, auth_headers):
        model.script("Ben, what did you hear Ana say?")

        response = await _mediate(
            client, auth_headers, message="He never listens", participants=ANA_BEN
        )

        assert response.json()["response"] == "Ben, what did you hear Ana say?"
        assert "fallback" not in response.json()
        [request] = model.requests
        assert len(request.messages) == 1
        assert 'Latest message from Ana: "He never listens"' in request.messages[0]["content"]

    @pytest.mark.parametrize(
        "participants",
        [None, {"user": "Ana"}, {"user": "", "other": "Ben"}, {"user": "Ana", "other": "  "}],
    )
    async def test_missing_participant_rejected_without_session(
        self, client, model, auth_headers, participants
    ):
        """
        GIVEN a mediation turn missing a participant name
        WHEN it is posted
        THEN 400 is returned, no session row exists and the model is not called.
        """
        body = {"message": "He never listens"}
        if participants is not None:
            body["participants"] = participants

        response = await _mediate(client, auth_headers, **body)

        assert response.status_code == 400
        assert model.requests == []
        listing = (await client.get("/api/mediate", headers=auth_headers)).json()
        assert listing["sessions"] == []

    async def test_non_string_message_rejected(self, client, auth_headers):
        response = await _mediate(client, auth_headers, message=["hi"], participants=ANA_BEN)

        assert response.status_code == 400

    async def test_second_party_turn(self, client, model, auth_headers):
        first = await _mediate(
            client, auth_headers, message="He never listens", participants=ANA_BEN
        )
        session_id = first.json()["sessionId"]

        second = await _mediate(
            client,
            auth_headers,
            message="I do listen, I just disagree",
            participants=ANA_BEN,
            sessionId=session_id,
            speaker="other",
        )

        assert second.status_code == 200
        assert 'Latest message from Ben: "I do listen' in model.requests[1].messages[0]["content"]
        assert "Ana: He never listens" in model.requests[1].messages[0]["content"]
        [session] = (await client.get("/api/mediate", headers=auth_headers)).json()["sessions"]
        assert session["messages"][3]["sender"] == "Ben"
        assert len(session["messages"]) == 5

    async def test_unknown_speaker_rejected(self, client, auth_headers):
        response = await _mediate(
            client, auth_headers, message="Hi", participants=ANA_BEN, speaker="mediator"
        )

        assert response.status_code == 400

    async def test_participants_cannot_change_on_existing_session(self, client, auth_headers):
        first = await _mediate(
            client, auth_headers, message="He never listens", participants=ANA_BEN
        )

        response = await _mediate(
            client,
            auth_headers,
            message="Hello",
            participants={"user": "Ana", "other": "Carl"},
            sessionId=first.json()["sessionId"],
        )

        assert response.status_code == 400
        assert response.json()["details"] == {"field": "participants"}

    async def test_client_conversation_echo_accepted(self, client, auth_headers):
        """
        GIVEN a client that echoes the last exchange it displayed
        WHEN it posts a follow-up on the session
        THEN the echo matches the stored tail and the turn succeeds.
        """
        first = await _mediate(
            client, auth_headers, message="He never listens", participants=ANA_BEN
        )
        session_id = first.json()["sessionId"]
        echoed = [
            {"role": "user", "content": "He never listens", "sender": "Ana"},
            {"role": "mediator", "content": first.json()["response"], "sender": MEDIATOR_NAME},
        ]

        response = await _mediate(
            client,
            auth_headers,
            message="Can we talk about it?",
            participants=ANA_BEN,
            sessionId=session_id,
            conversation=echoed,
        )

        assert response.status_code == 200
        assert response.json()["sessionId"] == session_id


class TestMediationAccess:
    async def test_unauthenticated_rejected(self, client, auth_headers):
        turn = await client.post(
            "/api/mediate", json={"message": "He never listens", "participants": ANA_BEN}
        )
        listing = await client.get("/api/mediate")

        assert turn.status_code == 401
        assert listing.status_code == 401
        own = (await client.get("/api/mediate", headers=auth_headers)).json()
        assert own["sessions"] == []

    async def test_cross_owner_isolation(self, client, auth_headers, other_auth_headers):
        created = await _mediate(
            client, auth_headers, message="He never listens", participants=ANA_BEN
        )

        intrusion = await _mediate(
            client,
            other_auth_headers,
            message="Hi",
            participants=ANA_BEN,
            sessionId=created.json()["sessionId"],
        )
        others_list = await client.get("/api/mediate", headers=other_auth_headers)

        assert intrusion.status_code == 404
        assert others_list.json()["sessions"] == []

    async def test_fallback_turn_survives_failed_model_on_every_call(
        self, client, model, auth_headers
    ):
        model.script(UpstreamModelError("HTTP 502"), UpstreamModelError("timeout"))

        for message in ("He never listens", "Still true"):
            response = await _mediate(
                client, auth_headers, message=message, participants=ANA_BEN
            )
            assert response.json()["fallback"] is True

        listing = (await client.get("/api/mediate", headers=auth_headers)).json()
        assert len(listing["sessions"]) == 2
