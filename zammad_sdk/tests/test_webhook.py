import json
import logging
from datetime import datetime, timedelta, timezone

import pytest

from zammad_sdk.realtime.events import (
    EventKind,
    TicketCreated,
    TicketUpdated,
    TicketClosed,
    ArticleCreated,
)
from zammad_sdk.realtime.webhook import (
    WebhookOptions,
    WebhookReceiver,
    compute_signature,
    verify_signature,
)
from zammad_sdk.tests.conftest import EventRecorder

SECRET = "s3cr3t"


def signed_headers(body: bytes, event: str, secret: str = SECRET, prefix: str = "") -> dict:
    return {
        "X-Zammad-Event": event,
        "X-Zammad-Signature": prefix + compute_signature(body, secret),
    }


def encode(payload) -> bytes:
    return json.dumps(payload).encode("utf-8")


@pytest.fixture
def all_events(monitor):
    recorder = EventRecorder()
    for kind in EventKind:
        monitor.subscribe(kind, recorder)
    return recorder


@pytest.fixture
def receiver(zammad_client, monitor):
    return WebhookReceiver(zammad_client, monitor, WebhookOptions(secret=SECRET))


class TestSignatureVerification:
    """HMAC-SHA256 checks over the raw body"""

    body = b'{"ticket": {"id": 1}}'

    def test_valid_signature_is_accepted(self):
        assert verify_signature(self.body, compute_signature(self.body, SECRET), SECRET)

    def test_prefixed_signature_is_accepted(self):
        assert verify_signature(self.body, "sha256=" + compute_signature(self.body, SECRET), SECRET)

    def test_signature_comparison_ignores_case(self):
        signature = compute_signature(self.body, SECRET).upper()
        assert verify_signature(self.body, "SHA256=" + signature, SECRET)

    def test_other_signature_of_same_length_is_rejected(self):
        signature = compute_signature(self.body, SECRET)
        tampered = ("0" if signature[0] != "0" else "1") + signature[1:]
        assert not verify_signature(self.body, tampered, SECRET)

    def test_signature_for_other_body_is_rejected(self):
        signature = compute_signature(b'{"ticket": {"id": 2}}', SECRET)
        assert not verify_signature(self.body, signature, SECRET)

    @pytest.mark.parametrize("header", [None, "", "   "])
    def test_missing_signature_is_rejected_when_secret_is_set(self, header):
        assert not verify_signature(self.body, header, SECRET)

    @pytest.mark.parametrize("secret", [None, ""])
    def test_any_signature_is_accepted_without_secret(self, secret):
        assert verify_signature(self.body, "garbage", secret)
        assert verify_signature(self.body, None, secret)


class TestWebhookReceiver:
    """Status codes and event production"""

    @pytest.mark.asyncio
    async def test_documented_ticket_created_scenario(self, receiver, all_events, zammad_client):
        body = b'{"ticket":{"id":1,"created_by_id":7}}'

        status = await receiver.handle(body, signed_headers(body, "ticket.created"))

        assert status == 200
        assert len(all_events.events) == 1
        event = all_events.events[0]
        assert isinstance(event, TicketCreated)
        assert event.ticket.id == 1
        assert event.creator.id == 7
        assert event.first_article.ticket_id == 1
        assert event.observed_at.tzinfo is not None
        zammad_client.users.get_user.assert_called_once_with(7)

    @pytest.mark.asyncio
    async def test_invalid_signature_returns_401(self, receiver, all_events):
        body = encode({"ticket": {"id": 1}})
        headers = {"X-Zammad-Event": "ticket.created", "X-Zammad-Signature": "invalid"}

        assert await receiver.handle(body, headers) == 401
        assert all_events.events == []

    @pytest.mark.asyncio
    async def test_missing_signature_returns_401(self, receiver, all_events):
        body = encode({"ticket": {"id": 1}})

        assert await receiver.handle(body, {"X-Zammad-Event": "ticket.created"}) == 401
        assert all_events.events == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("event_header", [None, "", "  "])
    async def test_missing_event_header_returns_400(self, receiver, all_events, event_header):
        body = encode({"ticket": {"id": 1}})
        headers = signed_headers(body, "ignored")
        if event_header is None:
            del headers["X-Zammad-Event"]
        else:
            headers["X-Zammad-Event"] = event_header

        assert await receiver.handle(body, headers) == 400
        assert all_events.events == []

    @pytest.mark.asyncio
    async def test_signature_is_checked_before_event_header(self, receiver):
        body = encode({"ticket": {"id": 1}})
        assert await receiver.handle(body, {"X-Zammad-Signature": "bad"}) == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("event_name", [kind.value for kind in EventKind] + ["ticket.escalated"])
    async def test_payload_without_ticket_is_ignored(self, receiver, all_events, event_name):
        body = encode({"article": {"id": 3}})

        assert await receiver.handle(body, signed_headers(body, event_name)) == 200
        assert all_events.events == []

    @pytest.mark.asyncio
    async def test_undecodable_ticket_is_ignored(self, receiver, all_events):
        body = encode({"ticket": {"title": "no id"}})

        assert await receiver.handle(body, signed_headers(body, "ticket.created")) == 200
        assert all_events.events == []

    @pytest.mark.asyncio
    async def test_unknown_event_is_ignored(self, receiver, all_events):
        body = encode({"ticket": {"id": 1}})

        assert await receiver.handle(body, signed_headers(body, "ticket.escalated")) == 200
        assert all_events.events == []

    @pytest.mark.asyncio
    async def test_ticket_updated(self, receiver, all_events):
        body = encode({
            "ticket": {"id": 4, "owner_id": 9, "updated_by_id": 5},
            "previous": {"id": 4, "owner_id": 3},
            "changes": {"owner_id": 9},
        })

        assert await receiver.handle(body, signed_headers(body, "ticket.updated")) == 200

        [event] = all_events.events
        assert isinstance(event, TicketUpdated)
        assert event.previous_ticket.owner_id == 3
        assert event.changed_fields == {"owner_id": 9}
        assert event.updated_by.id == 5

    @pytest.mark.asyncio
    async def test_ticket_updated_without_previous_or_changes(self, receiver, all_events):
        body = encode({"ticket": {"id": 4, "updated_by_id": 5}})

        await receiver.handle(body, signed_headers(body, "ticket.updated"))

        [event] = all_events.events
        assert event.previous_ticket == event.ticket
        assert event.changed_fields == {}

    @pytest.mark.asyncio
    async def test_article_created(self, receiver, all_events):
        body = encode({
            "ticket": {"id": 8},
            "article": {"id": 31, "ticket_id": 8, "body": "split me", "from": "a@example.com"},
            "is_split": True,
            "split_from_ticket_id": 2,
            "split_from_article_id": 12,
        })

        assert await receiver.handle(body, signed_headers(body, "ticket.article.created")) == 200

        [event] = all_events.events
        assert isinstance(event, ArticleCreated)
        assert event.article.id == 31
        assert event.article.from_ == "a@example.com"
        assert event.is_split is True
        assert event.split_from_ticket_id == 2
        assert event.split_from_article_id == 12

    @pytest.mark.asyncio
    async def test_article_created_defaults(self, receiver, all_events, zammad_client):
        body = encode({"ticket": {"id": 8}})

        await receiver.handle(body, signed_headers(body, "ticket.article.created"))

        [event] = all_events.events
        assert event.article.ticket_id == 8
        assert event.is_split is False
        assert event.split_from_ticket_id is None
        assert event.split_from_article_id is None
        zammad_client.users.get_user.assert_not_called()

    @pytest.mark.asyncio
    async def test_ticket_closed_with_timestamp(self, receiver, all_events):
        body = encode({"ticket": {"id": 6, "updated_by_id": 2}, "closed_at": "2024-03-01T10:30:00Z"})

        assert await receiver.handle(body, signed_headers(body, "ticket.closed")) == 200

        [event] = all_events.events
        assert isinstance(event, TicketClosed)
        assert event.closed_by.id == 2
        assert event.closed_at == datetime(2024, 3, 1, 10, 30, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_ticket_closed_defaults_to_now(self, receiver, all_events):
        before = datetime.now(timezone.utc)
        body = encode({"ticket": {"id": 6, "updated_by_id": 2}})

        await receiver.handle(body, signed_headers(body, "ticket.closed"))

        [event] = all_events.events
        assert event.closed_at >= before

    @pytest.mark.asyncio
    @pytest.mark.parametrize("closed_at, expected", [
        ("2024-03-01T10:30:00", datetime(2024, 3, 1, 10, 30, tzinfo=timezone.utc)),
        ("2024-03-01T12:30:00+02:00", datetime(2024, 3, 1, 10, 30, tzinfo=timezone.utc)),
    ])
    async def test_ticket_closed_timestamp_is_normalised_to_utc(self, receiver, all_events, closed_at, expected):
        body = encode({"ticket": {"id": 6}, "closed_at": closed_at})

        assert await receiver.handle(body, signed_headers(body, "ticket.closed")) == 200

        [event] = all_events.events
        assert event.closed_at == expected
        assert event.closed_at.utcoffset() == timedelta(0)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fields", [
        {"is_split": "false"},
        {"is_split": 1},
        {"is_split": None},
        {"split_from_ticket_id": True},
        {"split_from_ticket_id": "2"},
        {"split_from_article_id": 1.5},
    ])
    async def test_mistyped_split_fields_return_500(self, receiver, all_events, fields):
        body = encode(dict({"ticket": {"id": 8}}, **fields))

        assert await receiver.handle(body, signed_headers(body, "ticket.article.created")) == 500
        assert all_events.events == []

    @pytest.mark.asyncio
    async def test_non_object_changes_return_500(self, receiver, all_events, caplog):
        body = encode({"ticket": {"id": 4}, "changes": "owner_id"})

        with caplog.at_level(logging.ERROR, logger="zammad_sdk.realtime.webhook"):
            status = await receiver.handle(body, signed_headers(body, "ticket.updated"))

        assert status == 500
        assert "'changes' must be an object, got str" in caplog.text
        assert all_events.events == []

    @pytest.mark.asyncio
    async def test_user_lookup_failure_returns_500(self, receiver, all_events, zammad_client):
        zammad_client.users.get_user.side_effect = ConnectionError("zammad is down")
        body = encode({"ticket": {"id": 1, "created_by_id": 7}})

        assert await receiver.handle(body, signed_headers(body, "ticket.created")) == 500
        assert all_events.events == []

    @pytest.mark.asyncio
    async def test_malformed_json_returns_500(self, receiver):
        body = b"{not json"
        assert await receiver.handle(body, signed_headers(body, "ticket.created")) == 500

    @pytest.mark.asyncio
    async def test_failing_subscriber_still_returns_200(self, receiver, monitor):
        def broken(event):
            raise RuntimeError("subscriber bug")

        monitor.subscribe(EventKind.TICKET_CREATED, broken)
        body = encode({"ticket": {"id": 1}})

        assert await receiver.handle(body, signed_headers(body, "ticket.created")) == 200

    @pytest.mark.asyncio
    async def test_open_mode_accepts_unsigned_requests(self, zammad_client, monitor, all_events):
        receiver = WebhookReceiver(zammad_client, monitor, WebhookOptions())
        body = encode({"ticket": {"id": 1}})

        assert await receiver.handle(body, {"X-Zammad-Event": "ticket.created"}) == 200
        assert len(all_events.events) == 1

    @pytest.mark.asyncio
    async def test_custom_header_names_are_case_insensitive(self, zammad_client, monitor, all_events):
        options = WebhookOptions(
            secret=SECRET,
            signature_header_name="X-Hub-Signature",
            event_header_name="X-Hub-Event",
        )
        receiver = WebhookReceiver(zammad_client, monitor, options)
        body = encode({"ticket": {"id": 1}})
        headers = {
            "x-hub-event": "ticket.created",
            "x-hub-signature": "sha256=" + compute_signature(body, SECRET),
        }

        assert await receiver.handle(body, headers) == 200
        assert len(all_events.events) == 1

    @pytest.mark.asyncio
    async def test_stopped_monitor_publishes_nothing(self, receiver, monitor, all_events):
        monitor.stop()
        body = encode({"ticket": {"id": 1}})

        assert await receiver.handle(body, signed_headers(body, "ticket.created")) == 200
        assert all_events.events == []

    @pytest.mark.asyncio
    async def test_users_are_resolved_once(self, receiver, zammad_client):
        body = encode({"ticket": {"id": 1, "created_by_id": 7}})

        await receiver.handle(body, signed_headers(body, "ticket.created"))
        await receiver.handle(body, signed_headers(body, "ticket.created"))

        zammad_client.users.get_user.assert_called_once_with(7)
