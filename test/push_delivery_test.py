import logging
from unittest.mock import AsyncMock

import pytest
from firebase_admin import messaging

from sparkd_notifications.events import NotificationCreated
from sparkd_notifications.handlers import PushDeliveryHandler
from sparkd_notifications.push import build_push_message
from sparkd_notifications.schemas import Notification, User


def created(data=None):
    return NotificationCreated(
        notification_id="notif-1",
        notification=Notification(
            userId="u1",
            title="Payment Received! 💰",
            body='Payment received for "Logo Design". You can now start working.',
            data=data,
        ),
    )


@pytest.mark.asyncio
async def test_sends_to_recipient_token(mock_store, push_client):
    handler = PushDeliveryHandler(mock_store, push_client)

    result = await handler.handle(created({"type": "order_status_change", "orderId": "o1"}))

    assert result == "projects/sparkd/messages/0:1"
    mock_store.get_user.assert_awaited_once_with("u1")
    message = push_client.send.await_args.args[0]
    assert message.token == "token-123"
    assert message.notification.title == "Payment Received! 💰"
    assert message.notification.body == 'Payment received for "Logo Design". You can now start working.'
    assert message.data == {"type": "order_status_change", "orderId": "o1"}


@pytest.mark.asyncio
@pytest.mark.parametrize("user", [None, User(), User(fcmToken="")])
async def test_missing_token_skips_send(mock_store, push_client, user, caplog):
    caplog.set_level(logging.INFO)
    mock_store.get_user = AsyncMock(return_value=user)

    result = await PushDeliveryHandler(mock_store, push_client).handle(created())

    assert result is None
    push_client.send.assert_not_awaited()
    assert "No FCM token for user: u1" in caplog.text


@pytest.mark.asyncio
async def test_delivery_failure_is_swallowed(mock_store, push_client, caplog):
    push_client.send = AsyncMock(side_effect=messaging.UnregisteredError("Requested entity was not found."))

    result = await PushDeliveryHandler(mock_store, push_client).handle(created())

    assert result is None
    push_client.send.assert_awaited_once()
    assert "Requested entity was not found." in caplog.text


@pytest.mark.asyncio
async def test_user_lookup_failure_is_swallowed(mock_store, push_client):
    mock_store.get_user = AsyncMock(side_effect=RuntimeError("deadline exceeded"))

    result = await PushDeliveryHandler(mock_store, push_client).handle(created())

    assert result is None
    push_client.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_uses_configured_channel(mock_store, push_client):
    await PushDeliveryHandler(mock_store, push_client, channel_id="staging_orders").handle(created())

    message = push_client.send.await_args.args[0]
    assert message.android.notification.channel_id == "staging_orders"


def test_message_carries_platform_hints():
    message = build_push_message("tok", "Title", "Body")

    assert message.data == {}
    assert message.android.priority == "high"
    assert message.android.notification.channel_id == "sparkd_orders"
    assert message.android.notification.sound == "default"
    assert message.apns.payload.aps.sound == "default"
    assert message.apns.payload.aps.badge == 1


def test_message_data_values_become_strings():
    message = build_push_message("tok", "Title", "Body", {"orderId": "o1", "attempt": 2, "urgent": True})
    assert message.data == {"orderId": "o1", "attempt": "2", "urgent": "True"}
