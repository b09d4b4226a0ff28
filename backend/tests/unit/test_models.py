"""Unit tests for Pydantic models."""

import unittest

from pydantic import ValidationError

from models import (
    DeliveryFailure,
    DestinationToken,
    DispatchOutcome,
    Notification,
    RunResult,
    ServiceAccount,
)


class TestNotificationModel(unittest.TestCase):
    """Tests for Notification."""

    def test_defaults(self):
        """New record is pending with empty text."""
        notification = Notification(id="n1")

        self.assertEqual(notification.title, "")
        self.assertEqual(notification.message, "")
        self.assertFalse(notification.sent)
        self.assertTrue(notification.is_pending)
        self.assertIsNone(notification.sent_at)
        self.assertIsNone(notification.error)

    def test_sent_at_alias(self):
        """Database field sentAt maps to sent_at."""
        notification = Notification.model_validate(
            {"id": "n1", "title": "T", "sent": True, "sentAt": 1700000000000}
        )

        self.assertEqual(notification.sent_at, 1700000000000)
        self.assertFalse(notification.is_pending)

    def test_coerces_text(self):
        """None and non-string text are coerced to strings."""
        notification = Notification(id="n1", title=None, message=12)

        self.assertEqual(notification.title, "")
        self.assertEqual(notification.message, "12")


class TestDestinationTokenModel(unittest.TestCase):
    """Tests for DestinationToken."""

    def test_active_by_default(self):
        token = DestinationToken(id="d1", token="abc")

        self.assertTrue(token.active)

    def test_empty_token_rejected(self):
        """Empty device token is invalid."""
        with self.assertRaises(ValidationError):
            DestinationToken(id="d1", token="")


class TestDispatchOutcomeModel(unittest.TestCase):
    """Tests for DispatchOutcome."""

    def test_failure_summary(self):
        """Summary joins each failing destination with its reason."""
        outcome = DispatchOutcome(
            notification_id="n1",
            failures=[
                DeliveryFailure(destination_id="a", reason="FCM error: 404 - gone"),
                DeliveryFailure(destination_id="b", reason=""),
            ],
        )

        self.assertFalse(outcome.succeeded)
        self.assertEqual(outcome.attempted, 2)
        self.assertEqual(
            outcome.error_summary(),
            "FCM: all sends failed - a: FCM error: 404 - gone; b: unknown",
        )

    def test_missing_destination_id_is_unknown(self):
        failure = DeliveryFailure(destination_id="", reason="timeout")

        self.assertEqual(failure.describe(), "unknown: timeout")

    def test_success_has_no_summary(self):
        outcome = DispatchOutcome(
            notification_id="n1",
            delivered=["a"],
            failures=[DeliveryFailure(destination_id="b", reason="x")],
        )

        self.assertTrue(outcome.succeeded)
        self.assertIsNone(outcome.error_summary())


class TestRunResultModel(unittest.TestCase):
    """Tests for RunResult."""

    def test_zero_defaults(self):
        result = RunResult()

        self.assertEqual((result.total, result.sent, result.failed), (0, 0, 0))

    def test_negative_rejected(self):
        with self.assertRaises(ValidationError):
            RunResult(total=-1)


class TestServiceAccountModel(unittest.TestCase):
    """Tests for ServiceAccount."""

    def test_requires_email_and_key(self):
        with self.assertRaises(ValidationError):
            ServiceAccount(client_email="", private_key="k")

    def test_keeps_extra_fields(self):
        """Unknown key fields pass through for firebase-admin."""
        account = ServiceAccount(
            client_email="a@b.iam.gserviceaccount.com",
            private_key="k",
            client_id="123",
        )

        self.assertEqual(account.model_dump()["client_id"], "123")


if __name__ == "__main__":
    unittest.main()
