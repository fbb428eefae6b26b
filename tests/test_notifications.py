"""
Unit tests for notification builders and best-effort dispatch.
"""
from jobintake.services.notifications import (
    EmailSender,
    Notification,
    approved_notification,
    dispatch_notification,
    received_notification,
    rejected_notification,
)


class RecordingSender:
    def __init__(self):
        self.sent = []

    def send(self, to, subject, html_body):
        self.sent.append((to, subject, html_body))
        return True


class BrokenSender:
    def send(self, to, subject, html_body):
        raise TimeoutError("SMTP timeout")


def test_builders_need_a_recipient():
    assert received_notification(None, "Job") is None
    assert approved_notification("", "Job") is None
    assert rejected_notification(None, "Job", "spam") is None


def test_rejected_notification_escapes_reason():
    notification = rejected_notification("a@example.com", "Job <b>", "<script>x</script>")
    assert notification.kind == "rejected"
    assert "&lt;script&gt;" in notification.html
    assert "<script>" not in notification.html


def test_dispatch_sends_through_sender():
    sender = RecordingSender()
    notification = approved_notification("a@example.com", "Barista")

    assert dispatch_notification(notification, sender=sender) is True
    assert sender.sent[0][0] == "a@example.com"
    assert "Barista" in sender.sent[0][1]


def test_dispatch_never_raises():
    notification = Notification(to="a@example.com", subject="s", html="<p>h</p>", kind="approved")
    assert dispatch_notification(notification, sender=BrokenSender()) is False


def test_dispatch_ignores_missing_notification():
    assert dispatch_notification(None, sender=BrokenSender()) is False


def test_unconfigured_sender_skips():
    sender = EmailSender(user="", password="")
    assert sender.configured is False
    assert sender.send("a@example.com", "s", "<p>h</p>") is False
