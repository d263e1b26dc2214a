"""Notifications e-mail du workflow d'approbation.

Objectif du module
------------------
- Construire les e-mails "Review Requested" et "Approval Update".
- Les transmettre à la fonction d'envoi externe (HTTP POST `{to, subject, html}`).

Les envois sont best-effort: un échec est journalisé et compté, jamais propagé.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from html import escape
from typing import Literal

import httpx
import structlog

from hub.app.metrics import NOTIFICATIONS_TOTAL
from hub.domain.entities import Asset, User

log = structlog.get_logger(__name__)

SendResult = Literal["sent", "skipped", "failed"]

DECISION_LABELS = {
    "approved": "approved",
    "changes_requested": "requested changes on",
    "rejected": "rejected",
}

_BUTTON_STYLE = (
    "display: inline-block; background: #1a1a2e; color: white; padding: 10px 24px; "
    "border-radius: 6px; text-decoration: none; margin-top: 8px;"
)
_BOX_STYLE = "background: #f8f9fa; padding: 16px; border-radius: 8px; margin: 16px 0;"
_FOOTER = '<p style="color: #999; font-size: 12px; margin-top: 24px;">Partnership Hub</p>'


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html: str

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


def asset_url(app_url: str, asset_id: str) -> str:
    return f"{app_url.rstrip('/')}/content/{asset_id}"


def review_request_email(recipient: User, asset: Asset, app_url: str) -> EmailMessage:
    """E-mail envoyé à chaque approbateur d'une nouvelle revue."""
    due = asset.approval_due.date().isoformat() if asset.approval_due else "No deadline set"
    html = f"""
    <div style="font-family: sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #1a1a2e;">Review Requested</h2>
      <p>Hi {escape(recipient.full_name)},</p>
      <p>A new asset has been submitted for your review:</p>
      <div style="{_BOX_STYLE}">
        <p style="margin: 0; font-weight: 600;">{escape(asset.title)}</p>
        <p style="margin: 4px 0 0; color: #666; font-size: 14px;">Due: {due}</p>
      </div>
      <a href="{escape(asset_url(app_url, asset.id))}" style="{_BUTTON_STYLE}">Review Now</a>
      {_FOOTER}
    </div>
    """
    return EmailMessage(to=recipient.email, subject=f"Review Requested: {asset.title}", html=html)


def status_change_email(
    recipient: User,
    asset: Asset,
    approver_name: str,
    decision: str,
    comment: str | None,
    app_url: str,
) -> EmailMessage:
    """E-mail envoyé au créateur de l'asset après une décision."""
    action = DECISION_LABELS.get(decision, decision)
    quoted = (
        f'<div style="{_BOX_STYLE}"><p style="margin: 0; color: #333; font-size: 14px;">'
        f'"{escape(comment)}"</p></div>'
        if comment
        else ""
    )
    html = f"""
    <div style="font-family: sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #1a1a2e;">Approval Update</h2>
      <p>Hi {escape(recipient.full_name)},</p>
      <p><strong>{escape(approver_name)}</strong> {action} <strong>"{escape(asset.title)}"</strong>.</p>
      {quoted}
      <a href="{escape(asset_url(app_url, asset.id))}" style="{_BUTTON_STYLE}">View Asset</a>
      {_FOOTER}
    </div>
    """
    return EmailMessage(
        to=recipient.email,
        subject=f'{approver_name} {action} "{asset.title}"',
        html=html,
    )


class NotificationClient:
    """Client HTTP de la fonction d'envoi d'e-mails."""

    def __init__(
        self,
        url: str | None,
        api_key: str | None = None,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.url = url
        self._headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._timeout = timeout
        self._transport = transport

    def send(self, message: EmailMessage) -> SendResult:
        """Envoie un e-mail; ne lève jamais."""
        if not self.url:
            log.info("notification_skipped", to=message.to, subject=message.subject)
            NOTIFICATIONS_TOTAL.labels(result="skipped").inc()
            return "skipped"
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                resp = client.post(self.url, json=message.as_dict(), headers=self._headers)
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            log.warning(
                "notification_failed", to=message.to, error=type(exc).__name__, detail=str(exc)
            )
            NOTIFICATIONS_TOTAL.labels(result="failed").inc()
            return "failed"
        log.info("notification_sent", to=message.to, subject=message.subject)
        NOTIFICATIONS_TOTAL.labels(result="sent").inc()
        return "sent"


class Notifier:
    """Construit les e-mails du workflow et les délivre (inline ou via Celery).

    `deliver` est destiné à être appelé après commit de la transaction.
    """

    def __init__(self, client: NotificationClient, app_url: str, async_mode: bool = False) -> None:
        self.client = client
        self.app_url = app_url
        self.async_mode = async_mode

    def review_requested(self, asset: Asset, approvers: list[User]) -> list[EmailMessage]:
        return [review_request_email(u, asset, self.app_url) for u in approvers]

    def decision_made(
        self,
        asset: Asset,
        creator: User,
        approver: User,
        decision: str,
        comment: str | None,
    ) -> list[EmailMessage]:
        return [
            status_change_email(
                creator, asset, approver.full_name, decision, comment, self.app_url
            )
        ]

    def deliver(self, messages: list[EmailMessage]) -> None:
        if self.async_mode:
            from hub.app.celery_app import celery_app  # broker only needed in async mode

            for message in messages:
                try:
                    celery_app.send_task("hub.tasks.send_notification", kwargs=message.as_dict())
                except Exception as exc:
                    log.warning(
                        "notification_enqueue_failed",
                        to=message.to,
                        error=type(exc).__name__,
                        detail=str(exc),
                    )
                    NOTIFICATIONS_TOTAL.labels(result="failed").inc()
            return
        for message in messages:
            self.client.send(message)
