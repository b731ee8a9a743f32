"""Outgoing email router.

`send_email` records an Outbox row and delivers it according to the delivery
mode; `deliver` performs one provider attempt for a row (also used by
`process_outbox` and the outbox `resend` action).
"""

import logging
import threading
from datetime import timedelta

from django.conf import settings
from django.db import close_old_connections

from emails.models import Outbox
from emails.services.render import render_template

from .providers.resend_provider import send_via_resend
from .providers.smtp_provider import send_via_smtp

logger = logging.getLogger(__name__)

PROVIDERS = {
    "SMTP": send_via_smtp,
    "RESEND": send_via_resend,
}


def _provider_name() -> str:
    return (getattr(settings, "EMAILS_PROVIDER", "SMTP") or "SMTP").upper()


def retry_delay(retry_count: int) -> timedelta:
    """Exponential backoff: base, 2x base, 4x base, ... after the 1st, 2nd, 3rd failure."""
    base = getattr(settings, "EMAILS_RETRY_BACKOFF_SEC", 120)
    return timedelta(seconds=base * 2 ** max(0, retry_count - 1))


def send_email(
    *,
    to: str,
    subject: str = "",
    html: str = "",
    text: str = "",
    tags=None,
    template_code: str | None = None,
    template_data: dict | None = None,
    from_email: str | None = None,
    cc=None,
    bcc=None,
    reply_to=None,
    queue_if_failed: bool = True,
    delivery_mode: str | None = None,
) -> Outbox:
    """
    Single entry point for all system emails.

    Delivery modes (EMAILS_DELIVERY_MODE or `delivery_mode`):
    - INLINE: send now; the returned row already carries the provider's answer
    - THREAD: send in a background thread
    - QUEUE: leave QUEUED for `python manage.py process_outbox`

    With `queue_if_failed=False` a failed attempt is final (status FAILED).
    """
    if template_code:
        sub, h, t = render_template(template_code, template_data or {})
        subject = subject or sub
        html = html or h
        text = text or t

    o = Outbox.objects.create(
        to=to, subject=subject, html=html, text=text,
        from_email=from_email or "",
        cc=cc or [], bcc=bcc or [], reply_to=reply_to or [],
        tags=tags or [],
        template_code=template_code or "",
        template_data=template_data or {},
    )

    mode = (delivery_mode or getattr(settings, "EMAILS_DELIVERY_MODE", "INLINE") or "INLINE").upper()
    if mode == "INLINE":
        deliver(o, queue_if_failed=queue_if_failed)
    elif mode == "THREAD":
        _deliver_in_thread(o.id, queue_if_failed=queue_if_failed)
    return o


def _deliver_in_thread(outbox_id: int, *, queue_if_failed: bool):
    def _run():
        close_old_connections()
        try:
            o = Outbox.objects.filter(id=outbox_id).first()
            if o:
                deliver(o, queue_if_failed=queue_if_failed)
        finally:
            close_old_connections()

    threading.Thread(target=_run, name=f"email-send-{outbox_id}", daemon=True).start()


def deliver(outbox: Outbox, *, queue_if_failed: bool) -> bool:
    """One delivery attempt. Returns True when the provider accepted the email."""
    provider = _provider_name()
    send = PROVIDERS.get(provider, send_via_smtp)

    outbox.mark_sending()
    mid, err, http_status = send(outbox=outbox)

    if err:
        logger.error("Email #%s to %s failed via %s: %s", outbox.pk, outbox.to, provider, err)
        retry_in = retry_delay(outbox.retry_count + 1) if queue_if_failed else None
        outbox.mark_failed(err, http_status=http_status, retry_in=retry_in)
        return False

    logger.info("Email #%s sent to %s via %s (%s)", outbox.pk, outbox.to, provider, mid)
    outbox.mark_sent(message_id=mid, http_status=http_status)
    return True
