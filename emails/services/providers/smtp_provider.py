"""SMTP provider: Django's configured mail backend (EMAIL_HOST / SMTP_* env).

Works with Google SMTP out of the box; tests run it against the locmem backend.
"""

from email.utils import make_msgid

from django.conf import settings
from django.core.mail import EmailMultiAlternatives


def build_message(outbox) -> tuple[EmailMultiAlternatives, str]:
    from_email = (outbox.from_email or "").strip() or settings.DEFAULT_FROM_EMAIL
    message_id = make_msgid(domain=from_email.rsplit("@", 1)[-1].strip("> ") or None)
    headers = {"Message-ID": message_id}
    if outbox.tags:
        headers["X-Tags"] = ",".join(outbox.tags)

    # some relays reject an empty text part
    msg = EmailMultiAlternatives(
        subject=outbox.subject,
        body=(outbox.text or "").strip() or " ",
        from_email=from_email,
        to=[outbox.to],
        cc=list(outbox.cc or []),
        bcc=list(outbox.bcc or []),
        reply_to=list(outbox.reply_to or []) or None,
        headers=headers,
    )
    if outbox.html:
        msg.attach_alternative(outbox.html, "text/html")
    return msg, message_id


def send_via_smtp(*, outbox) -> tuple[str | None, str | None, int | None]:
    """Returns (message_id, error, None); SMTP has no HTTP status."""
    try:
        msg, message_id = build_message(outbox)
        msg.send(fail_silently=False)
    except Exception as e:
        return None, f"SMTP error: {e}", None
    return message_id, None, None
