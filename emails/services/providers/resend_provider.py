import json
import urllib.error
import urllib.request

from django.conf import settings

RESEND_URL = "https://api.resend.com/emails"

def _http_post(url, data, headers):
    req = urllib.request.Request(url, data=data, headers=headers, method="POST")
    timeout = getattr(settings, "EMAILS_HTTP_TIMEOUT", 10)
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        return resp.status, resp.read().decode("utf-8")

def send_via_resend(*, outbox) -> tuple[str | None, str | None, int | None]:
    """
    Send via Resend REST API. Returns (message_id, error, http_status).

    Non-2xx answers (403 in Resend testing mode, 429 when rate limited, ...)
    come back as an error with the upstream status, never as an exception.
    """
    api_key = getattr(settings, "RESEND_API_KEY", "")
    from_email = outbox.from_email or getattr(settings, "RESEND_FROM", "")

    payload = {
        "from": from_email,
        "to": [outbox.to],
        "subject": outbox.subject,
        "html": outbox.html or "",
    }
    if outbox.text:
        payload["text"] = outbox.text
    if outbox.cc:
        payload["cc"] = outbox.cc
    if outbox.bcc:
        payload["bcc"] = outbox.bcc
    if outbox.reply_to:
        payload["reply_to"] = outbox.reply_to
    if outbox.tags:
        payload["tags"] = [{"name": t, "value": "1"} for t in outbox.tags]

    try:
        body = json.dumps(payload).encode("utf-8")
        status, res = _http_post(
            RESEND_URL,
            data=body,
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
        )
        data = json.loads(res or "{}")
        return data.get("id"), None, status
    except urllib.error.HTTPError as e:
        detail = e.read().decode("utf-8", errors="replace")
        return None, f"Resend API error ({e.code}): {detail}", e.code
    except Exception as e:
        return None, str(e), None
