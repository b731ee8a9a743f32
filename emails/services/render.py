from string import Template as StrTemplate

from django.utils.html import escape

from emails.models import Template
from emails.services.builtin import BUILTIN_TEMPLATES

def get_template(code: str) -> tuple[str, str, str]:
    """(subject, html, text) for `code`: a DB override if present, else the built-in one."""
    t = Template.objects.filter(code=code).first()
    if t is not None:
        return t.subject, t.html, t.text or ""
    try:
        return BUILTIN_TEMPLATES[code]
    except KeyError:
        raise Template.DoesNotExist(f"No email template {code!r}") from None

def render_template(code: str, data: dict) -> tuple[str, str, str]:
    subject, html, text = get_template(code)
    data = data or {}
    safe = {k: escape(v) for k, v in data.items()}
    sub = StrTemplate(subject).safe_substitute(data)
    html = StrTemplate(html).safe_substitute(safe)
    text = StrTemplate(text).safe_substitute(data)
    return sub, html, text
