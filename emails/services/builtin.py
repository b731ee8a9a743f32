"""Built-in transactional templates (string.Template syntax).

Placeholders: $brand, $patient_name, $doctor_name, $date, $time and, for
reminders, $reminder_minutes. A `emails.Template` row with the same code
overrides the entry here.
"""

_STYLE = """
    body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; background: #f5f5f5; margin: 0; padding: 20px; }
    .container { max-width: 600px; margin: 0 auto; background: white; border-radius: 16px; overflow: hidden; }
    .header { color: white; padding: 30px; text-align: center; }
    .header h1 { margin: 0; font-size: 24px; }
    .content { padding: 30px; }
    .card { border-radius: 12px; padding: 20px; margin: 20px 0; }
    .label { color: #666; width: 100px; display: inline-block; }
    .value { color: #333; font-weight: 600; }
    .footer { background: #f9fafb; padding: 20px; text-align: center; color: #666; font-size: 12px; }
"""

_DETAILS = """
      <div class="card" style="background: $card_bg; border-left: 4px solid $accent;">
        <div><span class="label">Doctor:</span><span class="value">$doctor_name</span></div>
        <div><span class="label">Date:</span><span class="value">$date</span></div>
        <div><span class="label">Time:</span><span class="value">$time</span></div>
      </div>
"""

def _page(header_bg: str, heading: str, subheading: str, card_bg: str, accent: str, body: str) -> str:
    details = _DETAILS.replace("$card_bg", card_bg).replace("$accent", accent)
    body = body.replace("$details", details)
    return f"""<!DOCTYPE html>
<html>
<head><style>{_STYLE}</style></head>
<body>
  <div class="container">
    <div class="header" style="background: {header_bg};">
      <h1>{heading}</h1>
      <p>{subheading}</p>
    </div>
    <div class="content">
      <p>Dear <strong>$patient_name</strong>,</p>
{body}
      <p>Best regards,<br><strong>The $brand Team</strong></p>
    </div>
    <div class="footer"><p>This is an automated message from $brand</p></div>
  </div>
</body>
</html>
"""

CONFIRMATION_HTML = _page(
    "linear-gradient(135deg, #0d9488 0%, #14b8a6 100%)",
    "$brand",
    "Appointment Confirmed",
    "#f0fdfa",
    "#14b8a6",
    """      <p>Your appointment has been successfully scheduled!</p>
$details
      <p>Please arrive 10 minutes before your scheduled time.</p>
      <p>If you need to reschedule, please do so at least 24 hours in advance.</p>""",
)

REMINDER_HTML = _page(
    "linear-gradient(135deg, #f59e0b 0%, #fbbf24 100%)",
    "Appointment Reminder",
    "Your appointment is in $reminder_minutes minutes!",
    "#fffbeb",
    "#f59e0b",
    """      <p>This is a friendly reminder about your upcoming appointment.</p>
$details
      <p>Please make sure you're ready for your appointment!</p>""",
)

CONFIRMATION_TEXT = (
    "Dear $patient_name,\n\n"
    "Your appointment with $doctor_name is confirmed for $date at $time.\n"
    "Please arrive 10 minutes before your scheduled time.\n\n"
    "The $brand Team\n"
)

REMINDER_TEXT = (
    "Dear $patient_name,\n\n"
    "Your appointment with $doctor_name starts in $reminder_minutes minutes ($date at $time).\n\n"
    "The $brand Team\n"
)

BUILTIN_TEMPLATES = {
    "appointment_confirmation": (
        "Appointment Confirmed - $brand",
        CONFIRMATION_HTML,
        CONFIRMATION_TEXT,
    ),
    "appointment_reminder": (
        "Appointment Reminder ($reminder_minutes min) - $brand",
        REMINDER_HTML,
        REMINDER_TEXT,
    ),
}
