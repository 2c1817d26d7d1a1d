"""Notification email content for contact submissions.

Values are plain text. Every caller-supplied value is HTML-escaped here,
when it is placed in an HTML body, whether or not it was sanitized first.
"""

import html

from contactflow.models.submission import ContactSubmission

FIELD_LABELS = (
    ("name", "Name"),
    ("email", "Email"),
    ("company", "Company"),
    ("phone", "Phone"),
    ("service", "Service"),
)


def _html_text(value: str) -> str:
    return html.escape(value, quote=True).replace("\n", "<br>")


def render_staff_notification(submission: ContactSubmission) -> tuple[str, str, str]:
    """Render the email sent to staff for a new submission.

    Returns:
        Tuple of (subject, body_text, body_html).
    """
    subject = f"New contact request from {submission.name}"

    text_lines = ["A new contact request was submitted.", ""]
    html_rows = []
    for field_name, label in FIELD_LABELS:
        value = getattr(submission, field_name)
        if not value:
            continue
        text_lines.append(f"{label}: {value}")
        html_rows.append(f"<tr><th align=\"left\">{label}</th><td>{_html_text(value)}</td></tr>")

    text_lines.extend(["", "Message:", submission.message])

    body_html = (
        "<h2>New contact request</h2>"
        f"<table>{''.join(html_rows)}</table>"
        f"<h3>Message</h3><p>{_html_text(submission.message)}</p>"
    )
    return subject, "\n".join(text_lines), body_html


def render_auto_reply(submission: ContactSubmission, support_email: str) -> tuple[str, str, str]:
    """Render the confirmation email sent to the submitter.

    Returns:
        Tuple of (subject, body_text, body_html).
    """
    subject = "We received your message"
    support = html.escape(support_email, quote=True)

    body_text = (
        f"Hi {submission.name},\n\n"
        "Thanks for reaching out. We have received your message and will get back "
        "to you within 24 hours.\n\n"
        f"If your request is urgent, contact us directly at {support_email}.\n"
    )
    body_html = (
        f"<p>Hi {_html_text(submission.name)},</p>"
        "<p>Thanks for reaching out. We have received your message and will get back "
        "to you within 24 hours.</p>"
        f"<p>If your request is urgent, contact us directly at "
        f"<a href=\"mailto:{support}\">{support}</a>.</p>"
    )
    return subject, body_text, body_html
