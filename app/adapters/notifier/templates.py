"""Plain-text and HTML bodies for submission notification emails.

Every user-controlled value is HTML-escaped before it reaches the HTML body.
"""

from __future__ import annotations

from html import escape

from app.schemas.submission import Submission

FOOTER = "Sent by Form Intake API"

_ROW_TEMPLATE = (
    '<tr>'
    '<td style="padding: 12px; border-bottom: 1px solid #e0e0e0; font-weight: 600; color: #333;">{key}</td>'
    '<td style="padding: 12px; border-bottom: 1px solid #e0e0e0; color: #666;">{value}</td>'
    '</tr>'
)


def build_subject(submission: Submission) -> str:
    return f"New Form Submission: {submission.form_id}"


def _format_score(submission: Submission) -> str | None:
    score = submission.metadata.spam_score
    return f"{score:.2f}" if score else None


def render_text(submission: Submission) -> str:
    """Render the plain-text email body."""
    lines = [
        "New Form Submission",
        "===================",
        "",
        f"Form ID: {submission.form_id}",
        f"Submission ID: {submission.id}",
        f"Timestamp: {submission.metadata.timestamp}",
        f"IP Address: {submission.metadata.ip}",
    ]
    score = _format_score(submission)
    if score:
        lines.append(f"Spam Score: {score}")
    lines += ["", "Form Data", "---------"]
    lines += [f"{key}: {value}" for key, value in submission.data.items()]
    lines += ["", "-" * 48, FOOTER]
    return "\n".join(lines)


def render_html(submission: Submission) -> str:
    """Render the HTML email body."""
    rows = "".join(
        _ROW_TEMPLATE.format(key=escape(str(key)), value=escape(str(value)))
        for key, value in submission.data.items()
    )
    score = _format_score(submission)
    score_line = f"<strong>Spam Score:</strong> {score}<br>" if score else ""

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>New Form Submission</title>
</head>
<body style="margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background-color: #f5f5f5;">
  <table width="100%" cellpadding="0" cellspacing="0" style="background-color: #f5f5f5; padding: 40px 20px;">
    <tr>
      <td align="center">
        <table width="600" cellpadding="0" cellspacing="0" style="background-color: #ffffff; border-radius: 8px;">
          <tr>
            <td style="padding: 30px; background: #4f46e5; border-radius: 8px 8px 0 0;">
              <h1 style="margin: 0; color: #ffffff; font-size: 24px;">New Form Submission</h1>
              <p style="margin: 8px 0 0 0; color: #e0e7ff; font-size: 14px;">Form ID: {escape(submission.form_id)}</p>
            </td>
          </tr>
          <tr>
            <td style="padding: 20px 30px; color: #666; font-size: 14px;">
              <strong>Submission ID:</strong> {escape(submission.id)}<br>
              <strong>Timestamp:</strong> {escape(submission.metadata.timestamp)}<br>
              <strong>IP Address:</strong> {escape(submission.metadata.ip)}<br>
              {score_line}
            </td>
          </tr>
          <tr>
            <td style="padding: 0 30px 30px 30px;">
              <h2 style="margin: 0 0 16px 0; color: #333; font-size: 18px;">Form Data</h2>
              <table width="100%" cellpadding="0" cellspacing="0" style="border: 1px solid #e0e0e0;">{rows}</table>
            </td>
          </tr>
          <tr>
            <td style="padding: 20px 30px; background-color: #f9f9f9; text-align: center; color: #999; font-size: 12px;">{FOOTER}</td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""
