"""Jinja2 HTML bodies for each template type."""

from typing import Any

from jinja2 import StrictUndefined
from jinja2.sandbox import SandboxedEnvironment

from shared.enums import TemplateType

_env = SandboxedEnvironment(
    autoescape=True,
    undefined=StrictUndefined,
    keep_trailing_newline=False,
)

_LAYOUT = """\
<!DOCTYPE html>
<html>
  <body style="font-family: Arial, sans-serif; color: #1f2937;">
    <div style="max-width: 600px; margin: 0 auto; padding: 24px;">
      {body}
      <p style="color: #6b7280; font-size: 12px;">
        This is an automated message. Please do not reply.
      </p>
    </div>
  </body>
</html>"""

_BODIES: dict[TemplateType, str] = {
    TemplateType.REGISTRATION_APPROVED: """
      <h2>Registration Approved</h2>
      <p>Hello {{ name }},</p>
      <p>Your registration for <strong>{{ event_name }}</strong> has been approved.</p>
      <p>Use these credentials to sign in:</p>
      <ul>
        <li>Username: <code>{{ username }}</code></li>
        <li>Password: <code>{{ password }}</code></li>
      </ul>
      <p>Please change your password after your first login.</p>""",
    TemplateType.CREDENTIALS_DISTRIBUTION: """
      <h2>Your Credentials</h2>
      <p>Hello {{ name }},</p>
      <p>Here are your login credentials for <strong>{{ event_name }}</strong>:</p>
      <ul>
        <li>Username: <code>{{ username }}</code></li>
        <li>Password: <code>{{ password }}</code></li>
      </ul>
      <p>Keep them safe and do not share them with anyone.</p>""",
    TemplateType.TEST_START_REMINDER: """
      <h2>Test Starting Soon</h2>
      <p>Hello {{ name }},</p>
      <p><strong>{{ round_name }}</strong> of <strong>{{ event_name }}</strong>
         starts at {{ start_time }}.</p>
      <p>Make sure you are logged in a few minutes early.</p>""",
    TemplateType.RESULT_PUBLISHED: """
      <h2>Results Published</h2>
      <p>Hello {{ name }},</p>
      <p>The results for <strong>{{ event_name }}</strong> are out.</p>
      <ul>
        <li>Score: {{ score }}</li>
        <li>Rank: {{ rank }}</li>
      </ul>""",
    TemplateType.ADMIN_NOTIFICATION: """
      <h2>Email Activity</h2>
      <p>A <strong>{{ email_type }}</strong> email was processed.</p>
      <ul>
        <li>Recipient: {{ recipient_name }} &lt;{{ recipient_email }}&gt;</li>
        <li>Event: {{ event_name }}</li>
      </ul>
      {% if details %}
      <table cellpadding="4" style="border-collapse: collapse;">
        {% for key, value in details %}
        <tr><td><strong>{{ key }}</strong></td><td>{{ value }}</td></tr>
        {% endfor %}
      </table>
      {% endif %}""",
}

_TEMPLATES = {
    template_type: _env.from_string(_LAYOUT.replace("{body}", body))
    for template_type, body in _BODIES.items()
}


def render(template_type: TemplateType, **context: Any) -> str:
    """Render the HTML body for *template_type*.

    Raises jinja2.UndefinedError when a variable the template uses is
    missing from *context*.
    """
    return _TEMPLATES[TemplateType(template_type)].render(**context)
