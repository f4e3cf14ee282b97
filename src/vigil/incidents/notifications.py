"""
Email notifications for incidents, sent through the Resend API.

One email is sent per severity level, grouping every incident of that
severity together.
"""

import html
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import httpx

from .models import Incident, Severity

logger = logging.getLogger(__name__)


@dataclass
class EmailConfig:
    """Resend API configuration"""
    api_key: str
    from_email: str = "notifications@example.com"
    api_url: str = "https://api.resend.com"
    timeout: float = 30.0


@dataclass(frozen=True)
class NotificationOutcome:
    """Result of one send attempt"""
    success: bool
    error: Optional[str] = None


SEVERITY_COLORS = {
    Severity.CRITICAL: "#dc3545",
    Severity.HIGH: "#fd7e14",
    Severity.MEDIUM: "#ffc107",
    Severity.LOW: "#28a745",
}

DEFAULT_COLOR = "#6c757d"


def render_subject(severity: Severity, incident_count: int) -> str:
    """Subject line for a severity group."""
    plural = "s" if incident_count > 1 else ""
    return f"[{severity.value.upper()}] Security Incident Alert - {incident_count} incident{plural}"


def _render_list(values: Sequence[str]) -> str:
    if not values:
        return "N/A"
    return ", ".join(html.escape(value) for value in values)


def render_body(severity: Severity, incidents: Sequence[Incident]) -> str:
    """HTML body listing every incident of one severity."""
    color = SEVERITY_COLORS.get(severity, DEFAULT_COLOR)
    label = severity.value.upper()

    parts: List[str] = [
        "<html><head><style>",
        "body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }",
        f".header {{ background-color: {color}; color: white; padding: 20px; border-radius: 5px 5px 0 0; }}",
        ".content { padding: 20px; background-color: #f9f9f9; }",
        f".incident {{ background-color: white; margin: 15px 0; padding: 15px; border-left: 4px solid {color}; }}",
        ".field-label { font-weight: bold; color: #666; }",
        ".footer { padding: 20px; text-align: center; color: #666; font-size: 0.9em; }",
        "</style></head><body>",
        f'<div class="header"><h2>{label} Severity Security Incidents</h2>',
        f"<p>{len(incidents)} incident(s) detected</p></div>",
        '<div class="content">',
    ]

    for index, incident in enumerate(incidents, 1):
        parts.extend([
            '<div class="incident">',
            f"<h3>Incident #{index}: {html.escape(incident.incident_type)}</h3>",
            f'<p><span class="field-label">Timestamp:</span> {html.escape(incident.timestamp)}</p>',
            f'<p><span class="field-label">Affected Systems:</span> {_render_list(incident.affected_systems)}</p>',
            f'<p><span class="field-label">Description:</span> {html.escape(incident.description)}</p>',
            f'<p><span class="field-label">Stakeholders:</span> {_render_list(incident.stakeholders)}</p>',
            f'<p><span class="field-label">Source File:</span> {html.escape(incident.source_file)}</p>',
            "</div>",
        ])

    parts.extend([
        "</div>",
        '<div class="footer"><p>This is an automated security incident notification.</p></div>',
        "</body></html>",
    ])
    return "\n".join(parts)


class EmailService:
    """
    Sends incident notifications.

    Failures are reported in the returned NotificationOutcome rather than
    raised, so one failed severity does not stop the others.
    """

    def __init__(
        self,
        config: EmailConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        if not (config.api_key or "").strip():
            raise ValueError(
                "Resend API key is required. Set the RESEND_API_KEY environment variable."
            )
        self.config = config
        self._transport = transport

    async def send_notification(
        self,
        severity: Severity,
        incidents: Sequence[Incident],
        recipients: Sequence[str]
    ) -> NotificationOutcome:
        """
        Send one email for a group of incidents.

        Args:
            severity: Severity of the group
            incidents: Incidents to report
            recipients: Email addresses

        Returns:
            NotificationOutcome
        """
        if not incidents:
            return NotificationOutcome(success=True)

        if not recipients:
            return NotificationOutcome(success=False, error="No recipients specified")

        payload = {
            "from": self.config.from_email,
            "to": list(recipients),
            "subject": render_subject(severity, len(incidents)),
            "html": render_body(severity, incidents),
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout,
                transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.config.api_url.rstrip('/')}/emails",
                    headers={"Authorization": f"Bearer {self.config.api_key}"},
                    json=payload
                )
        except httpx.RequestError as e:
            logger.error(f"Sending {severity.value} notification failed: {e}")
            return NotificationOutcome(success=False, error=f"Request failed: {e}")

        if not response.is_success:
            error = self._error_message(response)
            logger.error(f"Resend rejected {severity.value} notification: {error}")
            return NotificationOutcome(success=False, error=error)

        logger.info(
            f"Sent {severity.value} notification for {len(incidents)} incident(s) "
            f"to {len(recipients)} recipient(s)"
        )
        return NotificationOutcome(success=True)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            data = None
        message = data.get("message") if isinstance(data, dict) else None
        return message or f"Resend API error ({response.status_code})"
