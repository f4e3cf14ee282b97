"""
Incident pass-through, email notification and issue creation.
"""

from .models import Incident, Severity, SEVERITY_ORDER, empty_severity_template
from .extractor import format_content_for_extraction
from .notifications import EmailService, EmailConfig, NotificationOutcome, render_subject, render_body
from .issues import IssueCreator, IssueResult, render_issue_title, render_issue_body, DEFAULT_LABELS

__all__ = [
    "Incident",
    "Severity",
    "SEVERITY_ORDER",
    "empty_severity_template",
    "format_content_for_extraction",
    "EmailService",
    "EmailConfig",
    "NotificationOutcome",
    "render_subject",
    "render_body",
    "IssueCreator",
    "IssueResult",
    "render_issue_title",
    "render_issue_body",
    "DEFAULT_LABELS",
]
