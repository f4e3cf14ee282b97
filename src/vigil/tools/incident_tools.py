"""
Incident tool handlers.

These tools work on data the agent extracts itself:
- Format parsed content for extraction (pass-through, no extraction)
- Send email notifications grouped by severity
- Create GitHub issues for high severity incidents
"""

import logging
from typing import Dict, Any, List, Optional

from .base import BaseToolHandler, ToolContext, ToolDefinition, ToolResponse, ToolCategory, parse_repository
from ..incidents import (
    EmailService,
    Incident,
    IssueCreator,
    SEVERITY_ORDER,
    Severity,
    empty_severity_template,
    format_content_for_extraction,
)
from ..incidents.issues import DEFAULT_LABELS

logger = logging.getLogger(__name__)


INCIDENT_SCHEMA = {
    "type": "object",
    "properties": {
        "severity": {"type": "string", "enum": [s.value for s in SEVERITY_ORDER]},
        "incident_type": {"type": "string"},
        "affected_systems": {"type": "array", "items": {"type": "string"}},
        "timestamp": {"type": "string", "description": "ISO 8601 date string"},
        "description": {"type": "string"},
        "stakeholders": {"type": "array", "items": {"type": "string"}},
        "source_file": {"type": "string"}
    },
    "required": ["severity", "incident_type", "timestamp", "description", "source_file"]
}


def _parse_incidents(values: Any, field_name: str) -> List[Incident]:
    if not isinstance(values, list):
        raise ValueError(f"{field_name} must be a list of incidents")
    return [Incident.from_dict(value) for value in values]


class ExtractIncidentDataHandler(BaseToolHandler):
    """Tool that hands parsed content back to the agent for extraction"""

    @property
    def name(self) -> str:
        return "extract_incident_data"

    @property
    def category(self) -> ToolCategory:
        return ToolCategory.INCIDENT

    def get_definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=(
                "Format parsed document content for incident extraction. This tool does NOT "
                "extract anything: it returns formatted_content and an empty incidents template "
                "grouped by severity (critical, high, medium, low). YOU must read "
                "formatted_content, extract each incident (severity, incident_type, "
                "affected_systems, timestamp as ISO 8601, description, stakeholders, source_file) "
                "and return the populated structure in your response."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "parsed_content": {
                        "description": "The content field of a parse_document result (any type)"
                    },
                    "source_file": {
                        "type": "string",
                        "description": "File path or identifier the content came from"
                    },
                    "metadata": {
                        "type": "object",
                        "description": "Optional metadata from parse_document (Markdown preamble)"
                    }
                },
                "required": ["parsed_content", "source_file"]
            },
            category=self.category
        )

    def validate_input(self, input_data: Dict[str, Any]) -> None:
        if "parsed_content" not in input_data:
            raise ValueError("Missing required input: parsed_content")
        self._require(input_data, "source_file")

        metadata = input_data.get("metadata")
        if metadata is not None and not isinstance(metadata, dict):
            raise ValueError("metadata must be an object")

    async def execute(self, input_data: Dict[str, Any], context: ToolContext) -> ToolResponse:
        """Execute: Format content, return the empty template"""
        formatted = format_content_for_extraction(
            input_data.get("parsed_content"),
            input_data.get("metadata"),
            str(input_data["source_file"])
        )

        return self._success_response({
            "formatted_content": formatted,
            "incidents": empty_severity_template()
        })


class SendNotificationHandler(BaseToolHandler):
    """Tool to email incidents grouped by severity"""

    @property
    def name(self) -> str:
        return "send_notification"

    @property
    def category(self) -> ToolCategory:
        return ToolCategory.NOTIFICATION

    def get_definition(self) -> ToolDefinition:
        email_list = {"type": "array", "items": {"type": "string", "format": "email"}}
        return ToolDefinition(
            name=self.name,
            description=(
                "Send email notifications for incidents, one email per severity level. "
                "Severity-specific recipients take precedence; default_email is used for "
                "severities without their own list. At least one address is required."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "incidents": {
                        "type": "object",
                        "properties": {
                            severity.value: {"type": "array", "items": INCIDENT_SCHEMA}
                            for severity in SEVERITY_ORDER
                        },
                        "description": "Incidents grouped by severity, as returned by your extraction"
                    },
                    "emails": {
                        "type": "object",
                        "properties": {
                            **{severity.value: email_list for severity in SEVERITY_ORDER},
                            "default_email": {"type": "string", "format": "email"}
                        },
                        "description": "Recipients per severity and/or a default_email"
                    }
                },
                "required": ["incidents", "emails"]
            },
            category=self.category
        )

    def validate_input(self, input_data: Dict[str, Any]) -> None:
        incidents = input_data.get("incidents")
        emails = input_data.get("emails")
        if not isinstance(incidents, dict):
            raise ValueError("incidents must be an object grouped by severity")
        if not isinstance(emails, dict):
            raise ValueError("emails must be an object")

        for severity in SEVERITY_ORDER:
            _parse_incidents(incidents.get(severity.value, []), f"incidents.{severity.value}")

    @staticmethod
    def _recipients(emails: Dict[str, Any], severity: Severity) -> List[str]:
        specific = emails.get(severity.value)
        if specific:
            return list(specific)
        if emails.get("default_email"):
            return [emails["default_email"]]
        return []

    async def execute(self, input_data: Dict[str, Any], context: ToolContext) -> ToolResponse:
        """Execute: Send one email per severity"""
        try:
            emails = input_data["emails"]
            has_any_email = emails.get("default_email") or any(
                emails.get(severity.value) for severity in SEVERITY_ORDER
            )
            if not has_any_email:
                raise ValueError(
                    "Please provide at least one email address. Use default_email for all "
                    "severities, or specify emails for specific severity levels."
                )

            service = EmailService(context.settings.email_config(), transport=context.transport)

            results = []
            sent = failed = 0

            for severity in SEVERITY_ORDER:
                incidents = _parse_incidents(
                    input_data["incidents"].get(severity.value, []),
                    f"incidents.{severity.value}"
                )
                if not incidents:
                    continue

                recipients = self._recipients(emails, severity)
                result: Dict[str, Any] = {
                    "severity": severity.value,
                    "recipients": recipients,
                    "incident_count": len(incidents),
                }

                if not recipients:
                    result.update(status="failed", error="No email recipients specified for this severity level")
                    failed += 1
                else:
                    outcome = await service.send_notification(severity, incidents, recipients)
                    if outcome.success:
                        result["status"] = "sent"
                        sent += 1
                    else:
                        result.update(status="failed", error=outcome.error)
                        failed += 1

                results.append(result)

            logger.info(f"Notifications: {sent} sent, {failed} failed", extra={"tool": self.name})
            return self._success_response(
                {"sent": sent, "failed": failed, "results": results},
                metadata={"summary": f"Sent {sent} notification(s), {failed} failed."}
            )

        except Exception as e:
            return self._error_response(e)


class CreateGitHubIssuesHandler(BaseToolHandler):
    """Tool to open one GitHub issue per high severity incident"""

    @property
    def name(self) -> str:
        return "create_github_issues"

    @property
    def category(self) -> ToolCategory:
        return ToolCategory.NOTIFICATION

    def get_definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=(
                "Create GitHub issues for high severity incidents, one issue per incident. "
                "Incidents of other severities are ignored."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "repository": {
                        "type": "string",
                        "description": 'Repository in format "owner/repo" where issues are created'
                    },
                    "incidents": {
                        "type": "array",
                        "items": INCIDENT_SCHEMA,
                        "description": "Incidents; only severity 'high' is processed"
                    },
                    "labels": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": f"Issue labels (default: {DEFAULT_LABELS})"
                    }
                },
                "required": ["repository", "incidents"]
            },
            category=self.category
        )

    def validate_input(self, input_data: Dict[str, Any]) -> None:
        self._require(input_data, "repository")
        parse_repository(input_data["repository"])
        _parse_incidents(input_data.get("incidents"), "incidents")

        labels = input_data.get("labels")
        if labels is not None and not (isinstance(labels, list) and all(isinstance(l, str) for l in labels)):
            raise ValueError("labels must be a list of strings")

    async def execute(self, input_data: Dict[str, Any], context: ToolContext) -> ToolResponse:
        """Execute: Create issues"""
        try:
            owner, repo = parse_repository(input_data["repository"])
            incidents = _parse_incidents(input_data["incidents"], "incidents")
            labels: Optional[List[str]] = input_data.get("labels")

            if not any(incident.severity == Severity.HIGH for incident in incidents):
                return self._success_response({"created": 0, "failed": 0, "results": []})

            async with context.github_client() as github:
                results = await IssueCreator(github).create_issues(owner, repo, incidents, labels)

            created = sum(1 for result in results if result.status == "created")
            return self._success_response(
                {
                    "created": created,
                    "failed": len(results) - created,
                    "results": [result.to_dict() for result in results]
                },
                metadata={"repository": f"{owner}/{repo}"}
            )

        except Exception as e:
            return self._error_response(e)
