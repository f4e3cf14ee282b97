"""
Incident data types.

Incidents are assembled by the calling agent; Vigil only validates their
shape before routing them to email or issue creation.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Mapping


class Severity(str, Enum):
    """Incident severity, most severe first"""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


SEVERITY_ORDER = [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW]


@dataclass(frozen=True)
class Incident:
    """A security incident extracted by the caller"""
    severity: Severity
    incident_type: str
    timestamp: str  # ISO 8601
    description: str
    source_file: str
    affected_systems: List[str] = field(default_factory=list)
    stakeholders: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Incident":
        """
        Build an incident from tool input.

        Raises:
            ValueError: Missing fields or unknown severity
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Incident must be an object, got {type(data).__name__}")

        missing = [
            key for key in ("severity", "incident_type", "timestamp", "description", "source_file")
            if key not in data
        ]
        if missing:
            raise ValueError(f"Incident is missing fields: {', '.join(missing)}")

        try:
            severity = Severity(str(data["severity"]).lower())
        except ValueError:
            raise ValueError(
                f"Unknown severity '{data['severity']}'. "
                f"Expected one of: {', '.join(s.value for s in Severity)}"
            )

        return cls(
            severity=severity,
            incident_type=str(data["incident_type"]),
            timestamp=str(data["timestamp"]),
            description=str(data["description"]),
            source_file=str(data["source_file"]),
            affected_systems=[str(s) for s in data.get("affected_systems") or []],
            stakeholders=[str(s) for s in data.get("stakeholders") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


def empty_severity_template() -> Dict[str, List[Any]]:
    """Incidents-by-severity structure with every list empty."""
    return {severity.value: [] for severity in SEVERITY_ORDER}
