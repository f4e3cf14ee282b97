"""
Runtime settings for Vigil.

Values come from environment variables, which ``run.py`` loads from a
``.env`` file before the application starts.
"""

import os
from dataclasses import dataclass, field
from typing import List

from .github import GitHubConfig
from .incidents.notifications import EmailConfig
from .repository.scanner import DEFAULT_EXTENSIONS


@dataclass
class Settings:
    """Settings shared by every tool invocation"""
    github_token: str = ""
    github_api_url: str = "https://api.github.com"
    github_raw_host: str = "raw.githubusercontent.com"
    github_timeout: float = 30.0
    resend_api_key: str = ""
    resend_from_email: str = "notifications@example.com"
    default_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the environment."""
        return cls(
            github_token=os.getenv("GITHUB_TOKEN", "").strip(),
            github_api_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
            github_raw_host=os.getenv("GITHUB_RAW_HOST", "raw.githubusercontent.com"),
            github_timeout=float(os.getenv("GITHUB_TIMEOUT", "30")),
            resend_api_key=os.getenv("RESEND_API_KEY", "").strip(),
            resend_from_email=os.getenv("RESEND_FROM_EMAIL", "notifications@example.com"),
        )

    def github_config(self) -> GitHubConfig:
        return GitHubConfig(
            token=self.github_token,
            api_url=self.github_api_url,
            raw_host=self.github_raw_host,
            timeout=self.github_timeout
        )

    def email_config(self) -> EmailConfig:
        return EmailConfig(
            api_key=self.resend_api_key,
            from_email=self.resend_from_email
        )

    def missing_variables(self) -> List[str]:
        """Names of required variables that are not set."""
        required = {
            "GITHUB_TOKEN": self.github_token,
            "RESEND_API_KEY": self.resend_api_key,
        }
        return [name for name, value in required.items() if not value]
