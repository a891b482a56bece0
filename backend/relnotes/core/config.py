"""
Release notes generator — Configuration
Loads .env automatically, then reads all settings from environment variables.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(_env_path)


@dataclass(frozen=True)
class IssueTrackerConfig:
    """Where issues and their release note attachments live."""
    issue_prefix: str
    browse_url: str
    attachment_url: str


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""
    product_name: str
    tracker: IssueTrackerConfig
    fetch_timeout: float
    fetch_concurrency: int


def _load_config() -> AppConfig:
    return AppConfig(
        product_name=os.getenv("RELNOTES_PRODUCT_NAME", "Derby"),
        tracker=IssueTrackerConfig(
            issue_prefix=os.getenv("RELNOTES_ISSUE_PREFIX", "DERBY-"),
            browse_url=os.getenv(
                "RELNOTES_JIRA_BROWSE_URL",
                "https://issues.apache.org/jira/browse/{issue_id}",
            ),
            attachment_url=os.getenv(
                "RELNOTES_ATTACHMENT_URL",
                "https://issues.apache.org/jira/secure/attachment/{attachment_id}/releaseNote.html",
            ),
        ),
        fetch_timeout=float(os.getenv("RELNOTES_FETCH_TIMEOUT", "30.0")),
        fetch_concurrency=int(os.getenv("RELNOTES_FETCH_CONCURRENCY", "1")),
    )


def _validate_config(cfg: AppConfig) -> None:
    """Fail fast on settings the pipeline cannot run with."""
    problems: list[str] = []
    if not cfg.product_name:
        problems.append("RELNOTES_PRODUCT_NAME must not be empty")
    if not cfg.tracker.issue_prefix:
        problems.append("RELNOTES_ISSUE_PREFIX must not be empty")
    if "{issue_id}" not in cfg.tracker.browse_url:
        problems.append("RELNOTES_JIRA_BROWSE_URL must contain {issue_id}")
    if "{attachment_id}" not in cfg.tracker.attachment_url:
        problems.append("RELNOTES_ATTACHMENT_URL must contain {attachment_id}")
    if cfg.fetch_timeout <= 0:
        problems.append("RELNOTES_FETCH_TIMEOUT must be positive")
    if cfg.fetch_concurrency < 1:
        problems.append("RELNOTES_FETCH_CONCURRENCY must be at least 1")
    if problems:
        print(
            f"\n  ERROR: Invalid configuration: {'; '.join(problems)}\n"
            f"  Check your environment or backend/.env.\n",
            file=sys.stderr,
        )
        sys.exit(1)


settings = _load_config()
_validate_config(settings)
