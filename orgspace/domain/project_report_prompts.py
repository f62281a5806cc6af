"""
Project Status Report Prompt Builder.

Constructs the prompt, system instruction and local fallback text for
project report generation. Separated from the LLM client to enable prompt
versioning and testing. All three are deterministic for a given project.
"""
from datetime import datetime

from orgspace.models.database.types import as_utc

SYSTEM_INSTRUCTION = "You generate practical project status reports for internal product teams."

NO_DESCRIPTION_PROMPT = "None provided"
NO_DESCRIPTION_REPORT = "No project description provided yet."


def _iso(value: datetime) -> str:
    return as_utc(value).isoformat().replace("+00:00", "Z")


def build_project_report_prompt(
    name: str,
    description: str | None,
    created_at: datetime,
    updated_at: datetime,
) -> str:
    """User prompt describing the project."""
    lines = [
        "Generate a concise project status report for an internal SaaS team.",
        "Use clear sections and practical next steps.",
        "",
        f"Project name: {name}",
        f"Project description: {description or NO_DESCRIPTION_PROMPT}",
        f"Created at: {_iso(created_at)}",
        f"Updated at: {_iso(updated_at)}",
    ]
    return "\n".join(lines)


def build_fallback_report(
    name: str,
    description: str | None,
    updated_at: datetime,
) -> str:
    """Report text used when no provider is configured or fallback is forced."""
    summary = (description or "").strip() or NO_DESCRIPTION_REPORT
    lines = [
        f"Project Status Report: {name}",
        "",
        "Current Summary",
        summary,
        "",
        "Status Assessment",
        "- Scope is defined at a high level and ready for team review.",
        "- Recommended next step: confirm owners, milestones, and delivery date.",
        f"- Last project update recorded: {_iso(updated_at)}.",
        "",
        "Suggested Immediate Actions",
        "1. Confirm success criteria for the next milestone.",
        "2. Break work into 2-5 concrete deliverables.",
        "3. Track risks/blockers weekly and update status notes.",
    ]
    return "\n".join(lines)
