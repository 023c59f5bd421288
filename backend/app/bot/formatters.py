"""Notification message formatting (Telegram HTML subset)."""

import re

from app.models.job_posting import JobPosting

TAG_PATTERN = re.compile(r"<[^>]*>")
WHITESPACE_PATTERN = re.compile(r"\s+")


def escape_html(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#039;")
    )


def strip_html(html: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", TAG_PATTERN.sub(" ", html)).strip()


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."


def format_job_message(job: JobPosting, description_limit: int = 220) -> str:
    """Short summary: bold headline, plain-text teaser, link."""
    company_part = f" <i>{escape_html(job.company.name)}.</i>" if job.company and job.company.name else ""
    salary_part = f" {escape_html(job.salary)}" if job.salary else ""
    short_text = truncate_text(strip_html(job.description or ""), description_limit)
    url = escape_html(job.url)

    return (
        f"<b>{escape_html(job.title)}.{company_part}{salary_part}</b>\n"
        f"\n"
        f"{escape_html(short_text)}\n"
        f'<a href="{url}">{url}</a>'
    )
