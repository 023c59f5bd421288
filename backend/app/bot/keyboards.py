"""Inline keyboards attached to bot messages."""

from app.models.job_posting import JobPosting


def job_keyboard(job: JobPosting, webapp_url: str) -> dict:
    """Details (opens the web app on the job) and a link to the original posting."""
    return {
        "inline_keyboard": [[
            {"text": "📄 Details", "web_app": {"url": f"{webapp_url.rstrip('/')}/#/job/{job.id}"}},
            {"text": "🔗 Dou", "url": job.url},
        ]]
    }


def settings_keyboard(webapp_url: str) -> dict:
    return {
        "inline_keyboard": [[
            {"text": "⚙️ Manage Subscriptions", "web_app": {"url": f"{webapp_url.rstrip('/')}/#/settings"}},
        ]]
    }
