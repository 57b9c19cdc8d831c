# app/core/email_templates.py
from dataclasses import dataclass
from html import escape


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    text: str
    html: str


def _layout(heading: str, paragraphs: list[str], cta_label: str, cta_url: str) -> str:
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    button = (
        f'<p><a href="{escape(cta_url, quote=True)}" '
        'style="display:inline-block;padding:10px 18px;border-radius:8px;'
        'background:#18181b;color:#ffffff;text-decoration:none;">'
        f"{escape(cta_label)}</a></p>"
        if cta_url
        else ""
    )
    return (
        '<div style="font-family:sans-serif;max-width:480px;margin:0 auto;">'
        f"<h2>{escape(heading)}</h2>{body}{button}"
        '<p style="color:#71717a;font-size:12px;">'
        "You can turn these emails off in your notification settings.</p></div>"
    )


def checkin_reminder_email(
    client_name: str,
    period_label: str,
    due_label: str,
    submit_url: str,
) -> RenderedEmail:
    """Reminder that a check-in is due soon / overdue."""
    subject = f"Your check-in is {due_label}"
    text = (
        f"Hi {client_name},\n\n"
        f"Your check-in for {period_label} is {due_label}. "
        "Your coach is waiting to hear how things went.\n\n"
        f"Submit it here: {submit_url}\n"
    )
    html = _layout(
        subject,
        [
            f"Hi {escape(client_name)},",
            f"Your check-in for <strong>{escape(period_label)}</strong> is "
            f"{escape(due_label)}. Your coach is waiting to hear how things went.",
        ],
        "Submit check-in",
        submit_url,
    )
    return RenderedEmail(subject=subject, text=text, html=html)


def meal_plan_updated_email(
    client_name: str,
    week_label: str,
    view_url: str,
) -> RenderedEmail:
    subject = "Your meal plan was updated"
    text = (
        f"Hi {client_name},\n\n"
        f"Your coach updated your meal plan for the week of {week_label}.\n\n"
        f"View it here: {view_url}\n"
    )
    html = _layout(
        subject,
        [
            f"Hi {escape(client_name)},",
            f"Your coach updated your meal plan for the week of "
            f"<strong>{escape(week_label)}</strong>.",
        ],
        "View meal plan",
        view_url,
    )
    return RenderedEmail(subject=subject, text=text, html=html)
