"""HTML bodies for outbound emails."""

import html
from datetime import datetime

# Shared email styles
_BODY_STYLE = (
    "font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; "
    "line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;"
)
_BUTTON_STYLE = (
    "background-color: #2563eb; color: white; padding: 12px 24px; "
    "text-decoration: none; border-radius: 6px; display: inline-block; font-weight: 500;"
)
_LINK_STYLE = "color: #2563eb; word-break: break-all;"
_MUTED_STYLE = "color: #666; font-size: 14px;"
_QUOTE_STYLE = "background: #f3f4f6; border-left: 4px solid #2563eb; padding: 12px 16px;"


def _page(title: str, body: str, color: str = "#2563eb") -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="{_BODY_STYLE}">
    <h1 style="color: {color}; margin-bottom: 24px;">{title}</h1>
{body}
</body>
</html>"""


def _action(url: str, label: str) -> str:
    return f"""    <p style="margin: 32px 0;">
        <a href="{url}" style="{_BUTTON_STYLE}">{label}</a>
    </p>
    <p style="{_MUTED_STYLE}">
        Or copy and paste this link into your browser:<br>
        <a href="{url}" style="{_LINK_STYLE}">{url}</a>
    </p>"""


def verification_email(user_name: str, verification_url: str) -> str:
    body = f"""    <p>Hi {html.escape(user_name)},</p>
    <p>Thanks for signing up! Please verify your email address by clicking below:</p>
{_action(verification_url, "Verify Email")}
    <p style="{_MUTED_STYLE} margin-top: 32px;">
        This link will expire in 24 hours. If you didn't create an account,
        you can safely ignore this email.
    </p>"""
    return _page("Verify your email", body)


def welcome_email(user_name: str, app_name: str, app_url: str) -> str:
    safe_app_name = html.escape(app_name)
    body = f"""    <p>Hi {html.escape(user_name)},</p>
    <p>Your account is ready. You can sign in at any time from
    <a href="{app_url}" style="{_LINK_STYLE}">{app_url}</a>.</p>
    <p>If you have any questions, feel free to reach out to our support team.</p>
    <p style="margin-top: 32px;">
        Best regards,<br>
        The {safe_app_name} Team
    </p>"""
    return _page(f"Welcome to {safe_app_name}!", body)


def password_reset_email(user_name: str, reset_url: str) -> str:
    body = f"""    <p>Hi {html.escape(user_name)},</p>
    <p>We received a request to reset your password. Click below to choose a new one:</p>
{_action(reset_url, "Reset Password")}
    <p style="{_MUTED_STYLE} margin-top: 32px;">
        This link will expire in 1 hour. If you didn't request a reset,
        you can safely ignore this email; your password will not change.
    </p>"""
    return _page("Reset your password", body)


def password_reset_confirmation_email(user_name: str) -> str:
    body = f"""    <p>Hi {html.escape(user_name)},</p>
    <p>Your password was changed and all other sessions were signed out.</p>
    <p style="{_MUTED_STYLE}">
        If you did not make this change, reset your password immediately
        and contact support.
    </p>"""
    return _page("Your password was changed", body)


def access_request_admin_email(
    account_name: str,
    account_email: str,
    resource_name: str,
    reason: str | None,
    review_url: str,
) -> str:
    reason_html = (
        f'<p style="{_QUOTE_STYLE}">{html.escape(reason)}</p>'
        if reason
        else f'<p style="{_MUTED_STYLE}">No reason given.</p>'
    )
    body = f"""    <p><strong>{html.escape(account_name)}</strong> ({html.escape(account_email)})
    requested access to <strong>{html.escape(resource_name)}</strong>.</p>
    {reason_html}
{_action(review_url, "Review Requests")}"""
    return _page("New access request", body)


def access_decision_email(
    user_name: str,
    resource_name: str,
    approved: bool,
    admin_message: str | None,
    expires_at: datetime | None,
    resource_url: str,
) -> str:
    safe_resource = html.escape(resource_name)
    message_html = (
        f'<p style="{_QUOTE_STYLE}">{html.escape(admin_message)}</p>' if admin_message else ""
    )
    if approved:
        expiry_html = (
            f'<p style="{_MUTED_STYLE}">Access expires on {expires_at:%Y-%m-%d %H:%M} UTC.</p>'
            if expires_at
            else ""
        )
        body = f"""    <p>Hi {html.escape(user_name)},</p>
    <p>Your request for <strong>{safe_resource}</strong> was approved.</p>
    {message_html}
    {expiry_html}
{_action(resource_url, "Open Dashboard")}"""
        return _page("Access approved", body, color="#16a34a")

    body = f"""    <p>Hi {html.escape(user_name)},</p>
    <p>Your request for <strong>{safe_resource}</strong> was not approved.</p>
    {message_html}
    <p style="{_MUTED_STYLE}">You may submit a new request from your dashboard.</p>"""
    return _page("Access request update", body, color="#dc2626")


def contact_form_email(name: str, email: str, subject: str, message: str) -> str:
    body = f"""    <p><strong>From:</strong> {html.escape(name)} ({html.escape(email)})</p>
    <p><strong>Subject:</strong> {html.escape(subject)}</p>
    <p style="{_QUOTE_STYLE} white-space: pre-wrap;">{html.escape(message)}</p>"""
    return _page("New contact form message", body)
