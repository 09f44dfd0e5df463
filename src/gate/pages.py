"""HTML pages served by the gate when a request is turned away."""

from html import escape

_STYLE = """
body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
       background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); margin: 0;
       min-height: 100vh; display: flex; align-items: center; justify-content: center; }
.container { background: white; padding: 2rem; border-radius: 12px; max-width: 500px;
             margin: 1rem; text-align: center; box-shadow: 0 10px 30px rgba(0,0,0,0.1); }
h1 { color: #333; }
p { color: #666; line-height: 1.6; }
.reason { background: #f8f9fa; padding: 1rem; border-radius: 8px; color: #dc3545;
          border-left: 4px solid #dc3545; margin: 1rem 0; }
.btn { display: inline-block; padding: 0.75rem 1.5rem; border-radius: 6px; margin: 0.25rem;
       text-decoration: none; font-weight: 500; }
.btn-primary { background: #667eea; color: white; }
.btn-secondary { background: #e2e8f0; color: #4a5568; }
"""


def _page(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)}</title>
    <style>{_STYLE}</style>
</head>
<body>
    <div class="container">
{body}
    </div>
</body>
</html>"""


def invalid_host_page() -> str:
    return _page(
        "Invalid subdomain configuration",
        "        <h1>Invalid subdomain configuration</h1>\n"
        "        <p>This host is not configured as a protected resource.</p>",
    )


def access_denied_page(reason: str, resource_name: str, login_url: str, main_site_url: str) -> str:
    """Denial page used for both missing authentication (401) and missing access (403)."""
    return _page(
        f"Access Denied - {resource_name}",
        f"""        <h1>Access Denied</h1>
        <p>You don't have permission to access <strong>{escape(resource_name)}</strong>.</p>
        <div class="reason"><strong>Reason:</strong> {escape(reason)}</div>
        <p>If you believe you should have access to this resource, please contact your
        administrator or request access through the main site.</p>
        <a href="{escape(login_url)}" class="btn btn-primary">Sign In</a>
        <a href="{escape(main_site_url)}" class="btn btn-secondary">Main Site</a>""",
    )


def service_unavailable_page(main_site_url: str) -> str:
    return _page(
        "Authentication Service Unavailable",
        f"""        <h1>Authentication Service Unavailable</h1>
        <p>We're experiencing technical difficulties. Please try again in a few moments.</p>
        <a href="{escape(main_site_url)}" class="btn btn-secondary">Return to Main Site</a>""",
    )
