from flask_talisman import Talisman

# The API answers with JSON and serves uploaded feedback images. Nothing
# here renders HTML, so scripts, styles and frames are shut off entirely.
API_CSP = {
    "default-src": ["'none'"],
    # locally stored uploads, pasted data: URLs and S3/CDN image links
    "img-src":     ["'self'", "data:", "blob:", "https:"],
    "connect-src": ["'self'"],
    "frame-ancestors": ["'none'"],
    "base-uri":    ["'none'"],
    "form-action": ["'none'"],
}


def init_security(app):
    """
    Staging/production headers for the roadmap API: HTTPS redirect, HSTS and
    a CSP that only lets image responses load.
    """
    Talisman(
        app,
        content_security_policy=API_CSP,
        force_https=True,
        strict_transport_security=True,
        session_cookie_secure=True,
        frame_options="DENY",
        referrer_policy="no-referrer",
    )
