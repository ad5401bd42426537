"""Security headers: X-Frame-Options, X-Content-Type-Options, Referrer-Policy.

Written onto every response writer before dispatch, so a controller or
a matched mock can still replace any of them. Nothing ever sets
``X-Powered-By``.
"""

from nightframe.config import SecurityHeadersConfig
from nightframe.http.response import ResponseWriter


def apply_security_headers(
    response: ResponseWriter, config: SecurityHeadersConfig | None
) -> ResponseWriter:
    """Set the configured security headers on *response*. ``None`` sets nothing."""
    if config is None:
        return response
    return (
        response.set_header("X-Frame-Options", config.x_frame_options)
        .set_header("X-Content-Type-Options", config.x_content_type_options)
        .set_header("Referrer-Policy", config.referrer_policy)
    )
