"""Optional base class for controllers.

Subclassing is not required. Any class whose constructor accepts
``(request, response, next)`` (or nothing) can be a controller. The base
class stores the three per-request objects and adds template rendering.
"""

from typing import TYPE_CHECKING, Any

from nightframe.templating import render_template

if TYPE_CHECKING:
    from nightframe.config import AppConfig
    from nightframe.http.request import Request
    from nightframe.http.response import ResponseWriter
    from nightframe.server.lifecycle import Next


class Controller:
    """Base controller.

    Usage::

        # routes/users.py
        from nightframe import Controller

        class Users(Controller):
            routes = {"get /active": "list_active"}

            async def get(self, request, response, next):
                return {"users": []}

            async def list_active(self, request, response, next):
                return self.render("users/active.html", users=[])
    """

    # Bound per controller type when the route table is built
    settings: "AppConfig"

    # Explicit identifier → method name table (e.g. {"post ^/hooks/stripe": "hook"})
    routes: dict[str, str] = {}

    def __init__(self, request: "Request", response: "ResponseWriter", next: "Next") -> None:
        self.request = request
        self.response = response
        self.next = next

    def render(self, template_name: str, /, **context: Any) -> str:
        """Render a template from ``settings.template_dir`` with kida."""
        return render_template(
            template_name,
            context,
            template_dir=self.settings.template_dir,
            autoescape=self.settings.autoescape,
        )
