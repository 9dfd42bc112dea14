"""Application resources and the static list of routed controllers.

Every controller served by the application must be listed in ``ROUTES``;
``create_app`` registers exactly these, in this order.
"""

from src.api.routing import Controller
from src.resources import users

ROUTES: list[type[Controller]] = [
    users.Create,
    users.Get,
]
