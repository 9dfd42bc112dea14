"""Controllers for the users resource."""

import uuid
from typing import cast

from src.api.routing import Controller, get, guard, middleware, post, response, validate
from src.resources.users.middleware import example
from src.resources.users.validation import CreateUser


@post("/users")
@guard()
@response(201)
@validate(CreateUser)
@middleware(example("Example arg setting header"))
class Create(Controller):
    """Create a user from a validated body."""

    async def handle(self) -> dict[str, str]:
        user = cast("CreateUser", self.request.validated)
        return {"id": str(uuid.uuid4()), "name": user.name, "email": str(user.email)}


@get("/users/:id")
class Get(Controller):
    """Return the user identified by the path parameter."""

    async def handle(self) -> dict[str, str]:
        user_id = self.request.params["id"]
        return {
            "id": user_id,
            "name": f"user-{user_id}",
            "email": f"user-{user_id}@example.com",
        }
