from pydantic import BaseModel, Field

from rental_reservations.models.enums import ActorRole


class Actor(BaseModel):
    """
    Identity of the caller performing a lifecycle operation.

    Supplied by the upstream authentication layer; the reservation core only
    uses it for audit attribution and owner scoping.
    """

    id: str = Field(..., min_length=1, description="Authenticated user ID")
    role: ActorRole = Field(ActorRole.MANAGER, description="Role of the authenticated user")
