"""Shared route dependencies."""

from typing import Annotated

from fastapi import Depends, Request

from tailorshop.core.rbac import CurrentUser
from tailorshop.services.notification_service import OrderNotifier, get_order_notifier
from tailorshop.services.post_commit import Actor


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def get_actor(request: Request, current_user: CurrentUser) -> Actor:
    """The authenticated user as recorded on movements and audit entries."""
    return Actor(
        user_id=current_user.user_id,
        name=current_user.full_name,
        ip_address=client_ip(request),
    )


CurrentActor = Annotated[Actor, Depends(get_actor)]
Notifier = Annotated[OrderNotifier, Depends(get_order_notifier)]
