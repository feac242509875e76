"""List View Routes — the rendering boundary: current view, status flags, intents.

Invariants:
    - Every intent responds with {accepted, view}; Busy ⇒ accepted=false, status 200
    - Fetch failures are NOT HTTP errors here: they surface as view.error
    - Invalid order input ⇒ 400 (InvalidOrderError via global handler, or pydantic)
    - DELETE is idempotent: unknown ids answer 200 with accepted=false

Design Decisions:
    - Controller lives on app.state (one per process), injected via Depends so
      tests override it without touching the lifespan
"""

import logging

from fastapi import APIRouter, Depends, Request

from listsync.schemas.list_view import (
    ErrorBody,
    IntentResponse,
    ListViewResponse,
    OrderBody,
    OrderRequest,
)
from listsync.services.list_controller import ListController, ListView

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/list", tags=["list"])


def get_controller(request: Request) -> ListController:
    return request.app.state.controller


def to_view_response(view: ListView) -> ListViewResponse:
    return ListViewResponse(
        items=[dict(item) for item in view.items],
        status=view.status.value,
        is_loading=view.is_loading,
        can_load_more=view.can_load_more,
        error=(
            ErrorBody(
                code=view.error.code,
                message=view.error.message,
                retryable=view.error.retryable,
            )
            if view.error else None
        ),
        order=OrderBody(**view.order.as_dict()),
        total_count=view.total_count,
    )


def _intent(accepted: bool, controller: ListController) -> IntentResponse:
    return IntentResponse(
        accepted=accepted, view=to_view_response(controller.snapshot()),
    )


@router.get("", response_model=ListViewResponse)
async def get_view(controller: ListController = Depends(get_controller)):
    return to_view_response(controller.snapshot())


@router.put("/order", response_model=IntentResponse)
async def change_order(
    body: OrderRequest, controller: ListController = Depends(get_controller),
):
    if body.preset is not None:
        accepted = await controller.set_order_preset(body.preset)
    else:
        accepted = await controller.set_order(body.key, body.direction)
    return _intent(accepted, controller)


@router.post("/load-more", response_model=IntentResponse)
async def load_more(controller: ListController = Depends(get_controller)):
    return _intent(await controller.load_more(), controller)


@router.post("/retry", response_model=IntentResponse)
async def retry(controller: ListController = Depends(get_controller)):
    return _intent(await controller.retry(), controller)


@router.delete("/items/{item_id}", response_model=IntentResponse)
async def delete_item(
    item_id: str, controller: ListController = Depends(get_controller),
):
    return _intent(controller.delete(item_id), controller)
