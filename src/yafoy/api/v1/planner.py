"""Event planner assistant endpoint (streamed)."""

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from yafoy.api.deps import CompletionClientDep, CurrentSession, DbSession
from yafoy.schemas.planner import PlannerChatRequest
from yafoy.services.completion_client import CompletionError
from yafoy.services.planner_service import PlannerService
from yafoy.services.product_service import ProductService

router = APIRouter()


@router.post("/chat")
async def planner_chat(
    request: PlannerChatRequest,
    db: DbSession,
    completion_client: CompletionClientDep,
    session: CurrentSession,
):
    """Stream the assistant's reply as server-sent events.

    Frames: ``{"choices": [{"delta": {"content": ...}}]}`` per delta, then
    ``{"recommendations": [...]}``, then ``[DONE]``.

    Raises:
        429: Completion rate limit reached
        402: Completion credits exhausted
        500/502: Completion service error
    """
    planner = PlannerService(ProductService(db), completion_client)
    try:
        stream = await planner.stream_reply(request.messages, request.event_context)
    except CompletionError as e:
        raise HTTPException(status_code=e.status_code, detail={"error": e.message})

    return StreamingResponse(
        stream,
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
