from fastapi import APIRouter, Depends

from pulsehustle.api.deps import respond
from pulsehustle.auth import require_api_key
from pulsehustle.platform import Platform, get_platform
from pulsehustle.schemas import BroadcastRequest, ContactCreate, ContactResponse

router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(require_api_key)])


@router.post("/contact")
async def queue_contact_message(request: ContactCreate, platform: Platform = Depends(get_platform)):
    result = await platform.operations.run(
        platform.contact.queue_contact_message,
        request.model_dump(exclude_none=True),
        label="Contact queue",
        context={"email": request.email},
        message="Contact message queued successfully",
    )
    return respond(result, ContactResponse, status_code=201)


@admin_router.get("/messages")
async def get_unprocessed_messages(platform: Platform = Depends(get_platform)):
    result = await platform.operations.run(platform.contact.get_unprocessed_messages, label="Message retrieval")
    return respond(result, list[ContactResponse])


@admin_router.post("/messages/{message_id}/process")
async def mark_message_processed(message_id: str, platform: Platform = Depends(get_platform)):
    result = await platform.operations.run(
        platform.contact.mark_message_processed,
        message_id,
        label="Message processing",
        context={"message_id": message_id},
        message="Contact message marked as processed",
    )
    return respond(result, ContactResponse)


@admin_router.post("/broadcast")
async def broadcast(request: BroadcastRequest, platform: Platform = Depends(get_platform)):
    result = await platform.operations.run(
        platform.realtime.broadcast_admin_notification,
        request.event,
        request.payload,
        label="Admin broadcast",
        context={"event": request.event},
        message="Admin notification broadcast successfully",
    )
    return respond(result)
