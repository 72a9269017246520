"""
Events Router - the single "what is happening now" endpoint.

GET /current-event
    200 {"currentEvent": null}
    200 {"currentEvent": {"summary", "start", "end", "calendarColor"}}
    401 UNAUTHORIZED | TOKEN_REFRESHED (retry now) | AUTH_EXPIRED
    400 NO_CALENDARS
    500 INTERNAL_ERROR (unexpected failure)

A calendar whose query fails is skipped, so provider outages show up as
{"currentEvent": null} rather than as an error status.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from nowcal.deps import get_gateway, get_resolver
from nowcal.schemas.responses import CurrentEventResponse
from nowcal.services.current_event import CurrentEventResolver
from nowcal.services.session_gateway import SessionGateway


router = APIRouter(tags=["events"])


@router.get("/current-event", response_model=CurrentEventResponse)
async def current_event(
    request: Request,
    gateway: SessionGateway = Depends(get_gateway),
    resolver: CurrentEventResolver = Depends(get_resolver),
):
    """Resolve the event in progress for the caller's session."""
    async with gateway.scope(request) as session:
        event = await resolver.get_current_event(session)
        body = CurrentEventResponse(current_event=event)
        response = JSONResponse(content=body.model_dump(by_alias=True, mode="json"))

    return gateway.issue_cookie(response, session)
