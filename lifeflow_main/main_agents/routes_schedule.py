# lifeflow_main/main_agents/routes_schedule.py
from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel
from starlette.requests import Request

from core.errors import ConfigurationError, LifeFlowError, NoWorkError, NotFoundError, TransportError
from core.negotiator import ScheduleNegotiator
from core.offline import offline_reply
from core.state import AppState
from lifeflow_calendar.export import blocks_for_schedule, export_filename, export_ics
from lifeflow_main.main_agents.schedule_store import ScheduleStore
from lifeflow_main.models import llm_client
from lifeflow_main.models.models_schedule import DaySchedule, Revision, ScheduleBlock, Turn
from planning.daily_planner import plan_day, summarize_plan

router = APIRouter(prefix="/api", tags=["schedule"])

STATUS_BY_ERROR = {
    ConfigurationError: 400,
    NoWorkError: 422,
    NotFoundError: 404,
    TransportError: 502,
}


def _http_error(e: LifeFlowError) -> HTTPException:
    return HTTPException(status_code=STATUS_BY_ERROR.get(type(e), 500), detail=str(e))


# ---------- App state accessors ----------
def get_state(request: Request) -> AppState:
    state: AppState = getattr(request.app.state, "lifeflow", None)
    if state is None:
        raise HTTPException(status_code=500, detail="App state not initialized")
    return state


def get_negotiator(request: Request) -> ScheduleNegotiator:
    """One negotiator per process; a new day starts a fresh one."""
    neg: Optional[ScheduleNegotiator] = getattr(request.app.state, "negotiator", None)
    if neg is None or neg.day != date.today():
        neg = ScheduleNegotiator(
            request.app.state.schedule_store,
            api_key=request.app.state.api_key,
            chat=request.app.state.chat,
        )
        neg.resume()
        request.app.state.negotiator = neg
    return neg


# ---------- Schemas ----------
class ScheduleOut(BaseModel):
    status: str  # empty | generated | confirmed
    schedule: Optional[DaySchedule] = None


class LocalPlanOut(BaseModel):
    schedule: DaySchedule
    summary: dict


class MessageBody(BaseModel):
    message: str


class ChatReply(BaseModel):
    reply: str


def _status(schedule: Optional[DaySchedule]) -> str:
    if schedule is None:
        return "empty"
    return "confirmed" if schedule.confirmed else "generated"


# ---------- Routes ----------
@router.get("/schedule", response_model=ScheduleOut)
def current_schedule(neg: ScheduleNegotiator = Depends(get_negotiator)):
    schedule = neg.store.load(neg.day)
    return ScheduleOut(status=_status(schedule), schedule=schedule)


@router.post("/schedule/local", response_model=LocalPlanOut)
def local_plan(state: AppState = Depends(get_state),
               neg: ScheduleNegotiator = Depends(get_negotiator)):
    if neg.busy:
        raise HTTPException(status_code=409, detail="A planning turn is already running")
    snap = state.snapshot()
    if not snap.pending:
        raise _http_error(NoWorkError("No pending tasks; add some tasks before planning the day."))
    blocks: List[ScheduleBlock] = plan_day(list(snap.pending), snap.preferences)
    schedule = neg.adopt_local(blocks)
    return LocalPlanOut(schedule=schedule, summary=summarize_plan(blocks))


@router.post("/schedule/generate", response_model=ScheduleOut)
async def generate(state: AppState = Depends(get_state),
                   neg: ScheduleNegotiator = Depends(get_negotiator)):
    if neg.busy:
        raise HTTPException(status_code=409, detail="A planning turn is already running")
    snap = state.snapshot()
    try:
        schedule = await neg.generate(list(snap.pending), snap.preferences)
    except LifeFlowError as e:
        raise _http_error(e)
    return ScheduleOut(status=_status(schedule), schedule=schedule)


@router.post("/schedule/revise", response_model=Revision)
async def revise(body: MessageBody,
                 state: AppState = Depends(get_state),
                 neg: ScheduleNegotiator = Depends(get_negotiator)):
    if neg.busy:
        raise HTTPException(status_code=409, detail="A planning turn is already running")
    try:
        return await neg.revise(body.message, state.snapshot().preferences)
    except ConfigurationError as e:
        raise _http_error(e)


@router.post("/schedule/confirm", response_model=ScheduleOut)
def confirm(neg: ScheduleNegotiator = Depends(get_negotiator)):
    try:
        schedule = neg.confirm()
    except NotFoundError as e:
        raise _http_error(e)
    return ScheduleOut(status=_status(schedule), schedule=schedule)


@router.delete("/schedule", response_model=ScheduleOut)
def clear(neg: ScheduleNegotiator = Depends(get_negotiator)):
    try:
        neg.clear()
    except NotFoundError as e:
        raise _http_error(e)
    return ScheduleOut(status="empty")


@router.get("/schedule/transcript", response_model=List[Turn])
def transcript(neg: ScheduleNegotiator = Depends(get_negotiator)):
    return neg.transcript


@router.get("/schedule/export.ics")
def export(neg: ScheduleNegotiator = Depends(get_negotiator)):
    schedule = neg.store.load(neg.day)
    if schedule is None:
        raise _http_error(NotFoundError(f"No schedule for {neg.day.isoformat()}"))
    ics = export_ics(blocks_for_schedule(schedule), neg.day)
    return Response(
        content=ics,
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(neg.day)}"'},
    )


@router.post("/chat/offline", response_model=ChatReply)
def chat_offline(body: MessageBody, state: AppState = Depends(get_state)):
    snap = state.snapshot()
    return ChatReply(reply=offline_reply(body.message, list(snap.pending), snap.preferences))


# ---------- Mount helper ----------
def mount_schedule_routes(app, state: AppState, store: ScheduleStore, api_key=None, chat=None) -> None:
    """
    Attach state, store and chat transport to app.state and include this router.
    `chat` defaults to the OpenAI client; tests pass a fake.
    """
    app.state.lifeflow = state
    app.state.schedule_store = store
    app.state.api_key = api_key
    app.state.chat = chat or llm_client.chat
    app.state.negotiator = None
    app.include_router(router)


__all__ = ["router", "mount_schedule_routes"]
