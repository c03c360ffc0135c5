import datetime

from fastapi import FastAPI

from core.state import AppState
from lifeflow_main.main_agents.kv_store import KeyValueStore
from lifeflow_main.main_agents.routes_schedule import mount_schedule_routes
from lifeflow_main.main_agents.schedule_store import ScheduleStore
from utils.config import CONFIG
from utils.debug import configure_logging


def create_app(kv: KeyValueStore = None, chat=None) -> FastAPI:
    kv = kv or KeyValueStore()
    state = AppState(kv).init()

    app = FastAPI(title="LifeFlow API")

    @app.get("/health")
    def health():
        return {"status": "ok", "time": datetime.datetime.now().isoformat()}

    @app.on_event("shutdown")
    def _shutdown():
        state.flush()
        kv.close()

    mount_schedule_routes(app, state, ScheduleStore(kv), api_key=CONFIG["llm"]["api_key"], chat=chat)
    return app


configure_logging()

# Serve with: uvicorn --factory lifeflow_main.main:create_app
