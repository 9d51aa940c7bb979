from typing import List, Optional

from fastapi import FastAPI, Header, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import LOG_LEVEL, PORT, PORTAL_TITLE, configure_logging
from .errors import (
    AlreadySelected,
    NameValidationError,
    NoActiveSession,
    OptionFull,
    RegistryError,
    SnapshotError,
    UnknownOption,
)
from .models import (
    OptionId,
    OptionStatus,
    RegistryConfig,
    RegistrySnapshot,
    SelectionIn,
    SessionIn,
    Summary,
)
from .sessions import SessionStore
from .state import SelectionRegistry, option_name

ERROR_STATUS = {
    NameValidationError: 422,
    UnknownOption: 404,
    NoActiveSession: 401,
    AlreadySelected: 409,
    OptionFull: 409,
    SnapshotError: 400,
}


async def _registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
    status = ERROR_STATUS.get(type(exc), 400)
    body = {"ok": False, "error": exc.code, "detail": str(exc)}
    if isinstance(exc, NameValidationError):
        body["reason"] = exc.reason
    if isinstance(exc, (AlreadySelected, OptionFull, UnknownOption)):
        body["option_id"] = exc.option_id
    return JSONResponse(status_code=status, content=body)


async def _request_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = {"ok": False, "error": "INVALID_REQUEST", "detail": jsonable_encoder(exc.errors())}
    return JSONResponse(status_code=422, content=body)


def create_app(config: Optional[RegistryConfig] = None) -> FastAPI:
    configure_logging()
    registry = SelectionRegistry(config)
    sessions = SessionStore(registry)

    app = FastAPI(title=PORTAL_TITLE)
    app.state.registry = registry
    app.state.sessions = sessions
    app.add_exception_handler(RegistryError, _registry_error_handler)
    app.add_exception_handler(RequestValidationError, _request_error_handler)

    @app.get("/")
    def root():
        return {
            "title": PORTAL_TITLE,
            "capacity": registry.config.capacity,
            "options": [{"id": opt.value, "name": option_name(opt)} for opt in OptionId],
        }

    @app.post("/session")
    def begin_session(s: SessionIn):
        token, result = sessions.begin(s.name)
        return {"ok": True, "token": token, **result.model_dump(mode="json")}

    @app.post("/select")
    def select(sel: SelectionIn, x_session_token: Optional[str] = Header(default=None)):
        participant = sessions.participant_for(x_session_token)
        result = registry.select_option(sel.option_id, participant=participant)
        return {"ok": True, **result.model_dump(mode="json")}

    @app.get("/options")
    def list_options() -> List[OptionStatus]:
        return [registry.get_option_status(opt) for opt in OptionId]

    @app.get("/options/{option_id}")
    def option_status(option_id: str) -> OptionStatus:
        return registry.get_option_status(option_id)

    @app.get("/summary")
    def summary() -> Summary:
        return registry.get_summary()

    @app.get("/internal/state")
    def internal_state() -> RegistrySnapshot:
        return registry.export_snapshot()

    @app.post("/internal/load")
    def internal_load(snapshot: RegistrySnapshot):
        registry.load_snapshot(snapshot)
        return {"ok": True, "selections": len(snapshot.selections)}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("selection_portal.main:app", host="0.0.0.0", port=PORT, log_level=LOG_LEVEL.lower())
