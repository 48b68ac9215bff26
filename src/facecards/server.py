import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Header, HTTPException
from pydantic import BaseModel, model_validator

from facecards.application.config import AppConfig, resolve_config
from facecards.application.factory import build_session, get_directory_cache, get_state_store
from facecards.application.roster import ensure_playable, parse_roster
from facecards.application.session import ChallengeSession, ChallengeView, ChoiceOutcome
from facecards.application.streak import StreakDisplay
from facecards.consts import VERSION
from facecards.domain.errors import (
    DirectoryAuthError,
    DirectoryUnavailableError,
    FacecardsError,
    NoActiveChallengeError,
    RosterTooSmallError,
    UnknownChoiceError,
)
from facecards.domain.ports import StateStore
from facecards.infrastructure.adapters.directory_client import DirectoryCache

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("facecards.server")


class GameState:
    """
    Process-wide server state: config, roster cache and the player's session.

    Built lazily so importing the app never touches the network or disk.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        cache: DirectoryCache | None = None,
        store: StateStore | None = None,
    ):
        self.config = config or resolve_config()
        self.cache = cache or get_directory_cache(self.config)
        self.store = store or get_state_store(self.config)
        self.session: ChallengeSession | None = None
        # One answer is graded completely before the next is accepted
        self.lock = asyncio.Lock()

    def token_for(self, authorization: str | None) -> str | None:
        """Bearer token forwarded by the login layer, else the configured one."""
        if authorization and authorization.lower().startswith("bearer "):
            token = authorization[7:].strip()
            if token:
                return token
        return self.config.read_token()

    def require_token(self, authorization: str | None) -> str:
        """The caller's token; every game request needs one, even with a session open."""
        token = self.token_for(authorization)
        if not token:
            raise DirectoryAuthError("No directory token available; log in first.")
        return token

    async def ensure_session(self, authorization: str | None) -> ChallengeSession:
        token = self.require_token(authorization)
        if self.session is None:
            profiles = await self.cache.get(token)
            roster = parse_roster(profiles)
            ensure_playable(roster)
            self.session = build_session(self.config, roster, store=self.store)
            logger.info(f"Game session started with {len(roster)} people")
        return self.session


_state: GameState | None = None


def get_game_state() -> GameState:
    global _state
    if _state is None:
        _state = GameState()
    return _state


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"facecards server v{VERSION} starting up...")
    state = get_game_state()
    static_dir = state.config.static_dir
    if static_dir and static_dir.is_dir():
        from fastapi.staticfiles import StaticFiles

        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
        logger.info(f"Serving static files from {static_dir}")
    yield
    # Shutdown
    await state.cache.client.close()
    logger.info("facecards server shutting down...")


app = FastAPI(
    title="facecards",
    description="Directory proxy and name/face memory game API.",
    version=VERSION,
    lifespan=lifespan,
)


def _http_error(e: FacecardsError) -> HTTPException:
    if isinstance(e, DirectoryAuthError):
        return HTTPException(status_code=401, detail=f"Please log in. {e}")
    if isinstance(e, DirectoryUnavailableError):
        return HTTPException(status_code=502, detail=str(e))
    if isinstance(e, RosterTooSmallError | NoActiveChallengeError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, UnknownChoiceError):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


start_time = time.time()


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.get("/api/directory")
async def get_directory(
    authorization: str | None = Header(default=None),
    state: GameState = Depends(get_game_state),
) -> list[dict[str, Any]]:
    """
    The roster, slimmed to id, name, first_name, image_path and pronouns, cached in memory.
    """
    try:
        return await state.cache.get(state.token_for(authorization))
    except FacecardsError as e:
        logger.error(f"Error fetching directory: {e}")
        raise _http_error(e) from e


@app.get("/api/challenge", response_model=ChallengeView)
async def get_challenge(
    authorization: str | None = Header(default=None),
    state: GameState = Depends(get_game_state),
):
    """The round in progress, or a freshly scheduled one."""
    async with state.lock:
        try:
            session = await state.ensure_session(authorization)
            return session.start_challenge()
        except FacecardsError as e:
            logger.warning(f"Cannot start challenge: {e}")
            raise _http_error(e) from e


class ChoiceRequest(BaseModel):
    choice_id: str | int | None = None
    key: int | None = None  # 1-based keyboard shortcut, alternative to choice_id

    @model_validator(mode="after")
    def one_of(self):
        if (self.choice_id is None) == (self.key is None):
            raise ValueError("Provide exactly one of choice_id or key")
        return self


@app.post("/api/choice", response_model=ChoiceOutcome)
async def post_choice(
    req: ChoiceRequest,
    authorization: str | None = Header(default=None),
    state: GameState = Depends(get_game_state),
):
    """Grade one pick. After a correct answer, GET /api/challenge for the next round."""
    async with state.lock:
        try:
            state.require_token(authorization)
        except DirectoryAuthError as e:
            raise _http_error(e) from e
        if state.session is None:
            raise HTTPException(status_code=409, detail="No challenge in progress.")
        session = state.session
        try:
            choice_id = (
                session.choice_for_key(req.key) if req.key is not None else str(req.choice_id)
            )
            outcome = session.on_choice(choice_id)
        except FacecardsError as e:
            raise _http_error(e) from e
        logger.info(f"Choice {choice_id}: correct={outcome.correct} streak={outcome.streak}")
        return outcome


@app.get("/api/streak", response_model=StreakDisplay)
async def get_streak(state: GameState = Depends(get_game_state)):
    if state.session is not None:
        return state.session.streak.display
    from facecards.application.streak import Streak

    return Streak(state.store).display
