import logging
import time
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from flashdeck.application.config import resolve_config
from flashdeck.application.factory import Services, build_services, make_selector
from flashdeck.application.selection import SelectionAlgorithm
from flashdeck.application.study_session import StudySession
from flashdeck.consts import VERSION
from flashdeck.domain.constants import BACKUP_FILENAME, IMPORT_MODES
from flashdeck.domain.errors import (
    BackupFormatError,
    CardNotFoundError,
    CardValidationError,
    InvalidInputError,
    StorageError,
)

logger = logging.getLogger("flashdeck.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"flashdeck server v{VERSION} starting up...")
    yield
    logger.info("flashdeck server shutting down...")


app = FastAPI(
    title="flashdeck",
    description="HTTP API for flashdeck cards, statistics and study selection.",
    version=VERSION,
    lifespan=lifespan,
)

start_time = time.time()


@lru_cache(maxsize=None)
def get_selector(seed: int | None) -> SelectionAlgorithm:
    """One selector per seed for the process, so a seeded stream keeps advancing."""
    return make_selector(seed)


def get_services() -> Services:
    config = resolve_config()
    return build_services(config, selector=get_selector(config.seed))


@app.exception_handler(InvalidInputError)
async def malformed_data_handler(request: Request, exc: InvalidInputError):
    logger.error(f"Stored data is malformed: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage error: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class StatisticsModel(BaseModel):
    knowCount: int
    dontKnowCount: int
    lastReviewed: int | None


class CardModel(BaseModel):
    id: str
    word: str
    translation: str
    tags: list[str]
    language: str
    statistics: StatisticsModel
    createdAt: int
    updatedAt: int


class CardRequest(BaseModel):
    word: str
    translation: str
    tags: list[str] = Field(default_factory=list)
    language: str | None = None


class NextCardResponse(BaseModel):
    card: CardModel | None
    weight: float | None = None


@app.get("/health", response_model=HealthResponse)
def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/cards", response_model=list[CardModel])
def list_cards(
    tag: list[str] | None = Query(default=None),
    services: Services = Depends(get_services),
):
    return [c.to_dict() for c in services.cards.get_cards_by_tags(tag or [])]


@app.post("/cards", response_model=CardModel, status_code=201)
def create_card(req: CardRequest, services: Services = Depends(get_services)):
    try:
        card = services.cards.create_card(
            req.word,
            req.translation,
            tags=req.tags,
            language=req.language or services.config.default_language,
        )
    except CardValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors) from e
    return card.to_dict()


@app.get("/cards/{card_id}", response_model=CardModel)
def get_card(card_id: str, services: Services = Depends(get_services)):
    try:
        return services.cards.get_card(card_id).to_dict()
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@app.put("/cards/{card_id}", response_model=CardModel)
def update_card(card_id: str, req: CardRequest, services: Services = Depends(get_services)):
    try:
        card = services.cards.update_card(
            card_id, req.word, req.translation, tags=req.tags, language=req.language
        )
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except CardValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors) from e
    return card.to_dict()


@app.delete("/cards/{card_id}", status_code=204)
def delete_card(card_id: str, services: Services = Depends(get_services)):
    if not services.cards.delete_card(card_id):
        raise HTTPException(status_code=404, detail=f"Card with id {card_id} not found")
    return Response(status_code=204)


@app.get("/cards/{card_id}/statistics", response_model=StatisticsModel)
def read_statistics(card_id: str, services: Services = Depends(get_services)):
    try:
        return services.tracker.read_statistics(card_id).to_dict()
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@app.post("/cards/{card_id}/known", response_model=StatisticsModel)
def record_known(card_id: str, services: Services = Depends(get_services)):
    try:
        return services.tracker.record_known(card_id).to_dict()
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@app.post("/cards/{card_id}/dont-know", response_model=StatisticsModel)
def record_dont_know(card_id: str, services: Services = Depends(get_services)):
    try:
        return services.tracker.record_dont_know(card_id).to_dict()
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@app.get("/study/next", response_model=NextCardResponse)
def study_next(
    tag: list[str] | None = Query(default=None),
    services: Services = Depends(get_services),
):
    """Draw the next card to study; ``card`` is null when nothing matches."""
    session = StudySession(services.cards, services.tracker, services.selector, tags=tag or [])
    card = session.next_card()
    if card is None:
        return NextCardResponse(card=None)
    return NextCardResponse(
        card=card.to_dict(), weight=services.selector.calculate_probability(card)
    )


@app.get("/backup")
def export_backup(services: Services = Depends(get_services)):
    body = services.backups.create_backup(services.cards.get_all_cards())
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{BACKUP_FILENAME}"'},
    )


class RestoreRequest(BaseModel):
    content: str
    mode: str = "merge"


@app.post("/backup/restore", response_model=list[CardModel])
def restore_backup(req: RestoreRequest, services: Services = Depends(get_services)):
    if req.mode not in IMPORT_MODES:
        raise HTTPException(status_code=400, detail="mode must be 'merge' or 'overwrite'")
    try:
        imported = services.backups.parse_backup(req.content).to_cards()
    except BackupFormatError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    result = services.cards.import_cards(imported, mode=req.mode)
    return [c.to_dict() for c in result]
