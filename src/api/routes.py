from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from src.api.schemas import DeletedGame, GameRead, GameSearch, GameWrite
from src.db.repository import SqlGameRepository
from src.errors import PopulationError
from src.pipeline.constants import PLATFORM_REQUIRED_MESSAGE, POPULATION_FAILED_MESSAGE
from src.pipeline.orchestrator import PopulationOrchestrator

router = APIRouter(prefix="/api/games", tags=["games"])


def get_repository(request: Request) -> SqlGameRepository:
    return request.app.state.repository


def get_orchestrator(request: Request) -> PopulationOrchestrator | None:
    return request.app.state.orchestrator


@router.get("", response_model=list[GameRead])
async def list_games(
    repository: SqlGameRepository = Depends(get_repository),
) -> list[GameRead]:
    games = await repository.list_games()
    return [GameRead.model_validate(game) for game in games]


@router.get("/{game_id}", response_model=GameRead)
async def get_game(
    game_id: int,
    repository: SqlGameRepository = Depends(get_repository),
) -> GameRead:
    game = await repository.get_game(game_id)
    return GameRead.model_validate(game)


@router.post("", response_model=GameRead)
async def create_game(
    body: GameWrite,
    repository: SqlGameRepository = Depends(get_repository),
) -> GameRead:
    game = await repository.create_game(
        body.model_dump(mode="json", exclude_none=True)
    )
    return GameRead.model_validate(game)


@router.put("/{game_id}", response_model=GameRead)
async def update_game(
    game_id: int,
    body: GameWrite,
    repository: SqlGameRepository = Depends(get_repository),
) -> GameRead:
    game = await repository.update_game(
        game_id, body.model_dump(mode="json", exclude_unset=True)
    )
    return GameRead.model_validate(game)


@router.delete("/{game_id}", response_model=DeletedGame)
async def delete_game(
    game_id: int,
    repository: SqlGameRepository = Depends(get_repository),
) -> DeletedGame:
    await repository.delete_game(game_id)
    return DeletedGame(id=game_id)


@router.post("/search", response_model=list[GameRead])
async def search_games(
    body: GameSearch | None = None,
    repository: SqlGameRepository = Depends(get_repository),
) -> list[GameRead] | JSONResponse:
    """
    플랫폼/이름으로 게임을 검색합니다.

    이름만 전달되고 플랫폼이 없으면 400을 반환합니다.
    """
    search = body or GameSearch()
    if search.name and not search.platform:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": PLATFORM_REQUIRED_MESSAGE},
        )

    games = await repository.search_games(
        name=search.name or None, platform=search.platform or None
    )
    return [GameRead.model_validate(game) for game in games]


@router.post("/populate")
async def populate_games(
    request: Request,
    orchestrator: PopulationOrchestrator | None = Depends(get_orchestrator),
) -> JSONResponse:
    """
    iOS/Android 랭킹 피드에서 신규 게임을 가져와 적재합니다.

    Returns:
        201 {"added": n}, 200 {"message": ...}, 설정 누락/실패 시 500 {"error": ...}
    """
    if orchestrator is None:
        error = request.app.state.config_error or "Feed URLs are not configured"
        logger.error(f"피드 설정 누락으로 population run을 실행할 수 없습니다: {error}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": error},
        )

    try:
        result = await orchestrator.populate()
    except PopulationError as e:
        logger.error(f"Population run 실패: {e!r} (원인: {e.__cause__!r})")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": POPULATION_FAILED_MESSAGE},
        )

    if result.added == 0:
        return JSONResponse(
            status_code=status.HTTP_200_OK, content={"message": result.message}
        )

    return JSONResponse(
        status_code=status.HTTP_201_CREATED, content={"added": result.added}
    )
