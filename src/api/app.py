from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from src.api.routes import router
from src.config import FeedSources, Settings
from src.db.repository import SqlGameRepository
from src.db.session import create_session_factory, init_models
from src.errors import ConfigurationError, GameNotFoundError, PersistenceError
from src.pipeline.fetchers import HttpFeedFetcher, create_http_client
from src.pipeline.orchestrator import PopulationOrchestrator


def create_app(
    repository: SqlGameRepository | None = None,
    orchestrator: PopulationOrchestrator | None = None,
    config_error: str | None = None,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[None]] | None = None,
) -> FastAPI:
    """
    라우터와 예외 핸들러가 등록된 FastAPI 앱을 생성합니다.

    Args:
        repository: 게임 저장소 (lifespan에서 설정하는 경우 None)
        orchestrator: Population run 오케스트레이터 (피드 설정 누락 시 None)
        config_error: 피드 설정 누락 시 응답할 오류 메시지
        lifespan: 리소스 생성/정리를 담당하는 lifespan 컨텍스트

    Returns:
        FastAPI: 앱 인스턴스
    """
    app = FastAPI(title="Top Games API", lifespan=lifespan)
    app.state.repository = repository
    app.state.orchestrator = orchestrator
    app.state.config_error = config_error

    app.include_router(router)

    @app.exception_handler(GameNotFoundError)
    async def handle_not_found(request: Request, exc: GameNotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"error": str(exc)}
        )

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(
        request: Request, exc: PersistenceError
    ) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} 처리 중 DB 오류: {exc}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)}
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning(f"{request.method} {request.url.path} 요청 검증 실패: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    return app


def build_app(config: Settings) -> FastAPI:
    """
    설정으로부터 DB 엔진, HTTP 클라이언트, 오케스트레이터를 구성하는 앱을 생성합니다.

    피드 URL 검증은 서버 시작 시 한 번만 수행하며, 누락되어도 CRUD API는 계속 동작합니다.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(f"=== Top Games API 시작 (environment={config.environment}) ===")
        engine, session_factory = create_session_factory(
            config.database_url, echo=config.debug
        )
        repository = SqlGameRepository(session_factory)
        app.state.repository = repository

        try:
            await init_models(engine)
            async with create_http_client(config) as http_client:
                try:
                    sources = FeedSources.from_settings(config)
                except ConfigurationError as e:
                    logger.error(f"피드 설정 오류: {e}. /api/games/populate 비활성화")
                    app.state.orchestrator = None
                    app.state.config_error = str(e)
                else:
                    app.state.orchestrator = PopulationOrchestrator(
                        fetcher=HttpFeedFetcher(client=http_client),
                        repository=repository,
                        sources=sources,
                    )
                    app.state.config_error = None

                yield
        finally:
            await engine.dispose()
            logger.info("=== Top Games API 종료 ===")

    return create_app(lifespan=lifespan)
