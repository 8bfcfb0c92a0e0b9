import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api.routes import agent, router
from src.core.config import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 테스트에서 협력 객체를 주입해 먼저 set_up 했다면 그대로 사용
    if not agent.is_set_up:
        agent.set_up()
    logger.info(f"Curio Block Agent ready (env: {settings.ENV}, store: {type(agent.store).__name__})")
    yield
    # 남은 보상 알림 전달 후 ES 연결 종료
    await agent.tear_down()


def create_app() -> FastAPI:
    application = FastAPI(
        title="Curio Block Agent",
        description="Content block generation and storage API for the learning app",
        lifespan=lifespan,
    )
    application.include_router(router)
    return application


app = create_app()


# AWS Lambda handler (mangum)
# pip install -e ".[lambda]" 로 설치 필요
try:
    from mangum import Mangum
    handler = Mangum(app, lifespan="auto")
except ImportError:
    # mangum 미설치 (로컬 개발 환경)
    handler = None


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.SERVER_HOST, port=settings.SERVER_PORT)
