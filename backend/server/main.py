import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import CORS_ALLOW_ORIGINS, UVICORN_CONFIG
from server.api.error_handlers import register_exception_handlers
from server.api.rest.dependencies import shutdown_dependencies
from server.api_router import api_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Re:Watch Backend", description="Accounts and per-user anime watchlists")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # 添加路由
    app.include_router(api_router)

    @app.on_event("shutdown")
    async def shutdown_event():
        """应用关闭时清理资源"""
        await shutdown_dependencies()
        logger.info("Connection pools closed")

    return app


app = create_app()


# 启动服务器
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run("server.main:app", **UVICORN_CONFIG)
