"""FastAPI 应用入口

Mod Updater Upload Gateway
"""
import logging
import os
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send
from api.config import GatewayConfig
from api.routers import logs, uploads
from database import init_database


logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)

logger = logging.getLogger(__name__)


# 初始化数据库
init_database()

config = GatewayConfig.from_env()

# 创建 FastAPI 应用
app = FastAPI(
    title="Mod Updater Upload Gateway",
    description="Receives mod archives and serves conversion logs and diff reports",
    version="1.0.0"
)


class UploadSizeLimitMiddleware:
    """按 Content-Length 预先拒绝过大的上传

    注册在 CORS 之前（更内层），413 响应也带上 CORS 头
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] == "http" and scope["method"] == "POST" and scope["path"] == "/api/upload":
            content_length = Headers(scope=scope).get("content-length")
            limit = GatewayConfig.from_env().max_upload_bytes
            if content_length and content_length.isdigit() and int(content_length) > limit:
                logger.warning("拒绝上传: Content-Length=%s 超过限制 %d", content_length, limit)
                response = JSONResponse(status_code=413, content={"error": "File too large"})
                await response(scope, receive, send)
                return
        await self.app(scope, receive, send)


app.add_middleware(UploadSizeLimitMiddleware)

# CORS 配置：只允许白名单中的来源
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
    expose_headers=["Content-Disposition"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """未处理的异常：记录完整堆栈，只返回通用信息"""
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Something went wrong!"})


# 注册路由
app.include_router(uploads.router, tags=["uploads"])
app.include_router(logs.router, tags=["logs"])


@app.get("/")
def root():
    """根路径"""
    return {
        "message": "Mod Updater Upload Gateway",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/api/health")
def health():
    """健康检查"""
    return {"status": "Server is running"}


# ============================================================
# 挂载 Gradio WebUI（可选）
# ============================================================

if os.getenv("ENABLE_WEBUI", "true").lower() == "true":
    try:
        import gradio as gr
        from api.webui import app as gradio_app

        # 将 Gradio 挂载到 /ui 路径
        app = gr.mount_gradio_app(app, gradio_app, path="/ui")

        logger.info("Web UI 已挂载到 /ui 路径")
    except ImportError:
        logger.warning("Gradio 未安装，Web UI 不可用")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
