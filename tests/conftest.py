import os

import httpx
import pytest
import schedule

# Gradio UI 不参与 API 测试
os.environ.setdefault("ENABLE_WEBUI", "false")

from client import ClientConfig, GatewayClient, MemoryStore, UploadWorkflow


class ImmediateScheduler(schedule.Scheduler):
    """每次 run_pending 都执行全部任务，不等待真实时间"""

    def run_pending(self):
        self.run_all()


@pytest.fixture()
def gateway_env(tmp_path, monkeypatch):
    """Gateway 使用的临时目录和数据库"""
    import database

    dirs = {
        "UPLOAD_DIR": tmp_path / "uploads",
        "LOG_DIR": tmp_path / "logs",
        "DIFF_DIR": tmp_path / "diff_results",
    }
    for name, path in dirs.items():
        monkeypatch.setenv(name, str(path))
    monkeypatch.setenv("DB_PATH", str(tmp_path / "gateway.db"))
    monkeypatch.setenv("MAX_UPLOAD_SIZE_MB", "1")
    database.init_database()
    return dirs


@pytest.fixture()
def api_client(gateway_env):
    from fastapi.testclient import TestClient
    from api.main import app

    with TestClient(app) as client:
        yield client


class FakeBackend:
    """记录请求并按路径返回预设响应的 httpx handler"""

    def __init__(self, routes: dict):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        if callable(route):
            return route(request)
        if isinstance(route, list):
            route = route.pop(0) if len(route) > 1 else route[0]
            if callable(route):
                return route(request)
        # 每次返回新的 Response，避免复用已读取的对象
        return httpx.Response(route.status_code, headers=route.headers, content=route.content)


@pytest.fixture()
def make_workflow():
    """用假后端构造 UploadWorkflow"""

    def _make(routes: dict, **config_overrides):
        backend = FakeBackend(routes)
        config = ClientConfig(base_url="http://testserver", **config_overrides)
        gateway = GatewayClient(config, transport=httpx.MockTransport(backend))
        sleeps: list[float] = []
        workflow = UploadWorkflow(
            config,
            store=MemoryStore(),
            gateway=gateway,
            sleep=sleeps.append,
            scheduler=ImmediateScheduler(),
        )
        return workflow, backend, sleeps

    return _make
