from api.src.routes.health import router as health_router
from api.src.routes.executions import router as executions_router
from api.src.routes.pipelines import router as pipelines_router
from api.src.routes.repos import router as repos_router
from api.src.routes.webhooks import router as webhooks_router

__all__ = [
    "health_router",
    "executions_router",
    "pipelines_router",
    "repos_router",
    "webhooks_router",
]
