from api.src.services.github import (
    verify_signature,
    parse_repository,
    parse_webhook_event,
    fetch_pulsefile,
)
from api.src.services.queue import (
    enqueue_job,
    get_job_status,
    get_queue_length,
)
from api.src.services.store import (
    register_repository,
    unregister_repository,
    get_repository,
    get_repo_pulsefile,
    list_repositories,
    get_execution,
    list_executions,
    list_repository_executions,
    count_executions_by_status,
    count_repositories,
)

__all__ = [
    "verify_signature",
    "parse_repository",
    "parse_webhook_event",
    "fetch_pulsefile",
    "enqueue_job",
    "get_job_status",
    "get_queue_length",
    "register_repository",
    "unregister_repository",
    "get_repository",
    "get_repo_pulsefile",
    "list_repositories",
    "get_execution",
    "list_executions",
    "list_repository_executions",
    "count_executions_by_status",
    "count_repositories",
]
