from controller.src.services.executor import run_job
from controller.src.services.status_reporter import (
    update_job_status,
    report_step,
    save_execution,
)
from controller.src.services.workspace import (
    clone_repository,
    prepare_workspace,
    cleanup_workspace,
)

__all__ = [
    "run_job",
    "update_job_status",
    "report_step",
    "save_execution",
    "clone_repository",
    "prepare_workspace",
    "cleanup_workspace",
]
