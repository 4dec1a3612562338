"""
GitHub webhook endpoints.
"""

from fastapi import APIRouter, Request, HTTPException, Header, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from api.src.db.database import get_db
from api.src.services.github import verify_signature, parse_webhook_event, fetch_pulsefile
from api.src.services.queue import enqueue_job
from api.src.services.store import get_repo_pulsefile
from core.src.errors import ParseError, PulsefileNotFoundError, WebhookPayloadError
from core.src.models import GitEvent
from core.src.parser import parse_pulsefile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

async def process_git_event(event: GitEvent, db: AsyncSession) -> dict:
    """Resolve the repository's Pulsefile, parse it and queue an execution."""
    full_name = event.repository.full_name

    pulsefile = await get_repo_pulsefile(db, full_name)
    if pulsefile is not None:
        logger.info(f"Using registered Pulsefile for {full_name}")
    else:
        try:
            pulsefile = await fetch_pulsefile(event)
        except PulsefileNotFoundError as e:
            logger.info(f"No Pulsefile for {full_name}: {e}")
            return {"status": "skipped", "reason": "No Pulsefile found"}

    try:
        pipeline = parse_pulsefile(pulsefile)
    except ParseError as e:
        logger.error(f"Invalid Pulsefile in {full_name}: {e}")
        return {"status": "error", "reason": str(e)}

    job_id = await enqueue_job(pipeline, event)

    logger.info(f"Queued job {job_id} for pipeline '{pipeline.name}' of {full_name} ({event.kind.value})")

    return {
        "status": "queued",
        "job_id": job_id,
        "pipeline": pipeline.name,
        "steps": len(pipeline.steps),
    }

@router.post("/github")
async def github_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
    x_hub_signature_256: Optional[str] = Header(None),
    x_github_event: Optional[str] = Header(None),
):
    """
    Receive GitHub webhook events.
    """
    # Get raw body for signature verification
    body = await request.body()

    if not verify_signature(body, x_hub_signature_256):
        raise HTTPException(status_code=401, detail="Invalid signature")

    # Parse JSON payload
    try:
        payload = await request.json()
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")

    if x_github_event == "ping":
        return {"status": "pong", "message": "Webhook configured successfully"}

    try:
        event = parse_webhook_event(x_github_event, payload)
    except WebhookPayloadError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if event is None:
        return {
            "status": "ignored",
            "event": x_github_event,
            "message": f"Event type '{x_github_event}' not handled"
        }

    return await process_git_event(event, db)
