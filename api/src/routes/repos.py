from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from api.src.db.database import get_db
from api.src.models.run import RegisterRepoRequest, RegisterRepoResponse, RepositoryResponse
from api.src.services.store import register_repository, unregister_repository, list_repositories
from core.src.errors import ParseError
from core.src.models import normalize_repo_identifier
from core.src.parser import parse_pulsefile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/repos", tags=["repositories"])

@router.post("", response_model=RegisterRepoResponse)
async def register_repo(request: RegisterRepoRequest, db: AsyncSession = Depends(get_db)):
    """Register a repository and its Pulsefile."""
    try:
        parse_pulsefile(request.pulsefile)
    except ParseError as e:
        raise HTTPException(status_code=400, detail=str(e))

    repo_identifier = request.repo_identifier or normalize_repo_identifier(request.repo_url)

    await register_repository(
        db,
        full_name=repo_identifier,
        repo_url=request.repo_url,
        pulsefile=request.pulsefile,
        repo_type=request.repo_type,
    )

    return RegisterRepoResponse(
        message="Repository registered successfully",
        repo_identifier=repo_identifier,
    )

@router.get("", response_model=List[RepositoryResponse])
async def list_repos(db: AsyncSession = Depends(get_db)):
    """List all registered repositories."""
    return await list_repositories(db)

@router.delete("/{repo_identifier:path}", status_code=204)
async def unregister_repo(repo_identifier: str, db: AsyncSession = Depends(get_db)):
    """Unregister a repository."""
    if not await unregister_repository(db, repo_identifier):
        raise HTTPException(status_code=404, detail="Repository not found")
    return Response(status_code=204)
