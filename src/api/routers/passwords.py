"""Password note endpoints."""
from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_workspace
from schemas.password import (
    PasswordCreate,
    PasswordListResponse,
    PasswordResponse,
    PasswordUpdate,
)
from services.workspace import Workspace

router = APIRouter(prefix="/passwords", tags=["passwords"])


@router.get("/", response_model=PasswordListResponse)
async def list_passwords(
    workspace: Workspace = Depends(get_workspace),
) -> PasswordListResponse:
    """List password notes, newest first."""
    items = [PasswordResponse.model_validate(p) for p in workspace.passwords]
    return PasswordListResponse(items=items, total=len(items))


@router.post("/", response_model=PasswordResponse, status_code=201)
async def create_password(
    data: PasswordCreate,
    workspace: Workspace = Depends(get_workspace),
) -> PasswordResponse:
    """Add a password note."""
    entry = workspace.add_password(data.title, data.password)
    return PasswordResponse.model_validate(entry)


@router.patch("/{password_id}", response_model=PasswordResponse)
async def update_password(
    password_id: str,
    data: PasswordUpdate,
    workspace: Workspace = Depends(get_workspace),
) -> PasswordResponse:
    """Edit the title and/or value of a password note."""
    changes = data.changes()
    if changes:
        entry = workspace.update_password(password_id, changes)
    else:
        entry = workspace.passwords.get(password_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Password not found")
    return PasswordResponse.model_validate(entry)


@router.delete("/{password_id}", status_code=204)
async def delete_password(
    password_id: str,
    workspace: Workspace = Depends(get_workspace),
) -> None:
    """Delete a password note."""
    if not workspace.delete_password(password_id):
        raise HTTPException(status_code=404, detail="Password not found")
