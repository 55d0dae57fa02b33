"""Admin management of third-party API keys."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from insightstream.database import get_db
from insightstream.models.schemas import ApiKeyCreate, ApiKeyUpdate, ApiKeyResponse, MessageResponse
from insightstream.models.user import User
from insightstream.services import api_key_service
from insightstream.middleware.auth import get_current_admin

router = APIRouter()


@router.get("", response_model=List[ApiKeyResponse])
def list_api_keys(
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin)
):
    """All keys, newest first, with values masked."""
    return [api_key_service.to_response(key) for key in api_key_service.list_api_keys(db)]


@router.post("", response_model=ApiKeyResponse, status_code=status.HTTP_201_CREATED)
def add_api_key(
    data: ApiKeyCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin)
):
    api_key = api_key_service.add_api_key(db, data, created_by=admin.id)
    return api_key_service.to_response(api_key)


@router.put("/{api_key_id}", response_model=ApiKeyResponse)
def update_api_key(
    api_key_id: str,
    data: ApiKeyUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin)
):
    api_key = api_key_service.update_api_key(db, api_key_id, data)
    if not api_key:
        raise HTTPException(status_code=404, detail="API key not found")
    return api_key_service.to_response(api_key)


@router.delete("/{api_key_id}", response_model=MessageResponse)
def delete_api_key(
    api_key_id: str,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin)
):
    if not api_key_service.delete_api_key(db, api_key_id):
        raise HTTPException(status_code=404, detail="API key not found")
    return MessageResponse(message="API key deleted")
