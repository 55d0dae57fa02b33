"""Admin-managed third-party API keys."""

from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from insightstream.models.api_key import ApiKey
from insightstream.models.schemas import ApiKeyCreate, ApiKeyUpdate, ApiKeyResponse
from insightstream.services.credential_service import CredentialService

logger = logging.getLogger(__name__)

credential_service = CredentialService()


def to_response(api_key: ApiKey) -> ApiKeyResponse:
    """Build the API representation of a key with its value masked."""
    try:
        masked = CredentialService.mask_value(credential_service.decrypt_value(api_key.encrypted_value))
    except ValueError:
        masked = "<undecryptable>"

    return ApiKeyResponse(
        id=api_key.id,
        service_name=api_key.service_name,
        masked_value=masked,
        description=api_key.description,
        created_by=api_key.created_by,
        created_at=api_key.created_at,
    )


def add_api_key(db: Session, data: ApiKeyCreate, created_by: Optional[str] = None) -> ApiKey:
    api_key = ApiKey(
        service_name=data.service_name.strip(),
        encrypted_value=credential_service.encrypt_value(data.key_value.strip()),
        description=data.description,
        created_by=created_by,
    )
    db.add(api_key)
    db.commit()
    db.refresh(api_key)

    logger.info(f"Added API key {api_key.id} for service '{api_key.service_name}'")
    return api_key


def list_api_keys(db: Session) -> List[ApiKey]:
    """All keys, newest first."""
    return db.query(ApiKey).order_by(ApiKey.created_at.desc()).all()


def get_api_key(db: Session, api_key_id: str) -> Optional[ApiKey]:
    return db.query(ApiKey).filter(ApiKey.id == api_key_id).first()


def update_api_key(db: Session, api_key_id: str, data: ApiKeyUpdate) -> Optional[ApiKey]:
    api_key = get_api_key(db, api_key_id)
    if not api_key:
        return None

    if data.service_name is not None:
        api_key.service_name = data.service_name.strip()
    if data.key_value is not None:
        api_key.encrypted_value = credential_service.encrypt_value(data.key_value.strip())
    if data.description is not None:
        api_key.description = data.description

    db.commit()
    db.refresh(api_key)
    return api_key


def delete_api_key(db: Session, api_key_id: str) -> bool:
    api_key = get_api_key(db, api_key_id)
    if not api_key:
        return False
    db.delete(api_key)
    db.commit()
    return True


def get_api_key_value(db: Session, service_name: str) -> Optional[str]:
    """
    Look up the decrypted value of the newest key registered for a service.

    Returns:
        Key value, or None if no usable key is configured
    """
    try:
        api_key = db.query(ApiKey).filter(
            ApiKey.service_name == service_name
        ).order_by(ApiKey.created_at.desc()).first()
    except Exception as e:
        logger.error(f"Error fetching '{service_name}' API key: {e}")
        return None

    if not api_key:
        logger.warning(f"'{service_name}' API key not found")
        return None

    try:
        value = credential_service.decrypt_value(api_key.encrypted_value)
    except ValueError as e:
        logger.error(f"'{service_name}' API key could not be decrypted: {e}")
        return None

    if not value:
        logger.warning(f"'{service_name}' API key value is empty")
        return None

    return value
