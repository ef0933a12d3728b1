from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from stats_server.core.config import settings
from stats_server.core.security import hash_api_key, raw_token_matches
from stats_server.db.session import get_db
from stats_server.models.api_key import APIKey


def _authorized_raw_dep(
    db: Session = Depends(get_db),
    x_stats_raw: str | None = Header(None, alias="X-Stats-Raw"),
    x_api_key: str | None = Header(None, alias="X-API-Key"),
) -> bool:
    # Shared secret from configuration first
    if raw_token_matches(x_stats_raw, settings.RAW_DATA_TOKEN):
        return True

    if x_api_key:
        key_hash = hash_api_key(x_api_key)
        api_key = db.query(APIKey).filter(APIKey.key_hash == key_hash, APIKey.is_active.is_(True)).first()
        if not api_key:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or revoked API key")
        return True

    return False


AuthorizedRaw = Annotated[bool, Depends(_authorized_raw_dep)]
