import logging
from datetime import datetime, timedelta
from typing import Optional
from jose import jwt, JWTError
from jobintake.core.config import SECRET_KEY, ALGORITHM

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=60))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """
    Decode and verify a bearer token.
    
    Returns:
        Claims dict, or None if the token is invalid or expired
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.debug(f"Rejected token: {e}")
        return None
