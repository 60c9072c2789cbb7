from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from gtd_todo.domain.errors import AuthenticationError

bearer = HTTPBearer(auto_error=False)


def get_current_user_id(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> str:
    if creds is None or not creds.credentials:
        raise AuthenticationError("Not authenticated.")
    user_id = request.app.state.auth_service.decode_token(creds.credentials)
    request.state.user_id = user_id
    return user_id
