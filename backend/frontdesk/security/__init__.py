from frontdesk.security.auth import (
    get_password_hash, verify_password, create_access_token,
    get_current_user, get_optional_user, require_manager, require_staff
)

__all__ = [
    'get_password_hash', 'verify_password', 'create_access_token',
    'get_current_user', 'get_optional_user', 'require_manager', 'require_staff'
]
