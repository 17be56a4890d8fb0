from passlib.context import CryptContext
from fastapi import HTTPException, status
import secrets

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Verified against when the username is unknown, so a failed lookup costs
# the same as a wrong password.
_DUMMY_HASH = pwd_context.hash(secrets.token_urlsafe(16))

# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)

def burn_password_check(plain_password: str) -> bool:
    """Run a verification against a throwaway hash. Always False."""
    pwd_context.verify(plain_password, _DUMMY_HASH)
    return False

def generate_session_token() -> str:
    """Generate an opaque session identifier."""
    return secrets.token_urlsafe(32)

# Security exceptions
class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
        )
