"""
Credential & session layer

Tokens are HS256 JWTs carrying {userId, email, role}. Malformed, expired
and badly signed tokens all verify to None.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from bson import ObjectId
from fastapi import HTTPException, Request
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

import config
from database import get_db, utcnow

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

INVALID_CREDENTIALS = "Invalid email or password"


class NotAuthenticated(HTTPException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(status_code=401, detail=detail)


class TokenClaims(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    email: str
    role: str


# ----------------- Helpers -----------------

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(password, hashed)
    except (ValueError, TypeError):
        # unknown or corrupt hash format
        return False


def issue_token(claims: TokenClaims, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = claims.model_dump(by_alias=True)
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=config.JWT_EXPIRE_DAYS))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.JWT_SECRET, algorithm=config.JWT_ALGO)


def verify_token(token: str) -> Optional[TokenClaims]:
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGO])
        return TokenClaims.model_validate(payload)
    except (JWTError, ValidationError):
        return None


def extract_token(request: Request) -> Optional[str]:
    auth = request.headers.get("authorization")
    if auth and auth.lower().startswith("bearer "):
        token = auth.split(" ", 1)[1].strip()
        if token:
            return token
    return request.cookies.get(config.AUTH_COOKIE_NAME) or None


def authenticate(request: Request) -> TokenClaims:
    """FastAPI dependency guarding admin routes. Any valid token is enough."""
    token = extract_token(request)
    if not token:
        raise NotAuthenticated("No authentication token provided")
    claims = verify_token(token)
    if claims is None:
        raise NotAuthenticated("Invalid authentication token")
    return claims


# ----------------- Account operations -----------------

def public_user(user: dict) -> dict:
    return {
        "id": str(user["_id"]),
        "email": user.get("email"),
        "name": user.get("name"),
        "role": user.get("role"),
        "createdAt": user.get("createdAt"),
        "lastLogin": user.get("lastLogin"),
    }


def get_user(user_id: str) -> dict:
    user = None
    if ObjectId.is_valid(user_id):
        user = get_db()["users"].find_one({"_id": ObjectId(user_id)})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def login(email: str, password: str):
    """Returns (user, token). Unknown email and wrong password look the same."""
    users = get_db()["users"]
    user = users.find_one({"email": email.strip().lower()})
    if not user:
        raise NotAuthenticated(INVALID_CREDENTIALS)
    if not user.get("isActive", False):
        raise NotAuthenticated("Account is deactivated")
    if not verify_password(password, user.get("password", "")):
        raise NotAuthenticated(INVALID_CREDENTIALS)

    token = issue_token(TokenClaims(user_id=str(user["_id"]), email=user["email"], role=user.get("role", "admin")))
    now = utcnow()
    users.update_one({"_id": user["_id"]}, {"$set": {"lastLogin": now, "updatedAt": now}})
    user["lastLogin"] = now
    logger.info("User %s logged in", user["email"])
    return user, token


def update_profile(user_id: str, name: str, email: str) -> dict:
    user = get_user(user_id)
    users = get_db()["users"]
    email = email.lower()
    if users.find_one({"email": email, "_id": {"$ne": user["_id"]}}):
        raise HTTPException(status_code=400, detail="Email is already taken")
    users.update_one({"_id": user["_id"]}, {"$set": {"name": name, "email": email, "updatedAt": utcnow()}})
    return users.find_one({"_id": user["_id"]})


def change_password(user_id: str, current_password: str, new_password: str):
    if len(new_password) < config.MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"New password must be at least {config.MIN_PASSWORD_LENGTH} characters",
        )
    user = get_user(user_id)
    if not verify_password(current_password, user.get("password", "")):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    get_db()["users"].update_one(
        {"_id": user["_id"]},
        {"$set": {"password": hash_password(new_password), "updatedAt": utcnow()}},
    )
