import logging
import os
import secrets
import shutil
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, File, Header, HTTPException, Request, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pymongo.errors import PyMongoError

import analytics
import auth
import config
import dashboard
import database
import media
from auth import TokenClaims, authenticate
from crud import RESOURCES, build_router
from database import SingletonRepository, utcnow
from ratelimit import limiter
from responses import ok, register_exception_handlers
from schemas import AboutContent, LoginRequest, PasswordChange, ProfileUpdate, SiteSettings
from seed import seed_database

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.JWT_SECRET_IS_DEFAULT:
        logger.warning("JWT_SECRET is not set; tokens are signed with an insecure default secret")
    try:
        database.ensure_indexes()
    except PyMongoError:
        logger.exception("Could not create database indexes")
    os.makedirs(config.UPLOAD_DIR, exist_ok=True)
    yield


app = FastAPI(title="School CMS API", lifespan=lifespan)

app.state.limiter = limiter
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for resource in RESOURCES:
    app.include_router(build_router(resource))
app.include_router(media.router)
app.include_router(analytics.router)
app.include_router(dashboard.router)

app.mount(
    config.UPLOAD_URL_PREFIX,
    StaticFiles(directory=config.UPLOAD_DIR, check_dir=False),
    name="uploads",
)

about_repo = SingletonRepository("about")
settings_repo = SingletonRepository("settings", {"type": "site"})


# ----------------- Health -----------------

@app.get("/")
def root():
    return {"message": "School CMS API running"}


# ----------------- Auth -----------------

@app.post("/api/auth/login")
@limiter.limit(config.LOGIN_RATE_LIMIT)
def login(request: Request, creds: LoginRequest, response: Response):
    user, token = auth.login(creds.email, creds.password)
    response.set_cookie(
        key=config.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="lax",
        max_age=config.JWT_EXPIRE_DAYS * 24 * 3600,
    )
    return ok({"user": auth.public_user(user), "token": token}, "Login successful")


@app.post("/api/auth/logout")
def logout(response: Response):
    response.delete_cookie(config.AUTH_COOKIE_NAME)
    return ok(message="Logged out successfully")


@app.get("/api/auth/profile")
def get_profile(claims: TokenClaims = Depends(authenticate)):
    user = auth.get_user(claims.user_id)
    return ok({"user": auth.public_user(user)}, "Profile fetched successfully")


@app.put("/api/auth/profile")
def update_profile(payload: ProfileUpdate, claims: TokenClaims = Depends(authenticate)):
    user = auth.update_profile(claims.user_id, payload.name, payload.email)
    return ok({"user": auth.public_user(user)}, "Profile updated successfully")


@app.put("/api/auth/change-password")
def change_password(payload: PasswordChange, claims: TokenClaims = Depends(authenticate)):
    auth.change_password(claims.user_id, payload.current_password, payload.new_password)
    return ok(message="Password changed successfully")


# ----------------- About & settings (singletons) -----------------

@app.get("/api/about")
def get_about():
    about = about_repo.get()
    return ok(about or {"content": "", "image": ""}, "About content fetched successfully")


@app.put("/api/about")
def update_about(payload: AboutContent, claims: TokenClaims = Depends(authenticate)):
    about = about_repo.replace({
        **payload.model_dump(by_alias=True),
        "updatedAt": utcnow(),
        "updatedBy": claims.user_id,
    })
    return ok(about, "About content updated successfully")


@app.get("/api/settings")
def get_settings():
    return ok(settings_repo.get() or {}, "Settings fetched successfully")


@app.put("/api/settings")
def update_settings(payload: SiteSettings, claims: TokenClaims = Depends(authenticate)):
    settings = settings_repo.merge({
        **payload.model_dump(by_alias=True, exclude_unset=True),
        "updatedAt": utcnow(),
        "updatedBy": claims.user_id,
    })
    return ok(settings, "Settings updated successfully")


# ----------------- Uploads -----------------

def unique_filename(original_name: str) -> str:
    name = Path(original_name or "upload").name
    stem, ext = os.path.splitext(name)
    return f"{stem or 'upload'}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"


@app.post("/api/upload")
def upload_file(file: Optional[UploadFile] = File(None), _: TokenClaims = Depends(authenticate)):
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")
    filename = unique_filename(file.filename)
    os.makedirs(config.UPLOAD_DIR, exist_ok=True)
    with open(os.path.join(config.UPLOAD_DIR, filename), "wb") as fh:
        shutil.copyfileobj(file.file, fh)
        size = fh.tell()
    logger.info("Stored upload %s (%d bytes)", filename, size)
    return ok({"url": f"{config.UPLOAD_URL_PREFIX}/{filename}", "filename": filename}, "File uploaded successfully")


# ----------------- Seeding -----------------

@app.post("/api/seed")
def seed(x_seed_secret: Optional[str] = Header(None)):
    if not config.SEED_SECRET:
        raise HTTPException(status_code=403, detail="Seeding is disabled")
    if not x_seed_secret or not secrets.compare_digest(x_seed_secret, config.SEED_SECRET):
        raise HTTPException(status_code=403, detail="Invalid seed secret")
    return ok(seed_database(), "Seeding complete")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
