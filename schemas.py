"""
Database Schemas for the School CMS

Each Pydantic model maps to a MongoDB collection. Stored and wire field
names are camelCase (isActive, buttonLabel, ...); Python attributes are
snake_case through the alias generator on `Document`.

Create models declare required fields first, in the order they are
reported when missing. Update models make every field optional.
"""
from datetime import datetime, timezone
from typing import Annotated, Dict, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


def _parse_date_only(value):
    if isinstance(value, str) and len(value) == 10:
        # date-only input, e.g. "2024-03-15"
        return datetime.fromisoformat(value)
    return value


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UtcDatetime = Annotated[datetime, BeforeValidator(_parse_date_only), AfterValidator(_to_naive_utc)]


def reject_null(value):
    if value is None:
        raise ValueError("cannot be null")
    return value


class Document(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ----------------- Users -----------------

class User(Document):
    email: EmailStr
    password: str = Field(..., description="bcrypt hash")
    name: str = Field(..., max_length=120)
    role: Literal["admin", "sub-admin"] = "admin"
    is_active: bool = True
    last_login: Optional[datetime] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class LoginRequest(Document):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ProfileUpdate(Document):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr


class PasswordChange(Document):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


# ----------------- Banners -----------------

class Banner(Document):
    image: str = Field(..., min_length=1)
    heading: str = Field(..., min_length=1)
    subheading: str = Field(..., min_length=1)
    order: int
    button_label: Optional[str] = None
    button_link: Optional[str] = None
    is_active: bool = True


class BannerUpdate(Document):
    image: Optional[str] = None
    heading: Optional[str] = None
    subheading: Optional[str] = None
    order: Optional[int] = None
    button_label: Optional[str] = None
    button_link: Optional[str] = None
    is_active: Optional[bool] = None

    not_null = field_validator("image", "heading", "subheading", "order", "is_active", mode="before")(reject_null)


# ----------------- Events -----------------

class Event(Document):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    date: UtcDatetime
    content: Optional[str] = Field(None, description="Rich text HTML")
    end_date: Optional[UtcDatetime] = None
    location: Optional[str] = None
    image: Optional[str] = None
    is_active: bool = True
    is_featured: bool = False


class EventUpdate(Document):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[UtcDatetime] = None
    content: Optional[str] = None
    end_date: Optional[UtcDatetime] = None
    location: Optional[str] = None
    image: Optional[str] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None

    not_null = field_validator("title", "description", "date", "is_active", "is_featured", mode="before")(reject_null)


# ----------------- Team -----------------

class TeamMember(Document):
    name: str = Field(..., min_length=1)
    designation: str = Field(..., min_length=1)
    photo: str = Field(..., min_length=1)
    order: int
    bio: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    social_links: Dict[str, str] = Field(default_factory=dict, description="platform -> URL")
    is_active: bool = True


class TeamMemberUpdate(Document):
    name: Optional[str] = None
    designation: Optional[str] = None
    photo: Optional[str] = None
    order: Optional[int] = None
    bio: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    social_links: Optional[Dict[str, str]] = None
    is_active: Optional[bool] = None

    not_null = field_validator(
        "name", "designation", "photo", "order", "social_links", "is_active", mode="before"
    )(reject_null)


# ----------------- Testimonials -----------------

class Testimonial(Document):
    name: str = Field(..., min_length=1)
    quote: str = Field(..., min_length=1)
    rating: int = Field(5, ge=1, le=5)
    role: Optional[str] = None
    company: Optional[str] = None
    image: Optional[str] = None
    is_active: bool = True
    is_featured: bool = False


class TestimonialUpdate(Document):
    name: Optional[str] = None
    quote: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    role: Optional[str] = None
    company: Optional[str] = None
    image: Optional[str] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None

    not_null = field_validator("name", "quote", "rating", "is_active", "is_featured", mode="before")(reject_null)


# ----------------- Gallery -----------------

class GalleryItem(Document):
    url: str = Field(..., min_length=1)
    alt: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, description="free-text tag")
    title: str = ""
    description: str = ""
    order: int = 1
    is_active: bool = True


class GalleryItemUpdate(Document):
    url: Optional[str] = None
    alt: Optional[str] = None
    category: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None

    not_null = field_validator(
        "url", "alt", "category", "title", "description", "order", "is_active", mode="before"
    )(reject_null)


# ----------------- Contact -----------------

class ContactSubmission(Document):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    subject: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    phone: Optional[str] = None


class ContactUpdate(Document):
    is_read: Optional[bool] = None

    not_null = field_validator("is_read", mode="before")(reject_null)


# ----------------- Singletons -----------------

class AboutContent(Document):
    content: str = Field(..., min_length=1, description="Rich text HTML")
    image: str = ""


class SeoSettings(Document):
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    og_image: Optional[str] = None


class SiteSettings(Document):
    site_name: Optional[str] = None
    site_description: Optional[str] = None
    site_keywords: Optional[List[str]] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    social_media: Optional[Dict[str, str]] = None
    business_hours: Optional[Dict[str, str]] = None
    seo_settings: Optional[SeoSettings] = None
    maintenance_mode: Optional[bool] = None
    allow_registration: Optional[bool] = None
    email_notifications: Optional[bool] = None


# ----------------- Media -----------------

class MediaDeleteRequest(BaseModel):
    public_id: Optional[str] = None
    public_ids: Optional[List[str]] = None


class ImageDeleteRequest(BaseModel):
    public_id: str = Field(..., min_length=1)


# ----------------- Analytics -----------------

class AnalyticsEvent(Document):
    action: str = Field(..., min_length=1)
    session_id: Optional[str] = None
    user_agent: Optional[str] = None
    ip: Optional[str] = None
    pathname: Optional[str] = None


class Session(Document):
    """One browser session inside a day document of the "analytics" collection."""
    session_id: str
    visitor_id: str
    start_time: datetime
    last_activity: datetime
    page_views: int = 0
