"""
Generic CRUD routes

Every content collection gets the same five routes from `build_router`:

    GET    /api/<path>          list (filters, search, pagination)
    GET    /api/<path>/{id}     one document
    POST   /api/<path>          create
    PUT    /api/<path>/{id}     update (PATCH for contact messages)
    DELETE /api/<path>/{id}     delete

A `Resource` describes what differs between collections.
"""
import re
from typing import Any, Dict, Optional, Sequence, Type

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel

import config
from auth import TokenClaims, authenticate
from database import Repository, SortSpec, object_id
from pagination import DEFAULT_LIMIT, MAX_LIMIT, paginate
from ratelimit import limiter
from responses import ok
from schemas import (
    Banner, BannerUpdate, ContactSubmission, ContactUpdate, Event, EventUpdate,
    GalleryItem, GalleryItemUpdate, TeamMember, TeamMemberUpdate, Testimonial, TestimonialUpdate,
)

TRUE_VALUES = {"true", "1"}
FALSE_VALUES = {"false", "0"}


class Resource:
    def __init__(
        self,
        path: str,
        collection: str,
        label: str,
        plural: str,
        create_model: Type[BaseModel],
        update_model: Type[BaseModel],
        sort: SortSpec,
        search_fields: Sequence[str] = (),
        filters: Optional[Dict[str, type]] = None,
        public_read: bool = True,
        public_create: bool = False,
        always_paginate: bool = False,
        update_method: str = "PUT",
        create_defaults: Optional[Dict[str, Any]] = None,
        create_rate_limit: Optional[str] = None,
    ):
        self.path = path
        self.collection = collection
        self.label = label
        self.plural = plural
        self.create_model = create_model
        self.update_model = update_model
        self.sort = sort
        self.search_fields = search_fields
        self.filters = filters or {}
        self.public_read = public_read
        self.public_create = public_create
        self.always_paginate = always_paginate
        self.update_method = update_method
        self.create_defaults = create_defaults or {}
        self.create_rate_limit = create_rate_limit
        self.repo = Repository(collection)

    def build_filter(self, params, search: Optional[str]) -> Dict[str, Any]:
        filter_dict: Dict[str, Any] = {}
        for name, kind in self.filters.items():
            raw = params.get(name)
            if raw is None or raw == "":
                continue
            if kind is bool:
                value = raw.lower()
                if value in TRUE_VALUES:
                    filter_dict[name] = True
                elif value in FALSE_VALUES:
                    filter_dict[name] = False
                else:
                    raise HTTPException(status_code=400, detail=f"{name} must be true or false")
            else:
                filter_dict[name] = raw
        if search and self.search_fields:
            pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
            filter_dict["$or"] = [{field: pattern} for field in self.search_fields]
        return filter_dict


def _anonymous() -> None:
    return None


def build_router(resource: Resource) -> APIRouter:
    router = APIRouter(prefix=f"/api/{resource.path}", tags=[resource.plural])
    repo = resource.repo
    label = resource.label
    id_label = label.lower()
    read_deps = [] if resource.public_read else [Depends(authenticate)]
    create_auth = _anonymous if resource.public_create else authenticate

    @router.get("", dependencies=read_deps)
    def list_items(
        request: Request,
        page: Optional[int] = Query(None, ge=1),
        limit: Optional[int] = Query(None, ge=1, le=MAX_LIMIT),
        search: Optional[str] = None,
    ):
        filter_dict = resource.build_filter(request.query_params, search)
        message = f"{resource.plural} fetched successfully"
        if resource.always_paginate or page is not None or limit is not None:
            items, pagination = paginate(repo, page or 1, limit or DEFAULT_LIMIT, filter_dict, resource.sort)
            return ok(items, message, pagination)
        return ok(repo.find(filter_dict, sort=resource.sort), message)

    @router.get("/{item_id}", dependencies=read_deps)
    def get_item(item_id: str):
        doc = repo.find_one(object_id(item_id, id_label))
        if not doc:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return ok(doc, f"{label} fetched successfully")

    def create_item(
        request: Request,
        payload: resource.create_model,
        claims: Optional[TokenClaims] = Depends(create_auth),
    ):
        data = {**payload.model_dump(by_alias=True), **resource.create_defaults}
        doc = repo.insert_one(data, created_by=claims.user_id if claims else None)
        return ok(doc, f"{label} created successfully")

    create_item.__name__ = f"create_{resource.collection}"
    if resource.create_rate_limit:
        create_item = limiter.limit(resource.create_rate_limit)(create_item)
    router.add_api_route("", create_item, methods=["POST"], status_code=201)

    def update_item(
        item_id: str,
        payload: resource.update_model,
        claims: TokenClaims = Depends(authenticate),
    ):
        doc_id = object_id(item_id, id_label)
        fields = payload.model_dump(by_alias=True, exclude_unset=True)
        doc = repo.update_one(doc_id, fields, updated_by=claims.user_id)
        if not doc:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return ok(doc, f"{label} updated successfully")

    update_item.__name__ = f"update_{resource.collection}"
    router.add_api_route("/{item_id}", update_item, methods=[resource.update_method])

    @router.delete("/{item_id}")
    def delete_item(item_id: str, _: TokenClaims = Depends(authenticate)):
        if not repo.delete_one(object_id(item_id, id_label)):
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return ok(message=f"{label} deleted successfully")

    return router


# ----------------- Resources -----------------

RESOURCES = [
    Resource(
        path="banners", collection="banners", label="Banner", plural="Banners",
        create_model=Banner, update_model=BannerUpdate,
        sort=[("order", 1)],
        filters={"isActive": bool},
    ),
    Resource(
        path="events", collection="events", label="Event", plural="Events",
        create_model=Event, update_model=EventUpdate,
        sort=[("date", -1)],
        search_fields=("title", "description", "location"),
        filters={"isActive": bool, "isFeatured": bool},
        always_paginate=True,
    ),
    Resource(
        path="team", collection="team", label="Team member", plural="Team members",
        create_model=TeamMember, update_model=TeamMemberUpdate,
        sort=[("order", 1)],
        search_fields=("name", "designation"),
        filters={"isActive": bool},
    ),
    Resource(
        path="testimonials", collection="testimonials", label="Testimonial", plural="Testimonials",
        create_model=Testimonial, update_model=TestimonialUpdate,
        sort=[("createdAt", -1)],
        search_fields=("name", "quote", "company"),
        filters={"isActive": bool, "isFeatured": bool},
    ),
    Resource(
        path="gallery", collection="gallery", label="Gallery item", plural="Gallery items",
        create_model=GalleryItem, update_model=GalleryItemUpdate,
        sort=[("order", 1), ("createdAt", -1)],
        search_fields=("title", "alt"),
        filters={"category": str, "isActive": bool},
        always_paginate=True,
    ),
    Resource(
        path="contact", collection="contacts", label="Contact message", plural="Contact messages",
        create_model=ContactSubmission, update_model=ContactUpdate,
        sort=[("createdAt", -1)],
        search_fields=("name", "email", "subject"),
        filters={"isRead": bool},
        public_read=False,
        public_create=True,
        update_method="PATCH",
        create_defaults={"isRead": False},
        create_rate_limit=config.CONTACT_RATE_LIMIT,
    ),
]
