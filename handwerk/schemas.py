from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OrmModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class ItemOut(OrmModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Optional[float] = None
    images: Optional[List[str]] = None
    order: int = 0
    is_favorite: bool = False
    featured_haken: bool = False
    featured_borduren: bool = False
    featured_order_haken: Optional[int] = None
    featured_order_borduren: Optional[int] = None
    created_at: datetime


class CategoryOut(OrmModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    type: Optional[str] = None
    headimageurl: Optional[str] = None
    order: int = 0
    created_at: datetime


class HeadCategoryOut(CategoryOut):
    pass


class HomeResponse(BaseModel):
    favorites: List[ItemOut]
    recent: List[ItemOut]


class OrderEntry(BaseModel):
    id: int
    order: int = Field(ge=0)


class ItemOrders(BaseModel):
    items: List[OrderEntry]


class CategoryOrders(BaseModel):
    categories: List[OrderEntry]


class HeadCategoryOrders(BaseModel):
    headcategories: List[OrderEntry]


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class AuthStatus(BaseModel):
    authed: bool


class OkResponse(BaseModel):
    ok: bool = True


class UploadResponse(BaseModel):
    path: str
    bucket: str
    url: str
    originalSize: Optional[int] = None
    optimizedSize: Optional[int] = None
    compressionRatio: Optional[float] = None
