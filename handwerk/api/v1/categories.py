"""
Category endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from handwerk.api.deps import get_uploads
from handwerk.auth import require_admin
from handwerk.db import get_session, session_factory
from handwerk.errors import NotFound, ValidationError
from handwerk.models import CHANNELS, Category, HeadCategory, HeadCategoryCategory, Item, ItemCategory
from handwerk.schemas import CategoryOrders, CategoryOut, ItemOut, OkResponse
from handwerk.services import ranking
from handwerk.services.ordering import apply_orders
from handwerk.services.uploads import UploadService
from handwerk.utils.forms import parse_craft_type
from handwerk.utils.paths import abs_url, slugify

router = APIRouter(prefix="/categories", tags=["categories"])


async def _get_category(session: AsyncSession, category_id: int) -> Category:
    category = await session.get(Category, category_id)
    if category is None:
        raise NotFound("Not found")
    return category


@router.get("", response_model=List[CategoryOut])
async def list_categories(session: AsyncSession = Depends(get_session)):
    stmt = select(Category).order_by(Category.order, Category.name)
    return (await session.execute(stmt)).scalars().all()


@router.get("/type/{craft}/items", response_model=List[ItemOut])
async def items_by_type(craft: str, limit: int = Query(10, ge=1, le=100), session: AsyncSession = Depends(get_session)):
    """Newest items across every category of one craft type."""
    if craft not in CHANNELS:
        raise NotFound("Not found")
    linked = (
        select(ItemCategory.item_id)
        .join(Category, Category.id == ItemCategory.category_id)
        .where(Category.type == craft)
    )
    stmt = select(Item).where(Item.id.in_(linked))
    return ranking.select_newest((await session.execute(stmt)).scalars().all(), limit)


@router.patch("/orders", response_model=OkResponse, dependencies=[Depends(require_admin)])
async def update_orders(body: CategoryOrders):
    await apply_orders(session_factory(), Category, body.categories)
    return OkResponse()


@router.get("/{category_id}", response_model=CategoryOut)
async def get_category(category_id: int, session: AsyncSession = Depends(get_session)):
    return await _get_category(session, category_id)


@router.get("/{category_id}/items", response_model=List[ItemOut])
async def category_items(category_id: int, session: AsyncSession = Depends(get_session)):
    await _get_category(session, category_id)
    stmt = (
        select(Item)
        .join(ItemCategory, ItemCategory.item_id == Item.id)
        .where(ItemCategory.category_id == category_id)
    )
    return ranking.rank((await session.execute(stmt)).scalars().all())


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_category(
    request: Request,
    name: str = Form(""),
    slug: str = Form(""),
    description: str = Form(""),
    type: str = Form(""),
    headcategoryId: Optional[int] = Form(None),
    headimage: Optional[UploadFile] = File(None),
    uploads: UploadService = Depends(get_uploads),
    session: AsyncSession = Depends(get_session),
):
    name = name.strip()
    if not name:
        raise ValidationError("Name is required")
    craft = parse_craft_type(type)
    headcategory = None
    if headcategoryId is not None:
        headcategory = await session.get(HeadCategory, headcategoryId)
        if headcategory is None:
            raise ValidationError(f"Unknown headcategory: {headcategoryId}")
        # a category inside a head category inherits its craft type
        craft = craft or headcategory.type

    headimageurl = None
    if headimage is not None and headimage.filename:
        stored = await uploads.store_image(headimage)
        headimageurl = abs_url(request, stored.url)

    category = Category(
        name=name,
        slug=slugify(slug) or slugify(name),
        description=description or None,
        type=craft,
        headimageurl=headimageurl,
    )
    session.add(category)
    await session.flush()
    if headcategory is not None:
        session.add(HeadCategoryCategory(headcategory_id=headcategory.id, category_id=category.id))
    await session.commit()
    return category


@router.patch("/{category_id}", response_model=CategoryOut, dependencies=[Depends(require_admin)])
async def update_category(
    category_id: int,
    request: Request,
    name: Optional[str] = Form(None),
    slug: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    headimage: Optional[UploadFile] = File(None),
    uploads: UploadService = Depends(get_uploads),
    session: AsyncSession = Depends(get_session),
):
    category = await _get_category(session, category_id)
    if name is not None:
        if not name.strip():
            raise ValidationError("Name is required")
        category.name = name.strip()
    if slug is not None:
        category.slug = slugify(slug) or slugify(category.name)
    if description is not None:
        category.description = description or None
    if type is not None:
        category.type = parse_craft_type(type)
    if headimage is not None and headimage.filename:
        stored = await uploads.store_image(headimage)
        category.headimageurl = abs_url(request, stored.url)
    await session.commit()
    return category


@router.delete("/{category_id}/headimage", response_model=CategoryOut, dependencies=[Depends(require_admin)])
async def delete_headimage(category_id: int, session: AsyncSession = Depends(get_session)):
    category = await _get_category(session, category_id)
    category.headimageurl = None
    await session.commit()
    return category


@router.delete("/{category_id}", response_model=OkResponse, dependencies=[Depends(require_admin)])
async def delete_category(category_id: int, session: AsyncSession = Depends(get_session)):
    category = await _get_category(session, category_id)
    await session.execute(delete(ItemCategory).where(ItemCategory.category_id == category_id))
    await session.execute(delete(HeadCategoryCategory).where(HeadCategoryCategory.category_id == category_id))
    await session.delete(category)
    await session.commit()
    return OkResponse()
