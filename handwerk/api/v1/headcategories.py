"""
Head category endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from handwerk.api.deps import get_uploads
from handwerk.auth import require_admin
from handwerk.db import get_session, session_factory
from handwerk.errors import NotFound, ValidationError
from handwerk.models import Category, HeadCategory, HeadCategoryCategory
from handwerk.schemas import CategoryOut, HeadCategoryOrders, HeadCategoryOut, OkResponse
from handwerk.services.ordering import apply_orders
from handwerk.services.uploads import UploadService
from handwerk.utils.forms import parse_craft_type, parse_id_list
from handwerk.utils.paths import abs_url, slugify

router = APIRouter(prefix="/headcategories", tags=["headcategories"])


async def _get_headcategory(session: AsyncSession, headcategory_id: int) -> HeadCategory:
    headcategory = await session.get(HeadCategory, headcategory_id)
    if headcategory is None:
        raise NotFound("Not found")
    return headcategory


@router.get("", response_model=List[HeadCategoryOut])
async def list_headcategories(session: AsyncSession = Depends(get_session)):
    stmt = select(HeadCategory).order_by(HeadCategory.order, HeadCategory.name)
    return (await session.execute(stmt)).scalars().all()


@router.patch("/orders", response_model=OkResponse, dependencies=[Depends(require_admin)])
async def update_orders(body: HeadCategoryOrders):
    await apply_orders(session_factory(), HeadCategory, body.headcategories)
    return OkResponse()


@router.get("/{headcategory_id}", response_model=HeadCategoryOut)
async def get_headcategory(headcategory_id: int, session: AsyncSession = Depends(get_session)):
    return await _get_headcategory(session, headcategory_id)


@router.get("/{headcategory_id}/categories", response_model=List[CategoryOut])
async def headcategory_categories(headcategory_id: int, session: AsyncSession = Depends(get_session)):
    await _get_headcategory(session, headcategory_id)
    stmt = (
        select(Category)
        .join(HeadCategoryCategory, HeadCategoryCategory.category_id == Category.id)
        .where(HeadCategoryCategory.headcategory_id == headcategory_id)
        .order_by(Category.order, Category.name)
    )
    return (await session.execute(stmt)).scalars().all()


@router.post("", response_model=HeadCategoryOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_headcategory(
    request: Request,
    name: str = Form(""),
    slug: str = Form(""),
    description: str = Form(""),
    type: str = Form(""),
    headimage: Optional[UploadFile] = File(None),
    uploads: UploadService = Depends(get_uploads),
    session: AsyncSession = Depends(get_session),
):
    name = name.strip()
    if not name:
        raise ValidationError("Name is required")
    headimageurl = None
    if headimage is not None and headimage.filename:
        stored = await uploads.store_image(headimage)
        headimageurl = abs_url(request, stored.url)
    headcategory = HeadCategory(
        name=name,
        slug=slugify(slug) or slugify(name),
        description=description or None,
        type=parse_craft_type(type),
        headimageurl=headimageurl,
    )
    session.add(headcategory)
    await session.commit()
    return headcategory


@router.patch("/{headcategory_id}", response_model=HeadCategoryOut, dependencies=[Depends(require_admin)])
async def update_headcategory(
    headcategory_id: int,
    request: Request,
    name: Optional[str] = Form(None),
    slug: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    categoryIds: Optional[str] = Form(None),
    headimage: Optional[UploadFile] = File(None),
    uploads: UploadService = Depends(get_uploads),
    session: AsyncSession = Depends(get_session),
):
    headcategory = await _get_headcategory(session, headcategory_id)
    category_ids = parse_id_list(categoryIds, "categoryIds")
    if name is not None:
        if not name.strip():
            raise ValidationError("Name is required")
        headcategory.name = name.strip()
    if slug is not None:
        headcategory.slug = slugify(slug) or slugify(headcategory.name)
    if description is not None:
        headcategory.description = description or None
    if type is not None:
        headcategory.type = parse_craft_type(type)
    if headimage is not None and headimage.filename:
        stored = await uploads.store_image(headimage)
        headcategory.headimageurl = abs_url(request, stored.url)
    if category_ids is not None:
        await session.execute(
            delete(HeadCategoryCategory).where(HeadCategoryCategory.headcategory_id == headcategory_id)
        )
        for category_id in dict.fromkeys(category_ids):
            if await session.get(Category, category_id) is None:
                raise ValidationError(f"Unknown category: {category_id}")
            session.add(HeadCategoryCategory(headcategory_id=headcategory_id, category_id=category_id))
    await session.commit()
    return headcategory


@router.delete("/{headcategory_id}/headimage", response_model=HeadCategoryOut, dependencies=[Depends(require_admin)])
async def delete_headimage(headcategory_id: int, session: AsyncSession = Depends(get_session)):
    headcategory = await _get_headcategory(session, headcategory_id)
    headcategory.headimageurl = None
    await session.commit()
    return headcategory


@router.delete("/{headcategory_id}", response_model=OkResponse, dependencies=[Depends(require_admin)])
async def delete_headcategory(headcategory_id: int, session: AsyncSession = Depends(get_session)):
    headcategory = await _get_headcategory(session, headcategory_id)
    await session.execute(
        delete(HeadCategoryCategory).where(HeadCategoryCategory.headcategory_id == headcategory_id)
    )
    await session.delete(headcategory)
    await session.commit()
    return OkResponse()
