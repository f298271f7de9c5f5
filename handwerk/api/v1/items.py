"""
Catalog item endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from handwerk.api.deps import get_featured_writer, get_uploads
from handwerk.auth import require_admin
from handwerk.db import get_session, session_factory
from handwerk.errors import NotFound, ValidationError
from handwerk.models import CHANNELS, Category, Item, ItemCategory
from handwerk.schemas import CategoryOut, HomeResponse, ItemOrders, ItemOut, OkResponse
from handwerk.services import ranking
from handwerk.services.featured import FeaturedSlotWriter
from handwerk.services.ordering import apply_orders
from handwerk.services.uploads import UploadService
from handwerk.utils.forms import parse_flag, parse_id_list, parse_price, parse_url_list
from handwerk.utils.paths import abs_url

router = APIRouter(prefix="/items", tags=["items"])


async def _get_item(session: AsyncSession, item_id: int) -> Item:
    item = await session.get(Item, item_id)
    if item is None:
        raise NotFound("Not found")
    return item


async def _check_categories(session: AsyncSession, category_ids: List[int]) -> None:
    for category_id in dict.fromkeys(category_ids):
        if await session.get(Category, category_id) is None:
            raise ValidationError(f"Unknown category: {category_id}")


async def _set_categories(session: AsyncSession, item_id: int, category_ids: List[int]) -> None:
    await _check_categories(session, category_ids)
    await session.execute(delete(ItemCategory).where(ItemCategory.item_id == item_id))
    for category_id in dict.fromkeys(category_ids):
        session.add(ItemCategory(item_id=item_id, category_id=category_id))


@router.get("", response_model=List[ItemOut])
async def list_items(session: AsyncSession = Depends(get_session)):
    rows = (await session.execute(select(Item))).scalars().all()
    return ranking.rank(rows)


@router.get("/home", response_model=HomeResponse)
async def home(session: AsyncSession = Depends(get_session)):
    ranked = ranking.rank((await session.execute(select(Item))).scalars().all())
    return HomeResponse(
        favorites=[ItemOut.model_validate(i) for i in ranking.select_favorites(ranked)],
        recent=[ItemOut.model_validate(i) for i in ranking.select_recent(ranked)],
    )


@router.get("/featured/{channel}", response_model=List[ItemOut])
async def featured(channel: str, session: AsyncSession = Depends(get_session)):
    if channel not in CHANNELS:
        raise NotFound("Not found")
    flag = getattr(Item, f"featured_{channel}")
    rows = (await session.execute(select(Item).where(flag.is_(True)))).scalars().all()
    return ranking.select_featured(rows, channel)


@router.patch("/orders", response_model=OkResponse, dependencies=[Depends(require_admin)])
async def update_orders(body: ItemOrders):
    await apply_orders(session_factory(), Item, body.items)
    return OkResponse()


@router.get("/{item_id}", response_model=ItemOut)
async def get_item(item_id: int, session: AsyncSession = Depends(get_session)):
    return await _get_item(session, item_id)


@router.get("/{item_id}/categories", response_model=List[CategoryOut])
async def item_categories(item_id: int, session: AsyncSession = Depends(get_session)):
    await _get_item(session, item_id)
    stmt = (
        select(Category)
        .join(ItemCategory, ItemCategory.category_id == Category.id)
        .where(ItemCategory.item_id == item_id)
        .order_by(Category.order, Category.name)
    )
    return (await session.execute(stmt)).scalars().all()


@router.post("", response_model=ItemOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_item(
    request: Request,
    name: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    categoryIds: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    uploads: UploadService = Depends(get_uploads),
    session: AsyncSession = Depends(get_session),
):
    name = name.strip()
    if not name:
        raise ValidationError("Name is required")
    category_ids = parse_id_list(categoryIds, "categoryIds") or []

    stored = await uploads.store_images(images or [])
    urls = [abs_url(request, s.url) for s in stored]

    item = Item(name=name, description=description or None, price=parse_price(price), images=urls or None)
    session.add(item)
    await session.flush()
    await _set_categories(session, item.id, category_ids)
    await session.commit()
    return item


@router.patch("/{item_id}", response_model=ItemOut, dependencies=[Depends(require_admin)])
async def update_item(
    item_id: int,
    request: Request,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    categoryIds: Optional[str] = Form(None),
    existingImagesOrder: Optional[str] = Form(None),
    is_favorite: Optional[str] = Form(None),
    featured_haken: Optional[str] = Form(None),
    featured_borduren: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    uploads: UploadService = Depends(get_uploads),
    writer: FeaturedSlotWriter = Depends(get_featured_writer),
    session: AsyncSession = Depends(get_session),
):
    item = await _get_item(session, item_id)
    if name is not None and not name.strip():
        raise ValidationError("Name is required")
    category_ids = parse_id_list(categoryIds, "categoryIds")
    images_order = parse_url_list(existingImagesOrder, "existingImagesOrder")
    favorite = parse_flag(is_favorite, "is_favorite")
    flags = {
        "haken": parse_flag(featured_haken, "featured_haken"),
        "borduren": parse_flag(featured_borduren, "featured_borduren"),
    }
    if images_order is not None:
        unknown = [u for u in images_order if u not in (item.images or [])]
        if unknown:
            raise ValidationError("existingImagesOrder contains unknown images")
    if category_ids is not None:
        await _check_categories(session, category_ids)
    stored = await uploads.store_images(images or [])

    # flags commit on their own, so every other check must already have passed
    if favorite is not None:
        await writer.set_favorite(item_id, favorite)
    for channel, on in flags.items():
        if on is not None:
            await writer.set_featured(item_id, channel, on)
    await session.refresh(item)

    new_urls = [abs_url(request, s.url) for s in stored]
    kept = images_order if images_order is not None else list(item.images or [])
    merged = kept + new_urls

    if name is not None:
        item.name = name.strip()
    if description is not None:
        item.description = description or None
    if price is not None:
        item.price = parse_price(price)
    item.images = merged or None
    if category_ids is not None:
        await _set_categories(session, item_id, category_ids)
    await session.commit()
    await session.refresh(item)
    return item


@router.delete("/{item_id}", response_model=OkResponse, dependencies=[Depends(require_admin)])
async def delete_item(item_id: int, session: AsyncSession = Depends(get_session)):
    item = await _get_item(session, item_id)
    await session.execute(delete(ItemCategory).where(ItemCategory.item_id == item_id))
    await session.delete(item)
    await session.commit()
    return OkResponse()
