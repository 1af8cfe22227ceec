# app/routers/categories.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.i18n import Language, get_language
from app.database import get_session
from app.repositories.catalog_repo import CatalogRepository
from app.schemas.common import ApiResponse
from app.schemas.product import CategoryRead
from app.services.catalog_service import CatalogService

router = APIRouter(prefix="/categories", tags=["Catalog"])

repo = CatalogRepository()
service = CatalogService(repo)


@router.get("", response_model=ApiResponse[list[CategoryRead]])
def list_categories(
    session: Session = Depends(get_session),
    lang: Language = Depends(get_language),
):
    """
    Active categories ordered by sort order, with active product counts.
    """
    return ApiResponse[list[CategoryRead]](data=service.list_categories(session, lang))


@router.get("/{slug}", response_model=ApiResponse[CategoryRead])
def get_category(
    slug: str,
    session: Session = Depends(get_session),
    lang: Language = Depends(get_language),
):
    return ApiResponse[CategoryRead](data=service.get_category(session, slug, lang))
