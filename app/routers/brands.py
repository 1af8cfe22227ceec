# app/routers/brands.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.i18n import Language, get_language
from app.database import get_session
from app.repositories.catalog_repo import CatalogRepository
from app.schemas.common import ApiResponse
from app.schemas.product import BrandRead
from app.services.catalog_service import CatalogService

router = APIRouter(prefix="/brands", tags=["Catalog"])

service = CatalogService(CatalogRepository())


@router.get("", response_model=ApiResponse[list[BrandRead]])
def list_brands(
    session: Session = Depends(get_session),
    lang: Language = Depends(get_language),
):
    """Active brands ordered by name, with active product counts."""
    return ApiResponse[list[BrandRead]](data=service.list_brands(session, lang))
