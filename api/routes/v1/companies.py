"""
api/routes/v1/companies.py -- Company directory REST endpoints.

Routes:
  POST   /api/v1/companies                -- create
  GET    /api/v1/companies                -- paginated list, ?page=&size=&name=
  GET    /api/v1/companies/{company_id}   -- one company
  PUT    /api/v1/companies/{company_id}   -- update
  DELETE /api/v1/companies/{company_id}   -- delete

All routes require a valid access token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from api.models import CompanyCreate, CompanyPage, CompanyResponse, CompanyUpdate, Meta
from auth.dependencies import get_current_principal
from auth.models import Principal
from company.models import Company
from company.store import CompanyStore
from core.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, page_meta

router = APIRouter()


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "not_found", "message": "Company not found."},
    )


@router.post("/companies", response_model=CompanyResponse, status_code=201)
def create_company(
    request: Request,
    body: CompanyCreate,
    principal: Principal = Depends(get_current_principal),
) -> CompanyResponse:
    store: CompanyStore = request.app.state.company_store
    company_id = store.create_company(Company(**body.model_dump()))
    created = store.get_company(company_id)
    if created is None:
        raise HTTPException(
            status_code=500,
            detail={"code": "internal_error", "message": "Company not found after write."},
        )
    return CompanyResponse.from_company(created)


@router.get("/companies", response_model=CompanyPage)
def list_companies(
    request: Request,
    page: int = Query(default=1, ge=1),
    size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    name: str | None = Query(default=None, max_length=255),
    principal: Principal = Depends(get_current_principal),
) -> CompanyPage:
    store: CompanyStore = request.app.state.company_store
    companies, total = store.list_companies(page, size, name=name)
    return CompanyPage(
        meta=Meta.from_page_meta(page_meta(page, size, total)),
        result=[CompanyResponse.from_company(c) for c in companies],
    )


@router.get("/companies/{company_id}", response_model=CompanyResponse)
def get_company(
    request: Request,
    company_id: int,
    principal: Principal = Depends(get_current_principal),
) -> CompanyResponse:
    store: CompanyStore = request.app.state.company_store
    company = store.get_company(company_id)
    if company is None:
        raise _not_found()
    return CompanyResponse.from_company(company)


@router.put("/companies/{company_id}", response_model=CompanyResponse)
def update_company(
    request: Request,
    company_id: int,
    body: CompanyUpdate,
    principal: Principal = Depends(get_current_principal),
) -> CompanyResponse:
    store: CompanyStore = request.app.state.company_store
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise HTTPException(
            status_code=400,
            detail={"code": "no_changes", "message": "No fields to update."},
        )
    if not store.update_company(company_id, **changes):
        raise _not_found()
    return CompanyResponse.from_company(store.get_company(company_id))


@router.delete("/companies/{company_id}", status_code=204)
def delete_company(
    request: Request,
    company_id: int,
    principal: Principal = Depends(get_current_principal),
) -> Response:
    store: CompanyStore = request.app.state.company_store
    if not store.delete_company(company_id):
        raise _not_found()
    return Response(status_code=204)
