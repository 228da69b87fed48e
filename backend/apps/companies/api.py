"""
Companies API endpoints - tenants and organizations.
"""

from uuid import UUID

from django.http import HttpRequest
from ninja import Query, Router

from apps.companies.schemas import (
    CompanyCreate,
    CompanyListParams,
    CompanyListResponse,
    CompanyResponse,
    CompanyUpdate,
    OrganizationCreate,
    OrganizationListParams,
    OrganizationListResponse,
    OrganizationResponse,
    OrganizationUpdate,
)
from apps.companies.services import company_service, organization_resource
from apps.core.resources import list_response
from apps.core.schemas import ErrorResponse, MessageResponse, envelope
from apps.core.security import BearerAuth, get_auth_context

bearer_auth = BearerAuth()

companies_router = Router(tags=["companies"], auth=bearer_auth)
organizations_router = Router(tags=["organizations"], auth=bearer_auth)


# --- Companies ---


@companies_router.get(
    "",
    response=CompanyListResponse,
    summary="List companies",
    description="Super admins see every company; other users only their own.",
)
def list_companies(request: HttpRequest, params: Query[CompanyListParams]):
    return list_response(company_service, get_auth_context(request), params)


@companies_router.get("/current", response=CompanyResponse, summary="Get the caller's company")
def get_current_company(request: HttpRequest):
    return envelope(get_auth_context(request).company)


@companies_router.get("/{company_id}", response={200: CompanyResponse, 404: ErrorResponse}, summary="Get company")
def get_company(request: HttpRequest, company_id: UUID):
    return envelope(company_service.get(get_auth_context(request), company_id))


@companies_router.post(
    "",
    response={201: CompanyResponse, 400: ErrorResponse, 403: ErrorResponse},
    summary="Create company",
)
def create_company(request: HttpRequest, payload: CompanyCreate):
    company = company_service.create(get_auth_context(request), payload.as_payload())
    return 201, envelope(company)


@companies_router.put(
    "/{company_id}",
    response={200: CompanyResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Update company",
)
def update_company(request: HttpRequest, company_id: UUID, payload: CompanyUpdate):
    company = company_service.update(get_auth_context(request), company_id, payload.as_payload())
    return envelope(company)


@companies_router.delete(
    "/{company_id}",
    response={200: MessageResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Delete company",
)
def delete_company(request: HttpRequest, company_id: UUID):
    company_service.delete(get_auth_context(request), company_id)
    return {"success": True, "message": "Company deleted successfully"}


# --- Organizations ---


@organizations_router.get("", response=OrganizationListResponse, summary="List organizations")
def list_organizations(request: HttpRequest, params: Query[OrganizationListParams]):
    return list_response(organization_resource, get_auth_context(request), params)


@organizations_router.get(
    "/{organization_id}",
    response={200: OrganizationResponse, 404: ErrorResponse},
    summary="Get organization",
)
def get_organization(request: HttpRequest, organization_id: UUID):
    return envelope(organization_resource.get(get_auth_context(request), organization_id))


@organizations_router.post(
    "",
    response={201: OrganizationResponse, 400: ErrorResponse, 403: ErrorResponse},
    summary="Create organization",
)
def create_organization(request: HttpRequest, payload: OrganizationCreate):
    organization = organization_resource.create(get_auth_context(request), payload.as_payload())
    return 201, envelope(organization)


@organizations_router.put(
    "/{organization_id}",
    response={200: OrganizationResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Update organization",
)
def update_organization(request: HttpRequest, organization_id: UUID, payload: OrganizationUpdate):
    organization = organization_resource.update(get_auth_context(request), organization_id, payload.as_payload())
    return envelope(organization)


@organizations_router.delete(
    "/{organization_id}",
    response={200: MessageResponse, 403: ErrorResponse, 404: ErrorResponse},
    summary="Delete organization",
)
def delete_organization(request: HttpRequest, organization_id: UUID):
    organization_resource.delete(get_auth_context(request), organization_id)
    return {"success": True, "message": "Organization deleted successfully"}
