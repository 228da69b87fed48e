"""
Companies API schemas - tenants and their organizations.
"""

from datetime import datetime
from uuid import UUID

from ninja import Schema
from pydantic import Field

from apps.core.schemas import ListParams, PaginationOut, PartialUpdate, Payload, ResourceOut

# --- Companies ---


class CompanyOut(Schema):
    id: UUID
    name: str
    domain: str
    logo: str
    allow_user_registration: bool
    default_role: str
    created_at: datetime
    updated_at: datetime


class CompanyCreate(Payload):
    name: str | None = Field(None, examples=["Acme Corp"])
    domain: str | None = Field(None, examples=["acme.com"])
    logo: str | None = None
    allow_user_registration: bool | None = None
    default_role: str | None = Field(None, description="Role given to invited users without explicit roles")


class CompanyUpdate(PartialUpdate):
    name: str | None = None
    domain: str | None = None
    logo: str | None = None
    allow_user_registration: bool | None = None
    default_role: str | None = None


class CompanyListParams(ListParams):
    pass


class CompanyResponse(Schema):
    success: bool = True
    data: CompanyOut


class CompanyListResponse(Schema):
    success: bool = True
    data: list[CompanyOut]
    pagination: PaginationOut


# --- Organizations ---


class OrganizationOut(ResourceOut):
    name: str
    description: str


class OrganizationCreate(Payload):
    name: str | None = Field(None, description="Unique (case-insensitive) within the company")
    description: str | None = None


class OrganizationUpdate(PartialUpdate):
    name: str | None = None
    description: str | None = None


class OrganizationListParams(ListParams):
    pass


class OrganizationResponse(Schema):
    success: bool = True
    data: OrganizationOut


class OrganizationListResponse(Schema):
    success: bool = True
    data: list[OrganizationOut]
    pagination: PaginationOut
