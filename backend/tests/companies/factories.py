"""
Factories for companies app models.
"""

import factory
from factory.django import DjangoModelFactory

from apps.companies.models import Company, Organization


class CompanyFactory(DjangoModelFactory):
    """Factory for Company model (a tenant)."""

    class Meta:
        model = Company

    name = factory.Faker("company")
    domain = factory.Sequence(lambda n: f"company{n}.example.com")


class OrganizationFactory(DjangoModelFactory):
    class Meta:
        model = Organization

    company = factory.SubFactory(CompanyFactory)
    name = factory.Sequence(lambda n: f"Division {n}")
