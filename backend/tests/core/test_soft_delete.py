"""
Tests for soft delete infrastructure.

Tests cover:
- SoftDeleteMixin behavior (soft_delete, restore, hard_delete)
- SoftDeleteQuerySet alive() / dead() / bulk soft_delete()
- Partial unique constraints that only consider active rows
"""

import time

import pytest

from apps.accounts.models import User
from apps.companies.models import Company
from tests.accounts.factories import UserFactory
from tests.companies.factories import CompanyFactory


@pytest.mark.django_db
class TestSoftDeleteMixin:
    """Tests for SoftDeleteMixin methods and properties."""

    def test_is_deleted_false_by_default(self) -> None:
        """New records should not be marked as deleted."""
        company = CompanyFactory.create()

        assert company.is_deleted is False
        assert company.deleted_at is None

    def test_soft_delete_sets_timestamp(self) -> None:
        """soft_delete() should set deleted_at and keep the row."""
        company = CompanyFactory.create()

        company.soft_delete()

        company.refresh_from_db()
        assert company.is_deleted is True
        assert Company.objects.filter(pk=company.pk).exists()

    def test_soft_delete_updates_updated_at(self) -> None:
        """soft_delete() should also update the updated_at field."""
        company = CompanyFactory.create()
        original_updated_at = company.updated_at
        time.sleep(0.01)  # Ensure time difference

        company.soft_delete()

        company.refresh_from_db()
        assert company.updated_at > original_updated_at

    def test_soft_delete_skip_timestamp_update(self) -> None:
        """soft_delete(update_timestamp=False) should not update updated_at."""
        company = CompanyFactory.create()
        original_updated_at = company.updated_at

        company.soft_delete(update_timestamp=False)

        company.refresh_from_db()
        assert company.is_deleted is True
        assert company.updated_at == original_updated_at

    def test_restore_clears_deleted_at(self) -> None:
        company = CompanyFactory.create()
        company.soft_delete()

        company.restore()

        company.refresh_from_db()
        assert company.is_deleted is False

    def test_hard_delete_removes_from_database(self) -> None:
        company = CompanyFactory.create()
        company_id = company.pk

        company.hard_delete()

        assert not Company.objects.filter(pk=company_id).exists()


@pytest.mark.django_db
class TestSoftDeleteQuerySet:
    """Nothing is filtered implicitly; callers pick alive() or dead()."""

    def test_alive_excludes_deleted(self) -> None:
        active = CompanyFactory.create()
        deleted = CompanyFactory.create()
        deleted.soft_delete()

        alive = Company.objects.alive()

        assert list(alive) == [active]

    def test_dead_returns_only_deleted(self) -> None:
        CompanyFactory.create()
        deleted = CompanyFactory.create()
        deleted.soft_delete()

        assert list(Company.objects.dead()) == [deleted]

    def test_all_includes_deleted(self) -> None:
        CompanyFactory.create()
        CompanyFactory.create().soft_delete()

        assert Company.objects.count() == 2

    def test_bulk_soft_delete(self) -> None:
        """soft_delete() on a queryset marks every row and returns the count."""
        first = CompanyFactory.create(name="Test One")
        second = CompanyFactory.create(name="Test Two")
        CompanyFactory.create(name="Other")

        count = Company.objects.filter(name__startswith="Test").soft_delete()

        assert count == 2
        first.refresh_from_db()
        second.refresh_from_db()
        assert first.is_deleted and second.is_deleted
        assert Company.objects.alive().count() == 1


@pytest.mark.django_db
class TestActiveUniqueness:
    def test_deleted_user_email_can_be_reused(self) -> None:
        """The email constraint only covers active users."""
        company = CompanyFactory.create()
        old = UserFactory.create(company=company, email="jane@example.com")
        old.soft_delete()

        new = UserFactory.create(company=company, email="JANE@example.com")

        assert new.pk != old.pk
        assert User.objects.filter(email__iexact="jane@example.com").count() == 2
