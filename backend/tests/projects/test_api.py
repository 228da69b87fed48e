"""
Tests for project group, project, milestone and task list endpoints.
"""

from decimal import Decimal

import pytest

from apps.projects.models import Project, ProjectGroup, TaskList
from apps.projects.services import project_resource
from tests.accounts.factories import UserFactory
from tests.bugs.factories import BugFactory
from tests.conftest import bearer_client
from tests.projects.factories import (
    MilestoneFactory,
    ProjectFactory,
    ProjectGroupFactory,
    TaskListFactory,
)
from tests.tasks.factories import TaskFactory
from tests.timetracking.factories import TimeLogFactory

JSON = "application/json"


@pytest.mark.django_db
class TestProjectGroups:
    def test_names_unique_per_tenant_case_insensitive(self, admin_user, other_company) -> None:
        """Alpha in T1, then alpha in T1 fails, then Alpha in T2 succeeds."""
        client = bearer_client(admin_user)
        other_admin = UserFactory.create(company=other_company, roles=["Admin"])

        first = client.post("/api/v1/project-groups", {"name": "Alpha"}, content_type=JSON)
        second = client.post("/api/v1/project-groups", {"name": "alpha"}, content_type=JSON)
        third = bearer_client(other_admin).post("/api/v1/project-groups", {"name": "Alpha"}, content_type=JSON)

        assert first.status_code == 201
        assert first.json()["data"]["project_count"] == 0
        assert first.json()["data"]["company_id"] == str(admin_user.company_id)
        assert second.status_code == 400
        assert second.json()["error"]["code"] == "DUPLICATE_FIELD"
        assert second.json()["error"]["details"] == {"field": "name"}
        assert third.status_code == 201

    def test_name_required(self, admin_client) -> None:
        response = admin_client.post("/api/v1/project-groups", {"name": "  "}, content_type=JSON)

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Project group name is required"

    def test_delete_ungroups_projects(self, admin_client, company) -> None:
        """Deleting a group referenced by 3 projects removes it and clears their group."""
        group = ProjectGroupFactory.create(company=company)
        projects = ProjectFactory.create_batch(3, company=company, project_group=group)

        response = admin_client.delete(f"/api/v1/project-groups/{group.pk}")

        assert response.status_code == 200
        assert not ProjectGroup.objects.filter(pk=group.pk).exists()
        for project in projects:
            project.refresh_from_db()
            assert project.project_group_id is None
            assert project.deleted_at is None
        listed = admin_client.get("/api/v1/project-groups").json()
        assert all(g["id"] != str(group.pk) for g in listed["data"])
        assert admin_client.get(f"/api/v1/project-groups/{group.pk}").status_code == 404

    def test_project_count_follows_membership(self, admin_client, company) -> None:
        group = ProjectGroupFactory.create(company=company)

        created = admin_client.post(
            "/api/v1/projects",
            {"title": "Grouped", "project_group_id": str(group.pk)},
            content_type=JSON,
        )
        group.refresh_from_db()
        assert group.project_count == 1

        admin_client.delete(f"/api/v1/projects/{created.json()['data']['id']}")
        group.refresh_from_db()
        assert group.project_count == 0

    def test_project_count_is_read_only(self, admin_client, company) -> None:
        group = ProjectGroupFactory.create(company=company)

        response = admin_client.put(
            f"/api/v1/project-groups/{group.pk}",
            {"project_count": 10},
            content_type=JSON,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.django_db
class TestProjects:
    def test_create_assigns_sequential_keys(self, admin_client, admin_user) -> None:
        keys = [
            admin_client.post("/api/v1/projects", {"title": f"P{i}"}, content_type=JSON).json()["data"]["project_key"]
            for i in range(3)
        ]

        assert keys == ["PR-001", "PR-002", "PR-003"]

    def test_keys_not_reused_after_delete(self, admin_client) -> None:
        first = admin_client.post("/api/v1/projects", {"title": "One"}, content_type=JSON).json()["data"]
        admin_client.delete(f"/api/v1/projects/{first['id']}")

        second = admin_client.post("/api/v1/projects", {"title": "Two"}, content_type=JSON).json()["data"]

        assert second["project_key"] == "PR-002"

    def test_owner_defaults_to_caller(self, admin_client, admin_user) -> None:
        response = admin_client.post("/api/v1/projects", {"title": "Mine"}, content_type=JSON)

        data = response.json()["data"]
        assert data["owner_id"] == str(admin_user.id)
        assert data["created_by_id"] == str(admin_user.id)
        assert data["status"] == "Active"

    def test_members_cannot_create(self, member_client) -> None:
        response = member_client.post("/api/v1/projects", {"title": "Nope"}, content_type=JSON)

        assert response.status_code == 403

    def test_owner_from_other_tenant_rejected(self, admin_client, other_company) -> None:
        outsider = UserFactory.create(company=other_company)

        response = admin_client.post(
            "/api/v1/projects",
            {"title": "X", "owner_id": str(outsider.id)},
            content_type=JSON,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REFERENCE"

    def test_end_before_start_rejected(self, admin_client) -> None:
        response = admin_client.post(
            "/api/v1/projects",
            {"title": "X", "start_date": "2025-05-02", "end_date": "2025-05-01"},
            content_type=JSON,
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "End date cannot be before start date"

    def test_company_cannot_change(self, admin_client, company, other_company) -> None:
        project = ProjectFactory.create(company=company)

        response = admin_client.put(
            f"/api/v1/projects/{project.pk}",
            {"company_id": str(other_company.id)},
            content_type=JSON,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "IMMUTABLE_FIELD"

    def test_rejected_update_leaves_record_untouched(self, admin_client, company, other_company) -> None:
        project = ProjectFactory.create(company=company, title="Original")

        response = admin_client.put(
            f"/api/v1/projects/{project.pk}",
            {"title": "Renamed", "company_id": str(other_company.id)},
            content_type=JSON,
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"]["field"] == "company_id"
        project.refresh_from_db()
        assert project.title == "Original"
        assert project.company_id == company.id

    def test_generated_key_cannot_change(self, admin_client, company) -> None:
        project = ProjectFactory.create(company=company)

        response = admin_client.put(
            f"/api/v1/projects/{project.pk}",
            {"project_key": "PR-999"},
            content_type=JSON,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "IMMUTABLE_FIELD"

    def test_deleted_at_cannot_be_set(self, admin_client, company) -> None:
        project = ProjectFactory.create(company=company)

        response = admin_client.put(
            f"/api/v1/projects/{project.pk}",
            {"deleted_at": "2025-01-01T00:00:00Z"},
            content_type=JSON,
        )

        assert response.json()["error"]["message"] == "deleted_at cannot be set directly"
        project.refresh_from_db()
        assert project.deleted_at is None

    def test_update_and_team_membership(self, admin_client, company, member_user) -> None:
        project = ProjectFactory.create(company=company)

        updated = admin_client.put(
            f"/api/v1/projects/{project.pk}",
            {"status": "On Hold", "allocated_hours": "120.5"},
            content_type=JSON,
        )
        added = admin_client.post(
            f"/api/v1/projects/{project.pk}/team",
            {"user_id": str(member_user.id)},
            content_type=JSON,
        )

        assert updated.json()["data"]["status"] == "On Hold"
        assert Decimal(str(updated.json()["data"]["allocated_hours"])) == Decimal("120.5")
        assert added.json()["data"]["team_member_ids"] == [str(member_user.id)]

        removed = admin_client.delete(f"/api/v1/projects/{project.pk}/team/{member_user.id}")
        assert removed.json()["data"]["team_member_ids"] == []

    def test_member_sees_only_own_or_public_projects(self, member_client, company, member_user) -> None:
        owned = ProjectFactory.create(company=company, owner=member_user)
        joined = ProjectFactory.create(company=company)
        joined.team_members.add(member_user)
        public = ProjectFactory.create(company=company, visibility=Project.Visibility.PUBLIC)
        hidden = ProjectFactory.create(company=company)

        response = member_client.get("/api/v1/projects")

        ids = {p["id"] for p in response.json()["data"]}
        assert ids == {str(owned.pk), str(joined.pk), str(public.pk)}
        assert member_client.get(f"/api/v1/projects/{hidden.pk}").status_code == 404

    def test_admin_sees_every_project_of_tenant_only(self, admin_client, company, other_company) -> None:
        ProjectFactory.create_batch(2, company=company)
        foreign = ProjectFactory.create(company=other_company)

        response = admin_client.get("/api/v1/projects")

        assert response.json()["pagination"]["total_count"] == 2
        assert admin_client.get(f"/api/v1/projects/{foreign.pk}").status_code == 404

    def test_filter_ungrouped(self, admin_client, company) -> None:
        group = ProjectGroupFactory.create(company=company)
        ProjectFactory.create(company=company, project_group=group)
        loose = ProjectFactory.create(company=company)

        response = admin_client.get("/api/v1/projects", {"project_group_id": "none"})

        assert [p["id"] for p in response.json()["data"]] == [str(loose.pk)]

    def test_statuses(self, member_client) -> None:
        response = member_client.get("/api/v1/projects/statuses")

        assert response.json()["data"] == list(Project.Status.values)

    def test_assignable_users_are_active_tenant_users(self, member_client, company, member_user, other_company) -> None:
        UserFactory.create(company=company, is_active=False)
        UserFactory.create(company=other_company)

        response = member_client.get("/api/v1/projects/users")

        assert [u["id"] for u in response.json()["data"]] == [str(member_user.id)]

    def test_stats(self, admin_client, company, admin_user) -> None:
        project = ProjectFactory.create(company=company)
        TaskFactory.create_batch(2, project=project)
        TaskFactory.create(project=project, status="Closed")
        BugFactory.create(project=project)
        TimeLogFactory.create(project=project, user=admin_user, hours=Decimal("3.00"))
        TimeLogFactory.create(project=project, user=admin_user, hours=Decimal("1.50"), billing_type="Non-Billable")

        response = admin_client.get(f"/api/v1/projects/{project.pk}/stats")

        data = response.json()["data"]
        assert {row["status"]: row["count"] for row in data["tasks"]} == {"1-Dev/Open": 2, "Closed": 1}
        assert data["bugs"] == [{"status": "Open", "count": 1}]
        assert Decimal(str(data["time_logs"]["total_hours"])) == Decimal("4.50")
        assert Decimal(str(data["time_logs"]["billable_hours"])) == Decimal("3.00")
        assert data["time_logs"]["non_billable_count"] == 1

    def test_delete_rolls_back_when_group_recount_fails(self, admin_ctx, company, monkeypatch) -> None:
        group = ProjectGroupFactory.create(company=company)
        project = ProjectFactory.create(company=company, project_group=group)

        def fail(self) -> None:
            raise RuntimeError("recount failed")

        monkeypatch.setattr(ProjectGroup, "refresh_project_count", fail)

        with pytest.raises(RuntimeError):
            project_resource.delete(admin_ctx, project.pk)

        project.refresh_from_db()
        assert project.deleted_at is None

    def test_delete_twice_is_not_found(self, admin_client, company) -> None:
        project = ProjectFactory.create(company=company)

        assert admin_client.delete(f"/api/v1/projects/{project.pk}").status_code == 200
        assert admin_client.delete(f"/api/v1/projects/{project.pk}").status_code == 404
        project.refresh_from_db()
        assert project.is_deleted

    def test_create_emits_after_commit(
        self, admin_client, relay_events, django_capture_on_commit_callbacks
    ) -> None:
        with django_capture_on_commit_callbacks(execute=True):
            response = admin_client.post("/api/v1/projects", {"title": "Live"}, content_type=JSON)

        project_id = response.json()["data"]["id"]
        [event] = relay_events.of_type("project:created")
        assert event.payload["id"] == project_id
        assert f"project:{project_id}" in event.room_ids


@pytest.mark.django_db
class TestMilestones:
    def test_crud(self, admin_client, company) -> None:
        project = ProjectFactory.create(company=company)

        created = admin_client.post(
            "/api/v1/milestones",
            {"project_id": str(project.pk), "name": "Beta", "due_date": "2025-09-01"},
            content_type=JSON,
        )
        milestone_id = created.json()["data"]["id"]
        updated = admin_client.put(
            f"/api/v1/milestones/{milestone_id}",
            {"status": "Completed"},
            content_type=JSON,
        )
        listed = admin_client.get("/api/v1/milestones", {"project_id": str(project.pk)})

        assert created.status_code == 201
        assert updated.json()["data"]["status"] == "Completed"
        assert [m["id"] for m in listed.json()["data"]] == [milestone_id]

    def test_name_required(self, admin_client, company) -> None:
        project = ProjectFactory.create(company=company)

        response = admin_client.post("/api/v1/milestones", {"project_id": str(project.pk)}, content_type=JSON)

        assert response.json()["error"]["message"] == "Milestone name is required"

    def test_delete_detaches_task_lists(self, admin_client, company) -> None:
        milestone = MilestoneFactory.create(project__company=company)
        task_list = TaskListFactory.create(project=milestone.project, related_milestone=milestone)

        admin_client.delete(f"/api/v1/milestones/{milestone.pk}")

        task_list.refresh_from_db()
        assert task_list.related_milestone_id is None
        assert task_list.deleted_at is None


@pytest.mark.django_db
class TestTaskLists:
    def test_order_defaults_to_end(self, member_client, company) -> None:
        project = ProjectFactory.create(company=company)
        TaskListFactory.create(project=project, order=4)

        response = member_client.post(
            "/api/v1/task-lists",
            {"project_id": str(project.pk), "name": "Backlog"},
            content_type=JSON,
        )

        assert response.json()["data"]["order"] == 5

    def test_milestone_from_other_project_rejected(self, member_client, company) -> None:
        project = ProjectFactory.create(company=company)
        foreign_milestone = MilestoneFactory.create(project__company=company)

        response = member_client.post(
            "/api/v1/task-lists",
            {"project_id": str(project.pk), "name": "L", "related_milestone_id": str(foreign_milestone.pk)},
            content_type=JSON,
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"] == {"field": "related_milestone_id"}

    def test_reorder(self, admin_client, company) -> None:
        project = ProjectFactory.create(company=company)
        first = TaskListFactory.create(project=project, order=1)
        second = TaskListFactory.create(project=project, order=2)
        foreign = TaskListFactory.create(project__company=company, order=1)

        response = admin_client.put(
            "/api/v1/task-lists/reorder",
            {
                "project_id": str(project.pk),
                "order": [
                    {"id": str(first.pk), "order": 2},
                    {"id": str(second.pk), "order": 1},
                    {"id": str(foreign.pk), "order": 9},
                ],
            },
            content_type=JSON,
        )

        assert response.status_code == 200
        orders = dict(TaskList.objects.values_list("pk", "order"))
        assert orders[first.pk] == 2
        assert orders[second.pk] == 1
        assert orders[foreign.pk] == 1

    def test_delete_keeps_tasks(self, member_client, company) -> None:
        task_list = TaskListFactory.create(project__company=company)
        task = TaskFactory.create(project=task_list.project, task_list=task_list)

        member_client.delete(f"/api/v1/task-lists/{task_list.pk}")

        task.refresh_from_db()
        assert task.task_list_id is None
        assert task.deleted_at is None

    def test_list_sorted_by_order(self, member_client, company) -> None:
        project = ProjectFactory.create(company=company)
        later = TaskListFactory.create(project=project, order=2)
        sooner = TaskListFactory.create(project=project, order=1)

        response = member_client.get("/api/v1/task-lists", {"project_id": str(project.pk)})

        assert [t["id"] for t in response.json()["data"]] == [str(sooner.pk), str(later.pk)]

