"""
Django Ninja API configuration.
"""

from django.http import HttpRequest
from ninja import NinjaAPI

from apps.accounts.api import auth_router, users_router
from apps.bugs.api import router as bugs_router
from apps.companies.api import companies_router, organizations_router
from apps.core.errors import register_exception_handlers
from apps.notifications.api import router as notifications_router
from apps.projects.api import milestones_router, project_groups_router, projects_router, task_lists_router
from apps.tasks.api import comments_router, tasks_router
from apps.timetracking.api import timelogs_router, timesheets_router

api = NinjaAPI(
    title="Project Management API",
    version="1.0.0",
    description="Multi-tenant projects, tasks, bugs and time tracking.",
    openapi_extra={
        "info": {
            "contact": {"name": "API Support"},
        },
        "tags": [
            {"name": "auth", "description": "Current principal"},
            {"name": "users", "description": "Company user directory and administration"},
            {"name": "companies", "description": "Tenants"},
            {"name": "project-groups", "description": "Named groupings of projects"},
            {"name": "projects", "description": "Projects, their team and progress"},
            {"name": "tasks", "description": "Tasks, kanban board and task comments"},
            {"name": "bugs", "description": "Defect tracking"},
            {"name": "timelogs", "description": "Logged hours and their approval"},
            {"name": "timesheets", "description": "Timesheet review workflow"},
            {"name": "notifications", "description": "Per-user inbox"},
            {"name": "health", "description": "Service health and readiness checks"},
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT",
                    "description": "Signed access token. Include as: Authorization: Bearer <token>",
                }
            }
        },
    },
)

register_exception_handlers(api)

# Register routers
api.add_router("/auth", auth_router)
api.add_router("/users", users_router)
api.add_router("/companies", companies_router)
api.add_router("/organizations", organizations_router)
api.add_router("/project-groups", project_groups_router)
api.add_router("/projects", projects_router)
api.add_router("/milestones", milestones_router)
api.add_router("/task-lists", task_lists_router)
api.add_router("/tasks", tasks_router)
api.add_router("/comments", comments_router)
api.add_router("/bugs", bugs_router)
api.add_router("/timelogs", timelogs_router)
api.add_router("/timesheets", timesheets_router)
api.add_router("/notifications", notifications_router)


@api.get("/health", tags=["health"], operation_id="healthCheck", summary="Health check")
def health_check(request: HttpRequest) -> dict:
    """Health check endpoint for load balancer."""
    return {"status": "ok"}
