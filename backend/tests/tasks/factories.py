"""
Factories for tasks app models.
"""

import factory
from factory.django import DjangoModelFactory

from apps.tasks.models import Comment, Task
from tests.projects.factories import ProjectFactory


class TaskFactory(DjangoModelFactory):
    class Meta:
        model = Task

    project = factory.SubFactory(ProjectFactory)
    company = factory.SelfAttribute("project.company")
    task_key = factory.Sequence(lambda n: f"F-T{n:03d}")
    name = factory.Sequence(lambda n: f"Task {n}")

    @factory.post_generation
    def assignees(self, create, extracted, **kwargs):
        if create and extracted:
            self.assignees.set(extracted)


class CommentFactory(DjangoModelFactory):
    class Meta:
        model = Comment

    task = factory.SubFactory(TaskFactory)
    company = factory.SelfAttribute("task.company")
    content = factory.Faker("sentence")
