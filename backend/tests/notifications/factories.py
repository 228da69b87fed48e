"""
Factories for notifications app models.
"""

import factory
from factory.django import DjangoModelFactory

from apps.notifications.models import Notification
from tests.accounts.factories import UserFactory


class NotificationFactory(DjangoModelFactory):
    class Meta:
        model = Notification

    recipient = factory.SubFactory(UserFactory)
    company = factory.SelfAttribute("recipient.company")
    type = Notification.Type.TASK_ASSIGNED
    title = "New Task Assigned"
    message = factory.Faker("sentence")
