from django.apps import AppConfig
from django.db.models.signals import post_migrate


def create_default_roles(sender, **kwargs):
    from .models import Role
    for role, _ in Role.ROLE_CHOICES:
        Role.objects.get_or_create(name=role)


class AccountConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'account'

    def ready(self):
        post_migrate.connect(create_default_roles, sender=self)
