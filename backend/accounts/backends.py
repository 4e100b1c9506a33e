"""
Login by username or e-mail.

Registered first in ``settings.AUTHENTICATION_BACKENDS``; the login
serializer calls ``authenticate(identifier=..., password=...)``.
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend
from django.db.models import Q

logger = logging.getLogger(__name__)

User = get_user_model()


class MultiFieldAuthBackend(ModelBackend):
    """Resolve ``identifier`` against the username, then the e-mail address."""

    @staticmethod
    def _lookup(identifier: str):
        matches = list(
            User.objects.filter(Q(username=identifier) | Q(email__iexact=identifier))[:2]
        )
        if len(matches) != 1:
            # An e-mail shared by two accounts is ambiguous.
            return None
        return matches[0]

    def authenticate(self, request, identifier=None, password=None, **kwargs):
        if not identifier or password is None:
            return None

        user = self._lookup(identifier.strip())
        if user is None:
            # Hash anyway so unknown identifiers take as long as known ones.
            User().set_password(password)
            return None

        if not user.check_password(password):
            logger.info("Rejected login for user %s: bad password.", user.pk)
            return None
        if not self.user_can_authenticate(user):
            logger.info("Rejected login for user %s: account inactive.", user.pk)
            return None
        return user
