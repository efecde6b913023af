"""
Tests for the license gate.

WHY: OIDC availability and the seat limit are both read from settings;
the seat check has to count users created by the running transaction.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sso.core.exceptions import LicenseLimitExceededError
from workspace_sso.models.user import UserStatus
from workspace_sso.services.license_service import LicenseService, OIDC_FEATURE
from tests.factories import UserFactory


class TestFeatureFlags:
    def test_licensed_feature_is_enabled(self, test_settings):
        assert LicenseService(test_settings).is_feature_enabled(OIDC_FEATURE) is True

    def test_unlicensed_feature_is_disabled(self, test_settings):
        test_settings.LICENSE_FEATURES = []
        assert LicenseService(test_settings).is_feature_enabled(OIDC_FEATURE) is False


class TestSeatLimit:
    @pytest.mark.asyncio
    async def test_no_limit_configured(self, db_session: AsyncSession, test_settings):
        await UserFactory.create(db_session, email="a@acme.com")
        await LicenseService(test_settings).validate_license(db_session)

    @pytest.mark.asyncio
    async def test_within_limit(self, db_session: AsyncSession, test_settings):
        test_settings.LICENSE_MAX_USERS = 1
        await UserFactory.create(db_session, email="a@acme.com")
        await LicenseService(test_settings).validate_license(db_session)

    @pytest.mark.asyncio
    async def test_over_limit_raises(self, db_session: AsyncSession, test_settings):
        test_settings.LICENSE_MAX_USERS = 1
        await UserFactory.create(db_session, email="a@acme.com")
        await UserFactory.create(db_session, email="b@acme.com")

        with pytest.raises(LicenseLimitExceededError) as exc_info:
            await LicenseService(test_settings).validate_license(db_session)

        assert exc_info.value.status_code == 451
        assert exc_info.value.context == {"user_count": 2, "max_users": 1}

    @pytest.mark.asyncio
    async def test_archived_users_do_not_take_a_seat(self, db_session: AsyncSession, test_settings):
        test_settings.LICENSE_MAX_USERS = 1
        await UserFactory.create(db_session, email="a@acme.com")
        await UserFactory.create(db_session, email="gone@acme.com", status=UserStatus.ARCHIVED)

        await LicenseService(test_settings).validate_license(db_session)
