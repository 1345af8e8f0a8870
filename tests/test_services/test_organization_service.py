"""
Tests for organization_service.
"""

import pytest

from wematch.access import RouteClass
from wematch.exceptions import ConflictError, NotFoundError
from wematch.services import organization_service
from wematch.services.query_service import Pagination


class TestOrganizationService:
    def test_create_and_get(self, admin, ctx_for):
        created = organization_service.create_organization(
            {"name": "Open Data Lab", "location": "Accra"},
            ctx_for(admin, RouteClass.ADMIN),
        )
        fetched = organization_service.get_organization(created.id)
        assert fetched.to_dict()["name"] == "Open Data Lab"
        assert fetched.location == "Accra"

    def test_duplicate_name_conflicts(self, admin, organization, ctx_for):
        with pytest.raises(ConflictError):
            organization_service.create_organization(
                {"name": organization.name}, ctx_for(admin, RouteClass.ADMIN)
            )

    def test_list_searches_by_name(self, make_organization):
        make_organization("Alpha Works")
        make_organization("Beta Guild")

        page = organization_service.get_organizations(Pagination(), name="guild")
        assert [org.name for org in page.items] == ["Beta Guild"]

    def test_search_wildcards_match_literally(self, make_organization):
        make_organization("Alpha Works")
        make_organization("Beta_Guild")

        assert organization_service.get_organizations(Pagination(), name="%").items == []
        page = organization_service.get_organizations(Pagination(), name="_")
        assert [org.name for org in page.items] == ["Beta_Guild"]

    def test_member_may_update_own_organization(self, org_user, organization, ctx_for):
        updated = organization_service.update_organization(
            organization.id, {"website": "https://acme.example"}, ctx_for(org_user)
        )
        assert updated.website == "https://acme.example"

    def test_member_of_another_organization_gets_not_found(
        self, other_org_user, organization, ctx_for
    ):
        with pytest.raises(NotFoundError):
            organization_service.update_organization(
                organization.id, {"name": "Taken Over"}, ctx_for(other_org_user)
            )
        assert organization_service.get_organization(organization.id).name == "Acme Foundation"

    def test_delete_in_use_conflicts(self, admin, organization, ctx_for):
        # The admin fixture is a member of the organization.
        with pytest.raises(ConflictError):
            organization_service.delete_organization(
                organization.id, ctx_for(admin, RouteClass.ADMIN)
            )

    def test_delete_unused(self, admin, make_organization, ctx_for):
        empty = make_organization("Empty Org")
        ctx = ctx_for(admin, RouteClass.ADMIN)

        organization_service.delete_organization(empty.id, ctx)
        with pytest.raises(NotFoundError):
            organization_service.delete_organization(empty.id, ctx)
