"""
Tests for the opportunities blueprint: multipart create, listing
filters, scoping and role checks.
"""

import io

import pytest

from wematch.models.enums import Category, PaymentType


def _form(**overrides):
    data = {
        "title": "Climate Data Internship",
        "description": "Clean and publish emissions datasets.",
        "category": "TECH",
        "opportunityType": "INTERNSHIP",
        "experienceLevel": "ENTRY",
        "paymentType": "PAID",
        "location": "Lisbon",
    }
    data.update(overrides)
    return data


class TestPublicListing:
    @pytest.fixture(autouse=True)
    def _setup(self, organization, make_opportunity):
        make_opportunity(
            "Tech Paid", organization=organization, category=Category.TECH,
            payment_type=PaymentType.PAID,
        )
        make_opportunity(
            "Nonprofit Unpaid", organization=organization,
            category=Category.NONPROFIT, payment_type=PaymentType.UNPAID,
        )

    def test_anonymous_can_list(self, client):
        response = client.get("/opportunities/all")
        assert response.status_code == 200
        body = response.get_json()
        assert body["meta"]["total"] == 2
        assert len(body["items"]) == 2

    def test_category_filter(self, client):
        tech = client.get("/opportunities/all?category=TECH").get_json()
        nonprofit = client.get("/opportunities/all?category=nonprofit").get_json()

        assert [item["title"] for item in tech["items"]] == ["Tech Paid"]
        assert [item["title"] for item in nonprofit["items"]] == ["Nonprofit Unpaid"]

    def test_invalid_enum_is_400(self, client):
        response = client.get("/opportunities/all?category=ASTROLOGY")
        assert response.status_code == 400
        assert "category" in response.get_json()["error"]["details"]

    def test_invalid_sort_is_400(self, client):
        response = client.get("/opportunities/all?sort=password:asc")
        assert response.status_code == 400

    @pytest.mark.parametrize("query", ["page=0", "limit=0", "limit=1000", "page=abc"])
    def test_bad_pagination_is_400(self, client, query):
        response = client.get(f"/opportunities/all?{query}")
        assert response.status_code == 400

    def test_created_after_accepts_z_suffix(self, client):
        response = client.get("/opportunities/all?createdAfter=2000-01-01T00:00:00Z")
        assert response.status_code == 200
        assert response.get_json()["meta"]["total"] == 2

    def test_limit_two(self, client, organization, make_opportunity):
        for index in range(3):
            make_opportunity(f"Extra {index}", organization=organization)

        body = client.get("/opportunities/all?page=1&limit=2").get_json()
        assert len(body["items"]) == 2
        assert body["meta"] == {"page": 1, "limit": 2, "total": 5, "pages": 3}


class TestByUser:
    def test_create_multipart_with_image(self, client, org_user, bearer):
        data = _form()
        data["image"] = (io.BytesIO(b"\x89PNGfake"), "poster.png")

        response = client.post(
            "/opportunities/byUser",
            data=data,
            headers=bearer(org_user),
            content_type="multipart/form-data",
        )

        assert response.status_code == 201
        body = response.get_json()
        assert body["userId"] == org_user.id
        assert body["image"].endswith(".png")

        image = client.get(f"/images/{body['image']}")
        assert image.status_code == 200

    def test_create_json(self, client, org_user, bearer):
        response = client.post("/opportunities/byUser", json=_form(), headers=bearer(org_user))
        assert response.status_code == 201
        assert response.get_json()["image"] is None

    def test_missing_fields_are_400(self, client, org_user, bearer):
        response = client.post(
            "/opportunities/byUser", json={"title": "Only a title"}, headers=bearer(org_user)
        )
        assert response.status_code == 400
        details = response.get_json()["error"]["details"]
        assert {"description", "category", "location"} <= set(details)

    def test_plain_user_is_403(self, client, regular_user, bearer):
        response = client.post("/opportunities/byUser", json=_form(), headers=bearer(regular_user))
        assert response.status_code == 403
        assert response.get_json()["error"]["kind"] == "authorization_error"

    def test_anonymous_is_401(self, client):
        response = client.get("/opportunities/byUser")
        assert response.status_code == 401

    def test_non_owner_gets_404(self, client, org_user, other_org_user, make_opportunity, bearer):
        posting = make_opportunity("Mine", user=org_user)

        for method in ("get", "patch", "delete"):
            kwargs = {"headers": bearer(other_org_user)}
            if method == "patch":
                kwargs["json"] = {"title": "Theirs now"}
            response = getattr(client, method)(f"/opportunities/byUser/{posting.id}", **kwargs)
            assert response.status_code == 404, method

        still = client.get(f"/opportunities/byUser/{posting.id}", headers=bearer(org_user))
        assert still.get_json()["title"] == "Mine"

    def test_patch_changes_only_sent_fields(self, client, org_user, make_opportunity, bearer):
        posting = make_opportunity("Before", user=org_user, location="Oslo")

        response = client.patch(
            f"/opportunities/byUser/{posting.id}",
            json={"title": "After", "paymentType": "stipend"},
            headers=bearer(org_user),
        )

        assert response.status_code == 200
        body = response.get_json()
        assert body["title"] == "After"
        assert body["paymentType"] == "STIPEND"
        assert body["location"] == "Oslo"

    def test_delete_twice(self, client, org_user, make_opportunity, bearer):
        posting = make_opportunity(user=org_user)
        url = f"/opportunities/byUser/{posting.id}"

        assert client.delete(url, headers=bearer(org_user)).status_code == 204
        assert client.delete(url, headers=bearer(org_user)).status_code == 404

    def test_list_own(self, client, org_user, other_org_user, make_opportunity, bearer):
        make_opportunity("Mine", user=org_user)
        make_opportunity("Theirs", user=other_org_user)

        body = client.get("/opportunities/byUser", headers=bearer(org_user)).get_json()
        assert [item["title"] for item in body["items"]] == ["Mine"]


class TestAdminPath:
    def test_admin_create_for_own_organization(self, client, admin, organization, bearer):
        response = client.post("/opportunities", json=_form(), headers=bearer(admin))
        assert response.status_code == 201
        assert response.get_json()["organizationId"] == organization.id

    def test_organization_role_is_403(self, client, org_user, bearer):
        response = client.post("/opportunities", json=_form(), headers=bearer(org_user))
        assert response.status_code == 403

    def test_admin_list_update_delete(self, client, admin, organization, make_opportunity, bearer):
        posting = make_opportunity("Org Role", organization=organization)

        listing = client.get("/opportunities", headers=bearer(admin)).get_json()
        assert [item["id"] for item in listing["items"]] == [posting.id]

        patched = client.patch(
            f"/opportunities/{posting.id}", json={"category": "design"}, headers=bearer(admin)
        )
        assert patched.get_json()["category"] == "DESIGN"

        assert client.delete(f"/opportunities/{posting.id}", headers=bearer(admin)).status_code == 204
        assert client.delete(f"/opportunities/{posting.id}", headers=bearer(admin)).status_code == 404


class TestJsonBodies:
    def test_null_organization_falls_back_to_callers(self, client, admin, organization, bearer):
        response = client.post(
            "/opportunities", json=_form(organizationId=None), headers=bearer(admin)
        )
        assert response.status_code == 201
        assert response.get_json()["organizationId"] == organization.id

    def test_number_as_text_is_accepted(self, client, org_user, bearer):
        response = client.post(
            "/opportunities/byUser", json=_form(title=123), headers=bearer(org_user)
        )
        assert response.status_code == 201
        assert response.get_json()["title"] == "123"

    @pytest.mark.parametrize("value", [["Intern"], {"text": "Intern"}])
    def test_nested_value_is_400(self, client, org_user, bearer, value):
        response = client.post(
            "/opportunities/byUser", json=_form(title=value), headers=bearer(org_user)
        )
        assert response.status_code == 400
        assert "title" in response.get_json()["error"]["details"]

    @pytest.mark.parametrize("url", ["/opportunities", "/opportunities/byUser"])
    def test_body_must_be_an_object(self, client, admin, url, bearer):
        response = client.post(url, json=["x"], headers=bearer(admin))
        assert response.status_code == 400
        assert response.get_json()["error"]["kind"] == "validation_error"

    def test_null_required_field_is_400(self, client, org_user, bearer):
        response = client.post(
            "/opportunities/byUser", json=_form(location=None), headers=bearer(org_user)
        )
        assert response.status_code == 400
        assert "location" in response.get_json()["error"]["details"]

    def test_image_in_json_is_400(self, client, org_user, bearer):
        response = client.post(
            "/opportunities/byUser", json=_form(image="poster.png"), headers=bearer(org_user)
        )
        assert response.status_code == 400
        assert "image" in response.get_json()["error"]["details"]

    def test_patch_null_leaves_field_unchanged(self, client, org_user, make_opportunity, bearer):
        posting = make_opportunity("Keep me", user=org_user)

        response = client.patch(
            f"/opportunities/byUser/{posting.id}",
            json={"title": None, "location": "Porto"},
            headers=bearer(org_user),
        )

        assert response.status_code == 200
        assert response.get_json()["title"] == "Keep me"
        assert response.get_json()["location"] == "Porto"
