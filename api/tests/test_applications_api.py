"""Application API tests."""
import json

import pytest


def new_app(**overrides):
    data = {
        "appCode": "SL1",
        "name": "Sales Force Automation",
        "description": "Pipeline and opportunity tracking",
        "functionalDomains": ["Sales"],
        "technicalStack": ["React", "C#"],
        "status": "Active",
        "relatedApps": {"functional": ["MK1"], "technical": []},
        "stakeholders": {"productOwner": "Nicole Young"},
    }
    data.update(overrides)
    return data


class TestListApplications:

    def test_list_empty(self, client, auth_headers):
        response = client.get("/applications/", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_list_uses_camel_case(self, client, auth_headers, sample_applications):
        response = client.get("/applications/", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert [a["appCode"] for a in data] == ["FN1", "HR1"]
        hr = data[1]
        assert hr["functionalDomains"] == ["Human Resources"]
        assert hr["relatedApps"] == {"functional": ["FN1"], "technical": ["ZZ9"]}
        assert hr["stakeholders"]["productOwner"] == "Sarah Johnson"
        assert hr["stakeholders"]["devOpsEngineer"] == ""
        assert "createdAt" in hr and "updatedAt" in hr

    def test_server_side_search(self, client, auth_headers, sample_applications):
        response = client.get("/applications/", params={"search": "budget"}, headers=auth_headers)
        assert response.status_code == 200
        assert [a["appCode"] for a in response.json()] == ["FN1"]

    def test_list_unauthenticated(self, client):
        response = client.get("/applications/")
        assert response.status_code in (401, 403)


class TestBrowse:

    def test_domain_filter(self, client, auth_headers, sample_applications):
        response = client.get(
            "/applications/browse", params={"domains": ["Finance"]}, headers=auth_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert [a["appCode"] for a in data["items"]] == ["FN1"]
        assert data["filters"]["domains"] == ["Finance"]

    def test_fuzzy_query_and_status(self, client, auth_headers, sample_applications):
        response = client.get(
            "/applications/browse",
            params={"q": "sarah", "statuses": ["Active"]},
            headers=auth_headers,
        )
        assert [a["appCode"] for a in response.json()["items"]] == ["HR1"]

    def test_no_filters_returns_everything(self, client, auth_headers, sample_applications):
        response = client.get("/applications/browse", headers=auth_headers)
        assert response.json()["total"] == 2


class TestSuggestionsAndStats:

    def test_suggestions(self, client, auth_headers, sample_applications):
        response = client.get("/applications/suggestions", params={"q": "fin"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {
            "query": "fin",
            "suggestions": ["Financial Planning Tool", "Finance"],
        }

    def test_blank_suggestions(self, client, auth_headers, sample_applications):
        response = client.get("/applications/suggestions", params={"q": " "}, headers=auth_headers)
        assert response.json()["suggestions"] == []

    def test_stats(self, client, auth_headers, sample_applications):
        response = client.get("/applications/stats", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["totalApps"] == 2
        assert data["activeApps"] == 1
        assert data["inDevelopment"] == 1
        assert data["totalDomains"] == 3
        assert data["totalTechStack"] == 4

    def test_reference_data(self, client, auth_headers):
        data = client.get("/applications/reference", headers=auth_headers).json()
        assert "Finance" in data["functionalDomains"]
        assert data["statuses"] == ["Active", "Inactive", "Deprecated", "Under Development"]
        assert "Product Owner" in data["stakeholderRoles"]

    def test_next_code_is_unused(self, client, admin_headers, sample_applications):
        response = client.get("/applications/next-code", headers=admin_headers)
        assert response.status_code == 200
        code = response.json()["appCode"]
        assert len(code) == 3
        assert code not in {"HR1", "FN1"}

    def test_next_code_requires_admin(self, client, auth_headers):
        assert client.get("/applications/next-code", headers=auth_headers).status_code == 403


class TestGetApplication:

    def test_get(self, client, auth_headers, sample_applications):
        hr = sample_applications["HR1"]
        response = client.get(f"/applications/{hr.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["name"] == "Employee Management System"

    def test_get_not_found(self, client, auth_headers):
        response = client.get("/applications/9999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Application not found"

    def test_related_resolves_known_codes(self, client, auth_headers, sample_applications):
        hr = sample_applications["HR1"]
        response = client.get(f"/applications/{hr.id}/related", headers=auth_headers)
        assert response.status_code == 200
        related = {r["appCode"]: r for r in response.json()}
        assert related["FN1"]["relationshipType"] == "functional"
        assert related["FN1"]["application"]["name"] == "Financial Planning Tool"
        assert related["ZZ9"]["relationshipType"] == "technical"
        assert related["ZZ9"]["application"] is None


class TestCreateApplication:

    def test_create_success(self, client, admin_headers):
        response = client.post("/applications/", headers=admin_headers, json=new_app())
        assert response.status_code == 201
        data = response.json()
        assert data["appCode"] == "SL1"
        assert data["stakeholders"]["productOwner"] == "Nicole Young"
        assert data["relatedApps"]["functional"] == ["MK1"]

    def test_create_requires_admin(self, client, auth_headers):
        response = client.post("/applications/", headers=auth_headers, json=new_app())
        assert response.status_code == 403

    def test_create_duplicate_code(self, client, admin_headers, sample_applications):
        response = client.post("/applications/", headers=admin_headers, json=new_app(appCode="HR1"))
        assert response.status_code == 409
        assert "HR1" in response.json()["detail"]

    @pytest.mark.parametrize("code", ["H1", "HR12", "1HR", "H-1"])
    def test_create_invalid_code(self, client, admin_headers, code):
        response = client.post("/applications/", headers=admin_headers, json=new_app(appCode=code))
        assert response.status_code == 422

    def test_create_lowercase_code_is_normalized(self, client, admin_headers):
        response = client.post("/applications/", headers=admin_headers, json=new_app(appCode="sl2"))
        assert response.status_code == 201
        assert response.json()["appCode"] == "SL2"

    def test_create_blank_name(self, client, admin_headers):
        response = client.post("/applications/", headers=admin_headers, json=new_app(name="   "))
        assert response.status_code == 422

    def test_create_unknown_status(self, client, admin_headers):
        response = client.post("/applications/", headers=admin_headers, json=new_app(status="Retired"))
        assert response.status_code == 422

    def test_create_overlong_related_code(self, client, admin_headers):
        response = client.post(
            "/applications/",
            headers=admin_headers,
            json=new_app(relatedApps={"functional": ["X" * 11], "technical": []}),
        )
        assert response.status_code == 422

    def test_create_unknown_stakeholder_role(self, client, admin_headers):
        response = client.post(
            "/applications/",
            headers=admin_headers,
            json=new_app(stakeholders={"chiefWizard": "Merlin"}),
        )
        assert response.status_code == 422


class TestUpdateApplication:

    def test_update_success(self, client, admin_headers, sample_applications):
        fn = sample_applications["FN1"]
        response = client.put(
            f"/applications/{fn.id}",
            headers=admin_headers,
            json=new_app(appCode="FN1", name="Finance Planner", status="Active"),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Finance Planner"
        assert data["status"] == "Active"

    def test_update_not_found(self, client, admin_headers):
        response = client.put("/applications/9999", headers=admin_headers, json=new_app())
        assert response.status_code == 404

    def test_update_conflicting_code(self, client, admin_headers, sample_applications):
        fn = sample_applications["FN1"]
        response = client.put(f"/applications/{fn.id}", headers=admin_headers, json=new_app(appCode="HR1"))
        assert response.status_code == 409

    def test_update_requires_admin(self, client, auth_headers, sample_applications):
        fn = sample_applications["FN1"]
        response = client.put(f"/applications/{fn.id}", headers=auth_headers, json=new_app(appCode="FN1"))
        assert response.status_code == 403


class TestDeleteApplication:

    def test_delete_success(self, client, admin_headers, sample_applications):
        hr = sample_applications["HR1"]
        response = client.delete(f"/applications/{hr.id}", headers=admin_headers)
        assert response.status_code == 204
        assert client.get(f"/applications/{hr.id}", headers=admin_headers).status_code == 404

    def test_delete_not_found(self, client, admin_headers):
        assert client.delete("/applications/9999", headers=admin_headers).status_code == 404

    def test_delete_requires_admin(self, client, auth_headers, sample_applications):
        hr = sample_applications["HR1"]
        assert client.delete(f"/applications/{hr.id}", headers=auth_headers).status_code == 403


class TestImportExport:

    def test_export_download(self, client, auth_headers, sample_applications):
        response = client.get("/applications/export", headers=auth_headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert 'filename="applications-' in response.headers["content-disposition"]
        records = json.loads(response.text)
        assert sorted(r["appCode"] for r in records) == ["FN1", "HR1"]

    def test_import_skips_invalid_records(self, client, admin_headers):
        body = json.dumps([
            {"appCode": "CS1", "name": "Customer Support Portal", "functionalDomains": ["Customer Service"]},
            {"name": "No Code"},
        ])
        response = client.post(
            "/applications/import",
            headers={**admin_headers, "Content-Type": "application/json"},
            content=body,
        )
        assert response.status_code == 200
        data = response.json()
        assert [a["appCode"] for a in data["created"]] == ["CS1"]
        assert len(data["failed"]) == 1

        listed = client.get("/applications/", headers=admin_headers).json()
        assert [a["appCode"] for a in listed] == ["CS1"]

    def test_import_invalid_json(self, client, admin_headers):
        response = client.post("/applications/import", headers=admin_headers, content="not json")
        assert response.status_code == 400

    def test_import_requires_admin(self, client, auth_headers):
        response = client.post("/applications/import", headers=auth_headers, content="[]")
        assert response.status_code == 403

    def test_export_then_import_restores_catalog(self, client, admin_headers, sample_applications):
        exported = client.get("/applications/export", headers=admin_headers).text
        for app in sample_applications.values():
            client.delete(f"/applications/{app.id}", headers=admin_headers)

        response = client.post("/applications/import", headers=admin_headers, content=exported)

        assert response.status_code == 200
        restored = {a["appCode"]: a for a in client.get("/applications/", headers=admin_headers).json()}
        assert set(restored) == {"HR1", "FN1"}
        assert restored["HR1"]["stakeholders"]["productOwner"] == "Sarah Johnson"
        assert restored["HR1"]["relatedApps"]["technical"] == ["ZZ9"]
