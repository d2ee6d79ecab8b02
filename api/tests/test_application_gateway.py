"""Tests for the application data gateway."""
import pytest
from sqlalchemy.exc import OperationalError

from catalog.models.application import (
    Application as ApplicationRow,
    ApplicationRelationship,
    ApplicationStakeholder,
)
from catalog.schemas.application import ApplicationCreate, ApplicationUpdate
from catalog.services.application_gateway import DuplicateAppCodeError, GatewayError


def payload(**overrides):
    data = {
        "appCode": "MK1",
        "name": "Digital Marketing Hub",
        "description": "Campaigns and lead nurturing",
        "functionalDomains": ["Marketing"],
        "technicalStack": ["Python"],
        "status": "Active",
    }
    data.update(overrides)
    return data


class TestCreate:

    def test_create_returns_stored_application(self, gateway):
        created = gateway.create_application(ApplicationCreate.model_validate(payload(
            stakeholders={"productOwner": "Amanda White", "leadDeveloper": "  "},
            relatedApps={"functional": ["SL1"], "technical": []},
        )))

        assert created.id is not None
        assert created.app_code == "MK1"
        assert created.stakeholders.product_owner == "Amanda White"
        assert created.stakeholders.lead_developer == ""
        assert created.related_apps.functional == ["SL1"]
        assert created.updated_at >= created.created_at

    def test_blank_stakeholders_are_not_stored(self, gateway, db_session):
        created = gateway.create_application(ApplicationCreate.model_validate(payload(
            stakeholders={"productOwner": "Amanda White"},
        )))
        rows = db_session.query(ApplicationStakeholder).filter(
            ApplicationStakeholder.application_id == created.id
        ).all()
        assert [(r.role, r.name) for r in rows] == [("productOwner", "Amanda White")]

    def test_missing_optional_fields_get_defaults(self, gateway):
        created = gateway.create_application(ApplicationCreate.model_validate({
            "appCode": "ab1",
            "name": "Minimal",
            "status": None,
            "description": None,
        }))
        assert created.app_code == "AB1"
        assert created.status == "Under Development"
        assert created.description == ""
        assert created.functional_domains == []
        assert created.stakeholders.names() == [""] * 6

    def test_duplicate_app_code_rejected(self, gateway, sample_applications):
        with pytest.raises(DuplicateAppCodeError):
            gateway.create_application(ApplicationCreate.model_validate(payload(appCode="HR1")))

    def test_database_failure_becomes_gateway_error(self, gateway, db_session, monkeypatch):
        def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("connection lost"))

        monkeypatch.setattr(db_session, "commit", broken_commit)
        with pytest.raises(GatewayError):
            gateway.create_application(ApplicationCreate.model_validate(payload()))


class TestRead:

    def test_list_most_recently_updated_first(self, gateway, sample_applications):
        codes = [app.app_code for app in gateway.list_applications()]
        assert codes == ["FN1", "HR1"]

    def test_get_application(self, gateway, sample_applications):
        hr = sample_applications["HR1"]
        fetched = gateway.get_application(hr.id)
        assert fetched == hr

    def test_get_missing_application(self, gateway):
        assert gateway.get_application(9999) is None

    def test_get_by_codes_ignores_unknown(self, gateway, sample_applications):
        found = gateway.get_by_codes(["hr1", "ZZ9"])
        assert list(found) == ["HR1"]

    def test_existing_codes(self, gateway, sample_applications):
        assert gateway.existing_app_codes() == {"HR1", "FN1"}

    def test_unknown_stakeholder_role_is_skipped(self, gateway, db_session, sample_applications, caplog):
        hr = sample_applications["HR1"]
        db_session.add(ApplicationStakeholder(application_id=hr.id, role="chiefWizard", name="Merlin"))
        db_session.commit()

        fetched = gateway.get_application(hr.id)

        assert "Merlin" not in fetched.stakeholders.names()
        assert "unknown role" in caplog.text


class TestSearch:

    def test_matches_name_description_and_code(self, gateway, sample_applications):
        assert [a.app_code for a in gateway.search_applications("planning")] == ["FN1"]
        assert [a.app_code for a in gateway.search_applications("PAYROLL")] == ["HR1"]
        assert [a.app_code for a in gateway.search_applications("hr1")] == ["HR1"]

    def test_does_not_match_domains(self, gateway, sample_applications):
        assert gateway.search_applications("Human Resources") == []

    @pytest.mark.parametrize("query", ["_", "%", "H_1", "%1"])
    def test_like_wildcards_match_literally(self, gateway, sample_applications, query):
        assert gateway.search_applications(query) == []

    def test_literal_percent_in_name(self, gateway, sample_applications):
        gateway.create_application(ApplicationCreate(appCode="IT5", name="Uptime 100% Monitor"))
        assert [a.app_code for a in gateway.search_applications("100%")] == ["IT5"]
        assert [a.app_code for a in gateway.search_applications("e_1")] == []

    def test_blank_query_lists_everything(self, gateway, sample_applications):
        assert gateway.search_applications("  ") == gateway.list_applications()


class TestUpdate:

    def test_update_rewrites_fields(self, gateway, sample_applications):
        hr = sample_applications["HR1"]
        updated = gateway.update_application(hr.id, ApplicationUpdate.model_validate(payload(
            appCode="HR1", name="People Platform", status="Deprecated",
        )))
        assert updated.name == "People Platform"
        assert updated.status == "Deprecated"
        assert updated.created_at == hr.created_at
        assert updated.updated_at >= hr.updated_at

    def test_omitted_children_are_kept(self, gateway, sample_applications):
        hr = sample_applications["HR1"]
        updated = gateway.update_application(hr.id, ApplicationUpdate.model_validate(payload(appCode="HR1")))
        assert updated.stakeholders == hr.stakeholders
        assert updated.related_apps == hr.related_apps

    def test_supplied_children_replace_existing(self, gateway, db_session, sample_applications):
        hr = sample_applications["HR1"]
        updated = gateway.update_application(hr.id, ApplicationUpdate.model_validate(payload(
            appCode="HR1",
            stakeholders={"governanceManager": "Lisa Anderson"},
            relatedApps={"functional": [], "technical": ["IT1"]},
        )))
        assert updated.stakeholders.product_owner == ""
        assert updated.stakeholders.governance_manager == "Lisa Anderson"
        assert updated.related_apps.functional == []
        assert updated.related_apps.technical == ["IT1"]
        assert db_session.query(ApplicationStakeholder).filter(
            ApplicationStakeholder.application_id == hr.id
        ).count() == 1

    def test_update_to_taken_code_rejected(self, gateway, sample_applications):
        hr = sample_applications["HR1"]
        with pytest.raises(DuplicateAppCodeError):
            gateway.update_application(hr.id, ApplicationUpdate.model_validate(payload(appCode="FN1")))

    def test_update_missing_returns_none(self, gateway):
        assert gateway.update_application(9999, ApplicationUpdate.model_validate(payload())) is None


class TestDelete:

    def test_delete_removes_children(self, gateway, db_session, sample_applications):
        hr = sample_applications["HR1"]
        assert gateway.delete_application(hr.id) is True

        assert db_session.get(ApplicationRow, hr.id) is None
        assert db_session.query(ApplicationStakeholder).filter(
            ApplicationStakeholder.application_id == hr.id
        ).count() == 0
        assert db_session.query(ApplicationRelationship).filter(
            ApplicationRelationship.source_app_id == hr.id
        ).count() == 0

    def test_delete_leaves_dangling_references(self, gateway, sample_applications):
        gateway.delete_application(sample_applications["FN1"].id)
        hr = gateway.get_application(sample_applications["HR1"].id)
        assert hr.related_apps.functional == ["FN1"]

    def test_delete_missing_returns_false(self, gateway):
        assert gateway.delete_application(9999) is False
