"""Tests for the pydantic models.

Covers:
- ClientConfig endpoint derivation and secret masking
- ActionRequest.build validation
- Parameter overrides and cache fields
- SignedEnvelope wire format
- Relationship parameter rendering
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from onoffice.cache import make_cache_key
from onoffice.exceptions import InvalidRequestError
from onoffice.models import (
    API_BASE_URL,
    ActionId,
    ActionRequest,
    CacheConfig,
    ClientConfig,
    Credentials,
    RelationType,
    Relationship,
    RelationshipQuery,
    ResourceType,
    SignedEnvelope,
    plain_value,
)


class TestClientConfig:

    def test_defaults(self):
        cfg = ClientConfig(token="t", secret="s")
        assert cfg.api_version == "stable"
        assert cfg.cache.enabled is False
        assert cfg.cache.expiration_seconds == 300
        assert cfg.request.timeout == 30
        assert cfg.request.verify_ssl is True

    def test_endpoint_from_version(self):
        cfg = ClientConfig(token="t", secret="s", api_version="latest")
        assert cfg.endpoint_url == f"{API_BASE_URL}latest/api.php"

    def test_api_url_override(self):
        cfg = ClientConfig(token="t", secret="s", api_url="http://localhost/api.php")
        assert cfg.endpoint_url == "http://localhost/api.php"

    def test_unknown_version_rejected(self):
        with pytest.raises(ValidationError):
            ClientConfig(token="t", secret="s", api_version="beta")

    def test_negative_expiration_rejected(self):
        with pytest.raises(ValidationError):
            CacheConfig(expiration_seconds=-1)

    def test_secret_not_in_repr(self):
        cfg = ClientConfig(token="t", secret="hunter2")
        assert "hunter2" not in repr(cfg)
        assert "hunter2" not in repr(cfg.credentials)

    def test_credentials(self):
        assert ClientConfig(token="t", secret="s").credentials == Credentials(token="t", secret="s")


class TestActionRequest:

    def test_build_unwraps_enums(self):
        req = ActionRequest.build(ActionId.READ, ResourceType.ESTATE, {"data": ["Id"]})
        assert req.action_id == ActionId.READ.value
        assert req.resource_type == "estate"
        assert req.resource_id == ""
        assert req.identifier == ""
        assert req.parameters == {"data": ["Id"]}

    def test_build_accepts_empty_parameters(self):
        req = ActionRequest.build(ActionId.READ, "estate", {})
        assert req.parameters == {}

    def test_missing_parameters(self):
        with pytest.raises(InvalidRequestError, match="parameters"):
            ActionRequest.build(ActionId.READ, "estate", None)

    def test_non_mapping_parameters(self):
        with pytest.raises(InvalidRequestError, match="mapping"):
            ActionRequest.build(ActionId.READ, "estate", ["Id"])  # type: ignore[arg-type]

    def test_empty_action_id(self):
        with pytest.raises(InvalidRequestError, match="action id"):
            ActionRequest.build("", "estate", {})

    def test_empty_resource_type(self):
        with pytest.raises(InvalidRequestError, match="resource type"):
            ActionRequest.build(ActionId.READ, "", {})

    def test_build_copies_parameters(self):
        params = {"data": ["Id"]}
        req = ActionRequest.build(ActionId.READ, "estate", params)
        params["listlimit"] = 5
        assert "listlimit" not in req.parameters

    def test_with_parameters_overrides(self):
        req = ActionRequest.build(ActionId.READ, "estate", {"listlimit": 10, "data": ["Id"]})
        page = req.with_parameters(listoffset=500, listlimit=500)
        assert page.parameters == {"listlimit": 500, "data": ["Id"], "listoffset": 500}
        assert req.parameters == {"listlimit": 10, "data": ["Id"]}

    def test_frozen(self):
        req = ActionRequest.build(ActionId.READ, "estate", {})
        with pytest.raises(ValidationError):
            req.resource_type = "address"  # type: ignore[misc]

    def test_cache_fields(self):
        req = ActionRequest.build(ActionId.MODIFY, "estate", {"x": 1}, resource_id="42")
        assert req.cache_fields() == {
            "actionid": ActionId.MODIFY.value,
            "resourcetype": "estate",
            "resourceid": "42",
            "identifier": "",
            "parameters": {"x": 1},
        }

    def test_none_ids_sent_empty(self):
        req = ActionRequest.build(ActionId.READ, "estate", {}, resource_id=None, identifier=None)
        assert req.resource_id == ""
        assert req.identifier == ""
        assert make_cache_key(req) == make_cache_key(ActionRequest.build(ActionId.READ, "estate", {}))


class TestSignedEnvelope:

    def test_to_wire(self):
        req = ActionRequest.build(ActionId.READ, "estate", {"data": ["Id"]}, identifier="abc")
        env = SignedEnvelope(request=req, timestamp=123, hmac="CODE")
        assert env.to_wire() == {
            "actionid": ActionId.READ.value,
            "resourceid": "",
            "identifier": "abc",
            "resourcetype": "estate",
            "timestamp": 123,
            "hmac": "CODE",
            "hmac_version": "2",
            "parameters": {"data": ["Id"]},
        }


class TestRelationships:

    def test_query_omits_unset_sides(self):
        query = RelationshipQuery(relationtype=RelationType.OWNER, parentids=["1", "2"])
        assert query.to_parameters() == {
            "relationtype": RelationType.OWNER.value,
            "parentids": ["1", "2"],
        }

    def test_relationship_parameters(self):
        rel = Relationship(relationtype=RelationType.BUYER, parentid="42", childid="7")
        assert rel.to_parameters() == {
            "relationtype": RelationType.BUYER.value,
            "parentid": "42",
            "childid": "7",
        }

    def test_relationship_info(self):
        rel = Relationship(
            relationtype=RelationType.TENANT,
            parentid="1",
            childid="2",
            relationinfo={"note": "x"},
        )
        assert rel.to_parameters()["relationinfo"] == {"note": "x"}


def test_plain_value():
    assert plain_value(ResourceType.ADDRESS) == "address"
    assert plain_value("estate") == "estate"
    assert plain_value(5) == 5
