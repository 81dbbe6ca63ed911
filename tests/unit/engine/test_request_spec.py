"""
Tests for request spec models.
"""

import pytest

from replay_runtime.engine.request_spec import (
    AuthType,
    BasicAuthStorageRef,
    BodyType,
    KeyValue,
    RequestSpec,
)
from replay_runtime.interfaces.storage import StorageKind


class TestRequestSpec:
    """Test validating recorded request specs."""
    
    def test_minimal_spec(self):
        spec = RequestSpec.model_validate({"url": "https://api.example.com/projects"})
        assert spec.method == "get"
        assert spec.params == []
        assert spec.headers == []
        assert spec.auth.type == AuthType.NONE
        assert spec.body.type == BodyType.NONE
    
    def test_null_sections(self):
        spec = RequestSpec.model_validate({
            "url": "https://x/y",
            "method": None,
            "params": None,
            "headers": None,
            "auth": None,
            "body": None,
        })
        assert spec.method == "get"
        assert spec.auth.token_storages == []
        assert spec.body.form_data == []
    
    def test_url_is_required(self):
        with pytest.raises(ValueError):
            RequestSpec.model_validate({"method": "get"})
    
    def test_recorder_shape(self):
        spec = RequestSpec.model_validate({
            "url": "https://x/login",
            "method": "post",
            "auth": {
                "type": "basic",
                "basic_auth_storages": [
                    {"type": "sessionStorage", "usernameKey": "u", "passwordKey": "p"},
                ],
            },
            "body": {"type": "form", "formData": [{"name": "remember", "value": True}]},
        })
        ref = spec.auth.basic_auth_storages[0]
        assert ref.type == StorageKind.SESSION_STORAGE
        assert ref.username_key == "u"
        assert ref.password_key == "p"
        assert spec.body.form_data[0].value is True
    
    def test_storage_ref_by_field_name(self):
        ref = BasicAuthStorageRef(type=StorageKind.COOKIE, username_key="u", password_key="p")
        assert ref.username_key == "u"
    
    def test_key_value_pairs(self):
        spec = RequestSpec(url="https://x/y", params=[("a", "1")], headers=[("X-Trace", "t")])
        assert spec.params[0].key == "a"
        assert spec.headers[0].value == "t"
    
    @pytest.mark.parametrize("key,value,blank", [
        ("a", "1", False),
        ("", "1", True),
        ("  ", "1", True),
        ("a", "", True),
        (None, "1", True),
        ("a", 0, False),
    ])
    def test_key_value_blank(self, key, value, blank):
        assert KeyValue(key=key, value=value).is_blank is blank
    
    def test_unknown_auth_type_rejected(self):
        with pytest.raises(ValueError):
            RequestSpec.model_validate({"url": "https://x", "auth": {"type": "oauth"}})


class TestStorageKind:
    """Test storage kind names."""
    
    def test_camel_case(self):
        assert StorageKind("localStorage") is StorageKind.LOCAL_STORAGE
    
    def test_snake_case_aliases(self):
        assert StorageKind("local_storage") is StorageKind.LOCAL_STORAGE
        assert StorageKind("session_storage") is StorageKind.SESSION_STORAGE
        assert StorageKind("cookies") is StorageKind.COOKIE
    
    def test_unknown(self):
        with pytest.raises(ValueError):
            StorageKind("indexedDB")
