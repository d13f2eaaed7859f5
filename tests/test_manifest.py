"""Tests for the manifest reader."""

import json

import pytest

from epistery_host.agents import (
    read_manifest, parse_manifest,
    ManifestNotFoundError, ManifestParseError, ManifestValidationError,
)


def test_read_full_manifest(tmp_path):
    """Test reading a manifest with every consumed field."""
    path = tmp_path / "epistery.json"
    path.write_text(json.dumps({
        "name": "@geistm/adnet-agent",
        "version": "1.2.3",
        "main": "index.mjs",
        "command": "npm start",
        "description": "Ad network",
        "config": {"rate": 5, "nested": {"a": 1}},
        "permissions": ["wallet:read"],
        "title": "AdNet",
        "icon": "/agent/geistm/adnet-agent/icon.svg",
        "widget": {"height": 200},
        "noUserInterface": True,
        "homepage": "https://example.com",
    }))

    manifest = read_manifest(path)

    assert manifest.name == "@geistm/adnet-agent"
    assert manifest.version == "1.2.3"
    assert manifest.entry_point == "index.mjs"
    assert manifest.start_command == "npm start"
    assert manifest.config == {"rate": 5, "nested": {"a": 1}}
    assert manifest.permissions == ["wallet:read"]
    assert manifest.widget == {"height": 200}
    assert manifest.no_user_interface is True
    # Unknown keys are kept
    assert manifest.model_extra["homepage"] == "https://example.com"


def test_defaults():
    """Test optional fields default sensibly."""
    manifest = parse_manifest('{"name": "simple-agent"}')

    assert manifest.version is None
    assert manifest.config == {}
    assert manifest.permissions == []
    assert manifest.no_user_interface is False


def test_display_names():
    """Test simple_name and display_name derivation."""
    manifest = parse_manifest('{"name": "@geistm/adnet-agent"}')
    assert manifest.simple_name == "adnet-agent"
    assert manifest.display_name == "adnet-agent"

    titled = parse_manifest('{"name": "@geistm/adnet-agent", "title": "AdNet"}')
    assert titled.display_name == "AdNet"


def test_missing_name_is_not_a_reader_error():
    """A nameless manifest parses; the loader decides what to do with it."""
    manifest = parse_manifest('{"version": "1.0.0"}')
    assert manifest.name is None


def test_not_found(tmp_path):
    with pytest.raises(ManifestNotFoundError):
        read_manifest(tmp_path / "missing.json")


def test_invalid_json(tmp_path):
    path = tmp_path / "epistery.json"
    path.write_text("{not json")

    with pytest.raises(ManifestParseError):
        read_manifest(path)


def test_non_object_json():
    with pytest.raises(ManifestParseError):
        parse_manifest('["a", "b"]')


def test_required_fields():
    with pytest.raises(ManifestValidationError) as exc:
        parse_manifest('{"version": "1.0.0", "name": ""}', required=["name"])
    assert "name" in str(exc.value)


def test_wrong_field_type():
    with pytest.raises(ManifestValidationError) as exc:
        parse_manifest('{"name": "x", "config": "not-a-map"}')
    assert "config" in str(exc.value)


def test_null_fields_fall_back_to_defaults():
    """Explicit nulls behave like absent keys."""
    manifest = parse_manifest('{"name": "nullcfg", "config": null, "permissions": null, "noUserInterface": null}')

    assert manifest.config == {}
    assert manifest.permissions == []
    assert manifest.no_user_interface is False
