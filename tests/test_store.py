"""Tests for the filesystem template store."""

from pathlib import Path

import pytest

from deploypilot.errors import TemplateNotFoundError
from deploypilot.templates.store import ConfigRecord, TemplateStore


def test_find_template_file(store: TemplateStore, template_root: Path):
    assert store.find_template_file("myapp") == template_root / "myapp" / "myapp-template.yaml"


def test_find_nested_template(tmp_path: Path):
    nested = tmp_path / "svc" / "chart" / "templates"
    nested.mkdir(parents=True)
    (nested / "svc-web-template.yml").write_text("a: ${b}\n")

    store = TemplateStore(tmp_path)

    assert store.find_template_file("svc").name == "svc-web-template.yml"
    assert store.read_template("svc") == "a: ${b}\n"


def test_missing_template(tmp_path: Path):
    (tmp_path / "empty").mkdir()
    store = TemplateStore(tmp_path)

    with pytest.raises(TemplateNotFoundError):
        store.find_template_file("empty")
    with pytest.raises(TemplateNotFoundError):
        store.find_template_file("absent")


def test_read_config(store: TemplateStore):
    record = store.read_config("myapp", "1.0.0")

    assert record.namespace == "team-a"
    assert record.placeholders["replica_count"] == "2"
    assert record.placeholders["app_name"] == "web"


def test_missing_config_is_none(store: TemplateStore):
    assert store.read_config("myapp", "9.9.9") is None


def test_config_must_be_mapping(store: TemplateStore, template_root: Path):
    (template_root / "myapp" / "config" / "2.0.0.yaml").write_text("- a\n- b\n")

    with pytest.raises(TemplateNotFoundError):
        store.read_config("myapp", "2.0.0")


def test_save_and_read_config(store: TemplateStore):
    store.save_config("myapp", "2.0.0", ConfigRecord(namespace="prod", placeholders={"tag": "2.0.0"}))

    record = store.read_config("myapp", "2.0.0")

    assert record == ConfigRecord(namespace="prod", placeholders={"tag": "2.0.0"})


def test_save_final(store: TemplateStore, template_root: Path):
    path = store.save_final("myapp", "2.0.0", "kind: ConfigMap\n")

    assert path == template_root / "myapp" / "myapp-2.0.0-final.yaml"
    assert store.relative_path(path) == "myapp/myapp-2.0.0-final.yaml"
    assert path.read_text() == "kind: ConfigMap\n"


def test_save_script(store: TemplateStore):
    path = store.save_script("myapp", "myapp-2.0.0-secret.yaml", "kind: Secret\n")

    assert store.relative_path(path) == "myapp/deploy-scripts/myapp-2.0.0-secret.yaml"


@pytest.mark.parametrize("name", ["../etc", "a/b", ".hidden", ""])
def test_unsafe_names_are_rejected(store: TemplateStore, name: str):
    with pytest.raises(TemplateNotFoundError):
        store.workload_dir(name)


def test_list_workloads(store: TemplateStore):
    assert store.list_workloads() == ["myapp"]
