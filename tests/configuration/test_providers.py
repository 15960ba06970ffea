import json

import pytest

from settings_store.configuration import (
    ChangeNotifier,
    EnvironmentConfigurationProvider,
    JsonFileConfigurationProvider,
    MemoryConfigurationProvider,
)


@pytest.mark.unit
class TestChangeNotifier:
    """Tests for the change notification signal."""

    def test_notify_calls_subscribers(self):
        notifier = ChangeNotifier()
        calls = []
        notifier.subscribe(lambda: calls.append("a"))
        notifier.subscribe(lambda: calls.append("b"))

        notifier.notify()

        assert calls == ["a", "b"]

    def test_unsubscribe(self):
        notifier = ChangeNotifier()
        calls = []
        unsubscribe = notifier.subscribe(lambda: calls.append(1))

        unsubscribe()
        unsubscribe()
        notifier.notify()

        assert calls == []


@pytest.mark.unit
class TestMemoryConfigurationProvider:
    """Tests for the static in-memory provider."""

    def test_lookup(self):
        provider = MemoryConfigurationProvider({"Email:Host": "example.com"})
        provider.load()

        assert provider.try_get("Email:Host") == (True, "example.com")
        assert provider.try_get("Email:Port") == (False, None)
        assert provider.get("Email:Port", "25") == "25"
        assert "Email:Host" in provider
        assert provider.keys() == ["Email:Host"]

    def test_empty_before_load(self):
        provider = MemoryConfigurationProvider({"a": "1"})
        assert "a" not in provider

    def test_caller_mapping_is_copied(self):
        source = {"a": "1"}
        provider = MemoryConfigurationProvider(source)
        source["a"] = "2"
        provider.load()

        assert provider.get("a") == "1"

    def test_data_is_read_only(self):
        provider = MemoryConfigurationProvider({"a": "1"})
        provider.load()

        with pytest.raises(TypeError):
            provider.data["a"] = "2"

    def test_reload_notifies(self):
        provider = MemoryConfigurationProvider({"a": "1"})
        calls = []
        provider.on_change(lambda: calls.append(1))

        provider.load()
        assert calls == []

        provider.load(reload=True)
        assert calls == [1]


@pytest.mark.integration
class TestJsonFileConfigurationProvider:
    """Tests for JSON file parsing."""

    def test_nested_document_is_flattened(self, tmp_path):
        path = tmp_path / "appsettings.json"
        path.write_text(json.dumps({
            "Email": {
                "Host": "example.com",
                "Port": 25,
                "UseTls": True,
                "Ratio": 0.5,
                "Recipients": ["a@example.com", "b@example.com"],
                "Footer": None,
            },
        }))
        provider = JsonFileConfigurationProvider(path)
        provider.load()

        assert dict(provider.data) == {
            "Email:Host": "example.com",
            "Email:Port": "25",
            "Email:UseTls": "true",
            "Email:Ratio": "0.5",
            "Email:Recipients:0": "a@example.com",
            "Email:Recipients:1": "b@example.com",
            "Email:Footer": "",
        }

    def test_missing_optional_file_is_empty(self, tmp_path):
        provider = JsonFileConfigurationProvider(tmp_path / "missing.json", optional=True)
        provider.load()

        assert provider.keys() == []

    def test_missing_required_file_raises(self, tmp_path):
        provider = JsonFileConfigurationProvider(tmp_path / "missing.json")

        with pytest.raises(FileNotFoundError):
            provider.load()

    def test_non_object_root_raises(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")

        with pytest.raises(ValueError):
            JsonFileConfigurationProvider(path).load()

    def test_reload_picks_up_file_changes(self, tmp_path):
        path = tmp_path / "appsettings.json"
        path.write_text(json.dumps({"Email": {"Host": "old.example.com"}}))
        provider = JsonFileConfigurationProvider(path)
        provider.load()
        calls = []
        provider.on_change(lambda: calls.append(1))

        path.write_text(json.dumps({"Email": {"Host": "new.example.com"}}))
        provider.load(reload=True)

        assert provider.get("Email:Host") == "new.example.com"
        assert calls == [1]

    def test_name_mentions_file(self, tmp_path):
        provider = JsonFileConfigurationProvider(tmp_path / "appsettings.json", optional=True)
        assert "appsettings.json" in provider.name
        assert "Optional" in provider.name


@pytest.mark.unit
class TestEnvironmentConfigurationProvider:
    """Tests for environment variable mapping."""

    def test_prefix_stripped_and_separator_mapped(self, monkeypatch):
        monkeypatch.setenv("TESTAPP_Email__Host", "env.example.com")
        monkeypatch.setenv("TESTAPP_Email__Authentication__UserName", "env-user")
        monkeypatch.setenv("OTHER_Email__Host", "ignored")

        provider = EnvironmentConfigurationProvider("TESTAPP_")
        provider.load()

        assert provider.get("Email:Host") == "env.example.com"
        assert provider.get("Email:Authentication:UserName") == "env-user"
        assert not any(key.startswith("OTHER") for key in provider.keys())

    def test_key_case_is_preserved(self, monkeypatch):
        monkeypatch.setenv("TESTAPP_EMAIL__HOST", "upper.example.com")

        provider = EnvironmentConfigurationProvider("TESTAPP_")
        provider.load()

        assert provider.get("EMAIL:HOST") == "upper.example.com"
        assert "Email:Host" not in provider

    def test_prefix_alone_is_skipped(self, monkeypatch):
        monkeypatch.setenv("TESTAPP_", "value")

        provider = EnvironmentConfigurationProvider("TESTAPP_")
        provider.load()

        assert "" not in provider
