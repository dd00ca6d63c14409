import os
import pytest
from config import loader
from core.exceptions import ConfigurationError
from infra.llm import factory as llm_factory
from infra.storage import factory as backend_factory
from infra.storage.sql_backend import SqlBackend


def test_merge_overrides_by_key_and_ignores_unknown_sections():
    base = {"backend": {"type": "supabase", "sql_url": "sqlite:///a.db"}, "steps": {"a": "m1"}}
    user = {"backend": {"type": "sql"}, "steps": {"b": "m2"}, "unknown": {"x": 1}}
    merged = loader._merge_configs(base, user)
    assert merged["backend"] == {"type": "sql", "sql_url": "sqlite:///a.db"}
    assert merged["steps"] == {"a": "m1", "b": "m2"}
    assert "unknown" not in merged
    # 不修改输入
    assert base["backend"]["type"] == "supabase"


def test_load_config_layers(tmp_path, monkeypatch):
    config_file = tmp_path / "config.yaml"
    user_file = tmp_path / "user_config.yaml"
    config_file.write_text("auth:\n  email_domain: corp.example\nsteps:\n  record_summarizer: m1\n", encoding="utf-8")
    user_file.write_text("auth:\n  min_password_length: 10\n", encoding="utf-8")
    monkeypatch.setattr(loader, "CONFIG_PATH", str(config_file))
    monkeypatch.setattr(loader, "USER_CONFIG_PATH", str(user_file))

    config = loader.load_config()
    assert config["auth"] == {"email_domain": "corp.example", "min_password_length": 10}
    assert config["steps"]["record_summarizer"] == "m1"
    assert config["backend"]["type"] == "supabase"


def test_load_config_without_files(tmp_path, monkeypatch):
    monkeypatch.setattr(loader, "CONFIG_PATH", str(tmp_path / "missing.yaml"))
    monkeypatch.setattr(loader, "USER_CONFIG_PATH", str(tmp_path / "missing_user.yaml"))
    assert loader.load_config() == loader.DEFAULT_CONFIG


def test_shipped_config_only_declares_known_sections(monkeypatch, tmp_path):
    repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    monkeypatch.setattr(loader, "CONFIG_PATH", os.path.join(repo_root, "config.yaml"))
    monkeypatch.setattr(loader, "USER_CONFIG_PATH", str(tmp_path / "missing_user.yaml"))
    shipped = loader._read_yaml(loader.CONFIG_PATH)
    assert set(shipped) <= set(loader.MERGEABLE_SECTIONS)
    config = loader.load_config()
    assert set(config) == set(loader.MERGEABLE_SECTIONS)
    assert "app" not in config


def test_invalid_yaml(tmp_path, monkeypatch):
    broken = tmp_path / "config.yaml"
    broken.write_text("backend: [unclosed", encoding="utf-8")
    monkeypatch.setattr(loader, "CONFIG_PATH", str(broken))
    with pytest.raises(ConfigurationError):
        loader.load_config()


def test_resolve_params_reads_environment(monkeypatch):
    monkeypatch.setenv("TEST_API_KEY", "sk-test")
    monkeypatch.delenv("TEST_BASE_URL", raising=False)
    params = llm_factory._resolve_params(
        "m1",
        {"model_name": "gpt-test", "api_key_env": "TEST_API_KEY", "base_url_env": "TEST_BASE_URL"},
        {"model_name": "string", "api_key_env": "secret_env", "base_url_env": "url_env"},
    )
    assert params == {"model_name": "gpt-test", "api_key": "sk-test"}


def test_resolve_params_missing_secret(monkeypatch):
    monkeypatch.delenv("TEST_API_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        llm_factory._resolve_params("m1", {"api_key_env": "TEST_API_KEY"}, {"api_key_env": "secret_env"})


def test_get_llm_unknown_alias(monkeypatch):
    monkeypatch.setattr(llm_factory, "load_config", lambda: {"steps": {}, "models": {}})
    with pytest.raises(ConfigurationError):
        llm_factory.get_llm("record_summarizer")


def test_get_llm_builds_configured_class(monkeypatch):
    monkeypatch.setenv("TEST_API_KEY", "sk-test")
    monkeypatch.setattr(llm_factory, "load_config", lambda: {
        "steps": {"record_summarizer": "fake"},
        "models": {"fake": {"template": "fake_template", "responses": ["hi"], "api_key_env": "TEST_API_KEY"}},
    })
    monkeypatch.setattr(llm_factory, "get_provider_templates", lambda: {
        "fake_template": {
            "class": "langchain_core.language_models.fake_chat_models.FakeListChatModel",
            "params": {"responses": "string"},
        },
    })
    monkeypatch.setattr(llm_factory, "_get_class_from_path", lambda path: _RecordingModel)
    llm = llm_factory.get_llm("record_summarizer", temperature=0.2)
    assert llm.kwargs == {"temperature": 0.2, "responses": ["hi"]}


class _RecordingModel:
    def __init__(self, **kwargs):
        self.kwargs = kwargs


def test_backend_factory_sql(tmp_path, monkeypatch):
    monkeypatch.setenv("BACKEND_TYPE", "sql")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'factory.db'}")
    assert isinstance(backend_factory.get_backend({}), SqlBackend)


def test_backend_factory_supabase_requires_credentials(monkeypatch):
    monkeypatch.setenv("BACKEND_TYPE", "supabase")
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        backend_factory.get_backend({})


def test_backend_factory_unknown_type(monkeypatch):
    monkeypatch.setenv("BACKEND_TYPE", "mongo")
    with pytest.raises(ConfigurationError):
        backend_factory.get_backend({})
