import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.runnables import RunnableLambda
from core.schemas import CreateEventInput
from infra.storage import event_store
from infra.storage.backend import eq
from infra.storage.sql_backend import SqlBackend


@pytest.fixture
def backend(tmp_path):
    return SqlBackend(f"sqlite:///{tmp_path / 'journal.db'}")


@pytest.fixture
def alice(backend):
    """第一个注册的用户，自动成为管理员"""
    return backend.sign_up("alice@miaoda.com", "secret1")


@pytest.fixture
def bob(backend, alice):
    return backend.sign_up("bob@miaoda.com", "secret2")


@pytest.fixture
def make_event(backend):
    def _make(identity, title="测试事件", created_at=None, updated_at=None, **kwargs):
        event = event_store.create_event(backend, identity, CreateEventInput(title=title, **kwargs))
        values = {}
        if created_at is not None:
            values["created_at"] = created_at
        if updated_at is not None:
            values["updated_at"] = updated_at
        if values:
            backend.update("events", values, [eq("id", event.id)])
            event = event_store.get_event_by_id(backend, identity, event.id)
        return event
    return _make


@pytest.fixture
def fake_llm(monkeypatch):
    """
    用假模型替换所有链中的模型。
    返回一个函数：传入的回复按调用顺序依次返回。
    """
    def _install(*responses):
        model = FakeListChatModel(responses=list(responses))
        monkeypatch.setattr("chains.summaries.get_llm", lambda alias, temperature=0.7: model)
        return model
    return _install


@pytest.fixture
def failing_llm(monkeypatch):
    def _boom(_):
        raise RuntimeError("model unavailable")
    monkeypatch.setattr("chains.summaries.get_llm", lambda alias, temperature=0.7: RunnableLambda(_boom))
