import os
import pytest
from core.exceptions import ConfigurationError
from prompts import manager


def test_shipped_prompts_have_required_variables():
    for key in manager.REQUIRED_VARIABLES:
        template = manager.get_prompt_template(key)
        assert manager.REQUIRED_VARIABLES[key] <= set(template.input_variables)


def test_unknown_prompt_key():
    with pytest.raises(ConfigurationError):
        manager.get_prompt_template("nonexistent_step")


def test_missing_placeholder_is_rejected(tmp_path, monkeypatch):
    path = tmp_path / "prompts.yaml"
    path.write_text("record_summarizer: 请整理这段内容\n", encoding="utf-8")
    monkeypatch.setattr(manager, "_prompt_cache", manager.PromptCache(str(path)))
    with pytest.raises(ConfigurationError, match="content"):
        manager.get_prompt_template("record_summarizer")


def test_reload_after_file_change(tmp_path, monkeypatch):
    path = tmp_path / "prompts.yaml"
    path.write_text("record_summarizer: 'v1 {content}'\n", encoding="utf-8")
    cache = manager.PromptCache(str(path))
    monkeypatch.setattr(manager, "_prompt_cache", cache)
    assert manager.get_prompt_template("record_summarizer").template == "v1 {content}"

    path.write_text("record_summarizer: 'v2 {content}'\n", encoding="utf-8")
    stat = os.stat(path)
    os.utime(path, (stat.st_atime, stat.st_mtime + 10))
    assert manager.get_prompt_template("record_summarizer").template == "v2 {content}"


def test_broken_file_keeps_previous_templates(tmp_path, monkeypatch):
    path = tmp_path / "prompts.yaml"
    path.write_text("record_summarizer: 'v1 {content}'\n", encoding="utf-8")
    monkeypatch.setattr(manager, "_prompt_cache", manager.PromptCache(str(path)))
    manager.get_prompt_template("record_summarizer")

    path.write_text("record_summarizer: [unclosed\n", encoding="utf-8")
    manager.force_reload_prompts()
    assert manager.get_prompt_template("record_summarizer").template == "v1 {content}"
