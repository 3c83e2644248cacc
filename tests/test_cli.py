from notion_clipper.__main__ import build_parser, main

from .fixtures import *  # noqa


@pytest.fixture
def configured():
    store = storage.sync_store()
    nuc.save_settings(store, TOKEN, ROOT_ID)
    return store


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.auto_create is True
    assert args.url == ""
    assert args.path is None
    assert build_parser().parse_args(["--no-auto-create"]).auto_create is False


def test_show_default_path(capsys):
    assert main(["--show-default-path"]) == 0
    assert capsys.readouterr().out.strip().startswith("Inbox/")


def test_set_settings(capsys):
    assert main(["--set-token", TOKEN, "--set-root-page-id", ROOT_ID]) == 0
    assert "Settings saved successfully!" in capsys.readouterr().out
    assert nuc.load_config().is_configured
    assert main(["--set-default-path", "Clips"]) == 0
    config = nuc.load_config()
    assert (config.token, config.default_path) == (TOKEN, "Clips")


def test_set_settings_requires_token(capsys):
    assert main(["--set-root-page-id", ROOT_ID]) == 2
    assert "Please enter your Notion token" in capsys.readouterr().err


def test_clear_path(configured):
    configured.set(LAST_PATH="Notes")
    assert main(["--clear-path"]) == 0
    assert configured.get(storage.KEY_LAST_PATH) is None


def test_test_connection(notion_memory, configured, capsys):
    assert main(["--test-connection"]) == 0
    assert 'Connected! Root page: "Root"' in capsys.readouterr().out


def test_test_connection_unconfigured(notion_memory, capsys):
    assert main(["--test-connection"]) == 1
    assert "Please fill in both token and page ID first" in capsys.readouterr().err
    assert notion_memory.calls == []


def test_save_from_files_reuses_last_path(notion_memory, configured, tmp_path):
    text_file = tmp_path / "clip.txt"
    text_file.write_text("Quoted text", encoding="utf-8")
    html_file = tmp_path / "clip.html"
    html_file.write_text("<blockquote>Quoted text</blockquote>", encoding="utf-8")

    argv = ["--text-file", str(text_file), "--html-file", str(html_file), "--url", "https://x", "--path", "Reading"]
    assert main(argv) == 0
    assert configured.get(storage.KEY_LAST_PATH) == "Reading"

    assert main(["--text", "again", "--url", "https://x"]) == 0
    reading = [pid for pid, title in notion_memory.titles.items() if title == "Reading"]
    assert len(reading) == 1
    first, second = notion_memory.appended[reading[0]]
    assert types_of(first)[-1] == "quote"
    assert texts_of(second)[-1] == "again"
    assert len(second) == len(first) - 1


def test_empty_selection_exits_with_error(notion_memory, configured, capsys):
    assert main(["--text", "   "]) == 1
    assert "No text selected" in capsys.readouterr().err
    assert notion_memory.calls == []


def test_save_failure_exit_code(notion_memory, configured):
    assert main(["--text", "x", "--path", "Missing", "--no-auto-create"]) == 1


def test_settings_update_does_not_persist_environment_values(configured, monkeypatch):
    monkeypatch.setenv("NOTION_TOKEN", "env_only_token")
    assert main(["--set-default-path", "Clips"]) == 0
    stored = configured.load()
    assert stored[storage.KEY_TOKEN] == TOKEN
    assert stored[storage.KEY_DEFAULT_PATH] == "Clips"
    assert "env_only_token" not in configured.path.read_text(encoding="utf-8")
