from .fixtures import *  # noqa


def test_split_path_trims_and_drops_empty_segments():
    assert nup.split_path(" Notes / Rust//  Traits /") == ["Notes", "Rust", "Traits"]
    assert nup.split_path("") == []
    assert nup.split_path(" / / ") == []


def test_today_token_expansion_any_case():
    assert nup.expand_path_tokens("Daily/#today", NOW) == "Daily/18-January-2026"
    assert nup.expand_path_tokens("#TODAY/x/#Today", NOW) == "18-January-2026/x/18-January-2026"
    assert nup.expand_path_tokens("No/Tokens", NOW) == "No/Tokens"
    assert nup.expand_path_tokens("", NOW) == ""


def test_today_token_pads_day():
    from datetime import datetime
    assert nup.today_token(datetime(2025, 3, 4)) == "04-March-2025"


def test_default_path_is_date_based():
    assert nup.default_path(NOW) == "Inbox/2026/January/18"


def test_choose_target_path_precedence(config):
    assert nup.choose_target_path("Notes/#today", config, NOW) == "Notes/18-January-2026"
    assert nup.choose_target_path("  ", config, NOW) == "Inbox/2026/January/18"
    assert nup.choose_target_path(None, config, NOW) == "Inbox/2026/January/18"
    override = nuc.ClipperConfig(token=TOKEN, root_page_id=ROOT_ID, default_path="Clips/#today")
    assert nup.choose_target_path("", override, NOW) == "Clips/18-January-2026"
    assert nup.choose_target_path("Explicit", override, NOW) == "Explicit"


async def test_empty_path_resolves_to_root_without_calls(notion_memory):
    assert await nup.resolve_path(TOKEN, ROOT_ID, "") == ROOT_ID
    assert await nup.resolve_path(TOKEN, ROOT_ID, " // ") == ROOT_ID
    assert notion_memory.calls == []


async def test_missing_segments_are_created_in_order(notion_memory):
    page_id = await nup.resolve_path(TOKEN, ROOT_ID, "Notes/Rust/Traits")
    assert notion_memory.call_names() == [
        "fetch_block_children", "create_child_page",
        "fetch_block_children", "create_child_page",
        "fetch_block_children", "create_child_page",
    ]
    assert [t for n, t in notion_memory.calls if n == "create_child_page"] == ["Notes", "Rust", "Traits"]
    assert notion_memory.titles[page_id] == "Traits"


async def test_resolution_is_idempotent(notion_memory):
    first = await nup.resolve_path(TOKEN, ROOT_ID, "Notes/Rust")
    notion_memory.calls.clear()
    second = await nup.resolve_path(TOKEN, ROOT_ID, "Notes/Rust")
    assert first == second
    assert "create_child_page" not in notion_memory.call_names()


async def test_lookup_is_case_insensitive(notion_memory):
    notes = notion_memory.add_page(ROOT_ID, "Notes")
    notion_memory.add_paragraph(ROOT_ID, "notes")
    assert await nup.resolve_path(TOKEN, ROOT_ID, "NOTES") == notes
    assert "create_child_page" not in notion_memory.call_names()


async def test_missing_segment_without_auto_create(notion_memory):
    notion_memory.add_page(ROOT_ID, "A")
    with pytest.raises(PathSegmentNotFound) as exc:
        await nup.resolve_path(TOKEN, ROOT_ID, "A/B", auto_create=False)
    assert exc.value.segment == "B"
    assert str(exc.value) == "Page not found: B"
    assert "create_child_page" not in notion_memory.call_names()


async def test_pages_created_before_failure_remain(notion_memory, monkeypatch):
    created = []
    real_create = notion_memory.create_child_page

    async def flaky_create(token, parent_id, title):
        if title == "Second":
            raise PageCreateError(400, "body failed validation")
        pid = await real_create(token, parent_id, title)
        created.append(pid)
        return pid

    monkeypatch.setattr(nu.api, 'create_child_page', flaky_create)
    with pytest.raises(PageCreateError) as exc:
        await nup.resolve_path(TOKEN, ROOT_ID, "First/Second/Third")
    assert str(exc.value) == "Failed to create page: body failed validation"
    assert len(created) == 1
    assert notion_memory.titles[created[0]] == "First"


async def test_lookup_failure_propagates(notion_memory, monkeypatch):
    async def failing_fetch(token, block_id, page_size=100):
        raise ChildLookupError(401, "API token is invalid.")

    monkeypatch.setattr(nu.api, 'fetch_block_children', failing_fetch)
    with pytest.raises(ChildLookupError) as exc:
        await nup.resolve_path(TOKEN, ROOT_ID, "Anything")
    assert str(exc.value) == "Failed to fetch children: 401"
    assert "create_child_page" not in notion_memory.call_names()


async def test_children_past_first_page_are_not_seen(notion_memory):
    for i in range(100):
        notion_memory.add_page(ROOT_ID, f"Filler {i}")
    late = notion_memory.add_page(ROOT_ID, "Late")
    page_id = await nup.resolve_path(TOKEN, ROOT_ID, "Late")
    assert page_id != late
    assert notion_memory.call_names().count("create_child_page") == 1
