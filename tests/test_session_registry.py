"""Tests for session instances and the session registry."""

from __future__ import annotations

import pytest

from sessionhost.errors import (
    DuplicateRegistrationError,
    DuplicateSidebarError,
    VisibilityConflictError,
)
from sessionhost.host.memory import MemorySurface
from sessionhost.session import (
    CHAT_BUTTON_ACTION,
    SIDEBAR_ID,
    RecordingController,
    SessionInstance,
    SessionKind,
    SessionRegistry,
)


def make_surface(surface_id: str = "surface") -> MemorySurface:
    return MemorySurface(surface_id, kind="panel", title=surface_id)


class TestGetOrCreate:
    """Creating instances through the registry."""

    def test_sidebar_created_once(self, registry: SessionRegistry) -> None:
        first = registry.get_or_create(SessionKind.SIDEBAR)
        second = registry.get_or_create(SessionKind.SIDEBAR)

        assert first is second
        assert first.id == SIDEBAR_ID
        assert first.is_sidebar
        assert registry.sidebar is first

    def test_panels_are_distinct(self, registry: SessionRegistry) -> None:
        a = registry.get_or_create(SessionKind.PANEL)
        b = registry.get_or_create(SessionKind.PANEL)

        assert a is not b
        assert a.id != b.id
        assert a.id.startswith("panel-")
        assert len(registry) == 2

    def test_created_instances_are_registered(self, registry: SessionRegistry) -> None:
        panel = registry.get_or_create(SessionKind.PANEL)
        assert panel in registry
        assert panel.id in registry
        assert registry.get(panel.id) is panel

    def test_each_instance_gets_its_own_controller(self, registry: SessionRegistry) -> None:
        sidebar = registry.get_or_create(SessionKind.SIDEBAR)
        panel = registry.get_or_create(SessionKind.PANEL)
        assert isinstance(sidebar.controller, RecordingController)
        assert sidebar.controller is not panel.controller

    def test_list_instances_by_kind(self, registry: SessionRegistry) -> None:
        registry.get_or_create(SessionKind.SIDEBAR)
        registry.get_or_create(SessionKind.PANEL)
        registry.get_or_create(SessionKind.PANEL)

        assert len(registry.list_instances()) == 3
        assert len(registry.list_instances(SessionKind.PANEL)) == 2
        assert len(registry.list_instances(SessionKind.SIDEBAR)) == 1


class TestSidebarInvariant:
    """At most one sidebar instance."""

    def test_second_sidebar_rejected(self, registry: SessionRegistry, context) -> None:
        registry.get_or_create(SessionKind.SIDEBAR)
        intruder = SessionInstance(
            SessionKind.SIDEBAR, "other-sidebar", RecordingController(), context
        )
        with pytest.raises(DuplicateSidebarError):
            registry.register(intruder)
        assert len(registry.list_instances(SessionKind.SIDEBAR)) == 1

    def test_second_sidebar_rejected_after_first_left(
        self, registry: SessionRegistry, context
    ) -> None:
        sidebar = registry.get_or_create(SessionKind.SIDEBAR)
        registry.unregister(sidebar.id)
        intruder = SessionInstance(
            SessionKind.SIDEBAR, "other-sidebar", RecordingController(), context
        )
        with pytest.raises(DuplicateSidebarError):
            registry.register(intruder)

    def test_same_sidebar_comes_back(self, registry: SessionRegistry) -> None:
        sidebar = registry.get_or_create(SessionKind.SIDEBAR)
        registry.unregister(sidebar.id)
        assert registry.sidebar is None

        again = registry.get_or_create(SessionKind.SIDEBAR)
        assert again is sidebar
        assert registry.sidebar is sidebar

    def test_reregister_same_object_is_noop(self, registry: SessionRegistry) -> None:
        panel = registry.get_or_create(SessionKind.PANEL)
        registry.register(panel)
        assert len(registry) == 1

    def test_duplicate_id_rejected(self, registry: SessionRegistry, context) -> None:
        panel = registry.get_or_create(SessionKind.PANEL)
        clash = SessionInstance(SessionKind.PANEL, panel.id, RecordingController(), context)
        with pytest.raises(DuplicateRegistrationError):
            registry.register(clash)


class TestUnregister:
    """Removing instances."""

    def test_unregister_returns_true(self, registry: SessionRegistry) -> None:
        panel = registry.get_or_create(SessionKind.PANEL)
        assert registry.unregister(panel.id) is True
        assert panel not in registry

    def test_unregister_unknown_returns_false(self, registry: SessionRegistry) -> None:
        assert registry.unregister("nope") is False


class TestResolveVisible:
    """Finding the instance the user is looking at."""

    @pytest.mark.asyncio
    async def test_none_visible(self, registry: SessionRegistry) -> None:
        registry.get_or_create(SessionKind.SIDEBAR)
        registry.get_or_create(SessionKind.PANEL)
        assert registry.resolve_visible() is None

    @pytest.mark.asyncio
    async def test_empty_registry(self, registry: SessionRegistry) -> None:
        assert registry.resolve_visible() is None

    @pytest.mark.asyncio
    async def test_one_visible(self, registry: SessionRegistry) -> None:
        registry.get_or_create(SessionKind.SIDEBAR)
        panel = registry.get_or_create(SessionKind.PANEL)
        surface = make_surface()
        await panel.resolve_view(surface)

        surface.set_visible(True)

        assert registry.resolve_visible() is panel

    @pytest.mark.asyncio
    async def test_two_visible_rejected(self, registry: SessionRegistry, caplog) -> None:
        a = registry.get_or_create(SessionKind.PANEL)
        b = registry.get_or_create(SessionKind.PANEL)
        surface_a, surface_b = make_surface("a"), make_surface("b")
        await a.resolve_view(surface_a)
        await b.resolve_view(surface_b)

        surface_a.set_visible(True)
        surface_b.set_visible(True)

        with caplog.at_level("WARNING", logger="sessionhost.registry"):
            with pytest.raises(VisibilityConflictError) as exc_info:
                registry.resolve_visible()
        assert sorted(exc_info.value.instance_ids) == sorted([a.id, b.id])
        assert "Refusing to pick" in caplog.text

    @pytest.mark.asyncio
    async def test_follows_visibility_changes(self, registry: SessionRegistry) -> None:
        panel = registry.get_or_create(SessionKind.PANEL)
        surface = make_surface()
        await panel.resolve_view(surface)

        surface.set_visible(True)
        assert registry.resolve_visible() is panel
        surface.set_visible(False)
        assert registry.resolve_visible() is None


class TestSurfaceBinding:
    """SessionInstance reacting to its host surface."""

    @pytest.mark.asyncio
    async def test_resolve_view_calls_controller(self, registry: SessionRegistry) -> None:
        panel = registry.get_or_create(SessionKind.PANEL)
        surface = make_surface("panel-surface")

        await panel.resolve_view(surface)

        assert panel.surface is surface
        assert panel.controller.methods() == ["resolve_as_panel"]
        assert panel.controller.calls[0].args == ("panel-surface",)

    @pytest.mark.asyncio
    async def test_resolve_view_picks_up_initial_visibility(
        self, registry: SessionRegistry
    ) -> None:
        panel = registry.get_or_create(SessionKind.PANEL)
        surface = make_surface()
        surface.set_visible(True)

        await panel.resolve_view(surface)

        assert panel.visible is True

    @pytest.mark.asyncio
    async def test_dispose_unregisters_synchronously(self, registry: SessionRegistry) -> None:
        panel = registry.get_or_create(SessionKind.PANEL)
        surface = make_surface()
        await panel.resolve_view(surface)
        surface.set_visible(True)

        surface.dispose()

        assert panel not in registry
        assert panel.visible is False
        assert panel.surface is None
        assert registry.resolve_visible() is None

    @pytest.mark.asyncio
    async def test_sidebar_reregisters_when_view_recreated(
        self, registry: SessionRegistry
    ) -> None:
        sidebar = registry.get_or_create(SessionKind.SIDEBAR)
        first = make_surface("view-1")
        await sidebar.resolve_view(first)
        first.dispose()
        assert sidebar not in registry

        await sidebar.resolve_view(make_surface("view-2"))

        assert registry.sidebar is sidebar

    @pytest.mark.asyncio
    async def test_old_surface_no_longer_drives_visibility(
        self, registry: SessionRegistry
    ) -> None:
        sidebar = registry.get_or_create(SessionKind.SIDEBAR)
        old, new = make_surface("old"), make_surface("new")
        await sidebar.resolve_view(old)
        await sidebar.resolve_view(new)

        old.set_visible(True)

        assert sidebar.visible is False

    @pytest.mark.asyncio
    async def test_delegates_to_controller(self, registry: SessionRegistry) -> None:
        sidebar = registry.get_or_create(SessionKind.SIDEBAR)

        await sidebar.clear_task()
        await sidebar.post_state()
        await sidebar.post_action("historyButtonClicked")
        await sidebar.handle_external_callback("code-1")

        assert sidebar.controller.methods() == [
            "clear_task",
            "post_state",
            "post_action",
            "handle_external_callback",
        ]

    @pytest.mark.asyncio
    async def test_start_new_task_order(self, registry: SessionRegistry) -> None:
        panel = registry.get_or_create(SessionKind.PANEL)

        await panel.start_new_task()

        assert panel.controller.methods() == ["clear_task", "post_state", "post_action"]
        assert panel.controller.calls[-1].args == (CHAT_BUTTON_ACTION,)
