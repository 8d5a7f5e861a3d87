from __future__ import annotations

import threading

import pytest

from todo_core.coordinator import Failed, Loading, Ready, TodoCoordinator
from todo_core.errors import NotFoundError, StorageError, UnexpectedError, ValidationError
from todo_core.repositories import InMemoryTodoStore


class FlakyStore(InMemoryTodoStore):
    """In-memory store whose list/create can be told to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.list_error = None
        self.create_error = None
        self.list_calls = 0

    def list(self):
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return super().list()

    def create(self, title):
        if self.create_error is not None:
            raise self.create_error
        return super().create(title)


@pytest.fixture()
def flaky() -> FlakyStore:
    return FlakyStore()


@pytest.fixture()
def coordinator(flaky) -> TodoCoordinator:
    return TodoCoordinator(flaky)


class TestLoading:
    def test_initial_state_is_loading_without_touching_store(self, coordinator, flaky):
        assert isinstance(coordinator.peek(), Loading)
        assert flaky.list_calls == 0

    def test_first_observation_loads_once(self, coordinator, flaky):
        flaky.create("existing")
        state = coordinator.state()
        assert isinstance(state, Ready)
        assert [t.title for t in state.todos] == ["existing"]
        coordinator.state()
        assert flaky.list_calls == 1

    def test_load_failure_becomes_failed_state(self, coordinator, flaky):
        flaky.list_error = StorageError("disk gone")
        state = coordinator.state()
        assert isinstance(state, Failed)
        assert isinstance(state.error, StorageError)

    def test_foreign_exception_is_wrapped(self, coordinator, flaky):
        flaky.list_error = RuntimeError("boom")
        state = coordinator.state()
        assert isinstance(state, Failed)
        assert isinstance(state.error, UnexpectedError)
        assert state.error.message == "boom"

    def test_invalidate_reloads(self, coordinator, flaky):
        coordinator.state()
        flaky.create("added behind the coordinator's back")
        assert len(coordinator.state().todos) == 0
        state = coordinator.invalidate()
        assert len(state.todos) == 1


class TestMutations:
    def test_scenario(self, coordinator):
        todo = coordinator.add("Buy milk")
        state = coordinator.state()
        assert [(t.title, t.is_completed) for t in state.todos] == [("Buy milk", False)]

        coordinator.toggle(todo.id)
        assert coordinator.state().todos[0].is_completed is True

        coordinator.update(todo.id, "Buy oat milk")
        assert coordinator.state().todos[0].title == "Buy oat milk"

        coordinator.delete(todo.id)
        assert coordinator.state().todos == ()

    def test_each_success_reloads(self, coordinator, flaky):
        coordinator.state()
        todo = coordinator.add("a")
        coordinator.toggle(todo.id)
        coordinator.delete("nonexistent")
        assert flaky.list_calls == 4

    def test_failed_mutation_keeps_state(self, coordinator):
        coordinator.add("keep")
        before = coordinator.state()
        with pytest.raises(ValidationError):
            coordinator.add("   ")
        with pytest.raises(NotFoundError):
            coordinator.toggle("nonexistent")
        with pytest.raises(NotFoundError):
            coordinator.update("nonexistent", "title")
        assert coordinator.state() is before

    def test_foreign_mutation_error_is_wrapped(self, coordinator, flaky):
        flaky.create_error = OSError("read-only")
        with pytest.raises(UnexpectedError) as info:
            coordinator.add("x")
        assert isinstance(info.value.__cause__, OSError)

    def test_reload_failure_after_mutation(self, coordinator, flaky):
        coordinator.state()
        flaky.list_error = StorageError("disk gone")
        todo = coordinator.add("saved anyway")
        assert todo.title == "saved anyway"
        assert isinstance(coordinator.peek(), Failed)


class TestSubscribe:
    def test_listener_receives_current_and_future_states(self, coordinator):
        seen = []
        coordinator.subscribe(seen.append)
        coordinator.add("a")
        assert [s.status for s in seen] == ["ready", "ready"]
        assert [t.title for t in seen[-1].todos] == ["a"]

    def test_unsubscribe_stops_delivery(self, coordinator):
        seen = []
        unsubscribe = coordinator.subscribe(seen.append)
        unsubscribe()
        coordinator.add("a")
        assert len(seen) == 1

    def test_failing_listener_does_not_block_others(self, coordinator):
        def broken(state):
            raise RuntimeError("listener bug")

        seen = []
        coordinator.subscribe(broken)
        coordinator.subscribe(seen.append)
        coordinator.add("a")
        assert len(seen) == 2

    def test_failed_mutation_publishes_nothing(self, coordinator):
        seen = []
        coordinator.subscribe(seen.append)
        with pytest.raises(ValidationError):
            coordinator.add("")
        assert len(seen) == 1

    def test_initial_delivery_is_not_overtaken(self, coordinator):
        seen = []
        blocked = []

        def listener(state):
            seen.append(state)
            if len(seen) == 1:
                writer = threading.Thread(target=coordinator.add, args=("concurrent",))
                writer.start()
                writer.join(timeout=0.2)
                blocked.append(writer.is_alive())
                writers.append(writer)

        writers = []
        coordinator.subscribe(listener)
        writers[0].join(timeout=5)

        assert blocked == [True]
        assert [len(s.todos) for s in seen] == [0, 1]
