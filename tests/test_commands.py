from types import SimpleNamespace

from utils.commands import RemoveItemCommand
from utils.common_models import ActionResult, Notification


def _items():
    return [SimpleNamespace(id="a"), SimpleNamespace(id="b"), SimpleNamespace(id="c")]


def _ids(items):
    return [item.id for item in items]


def test_removes_item_after_backend_success():
    items = _items()
    calls = []

    def remove(item_id):
        calls.append(item_id)
        return ActionResult.ok(item_id)

    command = RemoveItemCommand(items, "b", remove, entity_name="Lead")
    assert command.execute().success
    assert calls == ["b"]
    assert _ids(items) == ["a", "c"]
    assert command.removed.id == "b"
    assert command.notification.title == "Lead deleted"
    assert command.notification.level == Notification.Level.SUCCESS


def test_failure_leaves_list_untouched():
    items = _items()
    command = RemoveItemCommand(items, "b", lambda item_id: ActionResult.fail("permission denied"), entity_name="Banner")
    result = command.execute()
    assert not result.success
    assert _ids(items) == ["a", "b", "c"]
    assert command.removed is None
    assert command.notification.title == "Error deleting banner"
    assert command.notification.description == "permission denied"


def test_exception_is_rolled_back():
    items = _items()

    def remove(item_id):
        items.pop()
        raise RuntimeError("network down")

    command = RemoveItemCommand(items, "a", remove)
    result = command.execute()
    assert not result.success
    assert result.error == "network down"
    assert _ids(items) == ["a", "b", "c"]
    assert command.notification.level == Notification.Level.ERROR


def test_unknown_id_still_succeeds_when_backend_does():
    items = _items()
    command = RemoveItemCommand(items, "zzz", lambda item_id: ActionResult.ok(item_id))
    assert command.execute().success
    assert _ids(items) == ["a", "b", "c"]
    assert command.removed is None
