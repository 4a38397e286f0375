from __future__ import annotations

import threading

from seatable_nodes.seatable.registry import ClientRegistry, ConnectionConfig


def _config(base_uuid: str = "5c264e76-0e5a-448a-9f34-580b551364ca") -> ConnectionConfig:
    return ConnectionConfig(server="https://cloud.seatable.io", base_uuid=base_uuid, token="tok")


def test_register_then_lookup_returns_same_config() -> None:
    registry = ClientRegistry()
    config = _config()

    client_id = registry.register(config)

    assert client_id.startswith("st-5c264e760e5a448a9f34580b551364ca-")
    assert registry.lookup(client_id) == config


def test_lookup_unknown_id_returns_none() -> None:
    registry = ClientRegistry()
    registry.register(_config())

    assert registry.lookup("st-unknown-1") is None
    assert registry.lookup("") is None


def test_register_generates_unique_ids_for_same_base() -> None:
    registry = ClientRegistry()
    ids = {registry.register(_config()) for _ in range(200)}

    assert len(ids) == 200
    assert len(registry) == 200


def test_concurrent_register_and_lookup() -> None:
    registry = ClientRegistry()
    seed_id = registry.register(_config("seed"))
    registered: list[str] = []
    errors: list[str] = []
    lock = threading.Lock()

    def writer(index: int) -> None:
        client_id = registry.register(_config(f"base-{index}"))
        with lock:
            registered.append(client_id)

    def reader() -> None:
        for _ in range(100):
            if registry.lookup(seed_id) is None:
                errors.append("seed lost")

    threads = [threading.Thread(target=writer, args=(i,)) for i in range(20)]
    threads += [threading.Thread(target=reader) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert not errors
    assert len(set(registered)) == 20
    assert all(registry.lookup(client_id) is not None for client_id in registered)


def test_config_repr_hides_token() -> None:
    text = repr(_config())
    assert "'tok'" not in text
    assert "token='***'" in text
