import itertools

import pytest
from docker.errors import APIError, NotFound


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def info(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None

    def error(self, *_args, **_kwargs):
        return None


class DummyConsole:
    def __init__(self):
        self.lines = []

    def print(self, *args, **_kwargs):
        self.lines.append(" ".join(str(arg) for arg in args))


class FakeContainer:
    def __init__(self, client, container_id, name, image, **kwargs):
        self.client = client
        self.id = container_id
        self.name = name
        self.image = image
        self.create_kwargs = kwargs
        self.status = "created"
        self.attrs = {"NetworkSettings": {"Networks": {}}}
        self._networks = {}

    def _maybe_fail(self, operation):
        error = self.client.failures.get(operation)
        if error is not None:
            raise error

    def start(self):
        self._maybe_fail("start")
        self.client.events.append(("start", self.name))
        self.status = "running"

    def reload(self):
        self._maybe_fail("reload")
        if self.client.attach_ip:
            self.attrs = {"NetworkSettings": {"Networks": dict(self._networks)}}

    def remove(self, force=False):
        self._maybe_fail("remove")
        self.client.events.append(("remove", self.name, force))
        self.client.containers.by_name.pop(self.name, None)

    def rename(self, new_name):
        self._maybe_fail("rename")
        if new_name in self.client.containers.by_name:
            raise APIError(f"Conflict. The container name \"/{new_name}\" is already in use")
        self.client.events.append(("rename", self.name, new_name))
        self.client.containers.by_name.pop(self.name, None)
        self.name = new_name
        self.client.containers.by_name[new_name] = self


class FakeContainers:
    def __init__(self, client):
        self.client = client
        self.by_name = {}
        self._ids = itertools.count(1)

    def add(self, name, image="app:v1", status="running"):
        container = FakeContainer(self.client, f"{next(self._ids):012x}", name, image)
        container.status = status
        self.by_name[name] = container
        return container

    def create(self, image, **kwargs):
        error = self.client.failures.get("create")
        if error is not None:
            raise error
        name = kwargs.pop("name")
        if name in self.by_name:
            raise APIError(f"Conflict. The container name \"/{name}\" is already in use")
        container = FakeContainer(self.client, f"{next(self._ids):012x}", name, image, **kwargs)
        self.by_name[name] = container
        self.client.events.append(("create", name))
        return container

    def get(self, name):
        error = self.client.failures.get("get")
        if error is not None:
            raise error
        if name not in self.by_name:
            raise NotFound(f"No such container: {name}")
        return self.by_name[name]


class FakeNetwork:
    def __init__(self, client, name):
        self.client = client
        self.name = name
        self._next_host = itertools.count(2)

    def connect(self, container):
        error = self.client.failures.get("connect")
        if error is not None:
            raise error
        self.client.events.append(("connect", container.name, self.name))
        container._networks[self.name] = {"IPAddress": f"172.20.0.{next(self._next_host)}"}


class FakeNetworks:
    def __init__(self, client, names):
        self.by_name = {name: FakeNetwork(client, name) for name in names}

    def get(self, name):
        if name not in self.by_name:
            raise NotFound(f"network {name} not found")
        return self.by_name[name]


class FakeAPI:
    def __init__(self, client):
        self.client = client
        self.pull_events = [{"status": "Pulling from library/app", "id": "v2"}, {"status": "Downloaded newer image"}]
        self.pulled = []
        self.consumed = 0

    def pull(self, image, stream=False, decode=False):
        self.client.events.append(("pull", image))
        self.pulled.append(image)
        for event in self.pull_events:
            self.consumed += 1
            yield event


class FakeDockerClient:
    def __init__(self, networks=("haas_admin",)):
        self.events = []
        self.failures = {}
        self.attach_ip = True
        self.api = FakeAPI(self)
        self.containers = FakeContainers(self)
        self.networks = FakeNetworks(self, networks)

    def names(self):
        return sorted(self.containers.by_name)


@pytest.fixture
def fake_docker():
    return FakeDockerClient()


@pytest.fixture
def logger():
    return DummyLogger()


@pytest.fixture
def console():
    return DummyConsole()


@pytest.fixture
def docker_factory():
    return FakeDockerClient
