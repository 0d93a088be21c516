"""Tests for the gitops serving client."""

from pathlib import Path
import shutil

import pytest

from kn_local.client import GitOpsServingClient, ListConfig, UpdateStatus
from kn_local.exceptions import (
    InputException,
    NotFoundError,
    UnsupportedOperationError,
)
from kn_local.resource import Revision, Service, new_service

TESTDATA_DIR = Path("tests/testdata/store")


@pytest.fixture(name="root")
def root_fixture(tmp_path: Path) -> Path:
    """Fixture for an empty store directory."""
    return tmp_path / "store"


@pytest.fixture(name="client")
def client_fixture(root: Path) -> GitOpsServingClient:
    """Fixture for a client of the ns1 namespace."""
    return GitOpsServingClient("ns1", root)


@pytest.fixture(name="testdata")
def testdata_fixture(tmp_path: Path) -> Path:
    """Fixture with a writable copy of the test store."""
    dest = tmp_path / "testdata"
    shutil.copytree(TESTDATA_DIR, dest)
    return dest


def test_create_get_delete(client: GitOpsServingClient, root: Path) -> None:
    """Test the lifecycle of a single service."""
    service = new_service("svc1", "ns1", "ghcr.io/example/app:v1")
    client.create_service(service)
    assert (root / "ns1/ksvc/svc1.yaml").exists()

    result = client.get_service("svc1")
    assert result.spec == service.spec
    assert result.name == "svc1"

    client.delete_service("svc1", 0)
    with pytest.raises(NotFoundError) as exc_info:
        client.get_service("svc1")
    assert exc_info.value.kind == "Service"
    assert exc_info.value.name == "svc1"


def test_get_missing(client: GitOpsServingClient) -> None:
    """Test that a missing service is reported as not found."""
    with pytest.raises(NotFoundError, match='service "missing" not found') as exc_info:
        client.get_service("missing")
    assert exc_info.value.name == "missing"


def test_get_invalid_file(client: GitOpsServingClient, root: Path) -> None:
    """Test that an invalid file is not reported as not found."""
    path = root / "ns1/ksvc/bad.yaml"
    path.parent.mkdir(parents=True)
    path.write_text("spec: [")
    with pytest.raises(InputException):
        client.get_service("bad")


def test_create_stamps_identity(client: GitOpsServingClient, root: Path) -> None:
    """Test that identity metadata is overwritten on create."""
    service = new_service("svc1", "ns1", "image")
    service.api_version = "example.com/v1"
    service.kind = "Other"
    client.create_service(service)
    content = (root / "ns1/ksvc/svc1.yaml").read_text()
    assert content.startswith("apiVersion: serving.knative.dev/v1\nkind: Service\n")


def test_create_replaces_existing(client: GitOpsServingClient) -> None:
    """Test that create overwrites a service with the same name."""
    client.create_service(new_service("svc1", "ns1", "image:v1"))
    client.create_service(new_service("svc1", "ns1", "image:v2"))
    assert client.get_service("svc1").image == "image:v2"
    assert len(client.list_services().items) == 1


def test_create_without_name(client: GitOpsServingClient) -> None:
    """Test that a service needs a name to be stored."""
    with pytest.raises(InputException):
        client.create_service(Service())


def test_create_without_namespace(root: Path) -> None:
    """Test that an empty namespace stores directly below the root."""
    client = GitOpsServingClient("", root)
    client.create_service(new_service("svc1", "", "image"))
    assert (root / "ksvc/svc1.yaml").exists()
    assert client.get_service("svc1").image == "image"


def test_update(client: GitOpsServingClient) -> None:
    """Test that update replaces the whole service."""
    client.create_service(
        new_service("svc1", "ns1", "image:v1", labels={"app": "one"})
    )
    client.update_service(new_service("svc1", "ns1", "image:v2"))
    result = client.get_service("svc1")
    assert result.image == "image:v2"
    assert result.labels == {}


def test_update_missing(client: GitOpsServingClient, root: Path) -> None:
    """Test that update of a missing service does not create it."""
    with pytest.raises(NotFoundError):
        client.update_service(new_service("svc1", "ns1", "image"))
    assert not (root / "ns1/ksvc/svc1.yaml").exists()


def test_delete_missing(client: GitOpsServingClient) -> None:
    """Test that deleting a missing service raises the filesystem error."""
    with pytest.raises(FileNotFoundError):
        client.delete_service("missing", 0)


def test_list_empty(client: GitOpsServingClient) -> None:
    """Test listing a store that does not exist yet."""
    result = client.list_services()
    assert result.items == []
    assert result.to_dict() == {"apiVersion": "v1", "kind": "List", "items": []}


def test_list_services(client: GitOpsServingClient, root: Path) -> None:
    """Test that list returns exactly the stored services."""
    names = [f"svc{i}" for i in range(5)]
    for name in names:
        client.create_service(new_service(name, "ns1", "image"))
    (root / "ns1/ksvc/README.md").write_text("# services")
    (root / "ns1/config").mkdir()
    (root / "ns1/config/settings.yaml").write_text("debug: true\n")
    GitOpsServingClient("ns2", root).create_service(new_service("other", "ns2", "i"))

    result = client.list_services()
    assert result.api_version == "v1"
    assert result.kind == "List"
    assert sorted(svc.name for svc in result.items) == names


def test_list_all_namespaces() -> None:
    """Test listing across namespaces with unrelated files in the tree."""
    client = GitOpsServingClient("", TESTDATA_DIR)
    result = client.list_services()
    assert [(svc.namespace, svc.name) for svc in result.items] == [
        ("default", "echo"),
        ("default", "hello"),
        ("team-a", "api"),
    ]


def test_list_filters() -> None:
    """Test name and label filters."""
    client = GitOpsServingClient("", TESTDATA_DIR)
    result = client.list_services(ListConfig(label_selector={"app": "hello"}))
    assert [svc.name for svc in result.items] == ["hello"]
    result = client.list_services(ListConfig(name="api"))
    assert [svc.name for svc in result.items] == ["api"]
    result = client.list_services(
        ListConfig(name="api"), ListConfig(label_selector={"app": "hello"})
    )
    assert result.items == []


def test_list_decode_error() -> None:
    """Test that an invalid file fails the whole list."""
    client = GitOpsServingClient("default", Path("tests/testdata/broken"))
    with pytest.raises(InputException):
        client.list_services()


def test_update_with_retry(testdata: Path) -> None:
    """Test updating a stored service through the retry protocol."""
    client = GitOpsServingClient("default", testdata)

    def update(service: Service) -> Service:
        service.update_env({"TARGET": "Knative"})
        return service

    result = client.update_service_with_retry("hello", update, 3)
    assert result.ok
    assert result.attempts == 1
    service = client.get_service("hello")
    assert service.env == {"TARGET": "Knative"}
    assert service.labels == {"app": "hello"}


def test_invalid_utf8_file(client: GitOpsServingClient, root: Path) -> None:
    """Test that a file with undecodable bytes fails with an input error."""
    path = root / "ns1/ksvc/bad.yaml"
    path.parent.mkdir(parents=True)
    path.write_bytes(b"metadata:\n  name: \xff\xfe\n")

    with pytest.raises(InputException, match="bad.yaml"):
        client.list_services()

    result = client.update_service_with_retry("bad", lambda svc: svc, 3)
    assert result.status == UpdateStatus.ABORTED
    assert isinstance(result.error, InputException)
    assert result.attempts == 1


def test_update_keeps_timestamps(client: GitOpsServingClient, root: Path) -> None:
    """Test that a get and update does not rewrite timestamp values."""
    client.create_service(new_service("svc1", "ns1", "image"))
    path = root / "ns1/ksvc/svc1.yaml"
    content = path.read_text().replace(
        "metadata:\n", "metadata:\n  creationTimestamp: 2024-01-01T00:00:00Z\n"
    )
    path.write_text(content)

    client.update_service(client.get_service("svc1"))
    assert path.read_text() == content


def test_update_with_retry_missing(client: GitOpsServingClient) -> None:
    """Test that updating a missing service aborts."""
    result = client.update_service_with_retry("missing", lambda svc: svc, 3)
    assert result.status == UpdateStatus.ABORTED
    assert result.not_found
    assert result.attempts == 1
    with pytest.raises(NotFoundError):
        result.raise_for_error()


def test_wait_for_service(client: GitOpsServingClient) -> None:
    """Test that waiting returns immediately."""
    assert client.wait_for_service("svc1", 30) == 1.0


@pytest.mark.parametrize(
    ("operation", "args"),
    [
        ("watch_service", ("svc1", 10)),
        ("watch_revision", ("rev1", 10)),
        ("apply_service", (Service(),)),
        ("get_configuration", ("cfg1",)),
        ("get_revision", ("rev1",)),
        ("get_base_revision", (Service(),)),
        ("create_revision", (Revision(),)),
        ("update_revision", (Revision(),)),
        ("delete_revision", ("rev1", 0)),
        ("delete_revision", ("other", 30)),
        ("list_revisions", ()),
        ("list_revisions", (ListConfig(name="rev1"),)),
        ("get_route", ("route1",)),
        ("list_routes", ()),
    ],
)
def test_unsupported(
    client: GitOpsServingClient, operation: str, args: tuple[object, ...]
) -> None:
    """Test that every operation without storage fails the same way."""
    with pytest.raises(
        UnsupportedOperationError,
        match="this operation is not supported in gitops mode",
    ) as exc_info:
        getattr(client, operation)(*args)
    assert exc_info.value.operation == operation
    assert exc_info.value.mode == "gitops"
