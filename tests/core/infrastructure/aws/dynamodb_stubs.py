"""Adapter stubs raising boto3 errors for repository failure paths."""

from typing import Any

from botocore.exceptions import ClientError


def client_error(code: str, operation: str = "PutItem") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


CONDITION_FAILED = "ConditionalCheckFailedException"


class DummyAdapter:
    """Records calls; raises the error configured for an operation name."""

    def __init__(self, responses: dict[str, Any] | None = None, **errors: Exception) -> None:
        self.responses = responses or {}
        self.errors = errors
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def _call(self, name: str, kwargs: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((name, kwargs))
        if name in self.errors:
            raise self.errors[name]
        return self.responses.get(name, {})

    def put_item(self, **kwargs: Any) -> dict[str, Any]:
        return self._call("put_item", kwargs)

    def get_item(self, **kwargs: Any) -> dict[str, Any]:
        return self._call("get_item", kwargs)

    def delete_item(self, **kwargs: Any) -> dict[str, Any]:
        return self._call("delete_item", kwargs)

    def update_item(self, **kwargs: Any) -> dict[str, Any]:
        return self._call("update_item", kwargs)

    def query(self, **kwargs: Any) -> dict[str, Any]:
        return self._call("query", kwargs)

    def scan(self, **kwargs: Any) -> dict[str, Any]:
        return self._call("scan", kwargs)

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]
