import pytest
from dynamodb_stubs import CONDITION_FAILED, DummyAdapter, client_error

from core.infrastructure.aws.dynamodb_folders import DynamoDBFolders, parent_key, sibling_marker_id
from core.models.errors import ConflictError, NotFoundError, PersistenceError
from core.models.folder import Folder


def make_folder(
    folder_id: str,
    name: str,
    *,
    parent_id: str | None = None,
    path: str | None = None,
    user_id: str = "usr_1",
    created_at: str = "2024-01-01T00:00:00.000000+00:00",
) -> Folder:
    return Folder(
        folder_id=folder_id,
        user_id=user_id,
        name=name,
        parent_id=parent_id,
        path=path or name,
        created_at=created_at,
    )


class TestKeys:
    def test_parent_key(self) -> None:
        assert parent_key(None) == "root"
        assert parent_key("fld_1") == "fld_1"

    def test_sibling_marker_id(self) -> None:
        assert sibling_marker_id("usr_1", None, "Trips") == "SIBLING#usr_1#root#Trips"
        assert sibling_marker_id("usr_1", "fld_1", "2024") == "SIBLING#usr_1#fld_1#2024"


class TestDynamoDBFolders:
    def test_create_and_fetch(self, folders_adapter) -> None:
        repo = DynamoDBFolders(folders_adapter)
        folder = make_folder("fld_1", "Trips")

        repo.create_folder(folder=folder)

        assert repo.fetch_folder(folder_id="fld_1") == folder
        assert repo.find_sibling(user_id="usr_1", parent_id=None, name="Trips") == "fld_1"

    def test_fetch_missing_and_marker(self, folders_adapter) -> None:
        repo = DynamoDBFolders(folders_adapter)
        repo.create_folder(folder=make_folder("fld_1", "Trips"))

        assert repo.fetch_folder(folder_id="fld_missing") is None
        assert repo.fetch_folder(folder_id="SIBLING#usr_1#root#Trips") is None

    def test_duplicate_sibling_name(self, folders_adapter) -> None:
        repo = DynamoDBFolders(folders_adapter)
        repo.create_folder(folder=make_folder("fld_1", "Trips"))

        with pytest.raises(ConflictError) as exc_info:
            repo.create_folder(folder=make_folder("fld_2", "Trips"))

        assert exc_info.value.error_code == "FOLDER_NAME_TAKEN"
        assert repo.fetch_folder(folder_id="fld_2") is None

    def test_same_name_under_other_parent_or_owner(self, folders_adapter) -> None:
        repo = DynamoDBFolders(folders_adapter)
        repo.create_folder(folder=make_folder("fld_1", "Trips"))

        repo.create_folder(folder=make_folder("fld_2", "Trips", parent_id="fld_1", path="Trips/Trips"))
        repo.create_folder(folder=make_folder("fld_3", "Trips", user_id="usr_2"))

        assert repo.fetch_folder(folder_id="fld_2") is not None
        assert repo.fetch_folder(folder_id="fld_3") is not None

    def test_list_and_count_children(self, folders_adapter) -> None:
        repo = DynamoDBFolders(folders_adapter)
        repo.create_folder(folder=make_folder("fld_1", "A", created_at="2024-01-01T00:00:00.000000+00:00"))
        repo.create_folder(folder=make_folder("fld_2", "B", created_at="2024-01-02T00:00:00.000000+00:00"))
        repo.create_folder(folder=make_folder("fld_3", "C", parent_id="fld_1", path="A/C"))
        repo.create_folder(folder=make_folder("fld_4", "D", user_id="usr_2"))

        roots = repo.list_children(user_id="usr_1", parent_id=None)

        assert [f.folder_id for f in roots] == ["fld_2", "fld_1"]
        assert [f.folder_id for f in repo.list_children(user_id="usr_1", parent_id="fld_1")] == ["fld_3"]
        assert repo.count_children(user_id="usr_1", parent_id="fld_1") == 1
        assert repo.count_children(user_id="usr_1", parent_id="fld_2") == 0

    def test_rename_moves_reservation(self, folders_adapter) -> None:
        repo = DynamoDBFolders(folders_adapter)
        folder = make_folder("fld_1", "Trips")
        repo.create_folder(folder=folder)

        renamed = folder.model_copy(update={"name": "Travel", "path": "Travel"})
        repo.save_folder(folder=renamed, previous_name="Trips")

        assert repo.fetch_folder(folder_id="fld_1").name == "Travel"
        assert repo.find_sibling(user_id="usr_1", parent_id=None, name="Travel") == "fld_1"
        assert repo.find_sibling(user_id="usr_1", parent_id=None, name="Trips") is None

    def test_rename_onto_taken_name(self, folders_adapter) -> None:
        repo = DynamoDBFolders(folders_adapter)
        folder = make_folder("fld_1", "Trips")
        repo.create_folder(folder=folder)
        repo.create_folder(folder=make_folder("fld_2", "Work"))

        with pytest.raises(ConflictError):
            repo.save_folder(folder=folder.model_copy(update={"name": "Work"}), previous_name="Trips")

        assert repo.fetch_folder(folder_id="fld_1").name == "Trips"
        assert repo.find_sibling(user_id="usr_1", parent_id=None, name="Work") == "fld_2"

    def test_save_missing_folder_releases_new_name(self, folders_adapter) -> None:
        repo = DynamoDBFolders(folders_adapter)

        with pytest.raises(NotFoundError):
            repo.save_folder(folder=make_folder("fld_gone", "New"), previous_name="Old")

        assert repo.find_sibling(user_id="usr_1", parent_id=None, name="New") is None

    def test_update_path(self, folders_adapter) -> None:
        repo = DynamoDBFolders(folders_adapter)
        repo.create_folder(folder=make_folder("fld_1", "C", parent_id="fld_0", path="A/C"))

        repo.update_path(folder_id="fld_1", path="B/C", updated_at="2024-03-01T00:00:00.000000+00:00")

        folder = repo.fetch_folder(folder_id="fld_1")
        assert folder.path == "B/C"
        assert folder.updated_at == "2024-03-01T00:00:00.000000+00:00"

    def test_update_path_of_vanished_folder_is_ignored(self, folders_adapter) -> None:
        repo = DynamoDBFolders(folders_adapter)

        repo.update_path(folder_id="fld_gone", path="X", updated_at="2024-03-01T00:00:00.000000+00:00")

        assert repo.fetch_folder(folder_id="fld_gone") is None

    def test_remove_releases_name(self, folders_adapter) -> None:
        repo = DynamoDBFolders(folders_adapter)
        folder = make_folder("fld_1", "Trips")
        repo.create_folder(folder=folder)

        repo.remove_folder(folder=folder)

        assert repo.fetch_folder(folder_id="fld_1") is None
        repo.create_folder(folder=make_folder("fld_2", "Trips"))


class TestDynamoDBFoldersFailures:
    def test_reservation_error_is_persistence_error(self) -> None:
        repo = DynamoDBFolders(DummyAdapter(put_item=client_error("InternalServerError")))

        with pytest.raises(PersistenceError):
            repo.create_folder(folder=make_folder("fld_1", "Trips"))

    def test_query_error(self) -> None:
        repo = DynamoDBFolders(DummyAdapter(query=client_error("InternalServerError", "Query")))

        with pytest.raises(PersistenceError, match="Unable to list folders"):
            repo.list_children(user_id="usr_1", parent_id=None)

    def test_delete_error_keeps_reservation(self) -> None:
        adapter = DummyAdapter(delete_item=client_error("InternalServerError", "DeleteItem"))

        with pytest.raises(PersistenceError):
            DynamoDBFolders(adapter).remove_folder(folder=make_folder("fld_1", "Trips"))

        assert adapter.names() == ["delete_item"]

    def test_update_path_error(self) -> None:
        repo = DynamoDBFolders(DummyAdapter(update_item=client_error("InternalServerError", "UpdateItem")))

        with pytest.raises(PersistenceError):
            repo.update_path(folder_id="fld_1", path="A", updated_at="t")

    def test_save_condition_failure_without_rename(self) -> None:
        adapter = DummyAdapter(put_item=client_error(CONDITION_FAILED))

        with pytest.raises(NotFoundError):
            DynamoDBFolders(adapter).save_folder(folder=make_folder("fld_1", "Trips"))

        assert adapter.names() == ["put_item"]

    def test_paginated_query_follows_last_evaluated_key(self) -> None:
        pages = iter(
            [
                {"Count": 2, "LastEvaluatedKey": {"folder_id": "fld_2"}},
                {"Count": 1},
            ]
        )
        adapter = DummyAdapter()
        adapter.query = lambda **kwargs: adapter.calls.append(("query", kwargs)) or next(pages)

        assert DynamoDBFolders(adapter).count_children(user_id="usr_1", parent_id="fld_1") == 3
        assert adapter.calls[1][1]["ExclusiveStartKey"] == {"folder_id": "fld_2"}
        assert adapter.calls[0][1]["Select"] == "COUNT"
