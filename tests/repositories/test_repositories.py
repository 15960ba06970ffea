import pytest
from sqlalchemy.exc import IntegrityError

from settings_store.models import ConfigSetting
from settings_store.repositories import ConfigSettingRepository


def test_config_setting_repository_create(db_session):
    """Test ConfigSetting repository create."""
    repo = ConfigSettingRepository(db_session)
    row = repo.add("Email", "Host", "example.com")
    db_session.commit()

    assert row.id is not None
    assert row.key == "Email:Host"
    assert row.encrypted is False


def test_config_setting_repository_get_by_section(db_session):
    """Test getting rows by section."""
    repo = ConfigSettingRepository(db_session)
    repo.add("Email", "Host", "example.com")
    repo.add("Email", "Authentication:UserName", "user@example.com")
    repo.add("Database", "SettingsConnectionString", "sqlite://")
    db_session.commit()

    rows = repo.get_by_section("Email")

    assert [row.name for row in rows] == ["Host", "Authentication:UserName"]


def test_config_setting_repository_get_by_key(db_session):
    """Test getting a row by (section, name)."""
    repo = ConfigSettingRepository(db_session)
    repo.add("Email", "Host", "example.com")
    repo.add("Backup", "Host", "backup.example.com")
    db_session.commit()

    assert repo.get_by_key("Backup", "Host").value == "backup.example.com"
    assert repo.get_by_key("Email", "Port") is None


def test_section_and_name_are_unique(db_session):
    """Test the (section, name) uniqueness invariant."""
    repo = ConfigSettingRepository(db_session)
    repo.add("Email", "Host", "a")

    with pytest.raises(IntegrityError):
        repo.add("Email", "Host", "b")
    db_session.rollback()


def test_repository_update(db_session):
    """Test repository update by identity."""
    repo = ConfigSettingRepository(db_session)
    row = repo.add("Email", "Host", "old.example.com")
    db_session.commit()

    updated = repo.update(row.id, value="new.example.com")
    db_session.commit()

    assert updated.value == "new.example.com"
    assert repo.get_by_key("Email", "Host").value == "new.example.com"
    assert repo.update(9999, value="x") is None


def test_repository_update_unknown_field(db_session):
    """Test that updating an unknown column is rejected."""
    repo = ConfigSettingRepository(db_session)
    row = repo.add("Email", "Host", "example.com")

    with pytest.raises(ValueError):
        repo.update(row.id, colour="blue")


def test_repository_delete(db_session):
    """Test repository delete."""
    repo = ConfigSettingRepository(db_session)
    row = repo.add("Email", "Host", "example.com")
    db_session.commit()

    assert repo.delete(row.id) is True
    db_session.commit()

    assert repo.get_by_id(row.id) is None
    assert repo.delete(row.id) is False


def test_repository_delete_many(db_session):
    """Test deleting several rows in one flush."""
    repo = ConfigSettingRepository(db_session)
    repo.add("Email", "Host", "example.com")
    repo.add("Email", "Port", "25")
    repo.add("Other", "Key", "value")
    db_session.commit()

    removed = repo.delete_many(repo.get_by_section("Email"))
    db_session.commit()

    assert removed == 2
    assert repo.count() == 1
    assert repo.delete_many([]) == 0


def test_repository_count_and_exists(db_session):
    """Test count and exists helpers."""
    repo = ConfigSettingRepository(db_session)
    repo.add("Email", "Host", "example.com")
    repo.add("Email", "Port", "25")
    db_session.commit()

    assert repo.count() == 2
    assert repo.count(section="Email") == 2
    assert repo.exists(section="Email", name="Port")
    assert not repo.exists(section="Database")


def test_repository_unknown_filter(db_session):
    """Test that filtering by an unknown column is rejected."""
    repo = ConfigSettingRepository(db_session)

    with pytest.raises(ValueError):
        repo.get_by(colour="blue")


def test_repository_get_all_in_id_order(db_session):
    """Test get_all ordering."""
    repo = ConfigSettingRepository(db_session)
    first = repo.add("B", "x", "1")
    second = repo.add("A", "y", "2")
    db_session.commit()

    assert [row.id for row in repo.get_all()] == [first.id, second.id]


def test_model_to_dict(db_session):
    """Test model serialisation helper."""
    row = ConfigSettingRepository(db_session).add("Email", "Host", "example.com")

    assert row.to_dict() == {
        "id": row.id,
        "section": "Email",
        "name": "Host",
        "value": "example.com",
        "encrypted": False,
    }
    assert repr(row).startswith("<ConfigSetting(")
    assert isinstance(row, ConfigSetting)
