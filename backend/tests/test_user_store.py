import pytest

from app.exceptions import ConflictError, NotFoundError, ValidationError


def new_user(**overrides):
    fields = {"name": "Alice Adams", "email": "alice@example.com", "password": "alice123"}
    fields.update(overrides)
    return fields


async def test_create_hashes_password_and_applies_defaults(store):
    user = await store.create(new_user(email="  Alice@Example.com "))

    assert user.id is not None
    assert user.email == "alice@example.com"
    assert user.role == "user"
    assert user.is_active is True
    assert user.hashed_password != "alice123"
    assert user.created_at is not None
    assert user.updated_at is not None
    assert await store.verify_secret(user, "alice123")
    assert not await store.verify_secret(user, "alice124")


async def test_create_ignores_unknown_fields(store):
    user = await store.create(new_user(hashed_password="plain", id=999))
    assert user.id != 999
    assert await store.verify_secret(user, "alice123")


async def test_duplicate_email_conflicts_case_insensitively(store):
    await store.create(new_user())

    with pytest.raises(ConflictError):
        await store.create(new_user(name="Other Alice", email="ALICE@example.com"))


async def test_invalid_fields_raise_validation_error_listing_fields(store):
    with pytest.raises(ValidationError) as exc:
        await store.create({"name": "A", "email": "bad", "password": "1", "role": "root"})

    assert set(exc.value.fields) == {"name", "email", "password", "role"}
    assert await store.count() == 0


async def test_find_by_email_normalises_input(store):
    user = await store.create(new_user())

    found = await store.find_by_email("ALICE@EXAMPLE.COM ")
    assert found is not None and found.id == user.id
    assert await store.find_by_email("nobody@example.com") is None


async def test_update_changes_only_supplied_fields(store):
    user = await store.create(new_user())
    old_hash = user.hashed_password

    updated = await store.update(user.id, {"name": "Alice Baker", "is_active": False})

    assert updated.name == "Alice Baker"
    assert updated.is_active is False
    assert updated.email == "alice@example.com"
    assert updated.role == "user"
    assert updated.hashed_password == old_hash


async def test_update_rehashes_new_password(store):
    user = await store.create(new_user())
    old_hash = user.hashed_password

    updated = await store.update(user.id, {"password": "fresh-secret"})

    assert updated.hashed_password != old_hash
    assert await store.verify_secret(updated, "fresh-secret")
    assert not await store.verify_secret(updated, "alice123")


async def test_update_ignores_blank_password(store):
    user = await store.create(new_user())
    old_hash = user.hashed_password

    updated = await store.update(user.id, {"password": ""})
    assert updated.hashed_password == old_hash


async def test_empty_update_only_moves_updated_at(store):
    user = await store.create(new_user())
    snapshot = (user.name, user.email, user.role, user.is_active, user.created_at, user.hashed_password)
    previous_updated_at = user.updated_at

    updated = await store.update(user.id, {})

    assert (updated.name, updated.email, updated.role, updated.is_active,
            updated.created_at, updated.hashed_password) == snapshot
    assert updated.updated_at >= previous_updated_at


async def test_update_to_taken_email_conflicts(store):
    await store.create(new_user())
    bob = await store.create(new_user(name="Bob Brown", email="bob@example.com"))

    with pytest.raises(ConflictError):
        await store.update(bob.id, {"email": "Alice@example.com"})


async def test_update_keeping_own_email_is_fine(store):
    user = await store.create(new_user())
    updated = await store.update(user.id, {"email": "ALICE@example.com", "name": "Alice A"})
    assert updated.email == "alice@example.com"


async def test_update_validates_fields(store):
    user = await store.create(new_user())

    with pytest.raises(ValidationError) as exc:
        await store.update(user.id, {"role": "owner", "name": " "})
    assert set(exc.value.fields) == {"role", "name"}


async def test_update_unknown_id_is_not_found(store):
    with pytest.raises(NotFoundError):
        await store.update(12345, {"name": "Nobody Here"})


async def test_delete_is_hard_and_reports_missing_ids(store):
    user = await store.create(new_user())

    assert await store.delete(user.id) is True
    assert await store.find_by_id(user.id) is None
    assert await store.delete(user.id) is False
    assert await store.delete(user.id) is False
