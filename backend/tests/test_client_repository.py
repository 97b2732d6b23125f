"""
Backend Gateway — Client Repository Tests
===========================================

What:  Contract tests for the data access layer.
How:   Every test runs against both ClientRepository (ORM) and
       RawClientRepository (raw SQL) through the parametrized `repository`
       fixture, on an in-memory SQLite database.

What we test:
    ✅ create / find_by_id round trip, metadata deep-equality, timestamps
    ✅ absent signals for unknown ids (None / False, never an exception)
    ✅ partial update: omitted vs explicit-null vs value
    ✅ delete idempotence, exists, count, newest-first ordering
    ✅ create_many atomicity (all or nothing)
    ✅ metadata key search
"""

from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from gateway.models.client import Client
from gateway.repositories import ClientRepository, RawClientRepository
from gateway.schemas.client import ClientCreate, ClientUpdate


class TestCreateAndRead:
    """create(), find_by_id() and find_all()."""

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_timestamps(self, repository):
        created = await repository.create("Acme", {"tier": "gold"})

        assert created.id is not None
        assert created.name == "Acme"
        assert created.metadata["tier"] == "gold"
        assert created.created_at is not None
        assert created.created_at == created.updated_at

    @pytest.mark.asyncio
    async def test_find_by_id_round_trip(self, repository):
        metadata = {"tier": "gold", "tags": ["a", "b"], "limits": {"seats": 5, "trial": False}}
        created = await repository.create("Acme", metadata)

        found = await repository.find_by_id(created.id)

        assert found is not None
        assert found.id == created.id
        assert found.name == "Acme"
        assert found.metadata == metadata
        assert found.created_at == found.updated_at

    @pytest.mark.asyncio
    async def test_create_without_metadata_stores_null(self, repository, db_session):
        created = await repository.create("No Meta")

        assert created.metadata is None
        found = await repository.find_by_id(created.id)
        assert found.metadata is None

        # Stored as SQL NULL, not as a JSON 'null' document
        result = await db_session.execute(
            select(func.count()).select_from(Client).where(Client.metadata_.is_(None))
        )
        assert result.scalar_one() == 1

    @pytest.mark.asyncio
    async def test_find_by_id_unknown_returns_none(self, repository):
        assert await repository.find_by_id(uuid4()) is None

    @pytest.mark.asyncio
    async def test_find_all_empty(self, repository):
        assert await repository.find_all() == []

    @pytest.mark.asyncio
    async def test_find_all_newest_first(self, repository):
        for name in ("first", "second", "third"):
            await repository.create(name)

        names = [client.name for client in await repository.find_all()]

        assert names == ["third", "second", "first"]

    @pytest.mark.asyncio
    async def test_create_with_null_name_raises_database_error(self, repository):
        with pytest.raises(IntegrityError):
            await repository.create(None)


class TestPartialUpdate:
    """update() field composition."""

    @pytest.mark.asyncio
    async def test_update_name_keeps_metadata(self, repository):
        created = await repository.create("A", {"x": 1})

        updated = await repository.update(created.id, ClientUpdate(name="B"))

        assert updated.name == "B"
        assert updated.metadata == {"x": 1}
        assert updated.created_at == created.created_at
        assert updated.updated_at > created.updated_at

        found = await repository.find_by_id(created.id)
        assert found.name == "B"
        assert found.metadata == {"x": 1}

    @pytest.mark.asyncio
    async def test_explicit_null_metadata_clears_it(self, repository):
        created = await repository.create("A", {"x": 1})

        updated = await repository.update(created.id, ClientUpdate(metadata=None))

        assert updated.name == "A"
        assert updated.metadata is None
        assert (await repository.find_by_id(created.id)).metadata is None

    @pytest.mark.asyncio
    async def test_replace_metadata(self, repository):
        created = await repository.create("A", {"x": 1})

        updated = await repository.update(created.id, ClientUpdate(metadata={"y": 2}))

        assert updated.metadata == {"y": 2}

    @pytest.mark.asyncio
    async def test_update_both_fields(self, repository):
        created = await repository.create("A", None)

        updated = await repository.update(
            created.id, ClientUpdate(name="B", metadata={"tier": "silver"})
        )

        assert updated.name == "B"
        assert updated.metadata == {"tier": "silver"}

    @pytest.mark.asyncio
    async def test_empty_update_is_a_plain_read(self, repository):
        created = await repository.create("A", {"x": 1})

        result = await repository.update(created.id, ClientUpdate())

        assert result == await repository.find_by_id(created.id)
        assert result.updated_at == created.updated_at

    @pytest.mark.asyncio
    async def test_update_unknown_returns_none(self, repository):
        assert await repository.update(uuid4(), ClientUpdate(name="B")) is None

    @pytest.mark.asyncio
    async def test_empty_update_unknown_returns_none(self, repository):
        assert await repository.update(uuid4(), ClientUpdate()) is None


class TestDeleteExistsCount:
    """delete(), exists() and count()."""

    @pytest.mark.asyncio
    async def test_delete_twice(self, repository):
        created = await repository.create("Acme")

        assert await repository.delete(created.id) is True
        assert await repository.delete(created.id) is False

    @pytest.mark.asyncio
    async def test_delete_unknown_returns_false(self, repository):
        assert await repository.delete(uuid4()) is False

    @pytest.mark.asyncio
    async def test_create_then_delete_scenario(self, repository):
        created = await repository.create("Acme", {"tier": "gold"})
        assert created.metadata["tier"] == "gold"

        assert await repository.delete(created.id) is True
        assert await repository.find_by_id(created.id) is None

    @pytest.mark.asyncio
    async def test_exists_and_count(self, repository):
        assert await repository.count() == 0

        created = await repository.create("Acme")
        await repository.create("Globex")

        assert await repository.count() == 2
        assert await repository.exists(created.id) is True
        assert await repository.exists(uuid4()) is False

        await repository.delete(created.id)
        assert await repository.exists(created.id) is False
        assert await repository.count() == 1


class TestCreateMany:
    """create_many() atomicity."""

    @pytest.mark.asyncio
    async def test_create_many_returns_all_records(self, repository):
        created = await repository.create_many([
            ClientCreate(name="A", metadata={"n": 1}),
            ClientCreate(name="B"),
            ClientCreate(name="C", metadata={"n": 3}),
        ])

        assert [client.name for client in created] == ["A", "B", "C"]
        assert created[0].metadata == {"n": 1}
        assert created[1].metadata is None
        assert await repository.count() == 3

    @pytest.mark.asyncio
    async def test_create_many_commits_when_no_transaction_is_open(
        self, repository, session_factory
    ):
        await repository.create_many([ClientCreate(name="A"), ClientCreate(name="B")])

        # Visible from an independent session
        async with session_factory() as other:
            assert await ClientRepository(other).count() == 2

    @pytest.mark.asyncio
    async def test_failed_batch_inserts_nothing(self, repository):
        await repository.create("existing")
        before = await repository.count()

        # Bypass validation to get a NOT NULL violation in the middle of the batch
        invalid = ClientCreate.model_construct(name=None, metadata=None)
        with pytest.raises(IntegrityError):
            await repository.create_many([
                ClientCreate(name="A"),
                invalid,
                ClientCreate(name="C"),
            ])

        assert await repository.count() == before
        assert [client.name for client in await repository.find_all()] == ["existing"]

    @pytest.mark.asyncio
    async def test_failed_batch_on_fresh_session_inserts_nothing(
        self, repository, session_factory
    ):
        invalid = ClientCreate.model_construct(name=None, metadata=None)
        with pytest.raises(IntegrityError):
            await repository.create_many([ClientCreate(name="A"), invalid])

        async with session_factory() as other:
            assert await RawClientRepository(other).count() == 0


class TestMetadataKeySearch:
    """find_by_metadata_key()."""

    @pytest.mark.asyncio
    async def test_matches_top_level_keys_only(self, repository):
        gold = await repository.create("Gold", {"tier": "gold"})
        await repository.create("Nested", {"plan": {"tier": "silver"}})
        await repository.create("Empty", None)

        found = await repository.find_by_metadata_key("tier")

        assert [client.id for client in found] == [gold.id]

    @pytest.mark.asyncio
    async def test_key_with_null_value_counts_as_present(self, repository):
        created = await repository.create("Nulls", {"region": None})

        found = await repository.find_by_metadata_key("region")

        assert [client.id for client in found] == [created.id]

    @pytest.mark.asyncio
    async def test_newest_first(self, repository):
        await repository.create("older", {"vip": True})
        await repository.create("newer", {"vip": False})

        found = await repository.find_by_metadata_key("vip")

        assert [client.name for client in found] == ["newer", "older"]

    @pytest.mark.asyncio
    async def test_keys_with_dots_and_quotes_match_verbatim(self, repository):
        created = await repository.create("Odd keys", {"a.b": 1, "q\"x": 2, "back\\slash": 3})
        await repository.create("Plain", {"a": {"b": 1}, "q": 0})

        for key in ("a.b", "q\"x", "back\\slash"):
            found = await repository.find_by_metadata_key(key)
            assert [client.id for client in found] == [created.id], key

        assert await repository.find_by_metadata_key("x") == []


class TestStrategiesAgree:
    """Rows written by one strategy read identically through the other."""

    @pytest.mark.asyncio
    async def test_orm_write_raw_read(self, db_session):
        created = await ClientRepository(db_session).create("Acme", {"tier": "gold"})
        await db_session.commit()

        found = await RawClientRepository(db_session).find_by_id(created.id)

        assert found == created

    @pytest.mark.asyncio
    async def test_raw_write_orm_read(self, db_session):
        created = await RawClientRepository(db_session).create("Acme", {"tier": "gold"})

        found = await ClientRepository(db_session).find_by_id(created.id)

        assert found == created
