"""Tests for SQLAlchemy repository implementations on aiosqlite."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from procflow.core.database import create_session_factory, init_database, to_async_url
from procflow.domain.errors import (
    ConcurrentModificationError,
    OrderNotFoundError,
    TemplateNotFoundError,
)
from procflow.domain.orders.models import OrderInstance
from procflow.domain.templates.models import TargetModule
from procflow.persistence.repositories import OrderFilter
from procflow.persistence.sql_repositories import SQLOrderRepository, SQLTemplateStore
from tests.helpers.factories import sample_template


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_database(engine)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def template_store(session_factory):
    return SQLTemplateStore(session_factory)


@pytest.fixture
def order_repo(session_factory):
    return SQLOrderRepository(session_factory)


def test_to_async_url():
    assert to_async_url("postgresql://u:p@db/app") == "postgresql+asyncpg://u:p@db/app"
    assert to_async_url("sqlite:///./app.db") == "sqlite+aiosqlite:///./app.db"
    assert to_async_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"


class TestSQLTemplateStore:
    """Tests for SQLTemplateStore."""

    @pytest.mark.asyncio
    async def test_save_and_get(self, template_store):
        saved = await template_store.save_template(sample_template())
        fetched = await template_store.get_template("tpl_repair")

        assert saved.revision == 1
        assert fetched.form_schema == sample_template().form_schema
        assert fetched.workflow == sample_template().workflow
        assert fetched.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_resave_bumps_revision(self, template_store):
        first = await template_store.save_template(sample_template())
        template = sample_template()
        template.name = "改名"

        second = await template_store.save_template(template)

        assert second.revision == 2
        assert second.name == "改名"
        assert second.created_at == first.created_at
        assert len(await template_store.list_templates()) == 1

    @pytest.mark.asyncio
    async def test_new_template_gets_id(self, template_store):
        saved = await template_store.save_template(sample_template(template_id=None))
        assert saved.id.startswith("tpl_")

    @pytest.mark.asyncio
    async def test_missing(self, template_store):
        with pytest.raises(TemplateNotFoundError):
            await template_store.get_template("nope")


class TestSQLOrderRepository:
    """Tests for SQLOrderRepository."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, order_repo):
        created = await order_repo.create_order(OrderInstance(
            template_id="tpl_repair",
            current_node_id="approval",
            status="经理审批",
            dynamic_data={"f_parts": ["内存"]},
            module=TargetModule.SERVICE,
            order_number="SVC-202610-1",
            template_revision=1,
        ))

        fetched = await order_repo.get_order(created.id)

        assert fetched.dynamic_data == {"f_parts": ["内存"]}
        assert fetched.module == TargetModule.SERVICE
        assert fetched.version == 1

    @pytest.mark.asyncio
    async def test_update_is_version_checked(self, order_repo):
        created = await order_repo.create_order(OrderInstance(status="a"))

        updated = await order_repo.update_order(created.id, {"status": "b"}, expected_version=1)
        assert updated.status == "b"
        assert updated.version == 2

        with pytest.raises(ConcurrentModificationError) as exc_info:
            await order_repo.update_order(created.id, {"status": "c"}, expected_version=1)
        assert exc_info.value.actual_version == 2
        assert (await order_repo.get_order(created.id)).status == "b"

    @pytest.mark.asyncio
    async def test_update_without_expected_version(self, order_repo):
        created = await order_repo.create_order(OrderInstance())
        updated = await order_repo.update_order(created.id, {"assigned_to": "u_1"})
        assert updated.assigned_to == "u_1"

    @pytest.mark.asyncio
    async def test_update_missing(self, order_repo):
        with pytest.raises(OrderNotFoundError):
            await order_repo.update_order("nope", {"status": "x"})

    @pytest.mark.asyncio
    async def test_list_filters(self, order_repo):
        await order_repo.create_order(OrderInstance(template_id="tpl_a", machine_sn="SN-AAA"))
        await order_repo.create_order(OrderInstance(template_id="tpl_b", machine_sn="SN-BBB"))

        by_template = await order_repo.list_orders(OrderFilter(template_id="tpl_b"))
        searched = await order_repo.list_orders(OrderFilter(search="aaa"))

        assert [o.machine_sn for o in by_template] == ["SN-BBB"]
        assert [o.template_id for o in searched] == ["tpl_a"]
