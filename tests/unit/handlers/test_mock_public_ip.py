import pytest

from cloudhandle.schemas.resources import (
    IID,
    AddressType,
    KeyValue,
    NetworkTier,
    PublicIPReqInfo,
    PublicIPStatus,
)
from cloudhandle.services.handlers.mock import MockPublicIPHandler
from cloudhandle.shared.core.exceptions import ResourceConflictError, ResourceNotFoundError


@pytest.mark.asyncio
async def test_create_assigns_deterministic_record(store):
    handler = MockPublicIPHandler("m1", store=store)

    first = await handler.create_public_ip(PublicIPReqInfo(iid=IID(name_id="ip-1")))
    second = await handler.create_public_ip(
        PublicIPReqInfo(iid=IID(name_id="ip-2"), key_value_list=[KeyValue(key="owner", value="team-a")])
    )

    assert first.iid == IID(name_id="ip-1", system_id="ip-1")
    assert first.public_ip == "203.0.113.1"
    assert second.public_ip == "203.0.113.2"
    assert first.region == "mock-region"
    assert first.status == PublicIPStatus.RESERVED
    assert first.network_tier == NetworkTier.PREMIUM
    assert first.address_type == AddressType.EXTERNAL
    assert first.owned_vm_iid is None
    assert first.creation_timestamp
    assert second.key_value_list == [KeyValue(key="owner", value="team-a")]


@pytest.mark.asyncio
async def test_read_after_write_and_delete(store):
    handler = MockPublicIPHandler("m1", store=store)
    created = await handler.create_public_ip(PublicIPReqInfo(iid=IID(name_id="ip-1")))

    assert await handler.get_public_ip(IID(name_id="ip-1")) == created
    assert [ip.iid.name_id for ip in await handler.list_public_ip()] == ["ip-1"]

    assert await handler.delete_public_ip("ip-1") is True
    assert await handler.delete_public_ip("ip-1") is False
    with pytest.raises(ResourceNotFoundError):
        await handler.get_public_ip("ip-1")


@pytest.mark.asyncio
async def test_duplicate_name_conflicts(store):
    handler = MockPublicIPHandler("m1", store=store)
    await handler.create_public_ip(PublicIPReqInfo(iid=IID(name_id="ip-1")))

    with pytest.raises(ResourceConflictError):
        await handler.create_public_ip(PublicIPReqInfo(iid=IID(name_id="ip-1")))


@pytest.mark.asyncio
async def test_public_ip_and_security_partitions_do_not_collide(store):
    from cloudhandle.schemas.resources import SecurityReqInfo
    from cloudhandle.services.handlers.mock import MockSecurityHandler

    await MockPublicIPHandler("m1", store=store).create_public_ip(PublicIPReqInfo(iid=IID(name_id="same")))
    await MockSecurityHandler("m1", store=store).create_security(SecurityReqInfo(iid=IID(name_id="same")))

    assert len(await MockPublicIPHandler("m1", store=store).list_public_ip()) == 1
    assert len(await MockSecurityHandler("m1", store=store).list_security()) == 1


@pytest.mark.asyncio
async def test_store_reset_for_single_instance(store):
    await MockPublicIPHandler("keep", store=store).create_public_ip(PublicIPReqInfo(iid=IID(name_id="ip-1")))
    await MockPublicIPHandler("drop", store=store).create_public_ip(PublicIPReqInfo(iid=IID(name_id="ip-1")))

    store.reset("drop")

    assert len(await MockPublicIPHandler("keep", store=store).list_public_ip()) == 1
    assert await MockPublicIPHandler("drop", store=store).list_public_ip() == []


def test_mock_addresses_continue_into_next_block_without_reuse():
    from cloudhandle.services.handlers.mock.public_ip import _mock_address

    assert _mock_address(254) == "203.0.113.254"
    assert _mock_address(255) == "198.51.100.1"
    assert _mock_address(509) == "192.0.2.1"
    assert len({_mock_address(seq) for seq in range(1, 763)}) == 762


@pytest.mark.asyncio
async def test_create_fails_when_address_pool_is_exhausted(store, monkeypatch):
    from cloudhandle.services.handlers.mock import public_ip as mock_public_ip

    monkeypatch.setattr(mock_public_ip, "HOSTS_PER_BLOCK", 1)
    handler = MockPublicIPHandler("m1", store=store)

    created = [
        await handler.create_public_ip(PublicIPReqInfo(iid=IID(name_id=f"ip-{i}")))
        for i in range(3)
    ]
    assert [info.public_ip for info in created] == ["203.0.113.1", "198.51.100.1", "192.0.2.1"]

    with pytest.raises(ResourceConflictError):
        await handler.create_public_ip(PublicIPReqInfo(iid=IID(name_id="ip-overflow")))
    assert len(await handler.list_public_ip()) == 3
