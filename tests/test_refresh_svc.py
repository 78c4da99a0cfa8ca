import asyncio

import httpx
import pytest

from tests.factories import ALDI, COLES, WOOLWORTHS, product


def _names(products):
    return [p.item_name for p in products]


@pytest.mark.asyncio
async def test_one_failing_source_out_of_three_still_publishes_the_rest(build_service, clock):
    svc = build_service({
        COLES: [product("Toothbrush", "Coles", "7.50", "10.00")],
        WOOLWORTHS: httpx.ConnectError,
        ALDI: [product("Olive Oil", "Aldi", "9.00", "20.00"), product("Toothbrush", "Aldi", "5.00", "10.00")],
    })

    report = await svc.coordinator.refresh()

    assert report.sources_ok == 2
    assert report.sources_failed == [WOOLWORTHS]
    assert report.published
    assert sorted(_names(svc.store.read())) == ["Olive Oil", "Toothbrush"]
    assert {p.item_name: p.retailer for p in svc.store.read()}["Toothbrush"] == "Coles"
    assert svc.store.last_updated == clock.now


@pytest.mark.asyncio
async def test_all_sources_failing_publishes_empty_catalog(build_service):
    svc = build_service({COLES: httpx.ConnectError, WOOLWORTHS: 500, ALDI: "not json"})

    report = await svc.coordinator.refresh()

    assert report.sources_ok == 0
    assert report.sources_failed == [COLES, WOOLWORTHS, ALDI]
    assert report.published
    assert svc.store.read() == []


@pytest.mark.asyncio
async def test_all_sources_failing_replaces_a_previous_snapshot(build_service):
    routes = {COLES: [product("Toothbrush", "Coles", "7.50", "10.00")]}
    svc = build_service(routes)
    await svc.coordinator.refresh()
    assert _names(svc.store.read()) == ["Toothbrush"]

    routes[COLES] = httpx.ConnectError
    await svc.coordinator.refresh()

    assert svc.store.read() == []


@pytest.mark.asyncio
async def test_keep_stale_on_total_failure_leaves_snapshot_alone(build_service, clock):
    routes = {COLES: [product("Toothbrush", "Coles", "7.50", "10.00")]}
    svc = build_service(routes, keep_stale_on_total_failure=True)
    await svc.coordinator.refresh()
    published_at = svc.store.last_updated

    routes[COLES] = 503
    clock.advance(hours=1)
    report = await svc.coordinator.refresh()

    assert not report.published
    assert _names(svc.store.read()) == ["Toothbrush"]
    assert svc.store.last_updated == published_at


@pytest.mark.asyncio
async def test_merge_order_follows_registration_not_completion(build_service):
    async def slow_coles(request):
        await asyncio.sleep(0.05)
        return httpx.Response(200, json=[product("Toothbrush", "Coles", "7.50", "10.00")])

    svc = build_service({
        COLES: slow_coles,
        WOOLWORTHS: [product("Toothbrush", "Woolworths", "6.00", "10.00")],
    })

    await svc.coordinator.refresh()

    assert [p.retailer for p in svc.store.read()] == ["Coles"]


@pytest.mark.asyncio
async def test_sources_are_fetched_concurrently(build_service):
    in_flight = 0
    peak = 0

    async def tracked(request):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.05)
        in_flight -= 1
        return httpx.Response(200, json=[])

    svc = build_service({COLES: tracked, WOOLWORTHS: tracked, ALDI: tracked})

    await svc.coordinator.refresh()

    assert peak == 3


@pytest.mark.asyncio
async def test_concurrent_triggers_run_serially_each_with_its_own_cycle(build_service):
    in_flight = 0
    peak = 0
    calls = 0

    async def tracked(request):
        nonlocal in_flight, peak, calls
        calls += 1
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.05)
        in_flight -= 1
        return httpx.Response(200, json=[product(f"Item {calls}", "Coles", "1", "2")])

    svc = build_service({COLES: tracked})

    first, second = await asyncio.gather(svc.coordinator.refresh(), svc.coordinator.refresh())

    assert peak == 1
    assert calls == 2
    assert first.product_count == second.product_count == 1
    assert _names(svc.store.read()) == ["Item 2"]
    assert not svc.coordinator.in_progress


@pytest.mark.asyncio
async def test_unexpected_error_in_one_fetch_does_not_abort_siblings(build_service, monkeypatch):
    svc = build_service({
        COLES: [product("Toothbrush", "Coles", "7.50", "10.00")],
        WOOLWORTHS: [product("Mouthwash", "Woolworths", "8.50", "10.00")],
    })
    real_fetch = svc.coordinator.upstream.fetch

    async def flaky(url):
        if url == COLES:
            raise RuntimeError("bug in decoder")
        return await real_fetch(url)

    monkeypatch.setattr(svc.coordinator.upstream, "fetch", flaky)

    report = await svc.coordinator.refresh()

    assert report.sources_failed == [COLES]
    assert _names(svc.store.read()) == ["Mouthwash"]


@pytest.mark.asyncio
async def test_no_sources_configured_publishes_empty(build_service):
    svc = build_service({}, urls=[])

    report = await svc.coordinator.refresh()

    assert report.product_count == 0
    assert report.published
    assert svc.store.read() == []
