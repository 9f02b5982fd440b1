"""Test request-scoped dependencies"""

import asyncio

from align.presentation.api.dependencies import disconnect_watcher


class StubbornRequest:
    """Request whose disconnect check swallows cancellation, like an already-cancelled scope"""

    def __init__(self, disconnected: bool = False):
        self.disconnected = disconnected
        self.checks = 0

    async def is_disconnected(self) -> bool:
        self.checks += 1
        try:
            await asyncio.sleep(0.05)
        except asyncio.CancelledError:
            return False
        return self.disconnected


class TestDisconnectWatcher:
    async def test_teardown_finishes_when_cancel_is_swallowed(self):
        """
        GIVEN a watcher polling a request that absorbs task cancellation
        WHEN the dependency is torn down mid-check
        THEN teardown completes promptly and polling stops.
        """
        request = StubbornRequest()
        watcher = disconnect_watcher(request)
        cancel = await watcher.__anext__()
        await asyncio.sleep(0)  # let the watcher enter is_disconnected()

        await asyncio.wait_for(watcher.aclose(), timeout=2)

        checks = request.checks
        await asyncio.sleep(0.3)
        assert request.checks == checks
        assert not cancel.is_set()

    async def test_disconnect_sets_cancel_event(self):
        request = StubbornRequest(disconnected=True)
        watcher = disconnect_watcher(request)
        cancel = await watcher.__anext__()

        await asyncio.wait_for(cancel.wait(), timeout=2)

        await watcher.aclose()
        assert cancel.is_set()
