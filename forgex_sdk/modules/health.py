"""
Health Module

Probes the RPC connection and every present adapter that has a probe.
"""

import logging
from typing import Any, Awaitable, Dict, TYPE_CHECKING

from ..infra.fanout import settle_all
from ..infra.retry import CorrelationContext
from ..types.results import HealthReport

if TYPE_CHECKING:
    from ..client import ForgeXClient

logger = logging.getLogger(__name__)

CONNECTION = "connection"
NO_PROBE = "no health probe"


class HealthModule:
    """
    Service health check

    overall = healthy / attempted. Absent adapters and adapters without a
    probe are not attempted; they are reported in HealthReport.absent.

    Usage:
        report = await client.health_check()
        print(f"{report.overall:.0%} healthy, down: {report.unhealthy}")
    """

    def __init__(self, client: "ForgeXClient"):
        self._client = client

    async def health_check(self) -> HealthReport:
        probes: Dict[str, Awaitable[Any]] = {
            CONNECTION: self._client.connection.get_slot(),
        }
        absent: Dict[str, str] = {}

        for name, slot in self._client.slots().items():
            if not slot.is_present:
                absent[name] = slot.reason
            elif slot.adapter.has_health_probe:
                probes[name] = slot.adapter.health_probe()
            else:
                absent[name] = NO_PROBE

        with CorrelationContext("health") as cid:
            logger.debug(f"[{cid}] Probing {len(probes)} services")
            settled = await settle_all(probes)

        services = {}
        for name, outcome in settled.items():
            services[name] = outcome.ok
            if not outcome.ok:
                logger.warning(f"Health probe {name} failed: {outcome.error}")

        report = HealthReport.from_checks(services, absent)
        logger.info(f"Health check: {report.healthy}/{report.attempted} services healthy")
        return report
