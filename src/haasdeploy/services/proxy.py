"""Reverse proxy upstream swap through the Caddy admin API."""

from typing import Optional

import requests

from haasdeploy.constants import DEFAULT_PROXY_ADMIN_URL
from haasdeploy.errors import SwapError
from haasdeploy.errors_catalog import actionable_error
from haasdeploy.models import DeploymentTarget, ProxyUpstreamRecord


class ProxySwapper:
    """Points the ``{name}_upstream`` record at a new dial target."""

    def __init__(
        self,
        logger,
        admin_url: str = DEFAULT_PROXY_ADMIN_URL,
        timeout: Optional[float] = None,
        requests_module=requests,
    ):
        self.logger = logger
        self.admin_url = admin_url.rstrip("/")
        self.timeout = timeout
        self.requests = requests_module

    def record_url(self, record_id: str) -> str:
        return f"{self.admin_url}/id/{record_id}"

    def swap(self, target: DeploymentTarget, ip: str, port: int) -> ProxyUpstreamRecord:
        record = ProxyUpstreamRecord.for_target(target, ip, port)
        url = self.record_url(record.id)
        self.logger.info("Updating %s to dial %s", record.id, record.dial)

        try:
            response = self.requests.patch(url, json=record.payload(), timeout=self.timeout)
        except self.requests.RequestException as exc:
            raise SwapError(f"Proxy update for {record.id} failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise SwapError(
                actionable_error(
                    "proxy_rejected",
                    upstream=record.id,
                    status=str(response.status_code),
                    detail=(response.text or "").strip() or "<empty response>",
                )
            )

        return record
