"""
HTTP gateway to the store service

Implements the DataStore contract over the service's REST endpoints with
httpx. A 404 maps to "not found" (None/False); transport failures and 5xx
responses (plus 408 and 429) map to TransientStoreError so callers can
retry.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from enigma.core.store import DataStore, check_team_update
from enigma.errors import TransientStoreError
from enigma.models import AccessCode, Question, Team


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
# Timeout and rate-limit responses are worth retrying like 5xx
RETRYABLE_STATUS = {408, 429}


class HttpStore(DataStore):
    """DataStore backed by a running store service"""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "HttpStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Optional[httpx.Response]:
        """Send a request; None on 404, TransientStoreError on anything retryable"""
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"Store request {method} {url} failed: {e}")
            raise TransientStoreError(f"{method} {url} failed: {e}") from e

        if response.status_code == 404:
            return None
        if response.status_code >= 500 or response.status_code in RETRYABLE_STATUS:
            raise TransientStoreError(f"{method} {url} returned {response.status_code}")
        if response.status_code >= 400:
            # Client-side mistakes are not retryable
            raise ValueError(f"{method} {url} rejected ({response.status_code}): {response.text}")
        return response

    async def get_access_code(self, code: str) -> Optional[AccessCode]:
        response = await self._request("GET", f"/access-codes/{code}")
        return AccessCode(**response.json()) if response else None

    async def find_team(self, access_code: str, team_name: Optional[str] = None) -> Optional[Team]:
        params = {"access_code": access_code}
        if team_name is not None:
            params["team_name"] = team_name
        response = await self._request("GET", "/teams", params=params)
        return Team(**response.json()) if response else None

    async def create_team(self, fields: Dict[str, Any]) -> Team:
        response = await self._request("POST", "/teams", json=fields)
        if response is None:
            raise TransientStoreError("Team creation endpoint not found")
        return Team(**response.json())

    async def update_team(self, team_id: str, fields: Dict[str, Any]) -> Team:
        check_team_update(fields)
        response = await self._request("PATCH", f"/teams/{team_id}", json=fields)
        if response is None:
            raise KeyError(f"Team {team_id} not found")
        return Team(**response.json())

    async def get_team(self, team_id: str) -> Optional[Team]:
        response = await self._request("GET", f"/teams/{team_id}")
        return Team(**response.json()) if response else None

    async def list_teams_by_section(self, section: str) -> List[Team]:
        response = await self._request("GET", f"/sections/{section}/teams")
        return [Team(**row) for row in response.json()] if response else []

    async def list_teams(self, section: Optional[str] = None) -> List[Team]:
        if section is not None:
            return await self.list_teams_by_section(section)
        response = await self._request("GET", "/teams/all")
        return [Team(**row) for row in response.json()] if response else []

    async def list_active_questions(self) -> List[Question]:
        response = await self._request("GET", "/questions")
        return [Question(**row) for row in response.json()] if response else []

    async def get_question(self, question_id: str) -> Optional[Question]:
        response = await self._request("GET", f"/questions/{question_id}")
        return Question(**response.json()) if response else None

    async def check_answer(self, question_id: str, candidate: str) -> bool:
        response = await self._request("POST", f"/questions/{question_id}/verify", json={"answer": candidate})
        return bool(response.json().get("correct")) if response else False

    async def get_hint(self, question_id: str, index: int) -> Optional[str]:
        response = await self._request("GET", f"/questions/{question_id}/hints/{index}")
        return response.json().get("hint") if response else None

    async def validate_admin_credentials(self, username: str, password: str) -> bool:
        response = await self._request("POST", "/admin/login", json={"username": username, "password": password})
        return bool(response.json().get("valid")) if response else False
