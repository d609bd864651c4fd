# -----------------------------------------------------------------------------
# Remote Client
# Purpose: normalize every call to the formula registry / solver into either a
# parsed JSON value or a single ClientError carrying a human-readable message.
#   - non-2xx → structured {message|error} body, else "HTTP <code>: <reason>"
#   - 204     → None (no body parsing)
#   - network → ClientError without status code
# No retries, no cancellation; timeout is None unless the caller passes one.
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from . import config
from .errors import ClientError
from .logger import get_logger
from .types import EvaluationResult, Formula, GoalSeekRequest, GoalSeekResult

logger = get_logger(__name__)


def _validate(model, data: Any):
    """Validate a response payload; a shape mismatch is reported like any other remote failure."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ClientError(f"Unexpected response from server: {e.error_count()} invalid field(s)") from e


def _error_message(response: httpx.Response) -> str:
    """Pick the remote's message/error field, or synthesize one from the status line."""
    try:
        data = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.reason_phrase}"
    if isinstance(data, dict):
        msg = data.get("message") or data.get("error")
        if msg:
            return str(msg)
    return f"Request failed with status {response.status_code}"


class RemoteClient:
    def __init__(self, base_url: str | None = None, *, prefix: str | None = None,
                 http: httpx.AsyncClient | None = None, timeout: float | None = None):
        self.base_url = (base_url or config.API_URL).rstrip("/")
        self.prefix = config.API_PREFIX if prefix is None else prefix
        # An injected client (tests: ASGITransport / MockTransport) is not owned by us.
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def __aenter__(self) -> "RemoteClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # ---------------- generic call ----------------

    async def call(self, endpoint: str, method: str = "GET", body: Any = None) -> Any:
        url = f"{self.prefix}{endpoint}"
        try:
            response = await self._http.request(
                method, url,
                json=body,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error("API error: %s %s failed: %s", method, url, e)
            raise ClientError(str(e) or e.__class__.__name__) from e

        if not response.is_success:
            message = _error_message(response)
            logger.error("API error: %s %s -> %d %s", method, url, response.status_code, message)
            raise ClientError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ClientError(f"Invalid JSON in response from {url}",
                              status_code=response.status_code) from e

    # ---------------- registry ----------------

    @staticmethod
    def _formula_path(name: str) -> str:
        return f"/formulas/{quote(name, safe='')}"

    async def list_formulas(self) -> List[Formula]:
        data = await self.call("/formulas")
        return [_validate(Formula, item) for item in (data or [])]

    async def get_formula(self, name: str) -> Formula:
        return _validate(Formula, await self.call(self._formula_path(name)))

    async def create_formula(self, formula: Formula) -> Optional[Formula]:
        data = await self.call("/formulas", "POST", formula.to_wire())
        return _validate(Formula, data) if data else None

    async def update_formula(self, name: str, formula: Formula) -> Optional[Formula]:
        data = await self.call(self._formula_path(name), "PUT", formula.to_wire())
        return _validate(Formula, data) if data else None

    async def delete_formula(self, name: str) -> None:
        await self.call(self._formula_path(name), "DELETE")

    # ---------------- solver ----------------

    async def goal_seek(self, request: GoalSeekRequest) -> GoalSeekResult:
        data = await self.call("/goal-seek", "POST", request.to_wire())
        return _validate(GoalSeekResult, data or {})

    async def evaluate(self, formula_name: str, values: Dict[str, float]) -> EvaluationResult:
        path = f"/goal-seek/evaluate/{quote(formula_name, safe='')}"
        data = await self.call(path, "POST", dict(values))
        return _validate(EvaluationResult, data)
