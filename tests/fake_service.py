# -----------------------------------------------------------------------------
# In-memory stand-in for the remote formula registry / solver (FastAPI).
# Mounted in tests through httpx.ASGITransport; no sockets involved.
# Solver answers are scripted (goal_seek_response / evaluate_response) because
# the workbench never computes anything itself.
# -----------------------------------------------------------------------------

from __future__ import annotations
import asyncio
import json
from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

CIRCLE_AREA = {
    "name": "circle_area",
    "expression": "pi*r^2",
    "description": "Area of a circle",
    "outputVariable": "area",
    "variables": ["r", "area"],
}

SIMPLE_INTEREST = {
    "name": "SIMPLE_INTEREST",
    "expression": "P * R * T / 100",
    "outputVariable": "SI",
    "variables": ["P", "R", "T", "SI"],
}


def _error(status: int, error: str, message: str, path: str) -> JSONResponse:
    # same shape as the real service's error body
    return JSONResponse(status_code=status, content={
        "status": status, "error": error, "message": message, "path": path,
    })


class FakeFormulaService:
    def __init__(self, formulas: Optional[List[Dict[str, Any]]] = None):
        self.formulas: Dict[str, Dict[str, Any]] = {f["name"]: dict(f) for f in (formulas or [])}
        self.requests: List[Tuple[str, str, Any]] = []
        self.goal_seek_response: Dict[str, Any] = {"success": True}
        self.evaluate_response: Optional[Dict[str, Any]] = None
        # route key ("GET /api/formulas", ...) -> (status, body); str body → text/plain
        self.failures: Dict[str, Tuple[int, Any]] = {}
        # when set, every non-GET request waits on it (holds a request in flight)
        self.gate: Optional[asyncio.Event] = None
        self.app = self._build()

    def fail(self, route: str, status: int, body: Any = None) -> None:
        self.failures[route] = (status, body)

    def calls(self, method: str, prefix: str = "") -> List[Tuple[str, str, Any]]:
        return [r for r in self.requests if r[0] == method and r[1].startswith(prefix)]

    async def _hit(self, request: Request) -> Tuple[Any, Optional[Response]]:
        """Record the request; return (json body, injected failure response or None)."""
        raw = await request.body()
        body = json.loads(raw) if raw else None
        self.requests.append((request.method, request.url.path, body))
        if self.gate is not None and request.method != "GET":
            await self.gate.wait()
        failure = self.failures.get(f"{request.method} {request.url.path}")
        if failure is None:
            return body, None
        status, payload = failure
        if isinstance(payload, str):
            return body, PlainTextResponse(payload, status_code=status)
        return body, JSONResponse(payload if payload is not None else {}, status_code=status)

    # ---------------- app ----------------

    def _build(self) -> FastAPI:
        app = FastAPI(title="Fake Goal Seek Service")

        @app.get("/api/formulas")
        async def list_formulas(request: Request):
            _, failed = await self._hit(request)
            return failed or list(self.formulas.values())

        @app.get("/api/formulas/{name}")
        async def get_formula(name: str, request: Request):
            _, failed = await self._hit(request)
            if failed:
                return failed
            if name not in self.formulas:
                return _error(404, "Not Found", f"Formula not found: {name}", request.url.path)
            return self.formulas[name]

        @app.post("/api/formulas")
        async def create_formula(request: Request):
            data, failed = await self._hit(request)
            if failed:
                return failed
            if data["name"] in self.formulas:
                return _error(409, "Conflict", f"Formula already exists: {data['name']}", request.url.path)
            self.formulas[data["name"]] = dict(data, id=len(self.formulas) + 1)
            return JSONResponse(self.formulas[data["name"]], status_code=201)

        @app.put("/api/formulas/{name}")
        async def update_formula(name: str, request: Request):
            data, failed = await self._hit(request)
            if failed:
                return failed
            if name not in self.formulas:
                return _error(404, "Not Found", f"Formula not found: {name}", request.url.path)
            self.formulas[name] = dict(self.formulas[name], **data)
            return self.formulas[name]

        @app.delete("/api/formulas/{name}")
        async def delete_formula(name: str, request: Request):
            _, failed = await self._hit(request)
            if failed:
                return failed
            if name not in self.formulas:
                return _error(404, "Not Found", f"Formula not found: {name}", request.url.path)
            del self.formulas[name]
            return Response(status_code=204)

        @app.post("/api/goal-seek")
        async def goal_seek(request: Request):
            data, failed = await self._hit(request)
            if failed:
                return failed
            if data.get("formulaName") not in self.formulas:
                return _error(400, "Bad Request", f"Formula not found: {data.get('formulaName')}",
                              request.url.path)
            if data.get("targetValue") is None:
                return _error(400, "Bad Request", "Target value is required", request.url.path)
            return dict({"formulaName": data["formulaName"], "seekVariable": data["seekVariable"],
                         "targetValue": data["targetValue"]}, **self.goal_seek_response)

        @app.post("/api/goal-seek/evaluate/{name}")
        async def evaluate(name: str, request: Request):
            values, failed = await self._hit(request)
            if failed:
                return failed
            if name not in self.formulas:
                return _error(404, "Not Found", f"Formula not found: {name}", request.url.path)
            if self.evaluate_response is not None:
                return self.evaluate_response
            return {"formulaName": name, "inputValues": values, "result": 0.0}

        return app
