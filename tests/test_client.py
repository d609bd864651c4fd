import httpx
import pytest

from workbench import ClientError, Formula, GoalSeekRequest, RemoteClient


def _mock_client(handler) -> RemoteClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://mock")
    return RemoteClient("http://mock", http=http)


@pytest.mark.asyncio
async def test_list_formulas_parses_camel_case(client):
    formulas = await client.list_formulas()
    circle = next(f for f in formulas if f.name == "circle_area")
    assert circle.output_variable == "area"
    assert circle.variables == ["r", "area"]


@pytest.mark.asyncio
async def test_delete_no_content_returns_none(client, service):
    assert await client.call("/formulas/circle_area", "DELETE") is None
    assert "circle_area" not in service.formulas


@pytest.mark.asyncio
async def test_structured_error_message_is_used(client):
    with pytest.raises(ClientError) as exc:
        await client.get_formula("missing")
    assert exc.value.message == "Formula not found: missing"
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_error_field_used_when_message_absent(client, service):
    service.fail("GET /api/formulas", 400, {"error": "Bad things"})
    with pytest.raises(ClientError) as exc:
        await client.list_formulas()
    assert exc.value.message == "Bad things"


@pytest.mark.asyncio
async def test_unparsable_error_body_synthesizes_status_line(client, service):
    service.fail("GET /api/formulas", 500, "<html>boom</html>")
    with pytest.raises(ClientError) as exc:
        await client.list_formulas()
    assert exc.value.message == "HTTP 500: Internal Server Error"


@pytest.mark.asyncio
async def test_json_error_without_message_fields(client, service):
    service.fail("GET /api/formulas", 503, {"details": []})
    with pytest.raises(ClientError) as exc:
        await client.list_formulas()
    assert exc.value.message == "Request failed with status 503"


@pytest.mark.asyncio
async def test_network_failure_is_a_client_error():
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    client = _mock_client(handler)
    with pytest.raises(ClientError) as exc:
        await client.list_formulas()
    assert exc.value.status_code is None
    assert "Connection refused" in exc.value.message


@pytest.mark.asyncio
async def test_names_are_escaped_in_paths():
    seen = []

    def handler(request):
        seen.append(request.url.raw_path.decode())
        return httpx.Response(204)

    client = _mock_client(handler)
    await client.delete_formula("a b/c")
    assert seen == ["/api/formulas/a%20b%2Fc"]


@pytest.mark.asyncio
async def test_goal_seek_body_omits_unset_hints(client, service):
    request = GoalSeekRequest(formula_name="circle_area", seek_variable="r",
                              target_value=50, known_values={}, upper_bound=10)
    await client.goal_seek(request)
    _, _, body = service.calls("POST", "/api/goal-seek")[0]
    assert body == {"formulaName": "circle_area", "seekVariable": "r", "targetValue": 50.0,
                    "knownValues": {}, "upperBound": 10.0}


@pytest.mark.asyncio
async def test_malformed_success_payload_is_a_client_error():
    client = _mock_client(lambda request: httpx.Response(200, json={"unexpected": True}))
    with pytest.raises(ClientError):
        await client.evaluate("circle_area", {"r": 3})


@pytest.mark.asyncio
async def test_create_returns_created_resource(client):
    created = await client.create_formula(
        Formula(name="double", expression="2*x", output_variable="y", variables=["x", "y"]))
    assert created.name == "double"


@pytest.mark.asyncio
async def test_owned_client_has_no_timeout_unless_given():
    async with RemoteClient("http://nowhere") as default:
        assert default._http.timeout == httpx.Timeout(None)
    async with RemoteClient("http://nowhere", timeout=2.5) as bounded:
        assert bounded._http.timeout == httpx.Timeout(2.5)


def test_non_numeric_target_serializes_as_null():
    request = GoalSeekRequest(formula_name="circle_area", seek_variable="r", target_value=None)
    assert request.to_wire()["targetValue"] is None
