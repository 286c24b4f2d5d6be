"""End-to-end: a generated client talking to a Starlette app through its TestClient."""

from typing import Annotated, Any, Protocol

import pytest
from pydantic import BaseModel
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from reqline import (
    BasicAuthInterceptor,
    ClientBuilder,
    HeaderMap,
    HttpxTransport,
    JsonDecoder,
    JsonEncoder,
    Param,
    QueryMap,
    ResponseError,
    headers,
    request_line,
)


class Contributor(BaseModel):
    login: str
    contributions: int


class Issue(BaseModel):
    title: str
    body: str


async def contributors(request: Request) -> JSONResponse:
    owner = request.path_params["owner"]
    repo = request.path_params["repo"]
    return JSONResponse([{"login": f"{owner}-{repo}", "contributions": 3}])


async def create_issue(request: Request) -> JSONResponse:
    issue = await request.json()
    return JSONResponse(
        {
            "issue": issue,
            "authorization": request.headers.get("authorization"),
            "accept": request.headers.get("accept"),
            "trace": request.headers.get("x-trace"),
        },
        status_code=201,
    )


async def search(request: Request) -> JSONResponse:
    return JSONResponse([[key, value] for key, value in request.query_params.multi_items()])


async def missing(request: Request) -> PlainTextResponse:
    return PlainTextResponse("no such repo", status_code=404)


app = Starlette(
    routes=[
        Route("/repos/{owner}/{repo}/contributors", contributors),
        Route("/repos/{owner}/{repo}/issues", create_issue, methods=["POST"]),
        Route("/search", search),
        Route("/missing", missing),
    ]
)


@headers("Accept: application/json")
class GitHub(Protocol):
    @request_line("GET /repos/{owner}/{repo}/contributors")
    def contributors(self, owner: Annotated[str, Param()], repo: Annotated[str, Param()]) -> list[Contributor]:
        ...

    @request_line("POST /repos/{owner}/{repo}/issues")
    def create_issue(
        self,
        issue: Issue,
        owner: Annotated[str, Param()],
        repo: Annotated[str, Param()],
        trace: Annotated[dict[str, Any], HeaderMap()],
    ) -> dict[str, Any]:
        ...

    @request_line("GET /search?q={q}&sort=stars")
    def search(self, q: Annotated[str, Param()], extra: Annotated[dict[str, Any], QueryMap()]) -> list[list[str]]:
        ...

    @request_line("GET /missing")
    def missing(self) -> str:
        ...


@pytest.fixture
def github():
    with TestClient(app) as client:
        yield (
            ClientBuilder()
            .transport(HttpxTransport(client))
            .encoder(JsonEncoder())
            .decoder(JsonDecoder())
            .interceptor(BasicAuthInterceptor("alice", "secret"))
            .target(GitHub, "http://testserver")
        )


def test_get_with_path_variables(github):
    assert github.contributors("octo", "cat") == [Contributor(login="octo-cat", contributions=3)]


def test_post_json_body_with_interceptor_and_header_map(github):
    result = github.create_issue(Issue(title="Bug", body="It broke"), "octo", "cat", {"X-Trace": "t-1"})
    assert result == {
        "issue": {"title": "Bug", "body": "It broke"},
        "authorization": "Basic YWxpY2U6c2VjcmV0",
        "accept": "application/json",
        "trace": "t-1",
    }


def test_query_map_reaches_the_server(github):
    result = github.search("http client", {"sort": "forks", "page": 2})
    assert result == [["q", "http client"], ["sort", "forks"], ["page", "2"]]


def test_error_status_surfaces_as_response_error(github):
    with pytest.raises(ResponseError) as excinfo:
        github.missing()
    assert excinfo.value.status == 404
    assert excinfo.value.content_utf8() == "no such repo"
