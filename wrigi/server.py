"""HTTP surface: catalog listing, refresh trigger, descriptors and error reports."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from wrigi import __version__
from wrigi.catalog_store import CatalogStore
from wrigi.config import Settings
from wrigi.descriptor import Shape, content_type, render
from wrigi.errors import NotFound
from wrigi.github_api import GitHubClient
from wrigi.logger import get_logger
from wrigi.models import catalog_to_json
from wrigi.refresh import refresh
from wrigi.repo_catalog import load_catalog
from wrigi.upstream import Fetcher, forward_error_report, make_fetcher

logger = get_logger(__name__)

COOLDOWN_MESSAGE = "Repositories where updated less than {minutes:g} minutes ago. Please come back later."
UPDATED_MESSAGE = "Remote repositories updated"
NOT_FOUND_MESSAGE = "404 page not found"


def create_app(
    settings: Settings | None = None,
    *,
    store: CatalogStore | None = None,
    client: GitHubClient | None = None,
    fetch: Fetcher | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Service settings; defaults are used when omitted.
        store: Catalog store; seeded from ``settings.catalog`` when omitted.
        client: GitHub client used for fetching and error reports.
        fetch: Release fetcher; bound to ``client`` when omitted.
    """
    settings = settings or Settings()
    if store is None:
        store = CatalogStore(load_catalog(settings.catalog), cooldown=settings.cooldown)
    if client is None:
        client = GitHubClient(
            token=settings.oauth,
            base_url=settings.github.base_url,
            timeout_s=settings.github.timeout_s,
            max_retries=settings.github.max_retries,
        )
    if fetch is None:
        fetch = make_fetcher(client, limit_pages=settings.github.release_pages)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Close the GitHub session on shutdown."""
        yield
        client.close()

    app = FastAPI(title="wrigi", version=__version__, lifespan=lifespan)
    app.state.store = store

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound) -> PlainTextResponse:
        logger.info("descriptor_not_found", org=exc.org, repo=exc.repo, channel=exc.channel)
        return PlainTextResponse(NOT_FOUND_MESSAGE, status_code=404)

    @app.get("/")
    def list_catalog() -> JSONResponse:
        """Return every tracked organization with its resolved versions."""
        return JSONResponse(catalog_to_json(store.snapshot()))

    @app.api_route("/update", methods=["GET", "POST"])
    def update() -> PlainTextResponse:
        """Refresh all repositories from GitHub, subject to the cooldown."""
        outcome = refresh(store, fetch)
        if not outcome.applied:
            minutes = store.cooldown.total_seconds() / 60
            return PlainTextResponse(COOLDOWN_MESSAGE.format(minutes=minutes))
        return PlainTextResponse(UPDATED_MESSAGE)

    @app.post("/{owner}/{repository}/submitError")
    async def submit_error(
        owner: str, repository: str, request: Request, background_tasks: BackgroundTasks
    ) -> Response:
        """Forward an IDE error report to the repository's issue tracker."""
        body = await request.body()
        background_tasks.add_task(forward_error_report, client, owner, repository, body)
        return Response(status_code=200)

    def descriptor_response(
        owner: str, repository: str, channel: str, fmt: str, shape: Shape
    ) -> Response:
        payload = render(store.snapshot(), owner, repository, channel, fmt, shape=shape)
        return Response(content=payload, media_type=content_type(fmt))

    @app.get("/{owner}/{repository}/{channel}/idea.{fmt}")
    def idea_descriptor(owner: str, repository: str, channel: str, fmt: str) -> Response:
        return descriptor_response(owner, repository, channel, fmt, "rich")

    @app.get("/{owner}/{repository}/{channel}/updatePlugins.{fmt}")
    def update_manifest(owner: str, repository: str, channel: str, fmt: str) -> Response:
        return descriptor_response(owner, repository, channel, fmt, "minimal")

    @app.get("/{owner}/{repository}/{channel}.{fmt}")
    def channel_descriptor(owner: str, repository: str, channel: str, fmt: str) -> Response:
        return descriptor_response(owner, repository, channel, fmt, "rich")

    return app
