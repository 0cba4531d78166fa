"""Workflow controller: owns all shared state and sequences the pipeline.

Every operator action goes through one method here. Each method checks
that its step is reachable, does the work, and only then fires the
state-machine transition, so a failure never leaves the workflow on a
half-advanced step. Failures are recorded on ``last_error`` and
re-raised to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from shotlist.exceptions import ShotlistError
from shotlist.export.csv_export import compile_csv
from shotlist.models import FilterConfig, GettyMedia, MediaKind, Person, PersonGettyResults
from shotlist.selection.ledger import SelectionLedger
from shotlist.workflow.fsm import check_transition, create_fsm

if TYPE_CHECKING:
    import httpx

    from shotlist.config import Credentials, PipelineConfig
    from shotlist.export.bundle import BundlePackager, BundleResult, ItemCallback
    from shotlist.extraction.extractor import ShotlistExtractor
    from shotlist.getty.aggregator import ProgressCallback, SearchAggregator
    from shotlist.getty.auth import AccessToken

logger = logging.getLogger(__name__)


class WorkflowController:
    """Script -> shotlist -> Getty results -> selection -> exports.

    Usage::

        controller = WorkflowController.from_config(http, credentials, config)
        await controller.authenticate()
        controller.submit_script(text)
        await controller.generate_shotlist()
        await controller.search_provider()
        controller.select_all_global(MediaKind.PHOTO)
        csv_text = controller.compile_export()
        bundle = await controller.build_bundle()
    """

    def __init__(
        self,
        extractor: ShotlistExtractor,
        aggregator: SearchAggregator,
        packager: BundlePackager,
        filter_config: FilterConfig | None = None,
        token_fetcher: Callable[[], Awaitable[AccessToken]] | None = None,
    ) -> None:
        self._extractor = extractor
        self._aggregator = aggregator
        self._packager = packager
        self._token_fetcher = token_fetcher
        self._fsm = create_fsm()

        self.filter_config = filter_config or FilterConfig()
        self.access_token: str | None = None
        self.last_error: ShotlistError | None = None

        self.script = ""
        self.shotlist: list[Person] = []
        self.results: list[PersonGettyResults] = []
        self.export_text = ""
        self.ledger = SelectionLedger()
        self.ledger.add_listener(self._invalidate_export)

    @classmethod
    def from_config(
        cls,
        http: httpx.AsyncClient,
        credentials: Credentials,
        config: PipelineConfig,
    ) -> WorkflowController:
        """Wire the real Gemini/Getty collaborators around one HTTP client."""
        from google import genai

        from shotlist.export.bundle import BundlePackager
        from shotlist.extraction.extractor import ShotlistExtractor
        from shotlist.getty.aggregator import SearchAggregator
        from shotlist.getty.auth import fetch_access_token
        from shotlist.getty.gateway import GettyGateway
        from shotlist.getty.rate_limiter import FixedDelayRateLimiter

        async def _fetch_token() -> AccessToken:
            return await fetch_access_token(
                http, credentials.getty_api_key, credentials.getty_api_secret
            )

        return cls(
            extractor=ShotlistExtractor(
                genai.Client(api_key=credentials.gemini_api_key),
                model=config.gemini_model,
            ),
            aggregator=SearchAggregator(
                GettyGateway(http, credentials.getty_api_key),
                FixedDelayRateLimiter(config.inter_entity_delay),
            ),
            packager=BundlePackager(http, concurrency=config.bundle_concurrency),
            filter_config=config.default_filter(),
            token_fetcher=_fetch_token,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def step(self) -> int:
        """Current step number (1-6)."""
        return self._fsm.current_state.value

    def _invalidate_export(self) -> None:
        self.export_text = ""

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        """Record any pipeline error raised inside *name* on ``last_error``."""
        self.last_error = None
        try:
            yield
        except ShotlistError as e:
            self.last_error = e
            logger.error("%s failed: %s", name, e)
            raise

    # ------------------------------------------------------------------
    # Step 0: authentication (once per session)
    # ------------------------------------------------------------------

    async def authenticate(self) -> str:
        """Obtain the Getty bearer token if not already held.

        Raises:
            AuthError: On a failed token exchange.
        """
        if self.access_token:
            return self.access_token
        if self._token_fetcher is None:
            raise RuntimeError("No token fetcher configured")
        with self._operation("authenticate"):
            token = await self._token_fetcher()
        self.access_token = token.access_token
        return self.access_token

    # ------------------------------------------------------------------
    # Steps 1-4
    # ------------------------------------------------------------------

    def submit_script(self, text: str) -> None:
        """Accept the operator's script (step 1 -> 2)."""
        check_transition(self.step, "submit_script")
        if not text or not text.strip():
            raise ValueError("Script is empty")
        self.script = text
        self.last_error = None
        self._fsm.send("submit_script")

    async def generate_shotlist(self) -> list[Person]:
        """Extract people from the script (step 2 -> 3).

        Raises:
            ExtractionError: On malformed model output; the step does not
                advance and the call may be retried.
        """
        check_transition(self.step, "generate_shotlist")
        with self._operation("generate_shotlist"):
            people = await self._extractor.extract(self.script)
        self.shotlist = people
        self._fsm.send("generate_shotlist")
        return people

    async def search_provider(
        self, on_progress: ProgressCallback | None = None
    ) -> list[PersonGettyResults]:
        """Search Getty for every person (step 3 -> 4).

        Raises:
            SearchError: On the first provider failure; no results are kept.
        """
        check_transition(self.step, "search_provider")
        with self._operation("search_provider"):
            results = await self._aggregator.search_all(
                self.shotlist,
                self.filter_config,
                self.access_token,
                on_progress=on_progress,
            )
        self.results = results
        self._fsm.send("search_provider")
        return results

    # ------------------------------------------------------------------
    # Step 5: selection
    # ------------------------------------------------------------------

    def _after_selection_change(self) -> None:
        if self.ledger:
            self._fsm.send("make_selection")

    def _person_name(self, person_index: int) -> str:
        return self.results[person_index].person.name

    def toggle(self, person_index: int, media: GettyMedia, kind: MediaKind) -> bool:
        """Toggle one item; returns whether it is now selected."""
        check_transition(self.step, "make_selection")
        selected = self.ledger.toggle(person_index, self._person_name(person_index), media, kind)
        self._after_selection_change()
        return selected

    def select_all_of_kind(self, person_index: int, kind: MediaKind) -> None:
        check_transition(self.step, "make_selection")
        result = self.results[person_index]
        self.ledger.select_all_of_kind(
            person_index, result.person.name, result.items_of(kind), kind
        )
        self._after_selection_change()

    def deselect_all_of_kind(self, person_index: int, kind: MediaKind) -> None:
        check_transition(self.step, "make_selection")
        self.ledger.deselect_all_of_kind(person_index, kind)
        self._after_selection_change()

    def select_all_global(self, kind: MediaKind) -> None:
        check_transition(self.step, "make_selection")
        self.ledger.select_all_global(kind, self.results)
        self._after_selection_change()

    def deselect_all_global(self, kind: MediaKind) -> None:
        check_transition(self.step, "make_selection")
        self.ledger.deselect_all_global(kind)
        self._after_selection_change()

    def is_selected(self, person_index: int, media_id: str) -> bool:
        return self.ledger.is_selected(person_index, media_id)

    # ------------------------------------------------------------------
    # Step 6: exports
    # ------------------------------------------------------------------

    def compile_export(self) -> str:
        """Compile the CSV export (step 5 -> 6, repeatable).

        Raises:
            TransitionNotAllowed: Before anything has been selected.
            ExportError: If the ledger has since been emptied.
        """
        check_transition(self.step, "export")
        with self._operation("compile_export"):
            text = compile_csv(self.ledger.items, self.results)
        self.export_text = text
        self._fsm.send("export")
        return text

    async def build_bundle(self, on_item: ItemCallback | None = None) -> BundleResult:
        """Download the selected media into a ZIP archive (repeatable).

        Does not change the step.

        Raises:
            TransitionNotAllowed: Before anything has been selected.
            PackagingError: If no item could be downloaded.
        """
        check_transition(self.step, "export")
        with self._operation("build_bundle"):
            return await self._packager.package(self.ledger.items, on_item=on_item)

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Discard script, shotlist, results, selections and export; back to step 1.

        The access token and filter settings are kept for the session.
        """
        self.script = ""
        self.shotlist = []
        self.results = []
        self.ledger.clear()
        self.export_text = ""
        self.last_error = None
        self._fsm.send("reset")
        logger.info("Workflow reset")
