"""
HOLDINGS STORE — CRUD CONTROLLER

Single owner of the holdings collection for one session.

RESPONSIBILITIES:
- Validate and apply add / edit / delete / import
- Resolve prices through the quote provider (with pending fallback)
- Batch price refreshes into one valuation pass
- Publish an immutable PortfolioSnapshot after every change

RULES:
✅ Mutations are serialized by one asyncio.Lock
✅ Holdings, summary and allocation change together or not at all
✅ Suspension happens only around provider calls
✅ No exception escapes a public operation; failures come back as results
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import IO, Awaitable, Callable, Dict, Iterable, Optional, Tuple, Union

from portfolio_engine.config import Settings
from portfolio_engine.domain.errors import (
    DuplicateSymbolError,
    NotFoundError,
    PortfolioError,
    QuoteFetchError,
    StoreBusyError,
    ValidationError,
)
from portfolio_engine.domain.models import (
    CLOSED_MODALS,
    EMPTY_SUMMARY,
    AddPrefill,
    AllocationEntry,
    Holding,
    ModalState,
    MutationState,
    PortfolioSnapshot,
    PortfolioSummary,
    PriceStatus,
    Quote,
    SearchState,
    ViewSettings,
)
from portfolio_engine.domain.services.allocation_engine import AllocationEngine
from portfolio_engine.domain.services.validation import normalize_symbol, validate_position
from portfolio_engine.domain.services.valuation_engine import ValuationEngine
from portfolio_engine.domain.services.view_engine import sort_holdings
from portfolio_engine.infrastructure.market_data.quote_store import QuoteStore
from portfolio_engine.infrastructure.market_data.types import QuoteProvider, SymbolSearchProvider
from portfolio_engine.realtime.snapshot_bus import SnapshotBus
from portfolio_engine.services.csv_import import ImportRow, parse_holdings_csv
from portfolio_engine.services.symbol_search_service import SymbolSearchService
from portfolio_engine.utils.time import utc_now

logger = logging.getLogger(__name__)


class DuplicateSymbolPolicy(str, Enum):
    """What adding an already-held symbol does"""
    REJECT = "reject"
    MERGE = "merge"


class BusyPolicy(str, Enum):
    """What a mutation issued while another is in flight does"""
    QUEUE = "queue"
    REJECT = "reject"


@dataclass(frozen=True)
class StagedHolding:
    """Validated add request; produced without any I/O."""
    symbol: str
    quantity: float
    avg_buy_price: float
    name: Optional[str] = None


@dataclass(frozen=True)
class MutationResult:
    ok: bool
    holding: Optional[Holding] = None
    error: Optional[PortfolioError] = None
    message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok

    @property
    def field_errors(self) -> Dict[str, str]:
        if isinstance(self.error, ValidationError):
            return dict(self.error.field_errors)
        return {}

    @classmethod
    def failure(cls, error: PortfolioError) -> "MutationResult":
        return cls(ok=False, error=error, message=error.message)


@dataclass(frozen=True)
class RefreshReport:
    epoch: int
    updated: Tuple[str, ...] = ()
    failed: Dict[str, str] = field(default_factory=dict)
    applied: bool = False


@dataclass(frozen=True)
class ImportReport:
    imported: int = 0
    failed: int = 0
    errors: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.imported > 0 or self.failed == 0


class HoldingsStore:
    """
    Holdings store.

    Construct one per session and pass it to consumers; there is no module
    level instance.
    """

    def __init__(
        self,
        quote_provider: QuoteProvider,
        search_provider: Optional[SymbolSearchProvider] = None,
        *,
        duplicate_policy: Union[DuplicateSymbolPolicy, str] = DuplicateSymbolPolicy.REJECT,
        busy_policy: Union[BusyPolicy, str] = BusyPolicy.QUEUE,
        quote_timeout_seconds: float = 10.0,
        search_debounce_seconds: float = 0.3,
        search_limit: int = 50,
        view_settings: Optional[ViewSettings] = None,
        quote_store: Optional[QuoteStore] = None,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._quote_provider = quote_provider
        self.duplicate_policy = DuplicateSymbolPolicy(duplicate_policy)
        self.busy_policy = BusyPolicy(busy_policy)
        self.quote_timeout_seconds = quote_timeout_seconds
        self._quote_store = quote_store or QuoteStore()
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._clock = clock or utc_now
        self._initial_settings = view_settings or ViewSettings()

        self._lock = asyncio.Lock()
        self._bus = SnapshotBus()
        self._search = SymbolSearchService(
            search_provider,
            debounce_seconds=search_debounce_seconds,
            limit=search_limit,
            timeout_seconds=quote_timeout_seconds,
            on_change=self._on_search_change,
        )

        self._refresh_epoch = 0
        self._refreshes_in_flight = 0
        self._market_seq = 0
        self._version = 0
        self._reset_state()

    @classmethod
    def from_settings(
        cls,
        provider,
        config: Settings,
        view_settings: Optional[ViewSettings] = None,
    ) -> "HoldingsStore":
        return cls(
            provider,
            provider,
            duplicate_policy=config.DUPLICATE_SYMBOL_POLICY.lower(),
            busy_policy=config.MUTATION_BUSY_POLICY.lower(),
            quote_timeout_seconds=config.QUOTE_TIMEOUT_SECONDS,
            search_debounce_seconds=config.SEARCH_DEBOUNCE_MS / 1000.0,
            search_limit=config.SEARCH_RESULT_LIMIT,
            view_settings=view_settings or ViewSettings(refresh_interval=config.REFRESH_INTERVAL_SECONDS),
        )

    def _reset_state(self) -> None:
        self._holdings: Tuple[Holding, ...] = ()
        self._summary: PortfolioSummary = EMPTY_SUMMARY
        self._allocation: Tuple[AllocationEntry, ...] = ()
        self._settings = self._initial_settings
        self._modal: ModalState = CLOSED_MODALS
        self._is_loading = False
        self._error: Optional[str] = None
        self._mutation_state = MutationState.IDLE
        self._last_refresh: Optional[datetime] = None
        # holding id -> sequence number of the market data it carries
        self._market_stamps: Dict[str, int] = {}
        self._snapshot = self._build_snapshot()

    # ------------------------------------------------------------------
    # READ SIDE
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> PortfolioSnapshot:
        return self._snapshot

    @property
    def holdings(self) -> Tuple[Holding, ...]:
        return self._holdings

    @property
    def summary(self) -> PortfolioSummary:
        return self._summary

    @property
    def allocation(self) -> Tuple[AllocationEntry, ...]:
        return self._allocation

    @property
    def settings(self) -> ViewSettings:
        return self._settings

    @property
    def modal(self) -> ModalState:
        return self._modal

    @property
    def search_state(self) -> SearchState:
        return self._search.state

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_refreshing(self) -> bool:
        return self._refreshes_in_flight > 0

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def mutation_state(self) -> MutationState:
        return self._mutation_state

    def get_holding(self, holding_id: str) -> Optional[Holding]:
        for holding in self._holdings:
            if holding.id == holding_id:
                return holding
        return None

    def _find_by_symbol(self, symbol: str, holdings: Optional[Tuple[Holding, ...]] = None) -> Optional[Holding]:
        for holding in self._holdings if holdings is None else holdings:
            if holding.symbol == symbol:
                return holding
        return None

    def quote_status(self) -> Dict[str, object]:
        return self._quote_store.get_status()

    def subscribe(self, handler: Callable[[PortfolioSnapshot], object]) -> Callable[[], None]:
        """Register for snapshots. Returns an unsubscribe callable."""
        return self._bus.subscribe(handler)

    # ------------------------------------------------------------------
    # SNAPSHOTS
    # ------------------------------------------------------------------

    def _build_snapshot(self) -> PortfolioSnapshot:
        return PortfolioSnapshot(
            version=self._version,
            holdings=self._holdings,
            sorted_holdings=tuple(
                sort_holdings(self._holdings, self._settings.sort_by, self._settings.sort_direction)
            ),
            summary=self._summary,
            allocation=self._allocation,
            settings=self._settings,
            modal=self._modal,
            search=self._search.state,
            is_loading=self._is_loading,
            is_refreshing=self.is_refreshing,
            error=self._error,
            mutation_state=self._mutation_state,
            last_refresh=self._last_refresh,
        )

    def _publish(self) -> None:
        self._version += 1
        self._snapshot = self._build_snapshot()
        self._bus.publish(self._snapshot)

    def _commit(self, holdings: Tuple[Holding, ...]) -> None:
        """Swap in a new collection with its summary and allocation."""
        result = ValuationEngine.recompute(holdings)
        self._holdings = result.holdings
        self._summary = result.summary
        self._allocation = tuple(AllocationEngine.compute_allocation(result.holdings))
        held = {h.id for h in result.holdings}
        self._market_stamps = {k: v for k, v in self._market_stamps.items() if k in held}

    def _stamp(self, holding: Holding) -> Holding:
        """Mark holding's market data as newer than any refresh already started."""
        self._market_seq += 1
        self._market_stamps[holding.id] = self._market_seq
        return holding

    def _transition(self, state: MutationState) -> None:
        self._mutation_state = state
        self._publish()

    def _on_search_change(self, state: SearchState) -> None:
        self._publish()

    # ------------------------------------------------------------------
    # MUTATION PLUMBING
    # ------------------------------------------------------------------

    def _fail(self, error: PortfolioError, on_failure: Callable[[PortfolioError], object]):
        self._mutation_state = MutationState.FAILED
        self._error = error.message
        logger.info("Portfolio mutation failed: %s", error.message)
        return on_failure(error)

    async def _run_mutation(
        self,
        operation: str,
        body: Callable[[], Awaitable[object]],
        on_failure: Callable[[PortfolioError], object] = MutationResult.failure,
    ):
        if self.busy_policy is BusyPolicy.REJECT and self._lock.locked():
            logger.info("Rejecting %s: another mutation is in flight", operation)
            return on_failure(StoreBusyError(operation))

        async with self._lock:
            self._is_loading = True
            self._error = None
            self._transition(MutationState.VALIDATING)
            try:
                result = await body()
            except PortfolioError as exc:
                result = self._fail(exc, on_failure)
            except Exception:
                logger.exception("Unexpected failure during %s", operation)
                result = self._fail(PortfolioError(f"Failed to {operation} holding"), on_failure)
            finally:
                self._is_loading = False
                if self._mutation_state != MutationState.FAILED:
                    self._mutation_state = MutationState.IDLE
                self._publish()
            return result

    async def _fetch_quote(self, symbol: str) -> Quote:
        """Provider call bounded by the store timeout. Raises QuoteFetchError only."""
        try:
            quote = await asyncio.wait_for(
                self._quote_provider.fetch_quote(symbol),
                timeout=self.quote_timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise QuoteFetchError(
                symbol, "timeout", f"no response within {self.quote_timeout_seconds}s"
            ) from exc
        except QuoteFetchError:
            raise
        except Exception as exc:
            raise QuoteFetchError(symbol, "network", str(exc) or type(exc).__name__) from exc
        self._quote_store.record(quote)
        return quote

    async def _resolve_quote(self, symbol: str) -> Optional[Quote]:
        try:
            return await self._fetch_quote(symbol)
        except QuoteFetchError as exc:
            logger.warning("⚠️ Price pending for %s: %s", symbol, exc)
            return None

    def _with_quote(self, holding: Holding, quote: Quote) -> Holding:
        return self._stamp(holding.with_market_data(
            current_price=quote.price,
            previous_close=quote.previous_close,
            change=quote.change,
            change_percent=quote.change_percent,
            price_status=PriceStatus.LIVE,
            last_updated=self._clock(),
            name=quote.name,
            market_cap=quote.market_cap,
            pe=quote.pe,
        ))

    def _pending(self, holding: Holding) -> Holding:
        """
        Placeholder market fields when no quote could be obtained: the last
        known quote for the symbol, otherwise the cost basis (zero gain).
        """
        last = self._quote_store.get_last_quote(holding.symbol)
        if last is not None:
            return holding.with_market_data(
                current_price=last.price,
                previous_close=last.previous_close,
                change=last.change,
                change_percent=last.change_percent,
                price_status=PriceStatus.PENDING,
                last_updated=None,
                name=last.name,
            )
        return holding.with_market_data(
            current_price=holding.avg_buy_price,
            previous_close=holding.avg_buy_price,
            change=0.0,
            change_percent=0.0,
            price_status=PriceStatus.PENDING,
            last_updated=None,
        )

    @staticmethod
    def _merge(existing: Holding, staged: StagedHolding) -> Holding:
        quantity = existing.quantity + staged.quantity
        avg_buy_price = (
            existing.quantity * existing.avg_buy_price + staged.quantity * staged.avg_buy_price
        ) / quantity
        return existing.with_position(quantity, avg_buy_price)

    def _place_staged(
        self,
        staged: StagedHolding,
        quote: Optional[Quote],
        holdings: Tuple[Holding, ...],
    ) -> Tuple[Tuple[Holding, ...], Holding]:
        """
        Insert (or merge) a staged add into holdings. Duplicates are checked
        again here because the collection may have changed since staging.
        """
        existing = self._find_by_symbol(staged.symbol, holdings)
        if existing is not None:
            if self.duplicate_policy is DuplicateSymbolPolicy.REJECT:
                raise DuplicateSymbolError(staged.symbol)
            merged = self._merge(existing, staged)
            if quote is not None:
                merged = self._with_quote(merged, quote)
            return tuple(merged if h.id == existing.id else h for h in holdings), merged

        holding = Holding(
            id=self._id_factory(),
            symbol=staged.symbol,
            name=staged.name or staged.symbol,
            quantity=staged.quantity,
            avg_buy_price=staged.avg_buy_price,
        )
        holding = self._with_quote(holding, quote) if quote is not None else self._pending(holding)
        return holdings + (holding,), holding

    # ------------------------------------------------------------------
    # ADD (two phase: stage, then commit)
    # ------------------------------------------------------------------

    def stage_holding(
        self,
        symbol: Optional[str],
        quantity,
        avg_buy_price,
        name: Optional[str] = None,
    ) -> StagedHolding:
        """
        Validate an add request against the current collection. No I/O.

        Raises:
            ValidationError: bad symbol / quantity / price (all fields reported)
            DuplicateSymbolError: symbol held and the policy is reject
        """
        errors: Dict[str, str] = {}
        normalized = ""
        parsed_quantity = parsed_price = 0.0
        try:
            normalized = normalize_symbol(symbol)
        except ValidationError as exc:
            errors.update(exc.field_errors)
        try:
            parsed_quantity, parsed_price = validate_position(quantity, avg_buy_price)
        except ValidationError as exc:
            errors.update(exc.field_errors)
        if errors:
            raise ValidationError(errors)

        existing = self._find_by_symbol(normalized)
        if existing is not None and self.duplicate_policy is DuplicateSymbolPolicy.REJECT:
            raise DuplicateSymbolError(normalized)

        return StagedHolding(
            symbol=normalized,
            quantity=parsed_quantity,
            avg_buy_price=parsed_price,
            name=(name or "").strip() or None,
        )

    async def _commit_staged(self, staged: StagedHolding) -> MutationResult:
        self._transition(MutationState.RESOLVING_QUOTE)
        quote = await self._resolve_quote(staged.symbol)

        self._transition(MutationState.COMMITTING)
        merging = self._find_by_symbol(staged.symbol) is not None
        holdings, holding = self._place_staged(staged, quote, self._holdings)
        self._commit(holdings)

        if merging:
            message = "Holding updated - added to existing position"
        else:
            message = "Holding added successfully"
        if quote is None:
            message = f"{message} (price pending)"
        logger.info(
            "✅ %s | symbol=%s qty=%.4f avg=%.2f status=%s",
            message, holding.symbol, holding.quantity, holding.avg_buy_price, holding.price_status.value,
        )
        return MutationResult(ok=True, holding=holding, message=message)

    async def commit_holding(self, staged: StagedHolding) -> MutationResult:
        return await self._run_mutation("add", lambda: self._commit_staged(staged))

    async def add_holding(
        self,
        symbol: Optional[str],
        quantity,
        avg_buy_price,
        name: Optional[str] = None,
    ) -> MutationResult:
        async def body() -> MutationResult:
            staged = self.stage_holding(symbol, quantity, avg_buy_price, name)
            return await self._commit_staged(staged)

        return await self._run_mutation("add", body)

    # ------------------------------------------------------------------
    # UPDATE / DELETE
    # ------------------------------------------------------------------

    async def update_holding(
        self,
        holding_id: str,
        quantity=None,
        avg_buy_price=None,
        refresh_price: bool = False,
    ) -> MutationResult:
        """
        Change user-owned fields. None leaves a field as is, but at least
        one must be supplied. Price is re-fetched only on request.
        """
        async def body() -> MutationResult:
            nothing_supplied = quantity is None and avg_buy_price is None
            parsed_quantity, parsed_price = validate_position(
                quantity, avg_buy_price, partial=not nothing_supplied
            )
            existing = self.get_holding(holding_id)
            if existing is None:
                raise NotFoundError(holding_id)

            updated = existing.with_position(
                parsed_quantity if parsed_quantity is not None else existing.quantity,
                parsed_price if parsed_price is not None else existing.avg_buy_price,
            )
            if refresh_price:
                self._transition(MutationState.RESOLVING_QUOTE)
                quote = await self._resolve_quote(existing.symbol)
                if quote is not None:
                    updated = self._with_quote(updated, quote)
                else:
                    updated = self._stamp(updated.marked_stale())

            self._transition(MutationState.COMMITTING)
            self._commit(tuple(updated if h.id == holding_id else h for h in self._holdings))
            logger.info(
                "✅ Holding updated | symbol=%s qty=%.4f avg=%.2f",
                updated.symbol, updated.quantity, updated.avg_buy_price,
            )
            return MutationResult(ok=True, holding=self.get_holding(holding_id), message="Holding updated")

        return await self._run_mutation("update", body)

    async def delete_holding(self, holding_id: str) -> MutationResult:
        """Remove by id. Unknown ids are a successful no-op."""
        async def body() -> MutationResult:
            existing = self.get_holding(holding_id)
            if existing is None:
                logger.debug("Delete of unknown holding %s ignored", holding_id)
                return MutationResult(ok=True, message="Holding not found; nothing to delete")

            self._transition(MutationState.COMMITTING)
            self._commit(tuple(h for h in self._holdings if h.id != holding_id))
            if self._modal.editing_holding_id == holding_id:
                self._modal = self._modal.close_edit()
            logger.info("🗑️ Holding removed | symbol=%s", existing.symbol)
            return MutationResult(ok=True, holding=existing, message="Holding removed")

        return await self._run_mutation("delete", body)

    # ------------------------------------------------------------------
    # PRICE REFRESH
    # ------------------------------------------------------------------

    def _refreshed(
        self,
        holding: Holding,
        quotes: Dict[str, Quote],
        failures: Dict[str, str],
        started_seq: int,
    ) -> Holding:
        # market data written after this refresh started wins over it
        if self._market_stamps.get(holding.id, 0) > started_seq:
            return holding
        quote = quotes.get(holding.symbol)
        if quote is not None:
            return self._with_quote(holding, quote)
        if holding.symbol in failures:
            return holding.marked_stale()
        return holding

    async def refresh_prices(self) -> RefreshReport:
        """
        Fetch every held symbol in parallel, then apply all successful
        quotes in one valuation pass.

        Fetching happens outside the mutation lock; applying happens inside
        it, against the collection as it is at that moment. Only the most
        recently issued refresh may apply.
        Holdings whose market data was written after the refresh started
        (an add, a price-refreshing edit, an import) keep that newer data.
        """
        self._refresh_epoch += 1
        epoch = self._refresh_epoch
        started_seq = self._market_seq
        symbols = tuple(h.symbol for h in self._holdings)
        report = RefreshReport(epoch=epoch)

        self._refreshes_in_flight += 1
        self._publish()
        try:
            if symbols:
                logger.info("🔄 Refreshing prices | holdings=%d epoch=%d", len(symbols), epoch)
            outcomes = await asyncio.gather(
                *(self._fetch_quote(symbol) for symbol in symbols),
                return_exceptions=True,
            )
            quotes: Dict[str, Quote] = {}
            failures: Dict[str, str] = {}
            for symbol, outcome in zip(symbols, outcomes):
                if isinstance(outcome, Quote):
                    quotes[symbol] = outcome
                else:
                    failures[symbol] = str(outcome) or type(outcome).__name__

            async with self._lock:
                if epoch != self._refresh_epoch:
                    logger.info("Discarding superseded price refresh | epoch=%d", epoch)
                    return RefreshReport(
                        epoch=epoch, updated=tuple(sorted(quotes)), failed=failures, applied=False
                    )

                self._commit(tuple(self._refreshed(h, quotes, failures, started_seq) for h in self._holdings))
                self._last_refresh = self._clock()
                if failures:
                    self._error = f"Price refresh failed for: {', '.join(sorted(failures))}"
                    logger.warning("⚠️ %s", self._error)
                else:
                    self._error = None
                report = RefreshReport(
                    epoch=epoch, updated=tuple(sorted(quotes)), failed=failures, applied=True
                )
                logger.info(
                    "✅ Prices refreshed | updated=%d failed=%d value=%.2f",
                    len(quotes), len(failures), self._summary.total_value,
                )
        except Exception:
            logger.exception("Price refresh failed")
            self._error = "Failed to refresh prices"
        finally:
            self._refreshes_in_flight -= 1
            self._publish()
        return report

    # ------------------------------------------------------------------
    # BULK IMPORT
    # ------------------------------------------------------------------

    async def import_holdings(
        self,
        rows: Iterable[ImportRow],
        clear_existing: bool = False,
    ) -> ImportReport:
        """
        Add many holdings as one mutation with one valuation pass.

        Each row is validated on its own; bad rows are reported and skipped.
        """
        rows = list(rows)

        def failed_import(error: PortfolioError) -> ImportReport:
            return ImportReport(imported=0, failed=len(rows), errors=(error.message,))

        async def body() -> ImportReport:
            errors = []
            base = () if clear_existing else self._holdings
            staged_rows = []
            for row in rows:
                try:
                    symbol = normalize_symbol(row.symbol)
                    parsed_quantity, parsed_price = validate_position(row.quantity, row.avg_buy_price)
                except ValidationError as exc:
                    details = ", ".join(exc.field_errors.values())
                    errors.append(f"Line {row.line}: {details}")
                    continue
                staged_rows.append(
                    (row, StagedHolding(symbol, parsed_quantity, parsed_price, row.name))
                )

            held = {h.symbol for h in base}
            to_quote = sorted({staged.symbol for _, staged in staged_rows} - held)
            self._transition(MutationState.RESOLVING_QUOTE)
            outcomes = await asyncio.gather(
                *(self._fetch_quote(symbol) for symbol in to_quote),
                return_exceptions=True,
            )
            quotes = {s: o for s, o in zip(to_quote, outcomes) if isinstance(o, Quote)}

            self._transition(MutationState.COMMITTING)
            holdings: Tuple[Holding, ...] = tuple(base)
            imported = 0
            for row, staged in staged_rows:
                try:
                    holdings, _ = self._place_staged(staged, quotes.get(staged.symbol), holdings)
                except DuplicateSymbolError as exc:
                    errors.append(f"Line {row.line}: {exc.message}")
                    continue
                imported += 1
            self._commit(holdings)

            logger.info("📥 Holdings imported | imported=%d failed=%d", imported, len(rows) - imported)
            return ImportReport(imported=imported, failed=len(rows) - imported, errors=tuple(errors))

        return await self._run_mutation("import", body, on_failure=failed_import)

    async def import_csv(self, source: Union[str, Path, IO], clear_existing: bool = False) -> ImportReport:
        parsed = parse_holdings_csv(source)
        if not parsed.rows and parsed.errors:
            logger.warning("⚠️ Nothing to import from CSV: %s", "; ".join(parsed.errors))
            return ImportReport(imported=0, failed=len(parsed.errors), errors=tuple(parsed.errors))
        report = await self.import_holdings(parsed.rows, clear_existing=clear_existing)
        return ImportReport(
            imported=report.imported,
            failed=report.failed + len(parsed.errors),
            errors=tuple(parsed.errors) + report.errors,
        )

    # ------------------------------------------------------------------
    # VIEW SETTINGS / MODALS / SEARCH
    # ------------------------------------------------------------------

    def update_settings(self, **changes) -> ViewSettings:
        try:
            self._settings = self._settings.updated(**changes)
        except (TypeError, ValueError) as exc:
            logger.warning("Ignoring invalid view settings %s: %s", changes, exc)
            return self._settings
        self._publish()
        return self._settings

    def open_add_modal(self, prefill: Optional[AddPrefill] = None) -> None:
        self._search.clear()
        self._modal = self._modal.open_add(prefill)
        self._publish()

    def close_add_modal(self) -> None:
        self._search.clear()
        self._modal = self._modal.close_add()
        self._publish()

    def open_edit_modal(self, holding_id: str) -> bool:
        if self.get_holding(holding_id) is None:
            return False
        self._modal = self._modal.open_edit(holding_id)
        self._publish()
        return True

    def close_edit_modal(self) -> None:
        self._modal = self._modal.close_edit()
        self._publish()

    def search(self, query: str) -> int:
        """Debounced symbol search; call from within the event loop."""
        return self._search.set_query(query)

    async def wait_for_search(self) -> SearchState:
        await self._search.wait_idle()
        return self._search.state

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Drop all session state. In-flight refreshes are invalidated."""
        self._refresh_epoch += 1
        self._search.clear()
        self._quote_store.clear()
        self._reset_state()
        self._publish()

    async def aclose(self) -> None:
        self._search.cancel()
        await self._bus.drain()
