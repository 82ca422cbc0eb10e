"""
Weekly allocator: one outfit per day across a planning horizon.

Days are resolved strictly in ascending date order. For each day the allocator
tries, in turn:

1. strict: the first unused saved outfit whose restricted items (tops,
   bottoms, dresses) are all still free this horizon
2. relaxed: the first unused saved outfit, restricted collisions allowed
3. generated: a recommender suggestion for that single day, deduplicated by
   fingerprint before anything is persisted

The chosen outfit is marked used and its restricted items consumed for the
days after it. A day nothing can satisfy is left out of the plan.

Horizon bookkeeping lives in an immutable ``HorizonState`` threaded through the
fold, so each day can be allocated and tested in isolation.
"""
import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

from ..config import settings
from ..core.exceptions import RecommenderError, ResolutionError, ValidationError
from ..schemas import (
    DayAssignment,
    ItemDisplay,
    OutfitItemView,
    OutfitRecord,
    PlannedOutfitView,
    PlanningDay,
    WeeklyPlanRequest,
    WeeklyPlanResponse,
)
from ..store import OutfitStore
from ..utils.profiler import Profiler
from .categories import is_restricted
from .fingerprint import OutfitIndex
from .generation import OutfitGenerator
from .presentation import resolve_outfit_items
from .recommender import Recommender

logger = logging.getLogger(__name__)

STRICT_REASON = "Saved outfit with no repeated tops, bottoms or dresses so far this week."
RELAXED_REASON = "Saved outfit reused; some pieces were already worn earlier this week."
GENERATED_REASON = "AI stylist created this look for the day."


@dataclass(frozen=True)
class CandidateOutfit:
    """A saved outfit with its resolved items and restricted item ids"""
    record: OutfitRecord
    items: Tuple[OutfitItemView, ...]
    restricted_ids: FrozenSet[str]

    @classmethod
    def build(cls, record: OutfitRecord, resolved: Dict[str, ItemDisplay]) -> "CandidateOutfit":
        items = tuple(resolve_outfit_items(record, resolved))
        return cls(
            record=record,
            items=items,
            restricted_ids=frozenset(i.id for i in items if is_restricted(i.type)),
        )

    @property
    def id(self) -> str:
        return self.record.id


@dataclass(frozen=True)
class HorizonState:
    """What earlier days of the horizon have used up.

    ``pool`` holds arena indices of saved outfits still on offer, in snapshot order.
    """
    pool: Tuple[int, ...]
    used_outfit_ids: FrozenSet[str] = field(default_factory=frozenset)
    consumed_item_ids: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def start(cls, arena: Sequence[CandidateOutfit]) -> "HorizonState":
        return cls(pool=tuple(range(len(arena))))

    def consume(self, arena: Sequence[CandidateOutfit], candidate: CandidateOutfit) -> "HorizonState":
        """State for the following days once ``candidate`` is worn."""
        return HorizonState(
            pool=tuple(i for i in self.pool if arena[i].id != candidate.id),
            used_outfit_ids=self.used_outfit_ids | {candidate.id},
            consumed_item_ids=self.consumed_item_ids | candidate.restricted_ids,
        )


def pick_from_pool(
    arena: Sequence[CandidateOutfit],
    state: HorizonState,
    strict: bool = True,
) -> Optional[CandidateOutfit]:
    """First fit over the pool. Strict mode skips outfits with consumed restricted items."""
    for index in state.pool:
        candidate = arena[index]
        if candidate.id in state.used_outfit_ids:
            continue
        if strict and candidate.restricted_ids & state.consumed_item_ids:
            continue
        return candidate
    return None


def build_horizon(
    request: WeeklyPlanRequest,
    default_days: Optional[int] = None,
    today: Optional[dt.date] = None,
) -> List[PlanningDay]:
    """Planning days for a request, in ascending date order.

    Without explicit ``days`` the horizon is ``default_days`` consecutive days
    starting at ``start_date`` (or today).
    """
    if request.days is not None:
        if not request.days:
            raise ValidationError("days[] must contain at least one day", field="days")
        dates = [day.date for day in request.days]
        if len(set(dates)) != len(dates):
            raise ValidationError("days[] contains duplicate dates", field="days")
        return sorted(request.days, key=lambda day: day.date)

    count = default_days or settings.PLANNER_HORIZON_DAYS
    if count < 1:
        raise ValidationError("planning horizon must be at least one day", field="days")
    start = request.start_date or today or dt.date.today()
    return [PlanningDay(date=start + dt.timedelta(days=offset)) for offset in range(count)]


def build_arena(records: Sequence[OutfitRecord], resolved: Dict[str, ItemDisplay]) -> List[CandidateOutfit]:
    arena = []
    for record in records:
        try:
            arena.append(CandidateOutfit.build(record, resolved))
        except ResolutionError:
            logger.warning(f"Saved outfit {record.id} has no resolvable items; leaving it out of the pool")
    return arena


class WeeklyAllocator:
    def __init__(
        self,
        store: OutfitStore,
        recommender: Recommender,
        unknown_item_policy: Optional[str] = None,
        profiler: Optional[Profiler] = None,
    ):
        self.store = store
        self.recommender = recommender
        self.unknown_item_policy = unknown_item_policy
        self.profiler = profiler or Profiler()

    def plan(
        self,
        days: Sequence[PlanningDay],
        persona: Optional[Dict[str, Any]] = None,
        rules: Optional[Dict[str, Any]] = None,
    ) -> WeeklyPlanResponse:
        """Allocate outfits to ``days``. Store failures abort the whole plan."""
        with self.profiler.measure("store_snapshot"):
            snapshot = self.store.list_outfits()
            resolved = self.store.resolve_items(i for r in snapshot for i in r.item_ids)

        arena = build_arena(snapshot, resolved)
        generator = OutfitGenerator(
            self.store,
            self.recommender,
            OutfitIndex(snapshot),
            self.unknown_item_policy,
            self.profiler,
        )

        state = HorizonState.start(arena)
        assignments = []
        for day in sorted(days, key=lambda d: d.date):
            assignment, state = self.allocate_day(day, arena, state, generator, persona, rules)
            if assignment is not None:
                assignments.append(assignment)

        logger.info(f"Weekly plan: {len(assignments)} of {len(days)} days planned")
        return WeeklyPlanResponse(days=assignments)

    def allocate_day(
        self,
        day: PlanningDay,
        arena: Sequence[CandidateOutfit],
        state: HorizonState,
        generator: OutfitGenerator,
        persona: Optional[Dict[str, Any]] = None,
        rules: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Optional[DayAssignment], HorizonState]:
        """Resolve one day. Returns the assignment (or None) and the next state."""
        candidate = pick_from_pool(arena, state, strict=True)
        source, reason = "existing", STRICT_REASON
        if candidate is None:
            candidate = pick_from_pool(arena, state, strict=False)
            source, reason = "relaxed", RELAXED_REASON
        if candidate is None:
            candidate, reason = self._generate(day, generator, persona, rules)
            source = "generated"
        if candidate is None:
            logger.warning(f"{day.date}: no outfit available, leaving the day unplanned")
            return None, state

        if source != "generated" and candidate.record.notes:
            reason = candidate.record.notes
        logger.info(f"{day.date}: {source} outfit {candidate.id}")

        assignment = DayAssignment(
            date=day.date,
            outfit_id=candidate.id,
            outfit=PlannedOutfitView(id=candidate.id, items=list(candidate.items)),
            rationale=reason,
            source=source,
        )
        return assignment, state.consume(arena, candidate)

    def _generate(
        self,
        day: PlanningDay,
        generator: OutfitGenerator,
        persona: Optional[Dict[str, Any]],
        rules: Optional[Dict[str, Any]],
    ) -> Tuple[Optional[CandidateOutfit], str]:
        try:
            suggestion, outcome = generator.generate_one(day, persona, rules)
        except RecommenderError as exc:
            logger.warning(f"{day.date}: generation failed: {exc.message}")
            return None, GENERATED_REASON

        record = outcome.record
        with self.profiler.measure("store_resolve_items"):
            resolved = self.store.resolve_items(record.item_ids)
        try:
            candidate = CandidateOutfit.build(record, resolved)
        except ResolutionError:
            logger.warning(f"{day.date}: generated outfit {record.id} has no resolvable items")
            return None, GENERATED_REASON
        return candidate, suggestion.notes or GENERATED_REASON


def plan_week(
    store: OutfitStore,
    recommender: Recommender,
    request: WeeklyPlanRequest,
    today: Optional[dt.date] = None,
    unknown_item_policy: Optional[str] = None,
    profiler: Optional[Profiler] = None,
) -> WeeklyPlanResponse:
    """Validate the request, build its horizon and allocate it."""
    days = build_horizon(request, today=today)
    allocator = WeeklyAllocator(store, recommender, unknown_item_policy, profiler)
    return allocator.plan(days, request.persona, request.rules)
