"""
Daily selector: one main outfit plus a few alternatives for today.

``existing`` picks uniformly at random from saved outfits and falls through to
``new`` when there are none. ``new`` asks the recommender for a single day and
materializes the answer through the fingerprint dedup path.
"""
import datetime as dt
import logging
import random
from typing import Dict, List, Optional

from ..config import settings
from ..core.exceptions import DailyOutfitError, RecommenderError, ResolutionError
from ..schemas import (
    DailyOutfitRequest,
    DailyOutfitResponse,
    ItemDisplay,
    OutfitRecord,
    OutfitView,
    PlanningDay,
)
from ..store import OutfitStore
from ..utils.profiler import Profiler
from .fingerprint import OutfitIndex
from .generation import OutfitGenerator
from .presentation import outfit_view
from .recommender import Recommender

logger = logging.getLogger(__name__)

HISTORY_REASON = "Pulled from your saved outfits."
HISTORY_ALTERNATIVE_REASON = "Another look from your saved catalog."
GENERATED_REASON = "AI stylist created this look for today."
GENERATED_ALTERNATIVE_REASON = "Previously saved option."


class DailySelector:
    def __init__(
        self,
        store: OutfitStore,
        recommender: Recommender,
        rng: Optional[random.Random] = None,
        alternatives: Optional[int] = None,
        unknown_item_policy: Optional[str] = None,
        today: Optional[dt.date] = None,
        profiler: Optional[Profiler] = None,
    ):
        self.store = store
        self.recommender = recommender
        self.rng = rng or random.Random()
        self.alternatives = settings.DAILY_ALTERNATIVES if alternatives is None else alternatives
        self.unknown_item_policy = unknown_item_policy
        self.today = today
        self.profiler = profiler or Profiler()

    def select(self, request: DailyOutfitRequest) -> DailyOutfitResponse:
        with self.profiler.measure("store_snapshot"):
            snapshot = self.store.list_outfits()

        if request.strategy == "existing" and snapshot:
            return self._from_history(request, snapshot)
        if request.strategy == "existing":
            logger.info("No saved outfits yet, generating a new one")
        return self._generate(request, snapshot)

    def _resolve(self, records: List[OutfitRecord]) -> Dict[str, ItemDisplay]:
        with self.profiler.measure("store_resolve_items"):
            return self.store.resolve_items(i for r in records for i in r.item_ids)

    def _alternative_views(
        self, records: List[OutfitRecord], resolved: Dict[str, ItemDisplay], default_reason: str
    ) -> List[OutfitView]:
        views = []
        for record in records:
            try:
                views.append(outfit_view(record, resolved, record.notes or default_reason))
            except ResolutionError:
                logger.warning(f"Skipping alternative {record.id}: no items resolve")
        return views

    def _from_history(self, request: DailyOutfitRequest, snapshot: List[OutfitRecord]) -> DailyOutfitResponse:
        main_index = self.rng.randrange(len(snapshot))
        main = snapshot[main_index]
        others = [r for i, r in enumerate(snapshot) if i != main_index][: self.alternatives]
        logger.info(f"Daily outfit from history: {main.id} (1 of {len(snapshot)})")

        resolved = self._resolve([main] + others)
        try:
            main_view = outfit_view(main, resolved, main.notes or HISTORY_REASON)
        except ResolutionError as exc:
            raise DailyOutfitError("Saved outfit could not be resolved", details={"outfit_id": main.id}) from exc

        return DailyOutfitResponse(
            source="existing",
            weather=request.weather,
            main_outfit=main_view,
            alternatives=self._alternative_views(others, resolved, HISTORY_ALTERNATIVE_REASON),
        )

    def _planning_day(self, request: DailyOutfitRequest) -> PlanningDay:
        if request.day is not None:
            return request.day
        return PlanningDay(
            date=self.today or dt.date.today(),
            weather=request.weather,
            events=[request.event] if request.event else [],
        )

    def _generate(self, request: DailyOutfitRequest, snapshot: List[OutfitRecord]) -> DailyOutfitResponse:
        generator = OutfitGenerator(
            self.store,
            self.recommender,
            OutfitIndex(snapshot),
            self.unknown_item_policy,
            self.profiler,
        )
        if not generator.wardrobe:
            raise DailyOutfitError("Wardrobe is empty; add items before generating an outfit")

        rules = {**request.rules, "tags": request.tags}
        try:
            suggestion, outcome = generator.generate_one(self._planning_day(request), request.persona, rules)
        except RecommenderError as exc:
            logger.error(f"Daily generation failed: {exc.message}")
            raise DailyOutfitError("Unable to generate outfit right now", details={"reason": exc.message}) from exc

        chosen = outcome.record
        others = [r for r in snapshot if r.id != chosen.id][: self.alternatives]
        logger.info(f"Daily outfit generated: {chosen.id} ({'reused' if outcome.reused else 'new'})")

        resolved = self._resolve([chosen] + others)
        try:
            main_view = outfit_view(chosen, resolved, suggestion.notes or GENERATED_REASON)
        except ResolutionError as exc:
            raise DailyOutfitError("Unable to resolve generated outfit", details={"outfit_id": chosen.id}) from exc

        return DailyOutfitResponse(
            source="new",
            weather=request.weather,
            main_outfit=main_view,
            alternatives=self._alternative_views(others, resolved, GENERATED_ALTERNATIVE_REASON),
        )
