"""
Pack Allocation Engine Service
===============================
Distributes one purchase-order line (a product's size mix) across the
configured locations after it has been shipped by the vendor.

Supports:
- Ratio-preserving whole-pack distribution driven by a pack sequence
- 10-unit and 11-unit (XXS) pack compositions
- Office sample carve-out drawn from a designated store's share
- Toggle to skip a store and route its share to the sink
- Leftover and ship overage routed to the sink (warehouse)
- Hard cap so no size is ever allocated beyond what was shipped

The engine is a pure function of its inputs and the injected
``AllocationConfig``: no I/O, no state kept between runs.
"""
from functools import lru_cache
from typing import List, Dict, Any, Optional, Iterable, Mapping

from loguru import logger

from packalloc.core.config import Settings, get_settings
from packalloc.schemas.allocation import AllocationConfig, LocationConfig, LocationRole
from packalloc.services.matrix import MatrixBuilder, clamp_int


class AllocationEngine:
    """
    Pack-sequence allocation engine.

    Flow:
    1. avail = min(buy, ship) per size; overage = max(0, ship - buy)
    2. Pick the XXS or no-XXS pack composition
    3. total_packs = floor(sum(avail) / pack_size); count each store's
       appearances in the first min(total_packs, len(sequence)) slots
    4. Office sample first, then stores in sequence order (sink last),
       each taking min(pack_count * composition, pool) per size
    5. Remaining pool + overage -> sink
    6. Cap every size at the shipped quantity
    """

    def __init__(self, config: AllocationConfig):
        self.config = config
        self.sizes: List[str] = list(config.sizes)
        self.default_locations: List[str] = [loc.name for loc in config.locations]

        # Roles resolved once per engine
        self._roles: Dict[str, LocationRole] = {loc.name: loc.role for loc in config.locations}
        self._office = self._first(config.locations, lambda loc: loc.role == LocationRole.OFFICE)
        self._sink = self._first(config.locations, lambda loc: loc.role == LocationRole.SINK)
        self._office_source = self._first(config.locations, lambda loc: loc.supplies_office)
        self._ignorable = {loc.name for loc in config.locations if loc.ignorable}

        sequence_stores = [
            name for name in dict.fromkeys(config.pack_sequence)
            if name not in (self._sink, self._office)
        ]
        self._distribution_order: List[str] = sequence_stores + ([self._sink] if self._sink else [])

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "AllocationEngine":
        return cls(build_allocation_config(settings or get_settings()))

    @staticmethod
    def _first(locations: Iterable[LocationConfig], predicate) -> Optional[str]:
        for loc in locations:
            if predicate(loc):
                return loc.name
        return None

    def role_of(self, location: str) -> LocationRole:
        return self._roles.get(location, LocationRole.STORE)

    @property
    def distribution_order(self) -> List[str]:
        return list(self._distribution_order)

    # ========================================================================
    # RUN ALLOCATION
    # ========================================================================

    def allocate(
        self,
        buy: Optional[Mapping[str, Any]],
        ship: Optional[Mapping[str, Any]],
        locations: Optional[Iterable[str]] = None,
        ignore_teaneck: bool = False,
        ignored_stores: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """
        Allocate one product line across ``locations``.

        Returns ``allocation`` (location -> size -> qty), ``totals`` (per-size
        column sums) and a ``plan`` block describing how the run was sized.
        """
        sizes = self.sizes
        locations = self._resolve_locations(locations)
        present = set(locations)
        buy = {s: clamp_int((buy or {}).get(s)) for s in sizes}
        ship = {s: clamp_int((ship or {}).get(s)) for s in sizes}

        builder = MatrixBuilder(locations, sizes)

        # 1. Available pool and ship overage
        avail = {s: min(buy[s], ship[s]) for s in sizes}
        overage = {s: max(0, ship[s] - buy[s]) for s in sizes}

        # 2. Pack shape
        xxs = self.config.xxs_size
        has_xxs = buy.get(xxs, 0) > 0 or ship.get(xxs, 0) > 0
        composition = self.config.pack_with_xxs if has_xxs else self.config.pack_no_xxs
        pack_size = sum(composition.values())

        # 3. Pack counts from the sequence
        total_avail = sum(avail.values())
        total_packs = total_avail // pack_size
        slots_used = min(total_packs, len(self.config.pack_sequence))
        pack_counts: Dict[str, int] = {}
        for name in self.config.pack_sequence[:slots_used]:
            pack_counts[name] = pack_counts.get(name, 0) + 1

        logger.info(
            f"Allocation run: avail={total_avail} pack_size={pack_size} "
            f"packs={total_packs} slots={slots_used} counts={pack_counts}"
        )

        pool = dict(avail)

        # 4a. Office sample
        office_taken = self._take_office_sample(builder, pool, present)

        # 4b/4c. Stores in sequence order, sink last
        ignored = set(ignored_stores or [])
        if ignore_teaneck:
            ignored |= self._ignorable

        for loc in self._distribution_order:
            n_packs = pack_counts.get(loc, 0)
            if n_packs == 0:
                continue

            recipient = self._sink if (loc in ignored and loc != self._sink) else loc
            if recipient not in present:
                logger.debug(f"Skipping {loc}: {recipient} not in this run's locations")
                continue

            actual = {}
            for s in sizes:
                target = n_packs * composition.get(s, 0)
                if loc == self._office_source:
                    target = max(0, target - office_taken.get(s, 0))
                actual[s] = min(target, pool[s])
                pool[s] -= actual[s]

            builder.add_vector(recipient, actual)
            if recipient != loc:
                logger.debug(f"{loc} ignored: {n_packs} pack(s) redirected to {recipient}")

        # 5. Leftover pool and overage to the sink
        sink = self._resolve_sink(locations)
        if sink is not None:
            for s in sizes:
                builder.add(sink, s, pool[s] + overage[s])
        else:
            logger.debug("No locations supplied; leftover and overage not placed")

        # 6. Hard cap
        capped = self._apply_cap(builder, ship, locations)

        return {
            "allocation": builder.to_dict(),
            "totals": builder.totals(),
            "locations": locations,
            "sizes": list(sizes),
            "plan": {
                "has_xxs": has_xxs,
                "pack_size": pack_size,
                "total_available": total_avail,
                "total_packs": total_packs,
                "sequence_slots_used": slots_used,
                "pack_counts": pack_counts,
                "office_taken": office_taken,
                "overage": overage,
                "sink": sink,
                "ignored_stores": sorted(ignored),
                "capped": capped,
            },
        }

    # ========================================================================
    # STAGES
    # ========================================================================

    def _take_office_sample(
        self, builder: MatrixBuilder, pool: Dict[str, int], present: set
    ) -> Dict[str, int]:
        """Give the office its fixed sample if every sample size is in the pool."""
        if self._office is None or self._office not in present:
            return {}

        sample = {
            s: qty for s, qty in self.config.office_sample.items()
            if s in pool and qty > 0
        }
        if not sample or any(pool[s] < qty for s, qty in sample.items()):
            logger.debug(f"Office sample skipped: pool cannot cover {sample}")
            return {}

        builder.add_vector(self._office, sample)
        for s, qty in sample.items():
            pool[s] -= qty
        return sample

    def cap_to_ship(
        self,
        matrix: Mapping[str, Mapping[str, Any]],
        ship: Optional[Mapping[str, Any]],
        locations: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """Bring an arbitrary (e.g. hand-edited) matrix back under the ship cap."""
        locations = self._resolve_locations(locations)
        ship = {s: clamp_int((ship or {}).get(s)) for s in self.sizes}
        builder = MatrixBuilder(locations, self.sizes, initial=matrix)
        capped = self._apply_cap(builder, ship, locations)
        return {"allocation": builder.to_dict(), "totals": builder.totals(), "capped": capped}

    def _apply_cap(
        self, builder: MatrixBuilder, ship: Dict[str, int], locations: List[str]
    ) -> Dict[str, int]:
        """Remove any per-size excess over ``ship`` in removal-priority order."""
        removal_order = self.removal_order(locations)
        totals = builder.totals()
        capped = {}

        for s in self.sizes:
            excess = totals[s] - ship.get(s, 0)
            if excess <= 0:
                continue
            removed = 0
            for loc in removal_order:
                if excess <= 0:
                    break
                take = min(builder.get(loc, s), excess)
                if take > 0:
                    builder.add(loc, s, -take)
                    excess -= take
                    removed += take
            capped[s] = removed

        if capped:
            logger.warning(f"Hard cap removed units over ship quantity: {capped}")
        return capped

    # ========================================================================
    # LOCATION HELPERS
    # ========================================================================

    def removal_order(self, locations: Iterable[str]) -> List[str]:
        """Sink first, then stores in reverse distribution priority, office last."""
        locations = list(locations)
        present = set(locations)
        sink = self._resolve_sink(locations)

        order: List[str] = [sink] if sink is not None else []
        for loc in reversed(self._distribution_order):
            if loc in present and loc not in order:
                order.append(loc)
        for loc in locations:
            if loc not in order and loc != self._office:
                order.append(loc)
        if self._office in present and self._office not in order:
            order.append(self._office)
        return order

    def _resolve_sink(self, locations: List[str]) -> Optional[str]:
        if self._sink is not None and self._sink in locations:
            return self._sink
        # Fallback: first location other than the office
        for loc in locations:
            if loc != self._office:
                return loc
        return locations[0] if locations else None

    def _resolve_locations(self, locations: Optional[Iterable[str]]) -> List[str]:
        if locations is None:
            return list(self.default_locations)
        return [loc for loc in dict.fromkeys(locations) if loc]

    # ========================================================================
    # DESCRIBE
    # ========================================================================

    def describe(self) -> Dict[str, Any]:
        """Configuration snapshot for the UI."""
        return {
            "sizes": list(self.sizes),
            "locations": [
                {
                    "name": loc.name,
                    "role": loc.role.value,
                    "supplies_office": loc.supplies_office,
                    "ignorable": loc.ignorable,
                }
                for loc in self.config.locations
            ],
            "pack_sequence": list(self.config.pack_sequence),
            "distribution_order": self.distribution_order,
            "pack_with_xxs": dict(self.config.pack_with_xxs),
            "pack_no_xxs": dict(self.config.pack_no_xxs),
            "office_sample": dict(self.config.office_sample),
        }


def build_allocation_config(settings: Settings) -> AllocationConfig:
    """Resolve location roles from settings into an immutable config."""
    locations = []
    for name in settings.locations_list:
        if name == settings.OFFICE_LOCATION:
            role = LocationRole.OFFICE
        elif name == settings.SINK_LOCATION:
            role = LocationRole.SINK
        else:
            role = LocationRole.STORE
        locations.append(LocationConfig(
            name=name,
            role=role,
            supplies_office=(name == settings.OFFICE_SOURCE_LOCATION),
            ignorable=(name == settings.IGNORABLE_STORE),
        ))

    return AllocationConfig(
        sizes=tuple(settings.sizes_list),
        locations=tuple(locations),
        pack_sequence=tuple(settings.pack_sequence_list),
        pack_with_xxs=settings.pack_with_xxs,
        pack_no_xxs=settings.pack_no_xxs,
        office_sample=settings.office_sample,
    )


@lru_cache()
def get_allocation_engine() -> AllocationEngine:
    return AllocationEngine.from_settings(get_settings())
