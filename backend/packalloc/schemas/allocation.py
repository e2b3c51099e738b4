"""
Allocation Engine Schemas
"""
from types import MappingProxyType
from typing import Optional, List, Dict, Mapping, Tuple
from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator, model_validator
from enum import Enum


class LocationRole(str, Enum):
    STORE = "STORE"      # Receives whole packs from the sequence
    OFFICE = "OFFICE"    # Fixed sample carve-out, served first
    SINK = "SINK"        # Absorbs leftovers and ship overage


# ============================================================================
# Engine Configuration (immutable, injected at construction)
# ============================================================================

class LocationConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    role: LocationRole = LocationRole.STORE
    supplies_office: bool = False  # office samples come out of this store's share
    ignorable: bool = False        # target of the ignore_teaneck toggle


class AllocationConfig(BaseModel):
    """Pack ratios, compositions and location roles for one deployment."""

    model_config = ConfigDict(frozen=True)

    sizes: Tuple[str, ...]
    locations: Tuple[LocationConfig, ...]
    pack_sequence: Tuple[str, ...]
    pack_with_xxs: Mapping[str, int]
    pack_no_xxs: Mapping[str, int]
    office_sample: Mapping[str, int]
    xxs_size: str = "XXS"

    @field_validator("pack_with_xxs", "pack_no_xxs", "office_sample")
    @classmethod
    def _read_only_quantities(cls, v: Mapping[str, int]) -> Mapping[str, int]:
        for size, qty in v.items():
            if qty < 0:
                raise ValueError(f"Negative quantity for size '{size}'")
        # Copied so the caller's dict cannot reach into the config
        return MappingProxyType(dict(v))

    @model_validator(mode="after")
    def _check_roles(self):
        if not self.sizes:
            raise ValueError("At least one size is required")
        for pack in (self.pack_with_xxs, self.pack_no_xxs):
            if sum(pack.values()) <= 0:
                raise ValueError("Pack composition must contain at least one unit")
            unknown = set(pack) - set(self.sizes)
            if unknown:
                raise ValueError(f"Pack composition uses unknown sizes: {sorted(unknown)}")

        names = [loc.name for loc in self.locations]
        if len(names) != len(set(names)):
            raise ValueError("Location names must be unique")
        for role in (LocationRole.OFFICE, LocationRole.SINK):
            if sum(1 for loc in self.locations if loc.role == role) > 1:
                raise ValueError(f"At most one {role.value} location may be configured")
        if sum(1 for loc in self.locations if loc.supplies_office) > 1:
            raise ValueError("At most one location may supply the office")
        return self

    def location(self, name: str) -> Optional[LocationConfig]:
        for loc in self.locations:
            if loc.name == name:
                return loc
        return None


# ============================================================================
# Requests
# ============================================================================

SizeVector = Dict[str, NonNegativeInt]
Matrix = Dict[str, Dict[str, NonNegativeInt]]


class AllocationComputeRequest(BaseModel):
    buy: SizeVector = Field(default_factory=dict, description="Units bought per size")
    ship: SizeVector = Field(default_factory=dict, description="Units shipped per size")
    locations: Optional[List[str]] = Field(
        None, description="Ordered location names; defaults to the configured list",
    )
    ignore_teaneck: bool = False
    ignored_stores: List[str] = Field(default_factory=list)


class ReconcileRequest(BaseModel):
    ship: SizeVector = Field(default_factory=dict)
    allocation: Matrix = Field(default_factory=dict)
    scanned: Optional[Matrix] = None
    locations: Optional[List[str]] = None


class ScanRequest(BaseModel):
    allocation: Matrix = Field(default_factory=dict)
    scanned: Matrix = Field(default_factory=dict)
    location: str = Field(..., min_length=1)
    size: str = Field(..., min_length=1)
    override: bool = False
    locations: Optional[List[str]] = None
