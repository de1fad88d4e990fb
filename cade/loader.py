"""
Catalog loader (JSON / CSV / Excel -> Campaign list)
====================================================

This module reads a campaign catalog export and converts each row into a
`Campaign` object.

Key ideas:
- Nested JSON (`creator.displayName`, `location.city`) is flattened with
  `pandas.json_normalize`, so JSON, CSV and Excel all end up as one flat
  table with the same column names.
- Column names are matched loosely (camelCase, snake_case and spaced names
  all work), because exports from different tools vary.
- Conversion helpers (_to_int/_to_float/_to_str/...) degrade blanks and junk
  to safe defaults instead of failing the whole load.
- Rows may give `createdDaysAgo` / `endsInDays` instead of absolute dates;
  these are resolved against `now` (the bundled sample catalog does this).
- The loader returns a list of immutable records; CADE never edits the file.
"""

from __future__ import annotations
from collections import Counter
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, List, Optional, Tuple
import json
import re

import pandas as pd
import structlog

from .models import CATEGORIES, STATUSES, Campaign, Creator, Location

logger = structlog.get_logger(__name__)

SAMPLE_CATALOG = Path(__file__).parent / "data" / "sample_catalog.json"


class CatalogError(ValueError):
    pass


# ---------------- Cell conversion ----------------
def _missing(x: Any) -> bool:
    if isinstance(x, (list, tuple)):
        return False
    try:
        return bool(pd.isna(x))
    except (TypeError, ValueError):
        return False


def _to_int(x, default: int = 0) -> int:
    if _missing(x): return default
    try: return int(float(x))
    except (TypeError, ValueError): return default


def _to_float(x, default: float = 0.0) -> float:
    if _missing(x): return default
    try: return float(x)
    except (TypeError, ValueError): return default


def _to_str(x) -> str:
    if _missing(x): return ""
    if isinstance(x, float) and x.is_integer():
        return str(int(x))
    return str(x).strip()


def _to_opt_str(x) -> Optional[str]:
    s = _to_str(x)
    return s or None


def _to_bool(x) -> bool:
    if _missing(x): return False
    if isinstance(x, str):
        return x.strip().lower() in ("true", "yes", "y", "1", "verified")
    return bool(x)


def _to_tags(x) -> Tuple[str, ...]:
    if isinstance(x, (list, tuple)):
        return tuple(str(t).strip() for t in x if str(t).strip())
    s = _to_str(x)
    if not s:
        return ()
    return tuple(t.strip() for t in re.split(r"[;|,]", s) if t.strip())


def _to_datetime(x) -> Optional[datetime]:
    """Parse a timestamp cell into a naive datetime (UTC if it had a zone)."""
    if _missing(x) or _to_str(x) == "":
        return None
    try:
        ts = pd.Timestamp(x)
    except (TypeError, ValueError):
        return None
    if ts is pd.NaT:
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts.to_pydatetime()


# ---------------- Column lookup ----------------
def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())


def _col(df: pd.DataFrame, *names: str, required: bool = False) -> Optional[str]:
    norm_map = {_norm(c): c for c in df.columns}
    for n in names:
        if n in df.columns:
            return n
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    if required:
        raise CatalogError(f"Missing required column. Tried={names}. Available={list(df.columns)}")
    return None


# ---------------- Reading ----------------
def _read_frame(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix == ".json":
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
        if isinstance(payload, dict):
            # {"campaigns": [...]} wrapper
            payload = payload.get("campaigns", payload.get("projects", []))
        if not isinstance(payload, list):
            raise CatalogError("JSON catalog must be a list of campaign objects")
        return pd.json_normalize(payload)
    if suffix == ".csv":
        return pd.read_csv(path)
    if suffix in (".xlsx", ".xls"):
        return pd.read_excel(path, engine="openpyxl")
    raise CatalogError(f"Unsupported catalog format: {suffix or path.name} (use .json, .csv or .xlsx)")


def frame_to_campaigns(df: pd.DataFrame, now: Optional[datetime] = None) -> List[Campaign]:
    """Convert a flat table into campaigns. Exposed for callers that already hold a DataFrame."""
    if df.empty:
        return []
    now = now or datetime.now()
    df = df.rename(columns={c: str(c).strip() for c in df.columns})

    id_col = _col(df, "id", "campaignId", "projectId", required=True)
    title_col = _col(df, "title", "name", required=True)
    cat_col = _col(df, "category", required=True)
    status_col = _col(df, "status", required=True)
    goal_col = _col(df, "fundingGoal", "goal", required=True)

    desc_col = _col(df, "description")
    short_col = _col(df, "shortDescription", "summary")
    amount_col = _col(df, "currentAmount", "raised", "amountRaised")
    currency_col = _col(df, "currency")

    creator_id_col = _col(df, "creator.id", "creatorId")
    creator_name_col = _col(df, "creator.displayName", "creatorName", "creator")
    creator_rating_col = _col(df, "creator.rating", "creatorRating")
    creator_verified_col = _col(df, "creator.verificationStatus", "creator.verified", "creatorVerified")
    creator_loc_col = _col(df, "creator.location", "creatorLocation")

    country_col = _col(df, "location.country", "country")
    state_col = _col(df, "location.state", "state", "region", "province")
    city_col = _col(df, "location.city", "city")

    created_col = _col(df, "createdAt", "created")
    end_col = _col(df, "endDate", "deadline", "endsAt")
    created_rel_col = _col(df, "createdDaysAgo")
    end_rel_col = _col(df, "endsInDays")

    donors_col = _col(df, "donorCount", "donors", "backers")
    views_col = _col(df, "viewCount", "views")
    shares_col = _col(df, "shareCount", "shares")
    featured_col = _col(df, "featured")
    trending_col = _col(df, "trending")
    urgent_col = _col(df, "urgent")
    tags_col = _col(df, "tags")

    def cell(row, col, default=None):
        return row[col] if col else default

    campaigns: List[Campaign] = []
    for _, row in df.iterrows():
        cid = _to_str(row[id_col])
        if not cid:
            raise CatalogError("Row without an id in catalog")

        category = _to_str(row[cat_col]).lower()
        if category not in CATEGORIES:
            raise CatalogError(f"Campaign {cid}: unknown category {category!r}")
        status = _to_str(row[status_col]).lower()
        if status not in STATUSES:
            raise CatalogError(f"Campaign {cid}: unknown status {status!r}")

        created_at = _to_datetime(cell(row, created_col))
        if created_at is None and created_rel_col and not _missing(row[created_rel_col]):
            created_at = now - timedelta(days=_to_float(row[created_rel_col]))
        end_date = _to_datetime(cell(row, end_col))
        if end_date is None and end_rel_col and not _missing(row[end_rel_col]):
            end_date = now + timedelta(days=_to_float(row[end_rel_col]))
        if created_at is None or end_date is None:
            raise CatalogError(f"Campaign {cid}: missing or invalid createdAt/endDate")

        country = _to_opt_str(cell(row, country_col))
        state = _to_opt_str(cell(row, state_col))
        city = _to_opt_str(cell(row, city_col))
        location = None
        if country or state or city:
            location = Location(country=country or "", state=state, city=city)

        name = _to_str(cell(row, creator_name_col))
        creator = Creator(
            id=_to_str(cell(row, creator_id_col)) or name,
            display_name=name,
            rating=_to_float(cell(row, creator_rating_col)),
            verified=_to_bool(cell(row, creator_verified_col)),
            location=_to_opt_str(cell(row, creator_loc_col)),
        )

        campaigns.append(Campaign(
            id=cid,
            title=_to_str(row[title_col]),
            description=_to_str(cell(row, desc_col)),
            short_description=_to_str(cell(row, short_col)),
            category=category,
            status=status,
            funding_goal=max(0.0, _to_float(row[goal_col])),
            current_amount=max(0.0, _to_float(cell(row, amount_col))),
            currency=_to_str(cell(row, currency_col)) or "LKR",
            creator=creator,
            location=location,
            created_at=created_at,
            end_date=end_date,
            donor_count=max(0, _to_int(cell(row, donors_col))),
            view_count=max(0, _to_int(cell(row, views_col))),
            share_count=max(0, _to_int(cell(row, shares_col))),
            featured=_to_bool(cell(row, featured_col)),
            trending=_to_bool(cell(row, trending_col)),
            urgent=_to_bool(cell(row, urgent_col)),
            tags=_to_tags(cell(row, tags_col)),
        ))

    counts = Counter(c.id for c in campaigns)
    dupes = sorted(i for i, n in counts.items() if n > 1)
    if dupes:
        raise CatalogError(f"Duplicate campaign ids: {', '.join(dupes)}")
    return campaigns


def load_catalog(path: str, now: Optional[datetime] = None) -> List[Campaign]:
    """Load a catalog file (.json, .csv or .xlsx)."""
    p = Path(path)
    if not p.exists():
        raise CatalogError(f"Catalog file not found: {path}")
    campaigns = frame_to_campaigns(_read_frame(p), now=now)
    logger.info("Catalog loaded", path=str(p), campaigns=len(campaigns))
    return campaigns


def load_sample_catalog(now: Optional[datetime] = None) -> List[Campaign]:
    """The bundled 18-campaign catalog, with dates relative to `now`."""
    return load_catalog(str(SAMPLE_CATALOG), now=now)
