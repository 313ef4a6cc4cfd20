#!/usr/bin/env python3
"""
Group Splitter (target-amount bin packing for shopping lists)

- Uses a shopping list file (CSV / JSON / XLSX) read by shopping_list.load_items.
- Every line item is expanded into quantity-1 units so a multi-quantity item
  can be spread over several groups. Unit value = item price.
- Single target (--target/--groups):
    * first-fit-decreasing with a 20% overflow allowance,
    * best-fit (tightest remaining capacity),
    * optimize: keep whichever leaves less total excess (FFD on ties).
- Multiple targets (--spec TARGET:COUNT, repeatable):
    * greedy fill, largest target first, overshoot penalised,
    * leftovers redistributed to the group they help most,
    * pairwise swap refinement, at most MAX_SWAP_PASSES passes.
- Small equal-target inputs can be searched exhaustively (--strategy explore).
- Every unit always lands in a group; when nothing fits, the group with the
  lowest total takes it.

Outputs:
- split_plan.md
- split_list.json (with --json-out)

Progress Reporting (script-level)
---------------------------------
- Flags: `--quiet`, `--verbose`, `--progress-json <path>`.
- Phases: load items → pack → export; emits final summary.
"""

import argparse
import hashlib
import itertools
import json
import os
import re
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import yaml
from dotenv import load_dotenv

from shopping_list import (
    Group,
    GroupSpec,
    InvalidArgument,
    LineItem,
    ShoppingList,
    Unit,
    load_items,
    round2,
)


# ---------- Progress utils (lightweight) ----------
@dataclass
class Step:
    name: str
    status: str = "pending"
    started_at: Optional[float] = None
    ended_at: Optional[float] = None
    items_total: Optional[int] = None
    items_done: int = 0


class ProgressReporter:
    def __init__(self, script: str, quiet: bool = False, verbose: bool = False, json_path: Optional[str] = None):
        self.script = script
        self.quiet = quiet
        self.verbose = verbose
        self.json_path = json_path
        self.t0 = time.time()
        self.steps: List[Step] = []
        self._isatty = sys.stdout.isatty()

    def start(self, name: str, total: Optional[int] = None) -> Step:
        st = Step(name=name, status="in_progress", started_at=time.time(), items_total=total)
        self.steps.append(st)
        if self.verbose and not self.quiet:
            print(f"→ {name}…")
        return st

    def update(self, st: Step, done: Optional[int] = None) -> None:
        if done is not None:
            st.items_done = done
        if self.quiet:
            return
        frac = ""
        if st.items_total:
            pct = int(100 * (st.items_done / max(1, st.items_total)))
            frac = f" {st.items_done}/{st.items_total} ({pct}%)"
        end = "\r" if self._isatty and not self.verbose else "\n"
        print(f"{st.name}:{frac}", end=end, flush=True)

    def end(self, st: Step, status: str = "completed") -> None:
        st.status = status
        st.ended_at = time.time()
        if not self.quiet and status == "completed":
            elapsed_ms = int(1000 * (st.ended_at - (st.started_at or st.ended_at)))
            print(f"✓ {st.name} in {elapsed_ms}ms")

    def finalize(self, totals: Dict[str, object]) -> None:
        elapsed = round(time.time() - self.t0, 3)
        if not self.quiet:
            print(
                f"[{self.script}] Summary: items={totals.get('items', 0)}, units={totals.get('units', 0)}, "
                f"groups={totals.get('groups', 0)}, excess={totals.get('excess', 0.0)} | elapsed={elapsed}s"
            )
        if self.json_path:
            payload = {
                "script": self.script,
                "started_at": self.t0,
                "ended_at": time.time(),
                "elapsed_s": elapsed,
                "steps": [
                    {
                        "name": s.name,
                        "status": s.status,
                        "started_at": s.started_at,
                        "ended_at": s.ended_at,
                        "items_total": s.items_total,
                        "items_done": s.items_done,
                    }
                    for s in self.steps
                ],
                "totals": totals,
            }
            Path(self.json_path).write_text(json.dumps(payload, indent=2), encoding="utf-8")


# ---------- Tunables ----------
OVERFLOW_ALLOWANCE = 1.2   # FFD: a group counts as full above target × this
OVERSHOOT_PENALTY = 0.1    # greedy fill: extra weight on distance past the target
MAX_SWAP_PASSES = 50
EXPLORE_MAX_UNITS = 10

# Caller policy for single-target splits (the core only needs >= 1)
MIN_GROUPS = 2
MAX_GROUPS = 5
CURRENCY = "€"

DEFAULT_TARGET_AMOUNT = 50.0
DEFAULT_GROUPS = 2

_EPS = 1e-9


def apply_split_config(path: str) -> None:
    """Apply splitter tunables from YAML, overriding defaults.

    Expected structure:
      split:
        overflow_allowance: 1.2
        overshoot_penalty: 0.1
        max_swap_passes: 50
        explore_max_units: 10
        groups_range: [2, 5]
        currency: "€"
    """
    global OVERFLOW_ALLOWANCE, OVERSHOOT_PENALTY, MAX_SWAP_PASSES, EXPLORE_MAX_UNITS
    global MIN_GROUPS, MAX_GROUPS, CURRENCY
    p = Path(path)
    if not p.exists():
        return
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError:
        print(f"⚠️ Failed to parse {path}; using built-in defaults.")
        return
    split = data.get("split", {}) if isinstance(data, dict) else {}
    if not isinstance(split, dict):
        return

    def _number(key: str) -> Optional[float]:
        v = split.get(key)
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return None
        return v

    ov = _number("overflow_allowance")
    if ov is not None and ov >= 1.0:
        OVERFLOW_ALLOWANCE = float(ov)
    pen = _number("overshoot_penalty")
    if pen is not None and pen >= 0:
        OVERSHOOT_PENALTY = float(pen)
    passes = _number("max_swap_passes")
    if passes is not None and passes >= 1:
        MAX_SWAP_PASSES = int(passes)
    explore = _number("explore_max_units")
    if explore is not None and explore >= 0:
        EXPLORE_MAX_UNITS = int(explore)
    rng = split.get("groups_range")
    if (
        isinstance(rng, list)
        and len(rng) == 2
        and all(isinstance(x, int) and not isinstance(x, bool) for x in rng)
        and 1 <= rng[0] <= rng[1]
    ):
        MIN_GROUPS, MAX_GROUPS = rng[0], rng[1]
    cur = split.get("currency")
    if isinstance(cur, str) and cur.strip():
        CURRENCY = cur.strip()


def _env_number(key: str, default, cast):
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError:
        print(f"⚠️ Ignoring {key}={raw!r}; using {default}.")
        return default


def load_split_defaults() -> Tuple[float, int]:
    """Default target amount and group count, from .env / environment."""
    load_dotenv()
    target = _env_number("SPLIT_TARGET_AMOUNT", DEFAULT_TARGET_AMOUNT, float)
    groups = _env_number("SPLIT_GROUPS", DEFAULT_GROUPS, int)
    return target, groups


# ---------- Unit expansion ----------
def expand_to_units(items: Iterable[LineItem]) -> List[Unit]:
    """One unit per piece, in item order, unit index ascending from 1."""
    units: List[Unit] = []
    for item in items:
        for idx in range(1, max(0, int(item.quantity or 0)) + 1):
            units.append(Unit.from_item(item, idx))
    return units


def _largest_first(units: List[Unit]) -> List[Unit]:
    # sorted() is stable: equal values keep encounter order
    return sorted(units, key=lambda u: -u.value)


# ---------- Single target ----------
def _check_single_target(target_amount: float, number_of_groups: int) -> None:
    if target_amount is None or float(target_amount) <= 0:
        raise InvalidArgument(f"Target amount must be positive (got {target_amount})")
    if number_of_groups is None or int(number_of_groups) != number_of_groups or number_of_groups < 1:
        raise InvalidArgument(f"Number of groups must be at least 1 (got {number_of_groups})")


def _new_groups(target_amount: float, number_of_groups: int) -> List[Group]:
    return [
        Group(id=f"group-{i}", number=i, target_amount=float(target_amount))
        for i in range(1, int(number_of_groups) + 1)
    ]


def _lowest_total(groups: List[Group]) -> Group:
    # min() keeps the first of equal totals, i.e. the lowest ordinal
    return min(groups, key=lambda g: g.total)


def first_fit_decreasing(items: Sequence[LineItem], target_amount: float, number_of_groups: int) -> List[Group]:
    """First group (by ordinal) that stays within target × OVERFLOW_ALLOWANCE."""
    _check_single_target(target_amount, number_of_groups)
    groups = _new_groups(target_amount, number_of_groups)
    limit = float(target_amount) * OVERFLOW_ALLOWANCE
    for unit in _largest_first(expand_to_units(items)):
        dest = next((g for g in groups if g.total + unit.value <= limit), None)
        if dest is None:
            dest = _lowest_total(groups)
        dest.add(unit)
    return groups


def best_fit(items: Sequence[LineItem], target_amount: float, number_of_groups: int) -> List[Group]:
    """Group whose remaining capacity is the tightest that still holds the unit."""
    _check_single_target(target_amount, number_of_groups)
    groups = _new_groups(target_amount, number_of_groups)
    for unit in _largest_first(expand_to_units(items)):
        dest: Optional[Group] = None
        tightest = float("inf")
        for g in groups:
            remaining = g.target_amount - g.total
            if remaining >= unit.value and remaining < tightest:
                tightest = remaining
                dest = g
        if dest is None:
            dest = _lowest_total(groups)
        dest.add(unit)
    return groups


def group_excess(group: Group) -> float:
    return group.excess


def total_excess(groups: Iterable[Group]) -> float:
    return round2(sum(max(0.0, g.total - g.target_amount) for g in groups))


def optimize(items: Sequence[LineItem], target_amount: float, number_of_groups: int) -> List[Group]:
    """Run FFD and best-fit; return the one with less total excess."""
    _check_single_target(target_amount, number_of_groups)
    if not items:
        return []
    ffd = first_fit_decreasing(items, target_amount, number_of_groups)
    bf = best_fit(items, target_amount, number_of_groups)
    return ffd if total_excess(ffd) <= total_excess(bf) + _EPS else bf


pack_single_target = optimize


# ---------- Multiple targets ----------
SpecLike = Union[GroupSpec, Tuple[float, int]]


def _coerce_specs(specs: Sequence[SpecLike]) -> List[GroupSpec]:
    if not specs:
        raise InvalidArgument("At least one group spec is required")
    return [s if isinstance(s, GroupSpec) else GroupSpec(*s) for s in specs]


def groups_from_specs(specs: Sequence[SpecLike]) -> List[Group]:
    """Spec order first, then count order; numbering runs across specs."""
    groups: List[Group] = []
    number = 0
    for spec in _coerce_specs(specs):
        for _ in range(spec.count):
            number += 1
            groups.append(Group(id=f"group-{number}", number=number, target_amount=spec.target_amount))
    return groups


def _fill_score(total: float, value: float, target: float) -> float:
    new_total = round2(total + value)
    distance = abs(new_total - target)
    if new_total > target:
        distance += OVERSHOOT_PENALTY * distance
    return distance


def _greedy_fill(groups: List[Group], pool: List[Unit]) -> None:
    for group in sorted(groups, key=lambda g: -g.target_amount):
        while pool and group.total < group.target_amount:
            best = min(
                range(len(pool)),
                key=lambda i: _fill_score(group.total, pool[i].value, group.target_amount),
            )
            group.add(pool.pop(best))


def _redistribute(groups: List[Group], pool: List[Unit]) -> None:
    while pool:
        best: Optional[Tuple[float, int, int]] = None  # (gain, group idx, unit idx)
        for gi, group in enumerate(groups):
            before = group.distance
            for ui, unit in enumerate(pool):
                gain = before - abs(round2(group.total + unit.value) - group.target_amount)
                if best is None or gain > best[0] + _EPS:
                    best = (gain, gi, ui)
        _, gi, ui = best
        groups[gi].add(pool.pop(ui))


def _try_swap(a: Group, b: Group) -> bool:
    """Swap units between a and b wherever that lowers the pair's summed distance.

    Each item of a gets at most one swap (the first improving partner in b);
    the scan then moves on to the next item of a. Returns True if anything
    was swapped.
    """
    swapped = False
    before = a.distance + b.distance
    for ai in range(len(a.items)):
        ua = a.items[ai]
        for bi, ub in enumerate(b.items):
            if ua.value == ub.value:
                continue
            new_a = round2(a.total - ua.value + ub.value)
            new_b = round2(b.total - ub.value + ua.value)
            after = abs(new_a - a.target_amount) + abs(new_b - b.target_amount)
            if after < before - _EPS:
                a.replace_at(ai, ub)
                b.replace_at(bi, ua)
                swapped = True
                before = a.distance + b.distance
                break
    return swapped


def refine_by_swaps(groups: List[Group]) -> int:
    """Pairwise swap local search in place. Returns the number of passes run."""
    passes = 0
    improved = True
    while improved and passes < MAX_SWAP_PASSES:
        improved = False
        passes += 1
        for i in range(len(groups)):
            for j in range(i + 1, len(groups)):
                if _try_swap(groups[i], groups[j]):
                    improved = True
    return passes


def pack_multi_target(items: Sequence[LineItem], group_specs: Sequence[SpecLike]) -> List[Group]:
    groups = groups_from_specs(group_specs)
    pool = expand_to_units(items)
    _greedy_fill(groups, pool)
    _redistribute(groups, pool)
    refine_by_swaps(groups)
    return groups


# ---------- Exploratory search (equal targets, small inputs) ----------
def explore_equal_targets(items: Sequence[LineItem], target_amount: float, number_of_groups: int) -> List[Group]:
    """Exact enumeration of unit → group assignments for small inputs.

    Minimises the summed distance to target, then total excess. Groups are
    interchangeable, so a unit opens at most one empty group per branch.
    """
    _check_single_target(target_amount, number_of_groups)
    units = _largest_first(expand_to_units(items))
    if len(units) > EXPLORE_MAX_UNITS:
        raise InvalidArgument(
            f"Exploratory search is limited to {EXPLORE_MAX_UNITS} units (got {len(units)})"
        )
    target = float(target_amount)
    n = int(number_of_groups)
    totals = [0.0] * n
    counts = [0] * n
    assignment = [0] * len(units)
    best_score: Tuple[float, float] = (float("inf"), float("inf"))
    best_assignment: List[int] = []

    def overshoot() -> float:
        return sum(max(0.0, t - target) for t in totals)

    def dfs(k: int) -> None:
        nonlocal best_score, best_assignment
        # Overshoot only grows as units are added, and bounds the final distance
        if overshoot() > best_score[0] + _EPS:
            return
        if k == len(units):
            score = (round2(sum(abs(t - target) for t in totals)), round2(overshoot()))
            if score < best_score:
                best_score = score
                best_assignment = assignment.copy()
            return
        opened_empty = False
        for g in range(n):
            if counts[g] == 0:
                if opened_empty:
                    continue
                opened_empty = True
            prev = totals[g]
            totals[g] = round2(prev + units[k].value)
            counts[g] += 1
            assignment[k] = g
            dfs(k + 1)
            totals[g] = prev
            counts[g] -= 1

    dfs(0)
    groups = _new_groups(target, n)
    for unit, g in zip(units, best_assignment):
        groups[g].add(unit)
    return groups


STRATEGIES: Dict[str, Callable[[Sequence[LineItem], float, int], List[Group]]] = {
    "optimize": optimize,
    "ffd": first_fit_decreasing,
    "best-fit": best_fit,
    "explore": explore_equal_targets,
}


# ---------- Reconciliation ----------
def _grouped_indices(groups: Iterable[Group]) -> Dict[str, List[int]]:
    taken: Dict[str, List[int]] = {}
    for g in groups:
        for u in g.items:
            taken.setdefault(u.source_item_id, []).append(u.unit_index)
    return taken


def unassigned_quantity(items: Iterable[LineItem], groups: Iterable[Group]) -> Dict[str, int]:
    """Per item id: how many of its units are not in any group."""
    taken = _grouped_indices(groups)
    return {item.id: max(0, item.quantity - len(taken.get(item.id, []))) for item in items}


def unassigned_units(items: Iterable[LineItem], groups: Iterable[Group]) -> List[Unit]:
    """Units still to be placed, numbered (assigned+1)/qty … qty/qty per item.

    Unit indices already used in a group are skipped so ids stay unique.
    """
    taken = _grouped_indices(groups)
    out: List[Unit] = []
    for item in items:
        used = set(taken.get(item.id, []))
        assigned = len(taken.get(item.id, []))
        free = (i for i in itertools.count(1) if i not in used)
        for pos in range(1, max(0, item.quantity - assigned) + 1):
            out.append(Unit.from_item(item, next(free), split_index=assigned + pos))
    return out


# ---------- Manual regrouping ----------
def _require_group(groups: Sequence[Group], group_id: str) -> None:
    if not any(g.id == group_id for g in groups):
        raise InvalidArgument(f"Unknown group: {group_id}")


def move_unit(groups: Sequence[Group], unit: Unit, group_id: str) -> List[Group]:
    """Take the unit out of every group and append it to `group_id`.

    The unit may also come from the unassigned pool. Returns new groups.
    """
    _require_group(groups, group_id)
    moved: List[Group] = []
    for g in groups:
        ng = g.copy()
        ng.remove(unit)
        if ng.id == group_id:
            ng.add(unit)
        moved.append(ng)
    return moved


def update_group_target(groups: Sequence[Group], group_id: str, new_target: float) -> List[Group]:
    _require_group(groups, group_id)
    if new_target is None or float(new_target) <= 0:
        raise InvalidArgument(f"Target amount must be positive (got {new_target})")
    return [g.copy(target_amount=float(new_target)) if g.id == group_id else g.copy() for g in groups]


def split_list(
    shopping: ShoppingList,
    target_amount: Optional[float] = None,
    number_of_groups: Optional[int] = None,
    specs: Optional[Sequence[SpecLike]] = None,
    strategy: str = "optimize",
) -> List[Group]:
    """Pack the list's items and store the groups on it (enters split mode)."""
    if not shopping.items:
        raise InvalidArgument("No items: add some items before splitting the list.")
    if specs:
        groups = pack_multi_target(shopping.items, specs)
    else:
        if strategy not in STRATEGIES:
            raise InvalidArgument(f"Unknown strategy: {strategy}")
        groups = STRATEGIES[strategy](shopping.items, target_amount, number_of_groups)
    shopping.groups = groups
    shopping.is_split_mode = True
    return groups


def parse_group_spec(text: str) -> GroupSpec:
    """'20:2' → GroupSpec(20.0, 2); a bare '20' means one group."""
    target_s, _, count_s = str(text).strip().partition(":")
    try:
        target = float(target_s)
        count = int(count_s) if count_s.strip() else 1
    except ValueError:
        raise InvalidArgument(f"Invalid group spec {text!r}; expected TARGET:COUNT") from None
    return GroupSpec(target, count)


# ---------- Exports ----------
def _money(amount: float) -> str:
    return f"{CURRENCY}{amount:.2f}"


def export_plan_md(
    groups: Sequence[Group],
    items: Sequence[LineItem],
    path: str = "split_plan.md",
    *,
    meta: Optional[Dict[str, object]] = None,
) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write("# Split Plan\n\n")
        if meta:
            f.write("## Run Settings\n")
            f.write(f"- Timestamp: {meta.get('timestamp', '')}\n")
            for k in ("items_file", "strategy", "target", "groups", "specs", "overflow_allowance"):
                if meta.get(k) not in (None, [], ""):
                    f.write(f"- {k}: {meta[k]}\n")
            f.write("\n")
        for g in groups:
            status = f"OVER +{_money(g.excess)}" if g.is_over_target else "OK"
            f.write(f"## Group {g.number} — {_money(g.total)} / target {_money(g.target_amount)} — {status}\n")
            for u in sorted(g.items, key=lambda u: (u.name.lower(), u.split_index)):
                f.write(f"- {u.label} | {_money(u.value)}\n")
            f.write("\n")
        leftovers = unassigned_units(items, groups)
        if leftovers:
            f.write(f"## Unassigned ({len(leftovers)})\n")
            for u in leftovers:
                f.write(f"- {u.label} | {_money(u.value)}\n")
            f.write("\n")
        f.write(f"Total excess: {_money(total_excess(groups))}\n")


def _sha256_file(path: Path) -> Optional[str]:
    try:
        h = hashlib.sha256()
        with path.open("rb") as f:
            for chunk in iter(lambda: f.read(1024 * 1024), b""):
                h.update(chunk)
        return h.hexdigest()
    except OSError:
        return None


# ---------- Main ----------
def main(argv: Optional[List[str]] = None) -> int:
    default_target, default_groups = load_split_defaults()
    ap = argparse.ArgumentParser(description="Split a shopping list into groups close to a target amount")
    ap.add_argument("items", help="Shopping list file (CSV, JSON or XLSX) with name, price, quantity columns")
    ap.add_argument("--target", type=float, default=default_target, help=f"Target amount per group (default: {default_target})")
    ap.add_argument("--groups", type=int, default=default_groups, help=f"Number of groups (default: {default_groups})")
    ap.add_argument(
        "--spec",
        action="append",
        default=[],
        metavar="TARGET:COUNT",
        help="Group spec for different targets, e.g. --spec 30:1 --spec 15:2 (overrides --target/--groups)",
    )
    ap.add_argument("--strategy", choices=sorted(STRATEGIES), default="optimize", help="Single-target heuristic to use")
    ap.add_argument("--config", default="split_config.yaml", help="YAML file overriding splitter tunables")
    ap.add_argument("--output-dir", default="output", help="Directory to write outputs into (default: output)")
    ap.add_argument("--no-md", action="store_true", help="Skip Markdown plan export")
    ap.add_argument("--json-out", action="store_true", help="Also write the split list as JSON")
    ap.add_argument("--progress-json", default=None, help="Write progress JSON to this path (placed in output dir)")
    ap.add_argument("--quiet", action="store_true", help="Only print final summary")
    ap.add_argument("--verbose", action="store_true", help="Print step-by-step logs")
    args = ap.parse_args(argv)

    apply_split_config(args.config)

    try:
        specs = [parse_group_spec(s) for s in args.spec]
    except InvalidArgument as e:
        print(f"⚠️ {e}")
        return 1
    if not specs and not (MIN_GROUPS <= args.groups <= MAX_GROUPS):
        print(f"⚠️ Number of groups must be between {MIN_GROUPS} and {MAX_GROUPS}.")
        return 1

    out_dir = Path(args.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    ts = time.strftime("%Y%m%d-%H%M%S")
    label = re.sub(r"[^A-Za-z0-9]+", "-", Path(args.items).stem).strip("-") or "list"
    if args.progress_json:
        args.progress_json = str(out_dir / f"{ts}-{label}-{Path(args.progress_json).name}")

    prog = ProgressReporter(script="splitter", quiet=args.quiet, verbose=args.verbose, json_path=args.progress_json)

    st_load = prog.start("Load items")
    try:
        items = load_items(args.items)
    except (FileNotFoundError, InvalidArgument) as e:
        prog.end(st_load, status="failed")
        print(f"⚠️ {e}")
        return 1
    prog.end(st_load)

    shopping = ShoppingList(name=Path(args.items).stem, items=items)
    unit_count = sum(item.quantity for item in items)
    st_pack = prog.start("Pack units", total=unit_count)
    try:
        groups = split_list(shopping, args.target, args.groups, specs=specs, strategy=args.strategy)
    except InvalidArgument as e:
        prog.end(st_pack, status="failed")
        print(f"⚠️ {e}")
        return 1
    prog.update(st_pack, done=sum(len(g.items) for g in groups))
    prog.end(st_pack)

    st_export = prog.start("Export files")
    items_path = Path(args.items)
    meta: Dict[str, object] = {
        "timestamp": ts,
        "command": " ".join(sys.argv),
        "items_file": str(items_path),
        "items_hash": _sha256_file(items_path),
        "strategy": "multi-target" if specs else args.strategy,
        "target": None if specs else args.target,
        "groups": len(groups),
        "specs": [f"{s.target_amount:g}:{s.count}" for s in specs],
        "overflow_allowance": OVERFLOW_ALLOWANCE,
    }
    outputs = 0
    if not args.no_md:
        export_plan_md(groups, items, path=str(out_dir / f"{ts}-split_plan-{label}.md"), meta=meta)
        outputs += 1
    if args.json_out:
        payload = {"meta": meta, "list": shopping.to_dict()}
        (out_dir / f"{ts}-split_list-{label}.json").write_text(
            json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
        )
        outputs += 1
    prog.end(st_export)

    if not args.quiet:
        parts = ", ".join(f"#{g.number}: {_money(g.total)}/{_money(g.target_amount)}" for g in groups)
        print(f"✅ Split {unit_count} units into {len(groups)} groups → {parts}")

    prog.finalize(totals={
        "items": len(items),
        "units": unit_count,
        "groups": len(groups),
        "excess": total_excess(groups),
        "outputs": outputs,
    })
    return 0


if __name__ == "__main__":
    sys.exit(main())
