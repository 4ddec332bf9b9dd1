from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict

import yaml

from spectro_slice.engine.errors import SliceError
from spectro_slice.engine.pipeline import normalise_cut_ranges


@dataclass
class SliceRecipe:
    xunit_lcol: str = "wavenumbers"
    spc_lcol: str = "spc"
    xvalues_cut: Any = None
    parallel: Dict[str, Any] = field(default_factory=dict)
    version: str = "0.1.0"

    def validate(self) -> list[str]:
        errs = []
        for key, label in (("xunit_lcol", "x-axis column"), ("spc_lcol", "spectrum column")):
            value = getattr(self, key)
            if not isinstance(value, str) or not value.strip():
                errs.append(f"{label.capitalize()} name must be a non-empty string")
        if self.xunit_lcol == self.spc_lcol:
            errs.append("X-axis and spectrum columns must be different")

        try:
            normalise_cut_ranges(self.xvalues_cut)
        except SliceError as exc:
            errs.append(f"Cut ranges are invalid: {exc}")

        if not isinstance(self.parallel, dict):
            errs.append("Parallel settings must be a mapping with enabled/workers")
        else:
            workers = self.parallel.get("workers")
            if workers is not None:
                try:
                    if int(workers) < 1:
                        errs.append("Parallel workers must be at least 1")
                except (TypeError, ValueError):
                    errs.append("Parallel workers must be an integer")
        return errs

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        try:
            cuts = normalise_cut_ranges(self.xvalues_cut)
        except SliceError:
            return payload
        # Plain lists keep the YAML output readable by safe_load
        payload["xvalues_cut"] = [list(cut.as_tuple()) for cut in cuts] or None
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SliceRecipe":
        known = {key: data[key] for key in cls.__dataclass_fields__ if key in data}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise SliceError(f"Unknown recipe keys: {', '.join(unknown)}")
        if known.get("parallel") is None:
            known.pop("parallel", None)
        return cls(**known)

    @classmethod
    def load(cls, path: str | Path) -> "SliceRecipe":
        with open(path, "r", encoding="utf-8") as handle:
            content = yaml.safe_load(handle) or {}
        if not isinstance(content, dict):
            raise SliceError(f"Recipe file {path} must contain a mapping")
        return cls.from_dict(content)

    def save(self, path: str | Path) -> None:
        with open(path, "w", encoding="utf-8") as handle:
            yaml.safe_dump(self.to_dict(), handle, sort_keys=False)
