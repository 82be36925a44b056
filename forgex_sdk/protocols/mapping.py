"""
Declarative response normalization

Each adapter describes its output shape as a tuple of Field entries:
target name, source path in the raw payload, optional scaling and a cast.

    POSITION_FIELDS = (
        Field("market_index", "marketIndex", cast=int),
        Field("base_asset_amount", "baseAssetAmount", divide=1e9),
        Field("quote_entry_amount", "quoteEntryAmount", divide=1e6),
    )
    position = remap(raw, POSITION_FIELDS, PerpPosition)

Source paths are dotted ("liquidity.usd"); integer segments index lists
("tokens.0.mint"). A path may also be a tuple of alternatives, the first one
present wins.
"""

import copy
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple, Type, Union

_MISSING = object()

SourcePath = Union[str, Tuple[str, ...]]


@dataclass(frozen=True)
class Field:
    """
    One output field

    Attributes:
        target: Output key / dataclass attribute
        source: Dotted source path, or tuple of alternative paths
        divide: Divisor applied after cast (e.g. 1e9 for lamports -> SOL)
        multiply: Multiplier applied after cast (e.g. 100 for ratio -> percent)
        cast: Conversion applied to the raw value (float, int, str...)
        default: Value when the source is missing or null
    """
    target: str
    source: SourcePath
    divide: float = 1
    multiply: float = 1
    cast: Optional[Callable[[Any], Any]] = float
    default: Any = None

    def extract(self, raw: Any) -> Any:
        paths = self.source if isinstance(self.source, tuple) else (self.source,)
        value = _MISSING
        for path in paths:
            value = read_path(raw, path)
            if value is not _MISSING and value is not None:
                break
        if value is _MISSING or value is None or value == "":
            return copy.copy(self.default)

        if self.cast is not None:
            value = self.cast(value)
        if self.multiply != 1:
            value = value * self.multiply
        if self.divide != 1:
            value = value / self.divide
        return value


def read_path(raw: Any, path: str) -> Any:
    """Walk a dotted path; returns a sentinel when any segment is missing"""
    current = raw
    for segment in path.split("."):
        if current is None:
            return _MISSING
        if isinstance(current, dict):
            if segment not in current:
                return _MISSING
            current = current[segment]
        elif isinstance(current, (list, tuple)) and segment.lstrip("-").isdigit():
            index = int(segment)
            if index >= len(current) or index < -len(current):
                return _MISSING
            current = current[index]
        else:
            return _MISSING
    return current


def lookup(raw: Any, path: str, default: Any = None) -> Any:
    """read_path with a default instead of the sentinel"""
    value = read_path(raw, path)
    return default if value is _MISSING else value


def remap(raw: Any, fields: Sequence[Field], into: Optional[Type] = None):
    """
    Normalize one raw object

    Returns:
        dict of target -> value, or an instance of `into` built from it
    """
    data = {f.target: f.extract(raw) for f in fields}
    if into is None:
        return data
    return into(**data)


def remap_many(items: Optional[Iterable[Any]], fields: Sequence[Field], into: Optional[Type] = None) -> List:
    return [remap(item, fields, into) for item in (items or [])]
