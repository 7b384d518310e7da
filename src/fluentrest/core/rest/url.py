from __future__ import annotations

from collections.abc import Mapping, Sequence
from urllib.parse import urlencode, urlsplit, urlunsplit

import httpx

from .errors import ConfigurationError

_NS_PER_SECOND = 1_000_000_000


def _fmt_frac(value: int, precision: int) -> tuple[str, int]:
    digits = ""
    printed = False
    for _ in range(precision):
        digit = value % 10
        printed = printed or digit != 0
        if printed:
            digits = str(digit) + digits
        value //= 10
    return ("." + digits if printed else ""), value


def format_duration(seconds: float) -> str:
    """Render ``seconds`` the way a Go ``time.Duration`` prints, e.g. ``1.5s``, ``250ms``, ``2m0s``."""
    ns = int(round(seconds * _NS_PER_SECOND))
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    remaining = abs(ns)

    if remaining < _NS_PER_SECOND:
        if remaining < 1_000:
            return f"{sign}{remaining}ns"
        if remaining < 1_000_000:
            frac, whole = _fmt_frac(remaining, 3)
            return f"{sign}{whole}{frac}µs"
        frac, whole = _fmt_frac(remaining, 6)
        return f"{sign}{whole}{frac}ms"

    frac, whole = _fmt_frac(remaining, 9)
    text = f"{whole % 60}{frac}s"
    whole //= 60
    if whole > 0:
        text = f"{whole % 60}m{text}"
        whole //= 60
        if whole > 0:
            text = f"{whole}h{text}"
    return sign + text


def render_sub_path(sub_path: str, args: Sequence[object] = ()) -> str:
    path = sub_path.lstrip("/")
    if not args:
        return path
    try:
        return path % tuple(args)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"cannot render sub-path {sub_path!r} with {len(args)} argument(s): {exc}") from exc


def encode_query(params: Mapping[str, Sequence[str]], timeout_s: float | None = None) -> str:
    pairs = [(key, value) for key in sorted(params) for value in params[key]]
    if timeout_s:
        pairs = [(key, value) for key, value in pairs if key != "timeout"]
        pairs.append(("timeout", format_duration(timeout_s)))
        pairs.sort(key=lambda pair: pair[0])
    return urlencode(pairs)


def compose_url(
    base_url: str,
    sub_path: str = "",
    sub_path_args: Sequence[object] = (),
    params: Mapping[str, Sequence[str]] | None = None,
    timeout_s: float | None = None,
) -> str:
    try:
        httpx.URL(base_url)
        parts = urlsplit(base_url)
    except (httpx.InvalidURL, TypeError, ValueError) as exc:
        raise ConfigurationError(f"invalid base url {base_url!r}: {exc}") from exc

    path = parts.path
    rendered = render_sub_path(sub_path, sub_path_args)
    if rendered:
        path = f"{path.rstrip('/')}/{rendered}"

    query = encode_query(params or {}, timeout_s)
    return urlunsplit((parts.scheme, parts.netloc, path, query, parts.fragment))
