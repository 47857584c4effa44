import re
from datetime import timedelta
from typing import Optional

# "3d", "2d5m", "1h30m" 처럼 숫자+단위 묶음. 단위는 큰 것 -> 작은 것 순서만 허용
_FORMAT_RE = re.compile(r"^(\d+[dhms])+$")
_PART_RE = re.compile(r"(\d+)([dhms])")
_UNIT_ORDER = ["d", "h", "m", "s"]
_UNIT_SECONDS = {"d": 86400, "h": 3600, "m": 60, "s": 1}


def parse_duration(value: Optional[str]) -> Optional[timedelta]:
    """
    기간 문자열을 timedelta로 변환합니다.
    비어있거나 형식이 틀리거나 0이면 None (= 해당 기능 비활성) 을 반환합니다.
    """
    if not value:
        return None
    value = value.strip().lower()
    if not _FORMAT_RE.match(value):
        return None

    total = 0
    last_index = -1
    for amount, unit in _PART_RE.findall(value):
        index = _UNIT_ORDER.index(unit)
        if index <= last_index:
            return None
        last_index = index
        total += int(amount) * _UNIT_SECONDS[unit]

    if total <= 0:
        return None
    return timedelta(seconds=total)


def format_remaining(delta: timedelta) -> str:
    """남은 시간을 "2d 3h", "45m", "<1m" 처럼 짧게 표현"""
    seconds = int(delta.total_seconds())
    if seconds < 60:
        return "<1m"
    days, rem = divmod(seconds, 86400)
    hours, rem = divmod(rem, 3600)
    minutes = rem // 60
    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes and not days:
        parts.append(f"{minutes}m")
    return " ".join(parts)
