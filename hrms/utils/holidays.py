"""공휴일 정적 테이블입니다."""

from datetime import date
from typing import List, NamedTuple


class Holiday(NamedTuple):
    date: date
    name: str


HOLIDAYS: List[Holiday] = [
    Holiday(date(2025, 1, 1), "New Year's Day"),
    Holiday(date(2025, 1, 14), "Makar Sankranti"),
    Holiday(date(2025, 3, 14), "Dhuleti"),
    Holiday(date(2025, 8, 15), "Independence Day"),
    Holiday(date(2025, 9, 6), "Ganesh Chaturthi"),
    Holiday(date(2025, 10, 2), "Gandhi Jayanti & Dussehra"),
    Holiday(date(2025, 10, 20), "Diwali"),
    Holiday(date(2025, 10, 21), "Extended Diwali Holiday"),
    Holiday(date(2025, 10, 22), "Vikram Samvat New Year"),
    Holiday(date(2025, 12, 25), "Christmas Day"),
]


def holidays_for_month(year: int, month: int) -> List[Holiday]:
    return [h for h in HOLIDAYS if h.date.year == year and h.date.month == month]
