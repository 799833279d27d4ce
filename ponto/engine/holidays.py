"""Brazilian national holiday calendar."""

from datetime import date, timedelta
from typing import List

from ponto.models.summary import Holiday


FIXED_NATIONAL_HOLIDAYS = (
    (1, 1, "Confraternização Universal"),
    (4, 21, "Tiradentes"),
    (5, 1, "Dia do Trabalho"),
    (9, 7, "Independência do Brasil"),
    (10, 12, "Nossa Senhora Aparecida"),
    (11, 2, "Finados"),
    (11, 15, "Proclamação da República"),
    (11, 20, "Dia Nacional de Zumbi e da Consciência Negra"),
    (12, 25, "Natal"),
)


def easter_sunday(year: int) -> date:
    """Easter Sunday of a Gregorian year (anonymous Gregorian / Gauss algorithm)."""
    a = year % 19
    b = year // 100
    c = year % 100
    d = b // 4
    e = b % 4
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i = c // 4
    k = c % 4
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month = (h + l - 7 * m + 114) // 31
    day = ((h + l - 7 * m + 114) % 31) + 1
    return date(year, month, day)


def national_holidays(year: int) -> List[Holiday]:
    """Fixed and movable national holidays of a year, sorted by date."""
    easter = easter_sunday(year)
    movable = [
        Holiday(date=easter - timedelta(days=47), name="Carnaval"),
        Holiday(date=easter - timedelta(days=2), name="Sexta-feira Santa"),
        Holiday(date=easter + timedelta(days=60), name="Corpus Christi"),
    ]
    fixed = [Holiday(date=date(year, month, day), name=name) for month, day, name in FIXED_NATIONAL_HOLIDAYS]
    return sorted(fixed + movable, key=lambda h: h.date)
