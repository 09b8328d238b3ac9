"""
Expansión de recurrencias semanales

Funciones puras, sin I/O. Los días de la semana siguen la convención de
Python: 0 = lunes ... 6 = domingo
"""
from datetime import date, timedelta
from typing import Iterable, List, Optional, Union

from ..utils.errors import InvalidInputError

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def weekday_name(weekday: int) -> str:
    """Nombre en inglés del día (0 = Monday)"""
    if not 0 <= weekday <= 6:
        raise InvalidInputError(f"Día de la semana inválido: {weekday}. Debe estar entre 0 (lunes) y 6 (domingo)")
    return WEEKDAY_NAMES[weekday]


def parse_weekday(value: Union[int, str]) -> int:
    """Acepta un entero 0-6 o un nombre de día (sin distinguir mayúsculas)"""
    if isinstance(value, int):
        weekday_name(value)
        return value

    normalized = str(value).strip().capitalize()
    if normalized not in WEEKDAY_NAMES:
        raise InvalidInputError(f"Día de la semana inválido: {value}")
    return WEEKDAY_NAMES.index(normalized)


def normalize_visit_days(days: Iterable[Union[int, str]]) -> List[str]:
    """
    Normaliza los días de visita a nombres únicos ordenados de lunes a domingo

    Raises:
        InvalidInputError: si la lista queda vacía o contiene un día inválido
    """
    indexes = sorted({parse_weekday(day) for day in days})
    if not indexes:
        raise InvalidInputError("Debe indicar al menos un día de visita")
    return [WEEKDAY_NAMES[i] for i in indexes]


def first_occurrence(start_date: date, target_weekday: int) -> date:
    """Primera fecha >= start_date que cae en target_weekday"""
    weekday_name(target_weekday)
    offset = (target_weekday - start_date.weekday() + 7) % 7
    return start_date + timedelta(days=offset)


def expand(start_date: date, target_weekday: int, week_count: int) -> List[date]:
    """
    Fechas concretas de una serie semanal

    Args:
        start_date: fecha desde la que se busca la primera ocurrencia
        target_weekday: día objetivo (0 = lunes)
        week_count: número de semanas; 0 produce una lista vacía

    Returns:
        week_count fechas separadas exactamente 7 días

    Raises:
        InvalidInputError: si week_count es negativo
    """
    if week_count is None or week_count < 0:
        raise InvalidInputError("El número de semanas no puede ser negativo")

    first = first_occurrence(start_date, target_weekday)
    return [first + timedelta(weeks=i) for i in range(week_count)]


def window_end(start_date: date, recurring_weeks: Optional[int]) -> Optional[date]:
    """Último día de la ventana, o None si la ventana no tiene límite"""
    if not recurring_weeks:
        return None
    return start_date + timedelta(days=7 * (recurring_weeks - 1))


def in_window(
    day: date,
    visit_days: Iterable[str],
    start_date: Optional[date] = None,
    recurring_weeks: Optional[int] = None
) -> bool:
    """
    Indica si `day` cae dentro de la ventana de una asignación

    - day cae en uno de los visit_days
    - sin start_date no hay límite inferior
    - con recurring_weeks > 0: day <= start_date + 7 * (recurring_weeks - 1)
    """
    if WEEKDAY_NAMES[day.weekday()] not in set(visit_days or []):
        return False

    if start_date is None:
        return True

    if day < start_date:
        return False

    end = window_end(start_date, recurring_weeks)
    return end is None or day <= end
