import datetime
from typing import Optional, Union

from dateutil import parser as date_parser


def to_date(value: Union[str, datetime.date, datetime.datetime, None]) -> Optional[datetime.date]:
    """Convierte una fecha (texto ISO, date o datetime) a `date`."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return date_parser.isoparse(str(value).strip()).date()


def days_between(start: datetime.date, end: datetime.date) -> int:
    """Diferencia en días naturales (end - start); no depende de la hora."""
    return (end - start).days


def today() -> datetime.date:
    return datetime.date.today()
