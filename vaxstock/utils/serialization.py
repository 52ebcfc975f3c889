from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any


def entity_dict(entity: Any) -> dict[str, Any]:
    """Convierte una entidad del núcleo en un dict con los enums como texto."""
    data = asdict(entity) if is_dataclass(entity) else dict(entity)
    return {key: (value.value if isinstance(value, Enum) else value) for key, value in data.items()}
