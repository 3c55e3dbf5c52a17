"""
Metadata de paginación compartida por los listados.
"""


def build_pagination(page: int, limit: int, total: int) -> dict:
    """
    Calcular metadata de paginación.

    total_pages = ceil(total / limit)

    Ejemplo: total=25, limit=10 -> total_pages=3
    """
    total_pages = (total + limit - 1) // limit

    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1
    }


def get_offset(page: int, limit: int) -> int:
    return (page - 1) * limit
