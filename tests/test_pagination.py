"""
Tests de la metadata de paginación.
"""
from core.pagination import build_pagination, get_offset


def test_paginas_redondean_hacia_arriba():
    pagination = build_pagination(page=1, limit=10, total=25)

    assert pagination["total_pages"] == 3
    assert pagination["has_next"] is True
    assert pagination["has_prev"] is False


def test_ultima_pagina():
    pagination = build_pagination(page=3, limit=10, total=25)

    assert pagination["has_next"] is False
    assert pagination["has_prev"] is True


def test_division_exacta():
    assert build_pagination(page=2, limit=10, total=20)["total_pages"] == 2


def test_sin_resultados():
    pagination = build_pagination(page=1, limit=10, total=0)

    assert pagination["total_pages"] == 0
    assert pagination["has_next"] is False
    assert pagination["has_prev"] is False


def test_offset():
    assert get_offset(1, 20) == 0
    assert get_offset(3, 20) == 40
