"""
Tests de las tareas programadas.
"""
import logging

from core import tasks
from models import Category
from conftest import TestingSessionLocal, create_category, create_product


def test_reporte_de_stock_bajo(db, approved_vendor, monkeypatch, caplog):
    category = create_category(db, "Books", "books")
    create_product(db, approved_vendor, category, "LOW-1", stock_quantity=1, low_stock_threshold=5)
    create_product(db, approved_vendor, category, "OK-1", stock_quantity=40, low_stock_threshold=5)
    monkeypatch.setattr(tasks, "SessionLocal", TestingSessionLocal)

    with caplog.at_level(logging.WARNING, logger="core.tasks"):
        tasks.report_low_stock_products()

    messages = [r.getMessage() for r in caplog.records if r.name == "core.tasks"]
    assert any("1 producto(s) con stock bajo" in m for m in messages)
    assert any("LOW-1" in m for m in messages)
    assert not any("OK-1" in m for m in messages)


def test_reporte_sin_productos(db, monkeypatch, caplog):
    create_category(db, "Empty", "empty")
    monkeypatch.setattr(tasks, "SessionLocal", TestingSessionLocal)

    with caplog.at_level(logging.WARNING, logger="core.tasks"):
        tasks.report_low_stock_products()

    assert not [r for r in caplog.records if r.name == "core.tasks"]
    assert db.query(Category).count() == 1
