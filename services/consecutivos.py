"""Consecutivos legibles de cotizaciones: COT-<año>-<número>."""
from __future__ import annotations

from datetime import date
from typing import Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import ConsecutivoCotizacion


def formato_consecutivo(anio: int, numero: int) -> str:
    return f"COT-{anio}-{numero:04d}"


def consecutivo_provisional(anio: Optional[int] = None) -> str:
    """Marcador usado cuando el generador falla."""
    return formato_consecutivo(anio or date.today().year, 0)


def siguiente_consecutivo(workspace_id: int, hoy: Optional[date] = None) -> str:
    """Reserva el siguiente consecutivo del workspace para el año en curso.

    Debe llamarse antes de agregar otros cambios a la sesión: ante una falla
    de base de datos la sesión se revierte y se devuelve el consecutivo
    provisional ``COT-<año>-0000`` en lugar de fallar la operación.
    """
    anio = (hoy or date.today()).year
    try:
        contador = (
            ConsecutivoCotizacion.query
            .filter_by(workspace_id=workspace_id, anio=anio)
            .with_for_update()
            .first()
        )
        if contador is None:
            contador = ConsecutivoCotizacion(workspace_id=workspace_id, anio=anio, ultimo=0)
            db.session.add(contador)
        contador.ultimo = (contador.ultimo or 0) + 1
        db.session.flush()
        return formato_consecutivo(anio, contador.ultimo)
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.warning(
            f"[consecutivos] No se pudo generar consecutivo para workspace {workspace_id}: {exc}"
        )
        return consecutivo_provisional(anio)
