"""
Máquina de estados de Cotizaciones
==================================

    borrador ──enviar──▶ enviada ──aceptar──▶ aceptada   (terminal)
                           │  ▲
                rechazar   │  │ reabrir
                           ▼  │
                         rechazada
    enviada ──vencer──▶ vencida                          (terminal)

Duplicar está permitido desde cualquier estado y produce un borrador nuevo.
``TRANSICIONES`` es la única tabla que decide qué movimiento es legal.
"""

from datetime import date
from typing import Dict, FrozenSet, List, Optional

from models.enums import EstadoCotizacion as E


TRANSICIONES: Dict[E, FrozenSet[E]] = {
    E.BORRADOR: frozenset({E.ENVIADA}),
    E.ENVIADA: frozenset({E.ACEPTADA, E.RECHAZADA, E.VENCIDA}),
    E.RECHAZADA: frozenset({E.ENVIADA}),
    E.ACEPTADA: frozenset(),
    E.VENCIDA: frozenset(),
}

# Acción de usuario → (estado requerido, estado destino)
ACCIONES_TRANSICION = {
    'enviar': (E.BORRADOR, E.ENVIADA),
    'aceptar': (E.ENVIADA, E.ACEPTADA),
    'rechazar': (E.ENVIADA, E.RECHAZADA),
    'reabrir': (E.RECHAZADA, E.ENVIADA),
    'vencer': (E.ENVIADA, E.VENCIDA),
}

_ACCIONES_UI = {
    E.BORRADOR: ['editar', 'enviar', 'duplicar', 'ver'],
    E.ENVIADA: ['aceptar', 'rechazar', 'duplicar', 'ver'],
    E.ACEPTADA: ['duplicar', 'ver'],
    E.RECHAZADA: ['reabrir', 'duplicar', 'ver'],
    E.VENCIDA: ['duplicar', 'ver'],
}


def _estado(valor) -> E:
    return valor if isinstance(valor, E) else E(valor)


def puede_transicionar(desde, hacia) -> bool:
    return _estado(hacia) in TRANSICIONES[_estado(desde)]


def es_terminal(estado) -> bool:
    return not TRANSICIONES[_estado(estado)]


def es_editable(estado) -> bool:
    """Solo el borrador admite cambios en items, rubros y montos."""
    return _estado(estado) is E.BORRADOR


def acciones_disponibles(estado) -> List[str]:
    return list(_ACCIONES_UI[_estado(estado)])


def esta_vencida(fecha_validez: Optional[date], hoy: Optional[date] = None) -> bool:
    if fecha_validez is None:
        return False
    return fecha_validez < (hoy or date.today())
