"""
Etapas del pipeline de Oportunidades
====================================
Embudo ordenado de etapas activas y dos terminales (ganada, perdida).
"""

from typing import Optional

from models.enums import EtapaOportunidad as Etapa, RazonPerdida


ETAPAS_ACTIVAS = (
    Etapa.LEAD_NUEVO,
    Etapa.CONTACTO_INICIAL,
    Etapa.DISCOVERY_HECHA,
    Etapa.PROPUESTA_ENVIADA,
    Etapa.NEGOCIACION,
)

ETAPAS_TERMINALES = (Etapa.GANADA, Etapa.PERDIDA)

PROBABILIDADES = {
    Etapa.LEAD_NUEVO: 10,
    Etapa.CONTACTO_INICIAL: 20,
    Etapa.DISCOVERY_HECHA: 40,
    Etapa.PROPUESTA_ENVIADA: 60,
    Etapa.NEGOCIACION: 80,
    Etapa.GANADA: 100,
    Etapa.PERDIDA: 0,
}

ETIQUETAS = {
    Etapa.LEAD_NUEVO: 'Lead nuevo',
    Etapa.CONTACTO_INICIAL: 'Contacto inicial',
    Etapa.DISCOVERY_HECHA: 'Discovery hecha',
    Etapa.PROPUESTA_ENVIADA: 'Propuesta enviada',
    Etapa.NEGOCIACION: 'Negociación',
    Etapa.GANADA: 'Ganada',
    Etapa.PERDIDA: 'Perdida',
}

ETAPA_INICIAL = Etapa.LEAD_NUEVO


def _etapa(valor) -> Etapa:
    return valor if isinstance(valor, Etapa) else Etapa(valor)


def es_activa(etapa) -> bool:
    return _etapa(etapa) in ETAPAS_ACTIVAS


def es_terminal(etapa) -> bool:
    return _etapa(etapa) in ETAPAS_TERMINALES


def siguiente_etapa(etapa) -> Optional[Etapa]:
    """Etapa activa inmediatamente posterior; None desde negociación o terminales."""
    actual = _etapa(etapa)
    if actual not in ETAPAS_ACTIVAS:
        return None
    indice = ETAPAS_ACTIVAS.index(actual)
    if indice + 1 >= len(ETAPAS_ACTIVAS):
        return None
    return ETAPAS_ACTIVAS[indice + 1]


def probabilidad(etapa) -> int:
    return PROBABILIDADES[_etapa(etapa)]


def razon_perdida_valida(razon) -> Optional[RazonPerdida]:
    """RazonPerdida correspondiente o None si no pertenece al catálogo."""
    if not razon:
        return None
    try:
        return RazonPerdida(razon)
    except ValueError:
        return None
