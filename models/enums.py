"""
Enumeraciones del dominio comercial
===================================
Estados, etapas y catálogos cerrados que usan los modelos y los servicios.
Los valores se persisten como texto (``.value``) en columnas String.
"""

from enum import Enum


class TriState(str, Enum):
    """Booleano fiscal con estado 'sin definir' distinto de 'no'."""
    UNSET = 'unset'
    YES = 'yes'
    NO = 'no'

    @classmethod
    def parse(cls, value):
        """Convierte bool/None/texto a TriState. Lanza ValueError si no es válido."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.UNSET
        if isinstance(value, bool):
            return cls.YES if value else cls.NO
        texto = str(value).strip().lower()
        if texto in ('yes', 'si', 'sí', 'true', '1'):
            return cls.YES
        if texto in ('no', 'false', '0'):
            return cls.NO
        if texto in ('unset', ''):
            return cls.UNSET
        raise ValueError(f"Valor no válido para TriState: {value!r}")


class TipoPersona(str, Enum):
    NATURAL = 'natural'
    JURIDICA = 'juridica'


class RegimenTributario(str, Enum):
    ORDINARIO = 'ordinario'
    SIMPLE = 'simple'


class TipoDocumento(str, Enum):
    CC = 'CC'
    CE = 'CE'
    NIT = 'NIT'
    PASAPORTE = 'PASAPORTE'


class EtapaOportunidad(str, Enum):
    LEAD_NUEVO = 'lead_nuevo'
    CONTACTO_INICIAL = 'contacto_inicial'
    DISCOVERY_HECHA = 'discovery_hecha'
    PROPUESTA_ENVIADA = 'propuesta_enviada'
    NEGOCIACION = 'negociacion'
    GANADA = 'ganada'
    PERDIDA = 'perdida'


class RazonPerdida(str, Enum):
    PRECIO = 'precio'
    TIMING = 'timing'
    COMPETENCIA = 'competencia'
    SIN_PRESUPUESTO = 'sin_presupuesto'
    GHOSTING = 'ghosting'
    NO_ERA_PARA_MI = 'no_era_para_mi'


class EstadoCotizacion(str, Enum):
    BORRADOR = 'borrador'
    ENVIADA = 'enviada'
    ACEPTADA = 'aceptada'
    RECHAZADA = 'rechazada'
    VENCIDA = 'vencida'


class ModoCotizacion(str, Enum):
    FLASH = 'flash'
    DETALLADA = 'detallada'


class TipoRubro(str, Enum):
    MO_PROPIA = 'mo_propia'
    MO_TERCEROS = 'mo_terceros'
    MATERIALES = 'materiales'
    VIATICOS = 'viaticos'
    SOFTWARE = 'software'
    SERVICIOS_PROF = 'servicios_prof'


# Unidad sugerida cuando un rubro llega sin unidad
UNIDAD_POR_DEFECTO = {
    TipoRubro.MO_PROPIA: 'horas',
    TipoRubro.MO_TERCEROS: 'horas',
    TipoRubro.MATERIALES: 'unidades',
    TipoRubro.VIATICOS: 'dias',
    TipoRubro.SOFTWARE: 'licencias',
    TipoRubro.SERVICIOS_PROF: 'horas',
}


class CategoriaPresupuesto(str, Enum):
    HORAS = 'horas'
    SUBCONTRATACION = 'subcontratacion'
    MATERIALES = 'materiales'
    TRANSPORTE = 'transporte'
    SERVICIOS_PROFESIONALES = 'servicios_profesionales'
    GENERAL = 'general'


class EstadoProyecto(str, Enum):
    EN_EJECUCION = 'en_ejecucion'


def valores(enum_cls):
    """Lista de valores persistibles de una enumeración."""
    return [miembro.value for miembro in enum_cls]
