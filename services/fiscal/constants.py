"""
Parámetros fiscales colombianos
===============================

Valores por defecto del motor de retenciones, tarifas de ICA por ciudad y
los perfiles conservadores que se usan cuando falta información fiscal.

Uso:
    from services.fiscal.constants import FiscalConstants, PARAMETROS_DEFAULT

    tarifa = FiscalConstants.tarifa_ica_ciudad('Medellín')
"""

import unicodedata
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class ParametrosFiscales:
    """Parámetros del año gravable. Porcentajes en %, ICA en por mil."""

    uvt: Decimal = Decimal('49799')
    iva_general: Decimal = Decimal('19')
    retefuente_honorarios_declarante: Decimal = Decimal('11')
    retefuente_honorarios_no_declarante: Decimal = Decimal('10')
    retefuente_servicios: Decimal = Decimal('4')
    reteica_default: Decimal = Decimal('9.66')
    reteiva_pct: Decimal = Decimal('15')
    base_minima_honorarios_uvt: Decimal = Decimal('27')
    base_minima_servicios_uvt: Decimal = Decimal('4')

    @property
    def base_minima_honorarios(self) -> Decimal:
        return self.base_minima_honorarios_uvt * self.uvt

    @property
    def base_minima_servicios(self) -> Decimal:
        return self.base_minima_servicios_uvt * self.uvt


PARAMETROS_DEFAULT = ParametrosFiscales()


class FiscalConstants:
    """Constantes del cálculo fiscal."""

    # Redondeo a pesos enteros
    PRECISION_PESOS = Decimal('1')

    PORCENTAJE = Decimal('100')
    POR_MIL = Decimal('1000')

    # Seguridad social independiente: 40% del ingreso como IBC x 28.5%
    SEGURIDAD_SOCIAL_PCT = Decimal('11.4')

    # Umbral de margen real bajo el cual se alerta
    MARGEN_MINIMO_SALUDABLE = Decimal('15')

    # Tarifas de ICA para actividades de consultoría, en por mil
    TARIFAS_ICA = {
        'bogota': Decimal('9.66'),
        'medellin': Decimal('9.66'),
        'cali': Decimal('10'),
        'barranquilla': Decimal('7'),
        'cartagena': Decimal('7'),
        'bucaramanga': Decimal('7'),
        'pereira': Decimal('7'),
        'manizales': Decimal('7'),
        'ibague': Decimal('7'),
        'villavicencio': Decimal('7'),
    }

    CIUDAD_DEFAULT = 'Bogotá'

    DISCLAIMER = (
        'Valores estimados con base en parámetros fiscales vigentes. '
        'Consulta tu contador para cálculos definitivos.'
    )

    @staticmethod
    def normalizar_ciudad(ciudad: Optional[str]) -> str:
        if not ciudad:
            return ''
        texto = unicodedata.normalize('NFKD', ciudad.strip().lower())
        texto = ''.join(c for c in texto if not unicodedata.combining(c))
        return texto.split(',')[0].replace('d.c.', '').strip()

    @classmethod
    def tarifa_ica_ciudad(cls, ciudad: Optional[str]) -> Optional[Decimal]:
        """Tarifa de ICA (por mil) de la ciudad, o None si no está en la tabla."""
        return cls.TARIFAS_ICA.get(cls.normalizar_ciudad(ciudad))


@dataclass(frozen=True)
class PerfilVendedor:
    """Perfil fiscal de quien factura."""

    tipo_persona: str = 'natural'
    regimen_tributario: str = 'ordinario'
    es_declarante: bool = True
    responsable_iva: bool = True
    autorretenedor: bool = False
    tarifa_ica: Optional[Decimal] = Decimal('9.66')
    ciudad_ica: Optional[str] = 'Bogotá'


@dataclass(frozen=True)
class PerfilCliente:
    """Perfil fiscal de quien paga."""

    tipo_persona: str = 'juridica'
    regimen_tributario: str = 'ordinario'
    gran_contribuyente: bool = False
    agente_retenedor: bool = True


PERFIL_VENDEDOR_DEFAULT = PerfilVendedor()
PERFIL_CLIENTE_DEFAULT = PerfilCliente()
