"""
Fiscal Package
==============
Motor de IVA y retenciones (retefuente, reteICA, reteIVA) para Colombia.
"""

from services.fiscal.constants import (
    FiscalConstants,
    ParametrosFiscales,
    PerfilVendedor,
    PerfilCliente,
    PARAMETROS_DEFAULT,
    PERFIL_VENDEDOR_DEFAULT,
    PERFIL_CLIENTE_DEFAULT,
)
from services.fiscal.calculos import (
    DesgloseFiscal,
    ResumenFiscal,
    calcular_desglose,
    resumen_fiscal,
    alertas_fiscales,
    precio_sugerido,
    margen_real,
    seguridad_social,
    tarifa_reteica,
)
from services.fiscal.perfiles import (
    CAMPOS_FISCALES_REQUERIDOS,
    campos_fiscales_faltantes,
    perfil_fiscal_completo,
    perfil_cliente_desde,
    perfil_vendedor_desde,
)

__all__ = [
    'FiscalConstants',
    'ParametrosFiscales',
    'PerfilVendedor',
    'PerfilCliente',
    'PARAMETROS_DEFAULT',
    'PERFIL_VENDEDOR_DEFAULT',
    'PERFIL_CLIENTE_DEFAULT',
    'DesgloseFiscal',
    'ResumenFiscal',
    'calcular_desglose',
    'resumen_fiscal',
    'alertas_fiscales',
    'precio_sugerido',
    'margen_real',
    'seguridad_social',
    'tarifa_reteica',
    'CAMPOS_FISCALES_REQUERIDOS',
    'campos_fiscales_faltantes',
    'perfil_fiscal_completo',
    'perfil_cliente_desde',
    'perfil_vendedor_desde',
]
