"""Adaptadores entre los modelos persistidos y los perfiles del motor fiscal."""
from __future__ import annotations

from typing import List, Optional

from models.enums import TriState
from services.fiscal.constants import PerfilVendedor, PerfilCliente


# Orden en el que se reportan los campos faltantes
CAMPOS_FISCALES_REQUERIDOS = (
    'numero_documento',
    'tipo_documento',
    'tipo_persona',
    'regimen_tributario',
    'gran_contribuyente',
    'agente_retenedor',
)

_CAMPOS_TRISTATE = ('gran_contribuyente', 'agente_retenedor')


def campos_fiscales_faltantes(contraparte) -> List[str]:
    """Campos de identidad fiscal que faltan en una Empresa o Contacto.

    Los booleanos fiscales cuentan como faltantes mientras estén en
    ``TriState.UNSET``: 'sin definir' no equivale a 'no'.
    """
    if contraparte is None:
        return list(CAMPOS_FISCALES_REQUERIDOS)

    faltantes = []
    for campo in CAMPOS_FISCALES_REQUERIDOS:
        valor = getattr(contraparte, campo, None)
        if campo in _CAMPOS_TRISTATE:
            if TriState.parse(valor) is TriState.UNSET:
                faltantes.append(campo)
        elif valor is None or (isinstance(valor, str) and not valor.strip()):
            faltantes.append(campo)
    return faltantes


def perfil_fiscal_completo(contraparte) -> bool:
    return not campos_fiscales_faltantes(contraparte)


def perfil_cliente_desde(contraparte) -> Optional[PerfilCliente]:
    """Perfil del motor a partir de la contraparte; None si no hay contraparte.

    Los TriState se pasan tal cual: el motor sustituye el perfil por el
    conservador cuando alguno sigue sin definir.
    """
    if contraparte is None:
        return None
    return PerfilCliente(
        tipo_persona=contraparte.tipo_persona,
        regimen_tributario=contraparte.regimen_tributario,
        gran_contribuyente=TriState.parse(contraparte.gran_contribuyente),
        agente_retenedor=TriState.parse(contraparte.agente_retenedor),
    )


def perfil_vendedor_desde(perfil_fiscal) -> Optional[PerfilVendedor]:
    """Perfil del motor a partir del PerfilFiscal del workspace."""
    if perfil_fiscal is None:
        return None
    return PerfilVendedor(
        tipo_persona=perfil_fiscal.tipo_persona,
        regimen_tributario=perfil_fiscal.regimen_tributario,
        es_declarante=TriState.parse(perfil_fiscal.es_declarante),
        responsable_iva=TriState.parse(perfil_fiscal.responsable_iva),
        autorretenedor=TriState.parse(perfil_fiscal.autorretenedor),
        tarifa_ica=perfil_fiscal.tarifa_ica,
        ciudad_ica=perfil_fiscal.ciudad_ica,
    )
