"""
Motor de Cálculo Fiscal
=======================

Funciones puras que, dado un valor bruto y los perfiles fiscales del
vendedor y del cliente, calculan:
- IVA y total que paga el cliente
- Retención en la fuente (honorarios o servicios, con base mínima en UVT)
- ReteICA (por mil)
- ReteIVA (sobre el IVA)
- Neto recibido por el vendedor

Además expone el resumen fiscal de un proyecto (seguridad social, ganancia
y margen real), las alertas fiscales y utilidades de precio/margen.

No hay estado ni acceso a base de datos. Todos los montos se redondean a
pesos enteros con ROUND_HALF_UP.

Uso:
    from services.fiscal import calcular_desglose, PerfilVendedor, PerfilCliente

    desglose = calcular_desglose(Decimal('10000000'), vendedor, cliente)
    desglose.neto_recibido  # Decimal('10418400')
"""

from dataclasses import dataclass, field, asdict, replace
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import List, Optional, Union

from models.enums import TriState, TipoPersona, RegimenTributario
from services.fiscal.constants import (
    FiscalConstants,
    ParametrosFiscales,
    PerfilVendedor,
    PerfilCliente,
    PARAMETROS_DEFAULT,
    PERFIL_VENDEDOR_DEFAULT,
    PERFIL_CLIENTE_DEFAULT,
)

Numero = Union[Decimal, float, int, str, None]

CERO = Decimal('0')


def _to_decimal(value: Numero) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if value is None:
        return CERO
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return CERO


def _pesos(value: Decimal) -> Decimal:
    return value.quantize(FiscalConstants.PRECISION_PESOS, rounding=ROUND_HALF_UP)


def _un_decimal(value: Decimal) -> Decimal:
    return value.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)


def _bool_definido(value) -> Optional[bool]:
    """True/False si el dato fue capturado; None si está sin definir."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    estado = TriState.parse(value)
    if estado is TriState.UNSET:
        return None
    return estado is TriState.YES


@dataclass
class DesgloseFiscal:
    valor_bruto: Decimal
    aplica_iva: bool
    tarifa_iva: Decimal
    iva: Decimal
    total_cliente_paga: Decimal
    aplica_retenciones: bool
    tarifa_retefuente: Decimal
    retefuente: Decimal
    tarifa_reteica: Decimal
    reteica: Decimal
    tarifa_reteiva: Decimal
    reteiva: Decimal
    total_retenciones: Decimal
    neto_recibido: Decimal
    usa_perfil_por_defecto: bool = False

    def to_dict(self) -> dict:
        data = asdict(self)
        for clave, valor in data.items():
            if isinstance(valor, Decimal):
                data[clave] = float(valor) if clave.startswith('tarifa_') else int(valor)
        return data


@dataclass
class ResumenFiscal:
    desglose: DesgloseFiscal
    costo_total: Decimal
    seguridad_social: Decimal
    ganancia_real: Decimal
    margen_real_neto_pct: Decimal
    alertas: List[dict] = field(default_factory=list)

    @property
    def es_estimado(self) -> bool:
        return self.desglose.usa_perfil_por_defecto

    def to_dict(self) -> dict:
        return {
            'desglose': self.desglose.to_dict(),
            'costo_total': int(self.costo_total),
            'seguridad_social': int(self.seguridad_social),
            'ganancia_real': int(self.ganancia_real),
            'margen_real_neto_pct': float(self.margen_real_neto_pct),
            'alertas': list(self.alertas),
            'es_estimado': self.es_estimado,
            'disclaimer': FiscalConstants.DISCLAIMER,
        }


def resolver_vendedor(perfil: Optional[PerfilVendedor]):
    """Devuelve (perfil_con_booleanos, usa_default).

    Un perfil ausente, sin tipo de persona/régimen o con algún TriState sin
    definir se reemplaza completo por el perfil por defecto.
    """
    if perfil is None or not perfil.tipo_persona or not perfil.regimen_tributario:
        return PERFIL_VENDEDOR_DEFAULT, True

    declarante = _bool_definido(perfil.es_declarante)
    responsable = _bool_definido(perfil.responsable_iva)
    autorretenedor = _bool_definido(perfil.autorretenedor)
    if declarante is None or responsable is None or autorretenedor is None:
        return PERFIL_VENDEDOR_DEFAULT, True

    return replace(
        perfil,
        es_declarante=declarante,
        responsable_iva=responsable,
        autorretenedor=autorretenedor,
    ), False


def resolver_cliente(perfil: Optional[PerfilCliente]):
    """Devuelve (perfil_con_booleanos, usa_default) para la contraparte."""
    if perfil is None or not perfil.tipo_persona or not perfil.regimen_tributario:
        return PERFIL_CLIENTE_DEFAULT, True

    gran_contribuyente = _bool_definido(perfil.gran_contribuyente)
    agente_retenedor = _bool_definido(perfil.agente_retenedor)
    if gran_contribuyente is None or agente_retenedor is None:
        return PERFIL_CLIENTE_DEFAULT, True

    return replace(
        perfil,
        gran_contribuyente=gran_contribuyente,
        agente_retenedor=agente_retenedor,
    ), False


def tarifa_reteica(vendedor: PerfilVendedor, params: ParametrosFiscales = PARAMETROS_DEFAULT) -> Decimal:
    """Tarifa declarada por el vendedor, si no la de su ciudad, si no la general."""
    if vendedor.tarifa_ica is not None and _to_decimal(vendedor.tarifa_ica) > 0:
        return _to_decimal(vendedor.tarifa_ica)
    por_ciudad = FiscalConstants.tarifa_ica_ciudad(vendedor.ciudad_ica)
    if por_ciudad is not None:
        return por_ciudad
    return params.reteica_default


def cliente_retiene(vendedor: PerfilVendedor, cliente: PerfilCliente) -> bool:
    """Indica si el cliente practica retenciones sobre el pago."""
    if not (cliente.agente_retenedor or cliente.gran_contribuyente):
        return False
    if vendedor.regimen_tributario == RegimenTributario.SIMPLE.value:
        return False
    if cliente.regimen_tributario == RegimenTributario.SIMPLE.value:
        return False
    return not vendedor.autorretenedor


def calcular_desglose(
    valor_bruto: Numero,
    vendedor: Optional[PerfilVendedor] = None,
    cliente: Optional[PerfilCliente] = None,
    params: ParametrosFiscales = PARAMETROS_DEFAULT,
) -> Optional[DesgloseFiscal]:
    """
    Calcula IVA, retenciones y neto recibido de un valor bruto.

    Args:
        valor_bruto: Valor antes de IVA
        vendedor: Perfil de quien factura (None o incompleto → perfil por defecto)
        cliente: Perfil de quien paga (None o incompleto → perfil conservador)
        params: Parámetros fiscales del año

    Returns:
        DesgloseFiscal, o None si el valor bruto es menor o igual a cero
    """
    bruto = _to_decimal(valor_bruto)
    if bruto <= 0:
        return None

    vendedor, vendedor_default = resolver_vendedor(vendedor)
    cliente, cliente_default = resolver_cliente(cliente)

    aplica_iva = bool(vendedor.responsable_iva)
    tarifa_iva = params.iva_general if aplica_iva else CERO
    iva = _pesos(bruto * tarifa_iva / FiscalConstants.PORCENTAJE)
    total_cliente_paga = bruto + iva

    tarifa_rf = tarifa_ica = tarifa_riva = CERO
    retefuente = reteica = reteiva = CERO

    aplica_retenciones = cliente_retiene(vendedor, cliente)
    if aplica_retenciones:
        if vendedor.tipo_persona == TipoPersona.NATURAL.value:
            if bruto > params.base_minima_honorarios:
                tarifa_rf = (params.retefuente_honorarios_declarante if vendedor.es_declarante
                             else params.retefuente_honorarios_no_declarante)
        elif bruto > params.base_minima_servicios:
            tarifa_rf = params.retefuente_servicios
        retefuente = _pesos(bruto * tarifa_rf / FiscalConstants.PORCENTAJE)

        tarifa_ica = tarifa_reteica(vendedor, params)
        reteica = _pesos(bruto * tarifa_ica / FiscalConstants.POR_MIL)

        if aplica_iva and iva > 0:
            tarifa_riva = params.reteiva_pct
            reteiva = _pesos(iva * tarifa_riva / FiscalConstants.PORCENTAJE)

    total_retenciones = retefuente + reteica + reteiva

    return DesgloseFiscal(
        valor_bruto=_pesos(bruto),
        aplica_iva=aplica_iva,
        tarifa_iva=tarifa_iva,
        iva=iva,
        total_cliente_paga=_pesos(total_cliente_paga),
        aplica_retenciones=aplica_retenciones,
        tarifa_retefuente=tarifa_rf,
        retefuente=retefuente,
        tarifa_reteica=tarifa_ica,
        reteica=reteica,
        tarifa_reteiva=tarifa_riva,
        reteiva=reteiva,
        total_retenciones=total_retenciones,
        neto_recibido=_pesos(total_cliente_paga - total_retenciones),
        usa_perfil_por_defecto=vendedor_default or cliente_default,
    )


def seguridad_social(valor_bruto: Numero) -> Decimal:
    return _pesos(_to_decimal(valor_bruto) * FiscalConstants.SEGURIDAD_SOCIAL_PCT / FiscalConstants.PORCENTAJE)


def resumen_fiscal(
    valor_bruto: Numero,
    costo_total: Numero = 0,
    vendedor: Optional[PerfilVendedor] = None,
    cliente: Optional[PerfilCliente] = None,
    params: ParametrosFiscales = PARAMETROS_DEFAULT,
) -> Optional[ResumenFiscal]:
    """
    Resumen fiscal de un proyecto: desglose, seguridad social, ganancia real
    (neto - costos - seguridad social) y margen real neto sobre el valor bruto.

    Returns:
        ResumenFiscal con sus alertas, o None si el valor bruto no es positivo
    """
    desglose = calcular_desglose(valor_bruto, vendedor, cliente, params)
    if desglose is None:
        return None

    costo = _to_decimal(costo_total)
    seg_social = seguridad_social(desglose.valor_bruto)
    ganancia = desglose.neto_recibido - costo - seg_social
    margen = _un_decimal(ganancia / desglose.valor_bruto * FiscalConstants.PORCENTAJE)

    resumen = ResumenFiscal(
        desglose=desglose,
        costo_total=_pesos(costo),
        seguridad_social=seg_social,
        ganancia_real=ganancia,
        margen_real_neto_pct=margen,
    )
    resumen.alertas = alertas_fiscales(resumen, vendedor, cliente)
    return resumen


def _formato_pesos(valor: Decimal) -> str:
    return f"${int(valor):,}".replace(',', '.')


def alertas_fiscales(
    resumen: ResumenFiscal,
    vendedor: Optional[PerfilVendedor] = None,
    cliente: Optional[PerfilCliente] = None,
) -> List[dict]:
    """Alertas condicionales (danger / warning / info) sobre un resumen."""
    vendedor, _ = resolver_vendedor(vendedor)
    cliente, _ = resolver_cliente(cliente)
    desglose = resumen.desglose
    alertas = []

    if resumen.ganancia_real < 0:
        alertas.append({
            'tipo': 'danger',
            'mensaje': 'Estás perdiendo plata en este proyecto.',
            'detalle': 'Revisa tus costos o sube el precio.',
        })
    elif resumen.margen_real_neto_pct < FiscalConstants.MARGEN_MINIMO_SALUDABLE:
        margen_bruto = margen_real(desglose.valor_bruto, resumen.costo_total)
        alertas.append({
            'tipo': 'warning',
            'mensaje': (
                f"Con margen del {margen_bruto.to_integral_value(rounding=ROUND_HALF_UP)}%, el margen REAL "
                f"después de impuestos baja a {resumen.margen_real_neto_pct}%."
            ),
        })

    if (
        cliente.tipo_persona == TipoPersona.NATURAL.value
        and not cliente.agente_retenedor
        and vendedor.regimen_tributario == RegimenTributario.ORDINARIO.value
        and desglose.retefuente == 0
    ):
        provision = _pesos(desglose.valor_bruto * Decimal('0.11'))
        alertas.append({
            'tipo': 'warning',
            'mensaje': 'Te llega más plata pero NO es toda tuya.',
            'detalle': f"Provisiona ~{_formato_pesos(provision)} para impuestos.",
        })

    if (
        vendedor.regimen_tributario == RegimenTributario.ORDINARIO.value
        and vendedor.tipo_persona == TipoPersona.NATURAL.value
        and desglose.retefuente > 0
    ):
        alertas.append({
            'tipo': 'info',
            'mensaje': 'Si estuvieras en Régimen Simple: no te retienen retefuente.',
            'detalle': (
                f"Eso significaría +{_formato_pesos(desglose.retefuente)} de flujo por este proyecto."
            ),
        })

    return alertas


def precio_sugerido(costo_total: Numero, margen_pct: Numero) -> Decimal:
    """Precio que deja el margen pedido: costo / (1 - margen)."""
    costo = _to_decimal(costo_total)
    margen = _to_decimal(margen_pct)
    if margen >= FiscalConstants.PORCENTAJE:
        return _pesos(costo * 10)
    if margen <= 0:
        return _pesos(costo)
    return _pesos(costo / (1 - margen / FiscalConstants.PORCENTAJE))


def margen_real(precio: Numero, costo_total: Numero) -> Decimal:
    """(precio - costo) / precio x 100 con un decimal; 0 si no hay precio."""
    precio_dec = _to_decimal(precio)
    if precio_dec <= 0:
        return CERO
    return _un_decimal((precio_dec - _to_decimal(costo_total)) / precio_dec * FiscalConstants.PORCENTAJE)
